from storefront.catalogue.api.routes import category_router, product_router

__all__ = ["category_router", "product_router"]
