from storefront.banners.api.routes import banner_router

__all__ = ["banner_router"]
