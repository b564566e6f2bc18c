from storefront.ordering.api.routes import admin_order_router, order_router

__all__ = ["admin_order_router", "order_router"]
