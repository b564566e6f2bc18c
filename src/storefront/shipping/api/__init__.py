from storefront.shipping.api.routes import shipping_router, tracking_router

__all__ = ["shipping_router", "tracking_router"]
