from storefront.promotions.api.routes import coupon_router, point_router

__all__ = ["coupon_router", "point_router"]
