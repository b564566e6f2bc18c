from storefront.payments.api.routes import order_payment_router, payment_router

__all__ = ["order_payment_router", "payment_router"]
