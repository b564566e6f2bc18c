from storefront.ratelimit.api.routes import rate_limit_router

__all__ = ["rate_limit_router"]
