from storefront.audit.api.routes import audit_router

__all__ = ["audit_router"]
