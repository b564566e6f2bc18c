from storefront.permissions.api.routes import permission_router, role_router, user_permission_router

__all__ = ["permission_router", "role_router", "user_permission_router"]
