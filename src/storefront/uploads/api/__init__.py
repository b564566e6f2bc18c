from storefront.uploads.api.routes import upload_router

__all__ = ["upload_router"]
