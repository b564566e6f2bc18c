from storefront.search.api.routes import search_router

__all__ = ["search_router"]
