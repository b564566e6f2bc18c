from storefront.wishlists.api.routes import wishlist_router

__all__ = ["wishlist_router"]
