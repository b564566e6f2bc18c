from storefront.addresses.api.routes import address_router

__all__ = ["address_router"]
