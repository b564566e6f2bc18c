"""Storefront domain: catalogue, inventory, carts, orders, promotions, payments and shipping.

A single Protean domain so that checkout, reservations and point redemption
commit inside one Unit of Work. Each component lives in its own sub-package.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging

# Configure logging for the application
configure_logging()

# Domain Composition Root
storefront = Domain(name="storefront")
