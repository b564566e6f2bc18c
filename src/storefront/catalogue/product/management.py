"""Product management: commands and handler.

All product writes are staff operations; the role check happens here so that
every entry point (HTTP, scripts, tests) goes through it.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import Product, validate_sku
from storefront.domain import storefront
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict, DomainError, NotFound
from storefront.shared.pagination import iter_all
from storefront.utils.logging import logger


@storefront.command(part_of="Product")
class CreateProduct:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    description = Text()
    category_id = Identifier()
    slug = String(max_length=255)


@storefront.command(part_of="Product")
class UpdateProduct:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    category_id = Identifier()
    slug = String(max_length=255)
    price = Float(min_value=0.0)


@storefront.command(part_of="Product")
class AddVariant:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=50)
    name = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    attributes = Text()  # JSON object


@storefront.command(part_of="Product")
class UpdateVariant:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)
    name = String(max_length=255)
    price = Float(min_value=0.0)
    is_active = Boolean()


@storefront.command(part_of="Product")
class RemoveVariant:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@storefront.command(part_of="Product")
class ChangeProductStatus:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    product_id = Identifier(required=True)
    action = String(required=True, max_length=20)  # activate, deactivate, archive


def _staff(command) -> Actor:
    actor = Actor.of(command.actor_id, command.actor_role)
    actor.require(Role.STAFF)
    return actor


def _sku_taken(sku: str) -> bool:
    repo = current_domain.repository_for(Product)
    if repo._dao.query.filter(sku=sku).all().items:
        return True
    for product in iter_all(repo._dao.query):
        if any(v.sku == sku for v in product.variants):
            return True
    return False


def load_product(product_id) -> Product:
    """Fetch a product or raise NotFound."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFound(f"Product {product_id} not found", field="product_id") from None


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        _staff(command)
        sku = validate_sku(command.sku)
        if _sku_taken(sku):
            raise Conflict(f"SKU {sku} already exists", field="sku")
        if command.category_id:
            category_exists = current_domain.repository_for(Category)._dao.query.filter(id=command.category_id)
            if not category_exists.all().items:
                raise NotFound(f"Category {command.category_id} not found", field="category_id")

        product = Product.create(
            sku=sku,
            name=command.name,
            price=command.price,
            description=command.description,
            category_id=command.category_id,
            slug=command.slug,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), sku=sku)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        _staff(command)
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.update_details(
            name=command.name,
            description=command.description,
            category_id=command.category_id,
            slug=command.slug,
        )
        if command.price is not None:
            product.change_price(command.price)
        repo.add(product)

    @handle(AddVariant)
    def add_variant(self, command):
        _staff(command)
        sku = validate_sku(command.sku)
        if _sku_taken(sku):
            raise Conflict(f"SKU {sku} already exists", field="sku")

        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        variant = product.add_variant(
            sku=sku,
            price=command.price,
            name=command.name,
            attributes=command.attributes,
        )
        repo.add(product)
        return str(variant.id)

    @handle(UpdateVariant)
    def update_variant(self, command):
        _staff(command)
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.update_variant(
            variant_id=command.variant_id,
            name=command.name,
            price=command.price,
            is_active=command.is_active,
        )
        repo.add(product)

    @handle(RemoveVariant)
    def remove_variant(self, command):
        _staff(command)
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.remove_variant(command.variant_id)
        repo.add(product)

    @handle(ChangeProductStatus)
    def change_status(self, command):
        _staff(command)
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        transitions = {
            "activate": product.activate,
            "deactivate": product.deactivate,
            "archive": product.archive,
        }
        if command.action not in transitions:
            raise DomainError(f"Unknown product action: {command.action}", field="action")
        transitions[command.action]()
        repo.add(product)
        logger.info("Product status changed", product_id=str(product.id), status=product.status)
        return product.status
