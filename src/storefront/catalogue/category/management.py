"""Category management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category.category import Category
from storefront.catalogue.product.product import Product
from storefront.domain import storefront
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict, NotFound


@storefront.command(part_of="Category")
class CreateCategory:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    name = String(required=True, max_length=100)
    description = Text()
    parent_id = Identifier()
    display_order = Integer(default=0)


@storefront.command(part_of="Category")
class UpdateCategory:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    category_id = Identifier(required=True)
    name = String(max_length=100)
    description = Text()
    display_order = Integer()
    is_active = Boolean()


@storefront.command(part_of="Category")
class DeleteCategory:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    category_id = Identifier(required=True)


def load_category(category_id) -> Category:
    try:
        return current_domain.repository_for(Category).get(category_id)
    except ObjectNotFoundError:
        raise NotFound(f"Category {category_id} not found", field="category_id") from None


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(CreateCategory)
    def create_category(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        repo = current_domain.repository_for(Category)

        if command.parent_id:
            load_category(command.parent_id)

        category = Category.create(
            name=command.name,
            description=command.description,
            parent_id=command.parent_id,
            display_order=command.display_order or 0,
        )
        if repo._dao.query.filter(slug=category.slug).all().items:
            raise Conflict(f"Category '{command.name}' already exists", field="name")

        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        category = load_category(command.category_id)
        category.update(
            name=command.name,
            description=command.description,
            display_order=command.display_order,
            is_active=command.is_active,
        )
        current_domain.repository_for(Category).add(category)

    @handle(DeleteCategory)
    def delete_category(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.STAFF)
        repo = current_domain.repository_for(Category)
        category = load_category(command.category_id)

        if repo._dao.query.filter(parent_id=command.category_id).all().items:
            raise Conflict("Category still has sub-categories", field="category_id")
        products = current_domain.repository_for(Product)._dao.query.filter(category_id=command.category_id)
        if products.all().items:
            raise Conflict("Category still has products", field="category_id")

        repo._dao.delete(category)
