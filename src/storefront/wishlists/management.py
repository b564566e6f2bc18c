"""Wishlist management: commands, handler and read helpers."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.cart.items import sellable_price
from storefront.domain import storefront
from storefront.shared.access import Actor
from storefront.shared.errors import NotFound, Unauthorized
from storefront.shared.pagination import Page, paginate
from storefront.utils.logging import logger
from storefront.wishlists.wishlist import Wishlist


@storefront.command(part_of="Wishlist")
class CreateWishlist:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    name = String(required=True, max_length=255)
    description = Text()
    is_public = Boolean(default=False)


@storefront.command(part_of="Wishlist")
class UpdateWishlist:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    wishlist_id = Identifier(required=True)
    name = String(max_length=255)
    description = Text()
    is_public = Boolean()


@storefront.command(part_of="Wishlist")
class DeleteWishlist:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    wishlist_id = Identifier(required=True)


@storefront.command(part_of="Wishlist")
class AddWishlistItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    wishlist_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    notes = Text()
    priority = Integer(default=0, min_value=0, max_value=2)


@storefront.command(part_of="Wishlist")
class RemoveWishlistItem:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    wishlist_id = Identifier(required=True)
    item_id = Identifier(required=True)


def load_wishlist(wishlist_id) -> Wishlist:
    try:
        return current_domain.repository_for(Wishlist).get(wishlist_id)
    except ObjectNotFoundError:
        raise NotFound(f"Wishlist {wishlist_id} not found", field="wishlist_id") from None


def _owned(command) -> Wishlist:
    actor = Actor.of(command.actor_id, command.actor_role)
    wishlist = load_wishlist(command.wishlist_id)
    if str(wishlist.user_id) != actor.user_id:
        raise Unauthorized("You do not own this wishlist", field="user_id")
    return wishlist


@storefront.command_handler(part_of=Wishlist)
class WishlistHandler:
    @handle(CreateWishlist)
    def create_wishlist(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        wishlist = Wishlist.create(actor.user_id, command.name, command.description, command.is_public)
        current_domain.repository_for(Wishlist).add(wishlist)
        logger.info("Wishlist created", wishlist_id=str(wishlist.id), user_id=actor.user_id)
        return str(wishlist.id)

    @handle(UpdateWishlist)
    def update_wishlist(self, command):
        wishlist = _owned(command)
        wishlist.update(name=command.name, description=command.description, is_public=command.is_public)
        current_domain.repository_for(Wishlist).add(wishlist)

    @handle(DeleteWishlist)
    def delete_wishlist(self, command):
        wishlist = _owned(command)
        current_domain.repository_for(Wishlist)._dao.delete(wishlist)
        logger.info("Wishlist deleted", wishlist_id=str(wishlist.id))

    @handle(AddWishlistItem)
    def add_item(self, command):
        wishlist = _owned(command)
        price = sellable_price(command.product_id, command.variant_id)
        item = wishlist.add_item(
            command.product_id,
            price,
            variant_id=command.variant_id,
            notes=command.notes,
            priority=command.priority,
        )
        current_domain.repository_for(Wishlist).add(wishlist)
        return str(item.id)

    @handle(RemoveWishlistItem)
    def remove_item(self, command):
        wishlist = _owned(command)
        wishlist.remove_item(command.item_id)
        current_domain.repository_for(Wishlist).add(wishlist)


def get_wishlist(wishlist_id, actor: Actor | None) -> Wishlist:
    """Public wishlists are readable by anyone; private ones only by the owner."""
    wishlist = load_wishlist(wishlist_id)
    if wishlist.is_public:
        return wishlist
    if actor is None or str(wishlist.user_id) != actor.user_id:
        raise NotFound(f"Wishlist {wishlist_id} not found", field="wishlist_id")
    return wishlist


def wishlists_of(user_id, page: int | None = None, limit: int | None = None) -> Page:
    query = current_domain.repository_for(Wishlist)._dao.query.filter(user_id=str(user_id)).order_by("-created_at")
    return paginate(query, page, limit)


def public_wishlists(page: int | None = None, limit: int | None = None) -> Page:
    query = current_domain.repository_for(Wishlist)._dao.query.filter(is_public=True).order_by("-created_at")
    return paginate(query, page, limit)


def wishlist_to_dict(wishlist: Wishlist) -> dict:
    data = wishlist.to_dict()
    data["items"] = [item.to_dict() for item in wishlist.items]
    data["item_count"] = wishlist.item_count
    return data
