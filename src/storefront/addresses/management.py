"""Address book management: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.addresses.address import ADDRESS_FIELDS, Address
from storefront.domain import storefront
from storefront.shared.access import Actor
from storefront.shared.errors import NotFound
from storefront.utils.logging import logger


@storefront.command(part_of="Address")
class CreateAddress:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    is_default = Boolean(default=False)
    address_type = String(max_length=20)
    full_name = String(max_length=255)
    phone = String(max_length=20)
    email = String(max_length=255)
    address_line1 = String(max_length=255)
    address_line2 = String(max_length=255)
    ward = String(max_length=100)
    district = String(max_length=100)
    city = String(max_length=100)
    state = String(max_length=100)
    country = String(max_length=100)
    postal_code = String(max_length=20)
    instructions = Text()
    notes = Text()


@storefront.command(part_of="Address")
class UpdateAddress:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    address_id = Identifier(required=True)
    address_type = String(max_length=20)
    full_name = String(max_length=255)
    phone = String(max_length=20)
    email = String(max_length=255)
    address_line1 = String(max_length=255)
    address_line2 = String(max_length=255)
    ward = String(max_length=100)
    district = String(max_length=100)
    city = String(max_length=100)
    state = String(max_length=100)
    country = String(max_length=100)
    postal_code = String(max_length=20)
    instructions = Text()
    notes = Text()


@storefront.command(part_of="Address")
class DeleteAddress:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    address_id = Identifier(required=True)


@storefront.command(part_of="Address")
class SetDefaultAddress:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    address_id = Identifier(required=True)


def _details(command) -> dict:
    return {key: getattr(command, key) for key in ADDRESS_FIELDS}


def load_address(address_id) -> Address:
    try:
        return current_domain.repository_for(Address).get(address_id)
    except ObjectNotFoundError:
        raise NotFound(f"Address {address_id} not found", field="address_id") from None


def addresses_of(user_id) -> list[Address]:
    query = current_domain.repository_for(Address)._dao.query.filter(user_id=str(user_id)).order_by("created_at")
    return list(query.all().items)


def _make_default(address: Address):
    """Move the default flag to ``address``, clearing it everywhere else."""
    repo = current_domain.repository_for(Address)
    for other in addresses_of(address.user_id):
        if other.is_default and str(other.id) != str(address.id):
            other.clear_default()
            repo.add(other)
    address.make_default()
    repo.add(address)


@storefront.command_handler(part_of=Address)
class AddressBookHandler:
    @handle(CreateAddress)
    def create_address(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        address = Address.create(actor.user_id, **_details(command))
        first = not addresses_of(actor.user_id)

        if command.is_default or first:
            _make_default(address)
        else:
            current_domain.repository_for(Address).add(address)
        logger.info("Address created", address_id=str(address.id), user_id=actor.user_id)
        return str(address.id)

    @handle(UpdateAddress)
    def update_address(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        address = load_address(command.address_id)
        actor.require_owner(address.user_id, "address")
        address.update(**_details(command))
        current_domain.repository_for(Address).add(address)

    @handle(SetDefaultAddress)
    def set_default(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        address = load_address(command.address_id)
        actor.require_owner(address.user_id, "address")
        _make_default(address)

    @handle(DeleteAddress)
    def delete_address(self, command):
        actor = Actor.of(command.actor_id, command.actor_role)
        repo = current_domain.repository_for(Address)
        address = load_address(command.address_id)
        actor.require_owner(address.user_id, "address")

        was_default = address.is_default
        repo._dao.delete(address)
        if was_default:
            remaining = [a for a in addresses_of(address.user_id) if str(a.id) != str(address.id)]
            if remaining:
                _make_default(remaining[0])
        logger.info("Address deleted", address_id=str(address.id))


def get_address(address_id, actor: Actor) -> Address:
    address = load_address(address_id)
    actor.require_owner(address.user_id, "address")
    return address


def default_address(user_id) -> Address:
    for address in addresses_of(user_id):
        if address.is_default:
            return address
    raise NotFound("No default address", field="address_id")
