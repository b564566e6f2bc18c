"""Shipping provider management: commands, handler and lookups (admin only)."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.shared.access import Actor, Role
from storefront.shared.errors import Conflict, NotFound
from storefront.shipping.provider.provider import PROVIDER_FIELDS, RATE_FIELDS, ShippingProvider
from storefront.utils.logging import logger


@storefront.command(part_of="ShippingProvider")
class CreateShippingProvider:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    name = String(required=True, max_length=100)
    code = String(required=True, max_length=50)
    display_name = String(max_length=255)
    description = Text()
    website = String(max_length=500)
    phone = String(max_length=20)
    email = String(max_length=255)
    is_active = Boolean(default=True)
    is_default = Boolean(default=False)
    priority = Integer(default=0)
    supports_cod = Boolean(default=False)
    supports_tracking = Boolean(default=False)
    supports_insurance = Boolean(default=False)
    min_value = Float(min_value=0.0)
    max_value = Float(min_value=0.0)
    webhook_secret = String(max_length=255)


@storefront.command(part_of="ShippingProvider")
class UpdateShippingProvider:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    provider_id = Identifier(required=True)
    display_name = String(max_length=255)
    description = Text()
    website = String(max_length=500)
    phone = String(max_length=20)
    email = String(max_length=255)
    is_active = Boolean()
    is_default = Boolean()
    priority = Integer()
    supports_cod = Boolean()
    supports_tracking = Boolean()
    supports_insurance = Boolean()
    min_value = Float(min_value=0.0)
    max_value = Float(min_value=0.0)
    webhook_secret = String(max_length=255)


@storefront.command(part_of="ShippingProvider")
class DeleteShippingProvider:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    provider_id = Identifier(required=True)


@storefront.command(part_of="ShippingProvider")
class AddShippingRate:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    provider_id = Identifier(required=True)
    to_zone = String(max_length=100)
    min_weight = Float(min_value=0.0)
    max_weight = Float(min_value=0.0)
    min_value = Float(min_value=0.0)
    max_value = Float(min_value=0.0)
    base_fee = Float(required=True, min_value=0.0)
    weight_fee = Float(min_value=0.0)
    value_fee = Float(min_value=0.0)
    cod_fee = Float(min_value=0.0)
    insurance_fee = Float(min_value=0.0)
    min_days = Integer(min_value=0)
    max_days = Integer(min_value=0)
    is_active = Boolean()


@storefront.command(part_of="ShippingProvider")
class UpdateShippingRate:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    provider_id = Identifier(required=True)
    rate_id = Identifier(required=True)
    to_zone = String(max_length=100)
    min_weight = Float(min_value=0.0)
    max_weight = Float(min_value=0.0)
    min_value = Float(min_value=0.0)
    max_value = Float(min_value=0.0)
    base_fee = Float(min_value=0.0)
    weight_fee = Float(min_value=0.0)
    value_fee = Float(min_value=0.0)
    cod_fee = Float(min_value=0.0)
    insurance_fee = Float(min_value=0.0)
    min_days = Integer(min_value=0)
    max_days = Integer(min_value=0)
    is_active = Boolean()


@storefront.command(part_of="ShippingProvider")
class RemoveShippingRate:
    actor_id = Identifier(required=True)
    actor_role = String(max_length=20)
    provider_id = Identifier(required=True)
    rate_id = Identifier(required=True)


def load_provider(provider_id) -> ShippingProvider:
    try:
        return current_domain.repository_for(ShippingProvider).get(provider_id)
    except ObjectNotFoundError:
        raise NotFound(f"Shipping provider {provider_id} not found", field="provider_id") from None


def find_provider_by_code(code: str | None) -> ShippingProvider | None:
    if not code:
        return None
    dao = current_domain.repository_for(ShippingProvider)._dao
    providers = dao.query.filter(code=code.strip().lower()).all().items
    return providers[0] if providers else None


def provider_by_code(code: str) -> ShippingProvider:
    provider = find_provider_by_code(code)
    if provider is None:
        raise NotFound(f"Shipping provider '{code}' not found", field="provider_code")
    return provider


def _values(command, fields) -> dict:
    return {key: getattr(command, key) for key in fields}


@storefront.command_handler(part_of=ShippingProvider)
class ShippingProviderHandler:
    def _clear_other_defaults(self, keep_id) -> None:
        repo = current_domain.repository_for(ShippingProvider)
        for provider in repo._dao.query.filter(is_default=True).all().items:
            if str(provider.id) != str(keep_id):
                provider.is_default = False
                repo.add(provider)

    @handle(CreateShippingProvider)
    def create_provider(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        repo = current_domain.repository_for(ShippingProvider)
        if find_provider_by_code(command.code):
            raise Conflict(f"Shipping provider '{command.code}' already exists", field="code")
        if repo._dao.query.filter(name=command.name).all().items:
            raise Conflict(f"Shipping provider '{command.name}' already exists", field="name")

        provider = ShippingProvider.create(
            command.name,
            command.code,
            display_name=command.display_name,
            is_default=command.is_default,
            **{key: value for key, value in _values(command, PROVIDER_FIELDS).items() if key != "display_name"},
        )
        repo.add(provider)
        if provider.is_default:
            self._clear_other_defaults(provider.id)
        logger.info("Shipping provider created", provider_id=str(provider.id), code=provider.code)
        return str(provider.id)

    @handle(UpdateShippingProvider)
    def update_provider(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        provider = load_provider(command.provider_id)
        provider.update(is_default=command.is_default, **_values(command, PROVIDER_FIELDS))
        current_domain.repository_for(ShippingProvider).add(provider)
        if command.is_default:
            self._clear_other_defaults(provider.id)

    @handle(DeleteShippingProvider)
    def delete_provider(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        provider = load_provider(command.provider_id)
        current_domain.repository_for(ShippingProvider)._dao.delete(provider)
        logger.info("Shipping provider deleted", provider_id=str(provider.id), code=provider.code)

    @handle(AddShippingRate)
    def add_rate(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        provider = load_provider(command.provider_id)
        rate = provider.add_rate(**_values(command, RATE_FIELDS))
        current_domain.repository_for(ShippingProvider).add(provider)
        logger.info("Shipping rate added", provider_id=str(provider.id), rate_id=str(rate.id), zone=rate.to_zone)
        return str(rate.id)

    @handle(UpdateShippingRate)
    def update_rate(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        provider = load_provider(command.provider_id)
        provider.update_rate(command.rate_id, **_values(command, RATE_FIELDS))
        current_domain.repository_for(ShippingProvider).add(provider)

    @handle(RemoveShippingRate)
    def remove_rate(self, command):
        Actor.of(command.actor_id, command.actor_role).require(Role.ADMIN)
        provider = load_provider(command.provider_id)
        provider.remove_rate(command.rate_id)
        current_domain.repository_for(ShippingProvider).add(provider)
