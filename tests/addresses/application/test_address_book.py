"""Application tests for the address book and its single-default rule."""

import pytest
from protean.utils.globals import current_domain

from storefront.addresses.management import (
    CreateAddress,
    DeleteAddress,
    SetDefaultAddress,
    UpdateAddress,
    addresses_of,
    default_address,
    load_address,
)
from storefront.shared.errors import NotFound, Unauthorized

DETAILS = {
    "full_name": "Nguyen Van A",
    "phone": "0901234567",
    "address_line1": "12 Ly Thuong Kiet",
    "ward": "Ward 7",
    "district": "District 10",
    "city": "Ho Chi Minh City",
}


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _create(user_id="user-1", **overrides):
    return _process(CreateAddress(actor_id=user_id, **{**DETAILS, **overrides}))


def _defaults(user_id="user-1"):
    return [str(a.id) for a in addresses_of(user_id) if a.is_default]


class TestDefaultAddress:
    def test_first_address_becomes_default(self):
        address_id = _create()
        assert _defaults() == [address_id]

    def test_later_addresses_are_not_default(self):
        first = _create()
        _create(address_type="office")
        assert _defaults() == [first]

    def test_new_default_replaces_old(self):
        _create()
        second = _create(is_default=True)
        assert _defaults() == [second]

    def test_set_default(self):
        _create()
        second = _create()
        _process(SetDefaultAddress(address_id=second, actor_id="user-1"))
        assert _defaults() == [second]
        assert str(default_address("user-1").id) == second

    def test_deleting_default_promotes_oldest(self):
        first = _create()
        second = _create()
        _create()
        _process(DeleteAddress(address_id=first, actor_id="user-1"))
        assert _defaults() == [second]

    def test_deleting_last_address(self):
        only = _create()
        _process(DeleteAddress(address_id=only, actor_id="user-1"))
        with pytest.raises(NotFound):
            default_address("user-1")

    def test_books_are_per_user(self):
        _create()
        other = _create(user_id="user-2")
        assert _defaults("user-2") == [other]


class TestOwnership:
    def test_update_by_owner(self):
        address_id = _create()
        _process(UpdateAddress(address_id=address_id, city="Hue", actor_id="user-1"))
        assert load_address(address_id).city == "Hue"

    def test_stranger_cannot_update(self):
        address_id = _create()
        with pytest.raises(Unauthorized):
            _process(UpdateAddress(address_id=address_id, city="Hue", actor_id="user-2"))

    def test_stranger_cannot_delete(self):
        address_id = _create()
        with pytest.raises(Unauthorized):
            _process(DeleteAddress(address_id=address_id, actor_id="user-2"))

    def test_staff_can_act(self, staff):
        address_id = _create()
        _process(UpdateAddress(address_id=address_id, city="Hue", **staff))
        assert load_address(address_id).city == "Hue"
