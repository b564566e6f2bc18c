"""Tests for caller identity and role checks."""

import pytest

from storefront.shared.access import SYSTEM_ACTOR, Actor, Role, parse_role
from storefront.shared.errors import Forbidden, Unauthorized


class TestRoles:
    @pytest.mark.parametrize(
        "value, role",
        [
            (None, Role.CUSTOMER),
            ("", Role.CUSTOMER),
            ("STAFF", Role.STAFF),
            (" admin ", Role.ADMIN),
            ("root", Role.CUSTOMER),
        ],
    )
    def test_parse_role(self, value, role):
        assert parse_role(value) == role

    def test_actor_requires_identity(self):
        with pytest.raises(Unauthorized):
            Actor.of(None)

    def test_hierarchy(self):
        admin = Actor.of("admin-1", "admin")
        admin.require(Role.STAFF)
        assert admin.is_staff and admin.is_admin

        with pytest.raises(Forbidden):
            Actor.of("staff-1", "staff").require(Role.ADMIN)

    def test_system_actor_passes_everything(self):
        SYSTEM_ACTOR.require(Role.SUPER_ADMIN)
        SYSTEM_ACTOR.require_owner("someone-else")


class TestOwnership:
    def test_owner(self):
        Actor.of("user-1").require_owner("user-1")

    def test_stranger(self):
        with pytest.raises(Unauthorized):
            Actor.of("user-1").require_owner("user-2", "order")

    def test_unowned_resource(self):
        with pytest.raises(Unauthorized):
            Actor.of("user-1").require_owner(None)

    def test_staff_bypass(self):
        Actor.of("staff-1", "staff").require_owner("user-2")
