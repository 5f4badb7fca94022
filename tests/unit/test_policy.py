"""Tests for the role policy checks."""

import pytest

from gear_exchange.config.roles_config import ADMIN_ROLES, VERIFIED_VOLUNTEER_ROLES
from gear_exchange.core.dependencies import check_role, require_ownership_or_admin
from gear_exchange.core.exceptions import Forbidden, Unauthenticated


def _user(role, user_id="u-1"):
    return {"id": user_id, "role": role}


class TestCheckRole:
    def test_no_identity_is_unauthenticated(self):
        with pytest.raises(Unauthenticated):
            check_role(None, ADMIN_ROLES)

    @pytest.mark.parametrize("role", ["verified_volunteer", "admin"])
    def test_volunteer_gate_allows(self, role):
        assert check_role(_user(role), VERIFIED_VOLUNTEER_ROLES)["role"] == role

    @pytest.mark.parametrize("role", ["user", "pending_volunteer"])
    def test_volunteer_gate_denies(self, role):
        with pytest.raises(Forbidden):
            check_role(_user(role), VERIFIED_VOLUNTEER_ROLES)

    def test_admin_gate_has_no_inheritance(self):
        with pytest.raises(Forbidden):
            check_role(_user("verified_volunteer"), ADMIN_ROLES)
        assert check_role(_user("admin"), ADMIN_ROLES)

    def test_unknown_role_denied(self):
        with pytest.raises(Forbidden):
            check_role(_user("superuser"), ADMIN_ROLES)


class TestOwnershipOrAdmin:
    def test_owner_allowed(self):
        require_ownership_or_admin(_user("verified_volunteer", "u-1"), {"owner_id": "u-1"})

    def test_admin_allowed_on_foreign_resource(self):
        require_ownership_or_admin(_user("admin", "u-9"), {"owner_id": "u-1"})

    def test_non_owner_forbidden(self):
        with pytest.raises(Forbidden):
            require_ownership_or_admin(_user("verified_volunteer", "u-2"), {"owner_id": "u-1"})

    def test_custom_owner_field(self):
        require_ownership_or_admin(_user("user", "u-1"), {"created_by": "u-1"}, owner_field="created_by")
        with pytest.raises(Forbidden):
            require_ownership_or_admin(_user("user", "u-1"), {"owner_id": "u-1"}, owner_field="created_by")

    def test_no_identity_is_unauthenticated(self):
        with pytest.raises(Unauthenticated):
            require_ownership_or_admin(None, {"owner_id": "u-1"})
