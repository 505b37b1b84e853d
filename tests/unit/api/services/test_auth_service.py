"""Unit tests for the self-or-admin ownership check."""

import pytest

from dscommerce.api.services.auth import is_self_or_admin, validate_self_or_admin
from dscommerce.api.shared.auth import Principal
from dscommerce.api.shared.helpers.errors import AuthorizationError


@pytest.fixture
def client_principal() -> Principal:
    return Principal(id=1, email="maria@gmail.com", roles=frozenset({"ROLE_CLIENT"}))


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(id=3, email="ana@gmail.com", roles=frozenset({"ROLE_ADMIN"}))


class TestIsSelfOrAdmin:
    def test_owner_allowed(self, client_principal):
        assert is_self_or_admin(client_principal, 1) is True

    def test_other_client_denied(self, client_principal):
        assert is_self_or_admin(client_principal, 2) is False

    def test_admin_allowed_for_any_user(self, admin_principal):
        assert is_self_or_admin(admin_principal, 1) is True
        assert is_self_or_admin(admin_principal, 3) is True

    def test_principal_without_roles_only_sees_self(self):
        principal = Principal(id=5, email="nobody@example.com")

        assert is_self_or_admin(principal, 5) is True
        assert is_self_or_admin(principal, 6) is False


class TestValidateSelfOrAdmin:
    def test_allowed_returns_none(self, client_principal, admin_principal):
        assert validate_self_or_admin(client_principal, 1) is None
        assert validate_self_or_admin(admin_principal, 2) is None

    def test_denied_raises_forbidden(self, client_principal):
        with pytest.raises(AuthorizationError) as exc_info:
            validate_self_or_admin(client_principal, 2)

        assert exc_info.value.status_code == 403
