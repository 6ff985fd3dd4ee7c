"""Authorization guards, exercised without HTTP."""

import pytest

from daily_report.auth.dependencies import (
    authorize_role,
    authorize_self_or_manager,
    ensure_owner_or_manager,
)
from daily_report.auth.jwt import Claim
from daily_report.core.errors import ApiError, ErrorCode
from daily_report.models.user import Role

SALES = Claim(user_id=1, email="sales@example.com", role=Role.SALES)
MANAGER = Claim(user_id=2, email="manager@example.com", role=Role.MANAGER)


def error_code(fn, *args) -> ErrorCode:
    with pytest.raises(ApiError) as exc:
        fn(*args)
    return exc.value.code


class TestRoleGuard:
    def test_allowed_role_passes(self):
        assert authorize_role(MANAGER, {Role.MANAGER}) is MANAGER

    def test_other_role_is_forbidden(self):
        assert error_code(authorize_role, SALES, {Role.MANAGER}) == ErrorCode.FORBIDDEN

    def test_manager_passes_wherever_sales_does(self):
        assert authorize_role(MANAGER, {Role.SALES, Role.MANAGER}) is MANAGER

    def test_missing_identity_is_unauthorized(self):
        assert error_code(authorize_role, None, {Role.SALES}) == ErrorCode.UNAUTHORIZED


class TestSelfOrManager:
    def test_self_passes(self):
        assert authorize_self_or_manager(SALES, 1) is SALES

    def test_manager_passes_for_anyone(self):
        assert authorize_self_or_manager(MANAGER, 99) is MANAGER

    def test_other_user_is_forbidden(self):
        assert error_code(authorize_self_or_manager, SALES, 2) == ErrorCode.FORBIDDEN

    def test_missing_identity_is_unauthorized(self):
        assert error_code(authorize_self_or_manager, None, 1) == ErrorCode.UNAUTHORIZED


class TestOwnership:
    def test_owner_passes(self):
        assert ensure_owner_or_manager(SALES, 1, "report") is SALES

    def test_manager_passes(self):
        assert ensure_owner_or_manager(MANAGER, 1, "report") is MANAGER

    def test_non_owner_is_forbidden(self):
        with pytest.raises(ApiError) as exc:
            ensure_owner_or_manager(SALES, 3, "comment")
        assert exc.value.code == ErrorCode.FORBIDDEN
        assert exc.value.message == "You do not have permission to modify this comment"

    def test_missing_identity_is_unauthorized(self):
        assert error_code(ensure_owner_or_manager, None, 1) == ErrorCode.UNAUTHORIZED
