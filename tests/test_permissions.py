# tests/test_permissions.py

import pytest

from charterdesk.business_logic.permissions import (
    UserRole, Permission, PermissionDeniedError, normalize_role, has_permission,
    require_permission, can_edit_field
)


@pytest.mark.parametrize("raw, expected", [
    ("admin", UserRole.ADMIN),
    ("  SUPER ADMIN ", UserRole.SUPER_ADMIN),
    (UserRole.SALES, UserRole.SALES),
    ("janitor", None),
    (None, None),
])
def test_normalize_role(raw, expected):
    assert normalize_role(raw) is expected


def test_only_admins_delete_bookings():
    assert has_permission(UserRole.SUPER_ADMIN, Permission.DELETE_BOOKINGS)
    assert has_permission("Admin", Permission.DELETE_BOOKINGS)
    assert not has_permission(UserRole.MANAGER, Permission.DELETE_BOOKINGS)
    assert not has_permission(UserRole.SALES, Permission.DELETE_BOOKINGS)


def test_agent_permissions():
    assert has_permission(UserRole.MANAGER, Permission.CREATE_AGENT)
    assert has_permission(UserRole.MANAGER, Permission.EDIT_AGENT)
    assert not has_permission(UserRole.MANAGER, Permission.DELETE_AGENT)
    assert not has_permission(UserRole.SALES, Permission.CREATE_AGENT)


def test_everyone_can_export_and_unknown_roles_can_do_nothing():
    assert all(has_permission(role, Permission.EXPORT_DATA) for role in UserRole)
    assert not has_permission("guest", Permission.EXPORT_DATA)
    assert not has_permission(None, Permission.EXPORT_DATA)


def test_require_permission_raises_with_details():
    require_permission(UserRole.ACCOUNTS, Permission.MANAGE_ACCOUNTS)
    with pytest.raises(PermissionDeniedError) as excinfo:
        require_permission("sales", Permission.MANAGE_ACCOUNTS)
    assert excinfo.value.role is UserRole.SALES
    assert excinfo.value.permission is Permission.MANAGE_ACCOUNTS


def test_yacht_pricing_fields_are_admin_only():
    assert can_edit_field(UserRole.ADMIN, "yacht", "shared_packages")
    assert not can_edit_field(UserRole.MANAGER, "yacht", "shared_packages")
    assert not can_edit_field(UserRole.SALES, "yacht", "private_hourly_rate")
    assert can_edit_field(UserRole.SALES, "yacht", "description")
