# charterdesk/business_logic/permissions.py

from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple, Union
import logging

logger = logging.getLogger(__name__)


class UserRole(Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    MANAGER = "Manager"
    SALES = "Sales"
    ACCOUNTS = "Accounts"


class Permission(Enum):
    MANAGE_USERS = "manage_users"
    VIEW_USERS = "view_users"
    CREATE_AGENT = "create_agent"
    EDIT_AGENT = "edit_agent"
    DELETE_AGENT = "delete_agent"
    MANAGE_BOOKINGS = "manage_bookings"
    DELETE_BOOKINGS = "delete_bookings"
    BYPASS_CLOSED_LOCK = "bypass_closed_lock"
    EXPORT_DATA = "export_data"
    VIEW_REPORTS = "view_reports"
    MANAGE_ACCOUNTS = "manage_accounts"
    MANAGE_YACHTS = "manage_yachts"


class PermissionDeniedError(PermissionError):
    def __init__(self, role: Optional[UserRole], permission: Permission):
        self.role = role
        self.permission = permission
        role_name = role.value if role else "anonymous"
        super().__init__(f"Role '{role_name}' is not allowed to {permission.value}.")


_ADMINS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN})

ROLE_PERMISSIONS: Dict[Permission, FrozenSet[UserRole]] = {
    Permission.MANAGE_USERS: _ADMINS,
    Permission.VIEW_USERS: _ADMINS,
    Permission.CREATE_AGENT: _ADMINS | {UserRole.MANAGER},
    Permission.EDIT_AGENT: _ADMINS | {UserRole.MANAGER},
    Permission.DELETE_AGENT: _ADMINS,
    Permission.MANAGE_BOOKINGS: _ADMINS | {UserRole.MANAGER, UserRole.SALES},
    Permission.DELETE_BOOKINGS: _ADMINS,
    Permission.BYPASS_CLOSED_LOCK: _ADMINS | {UserRole.MANAGER},
    Permission.EXPORT_DATA: frozenset(UserRole),
    Permission.VIEW_REPORTS: _ADMINS | {UserRole.MANAGER, UserRole.ACCOUNTS},
    Permission.MANAGE_ACCOUNTS: _ADMINS | {UserRole.ACCOUNTS},
    Permission.MANAGE_YACHTS: _ADMINS,
}

# (entity, field) -> permission needed to edit it. Fields not listed are editable by anyone
# who can open the form.
FIELD_PERMISSIONS: Dict[Tuple[str, str], Permission] = {
    ("yacht", "shared_packages"): Permission.MANAGE_YACHTS,
    ("yacht", "private_hourly_rate"): Permission.MANAGE_YACHTS,
}


def normalize_role(role: Union[UserRole, str, None]) -> Optional[UserRole]:
    """Accepts 'super admin', 'ADMIN', UserRole.SALES, ...; unknown values give None."""
    if role is None or isinstance(role, UserRole):
        return role
    wanted = str(role).strip().lower()
    for candidate in UserRole:
        if candidate.value.lower() == wanted:
            return candidate
    logger.debug(f"Unknown role string '{role}'.")
    return None


def has_permission(role: Union[UserRole, str, None], permission: Permission) -> bool:
    normalized = normalize_role(role)
    if normalized is None:
        return False
    return normalized in ROLE_PERMISSIONS.get(permission, frozenset())


def require_permission(role: Union[UserRole, str, None], permission: Permission) -> None:
    if not has_permission(role, permission):
        normalized = normalize_role(role)
        logger.warning(f"Permission '{permission.value}' denied for role '{role}'.")
        raise PermissionDeniedError(normalized, permission)


def can_edit_field(role: Union[UserRole, str, None], entity: str, field_name: str) -> bool:
    permission = FIELD_PERMISSIONS.get((entity, field_name))
    if permission is None:
        return True
    return has_permission(role, permission)
