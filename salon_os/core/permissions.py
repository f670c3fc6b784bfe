"""
RBAC (Role-Based Access Control) permission system
"""

from enum import Enum
from typing import Iterable, Set


class Permission(str, Enum):
    """Permission definitions"""
    # Customer permissions
    CUSTOMERS_READ = "customers:read"
    CUSTOMERS_CREATE = "customers:create"
    CUSTOMERS_UPDATE = "customers:update"

    # Day-end closing permissions
    DAYEND_READ = "dayend:read"
    DAYEND_CREATE = "dayend:create"

    # Expense permissions
    EXPENSES_READ = "expenses:read"
    EXPENSES_CREATE = "expenses:create"
    EXPENSES_UPDATE = "expenses:update"
    EXPENSES_DELETE = "expenses:delete"


# Role permission mapping
ROLE_PERMISSIONS = {
    "admin": set(Permission),
    "manager": {
        Permission.CUSTOMERS_READ,
        Permission.CUSTOMERS_CREATE,
        Permission.CUSTOMERS_UPDATE,
        Permission.DAYEND_READ,
        Permission.DAYEND_CREATE,
        Permission.EXPENSES_READ,
        Permission.EXPENSES_CREATE,
        Permission.EXPENSES_UPDATE,
    },
    "receptionist": {
        # Front desk books customers but does not touch the ledger
        Permission.CUSTOMERS_READ,
        Permission.CUSTOMERS_CREATE,
        Permission.CUSTOMERS_UPDATE,
        Permission.EXPENSES_READ,
    },
    "staff": set(),
}


def get_permissions_for_role(role: str) -> Set[Permission]:
    """Get permissions for a given role"""
    return set(ROLE_PERMISSIONS.get(role.lower(), set()))


def has_permission(required_permission: Permission, user_permissions: Iterable[str]) -> bool:
    """Check if user has required permission"""
    return required_permission.value in {getattr(p, "value", p) for p in user_permissions}
