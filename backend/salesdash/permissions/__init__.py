# Overview: Permission system package.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    CUSTOMER_PERMISSIONS,
    SALES_PERMISSIONS,
    SALES_DETAIL_PERMISSIONS,
    ADMIN_PERMISSIONS,
)
from .helpers import (
    get_all_permission_codes,
    get_permissions_by_category,
    get_permission_definition,
    validate_permission_code,
    get_flag_for_code,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "CUSTOMER_PERMISSIONS",
    "SALES_PERMISSIONS",
    "SALES_DETAIL_PERMISSIONS",
    "ADMIN_PERMISSIONS",
    "get_all_permission_codes",
    "get_permissions_by_category",
    "get_permission_definition",
    "validate_permission_code",
    "get_flag_for_code",
]
