# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category, flag)
# flag is the user_permissions column granting the code, or None for
# codes held only by administrators.

from .categories import PermissionCategory


# -- CUSTOMERS --

CUSTOMER_PERMISSIONS = [
    (
        "ADD_CUSTOMERS",
        "Add Customers",
        "Create new customer records",
        PermissionCategory.CUSTOMERS,
        "can_add_customers",
    ),
    (
        "EDIT_CUSTOMERS",
        "Edit Customers",
        "Edit customer name, address and payment term",
        PermissionCategory.CUSTOMERS,
        "can_edit_customers",
    ),
    (
        "DELETE_CUSTOMERS",
        "Delete Customers",
        "Soft-delete customer records",
        PermissionCategory.CUSTOMERS,
        "can_delete_customers",
    ),
]


# -- SALES --

SALES_PERMISSIONS = [
    (
        "ADD_SALES",
        "Add Sales",
        "Create new sales transactions",
        PermissionCategory.SALES,
        "can_add_sales",
    ),
    (
        "EDIT_SALES",
        "Edit Sales",
        "Edit sales headers and record payments",
        PermissionCategory.SALES,
        "can_edit_sales",
    ),
    (
        "DELETE_SALES",
        "Delete Sales",
        "Soft-delete sales transactions",
        PermissionCategory.SALES,
        "can_delete_sales",
    ),
]


# -- SALES DETAILS --

SALES_DETAIL_PERMISSIONS = [
    (
        "ADD_SALESDETAILS",
        "Add Sale Lines",
        "Add product lines to a sale",
        PermissionCategory.SALES_DETAILS,
        "can_add_salesdetails",
    ),
    (
        "EDIT_SALESDETAILS",
        "Edit Sale Lines",
        "Change quantities on sale lines",
        PermissionCategory.SALES_DETAILS,
        "can_edit_salesdetails",
    ),
    (
        "DELETE_SALESDETAILS",
        "Delete Sale Lines",
        "Soft-delete individual sale lines",
        PermissionCategory.SALES_DETAILS,
        "can_delete_salesdetails",
    ),
]


# -- ADMINISTRATION (admin role only) --

ADMIN_PERMISSIONS = [
    (
        "RESTORE_RECORDS",
        "Restore Records",
        "Restore soft-deleted customers, sales and sale lines",
        PermissionCategory.ADMINISTRATION,
        None,
    ),
    (
        "VIEW_DELETED",
        "View Deleted",
        "List soft-deleted customers and sales",
        PermissionCategory.ADMINISTRATION,
        None,
    ),
    (
        "MANAGE_USERS",
        "Manage Users",
        "Change user roles and per-user permission flags",
        PermissionCategory.ADMINISTRATION,
        None,
    ),
    (
        "SEND_NOTIFICATIONS",
        "Send Notifications",
        "Send notifications to other users",
        PermissionCategory.ADMINISTRATION,
        None,
    ),
]


PERMISSION_DEFINITIONS = (
    CUSTOMER_PERMISSIONS
    + SALES_PERMISSIONS
    + SALES_DETAIL_PERMISSIONS
    + ADMIN_PERMISSIONS
)
