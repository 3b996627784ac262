# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    CUSTOMERS = "CUSTOMERS"
    SALES = "SALES"
    SALES_DETAILS = "SALES_DETAILS"
    ADMINISTRATION = "ADMINISTRATION"
