from .auth import Profile, SessionToken, UserPermission
from .customers import Customer
from .catalog import Employee, Product, PriceHistory
from .sales import Sale, SaleLineItem, Payment
from .communications import Notification
from .activity import ActivityLog

__all__ = [
    'Profile', 'SessionToken', 'UserPermission',
    'Customer',
    'Employee', 'Product', 'PriceHistory',
    'Sale', 'SaleLineItem', 'Payment',
    'Notification',
    'ActivityLog',
]
