from .auth import User, USER_ROLES
from .inventory import Category, Item, Batch
from .sales import Sale, SaleItem, PAYMENT_METHODS, DISCOUNT_TYPES
from .attendance import Attendance
from .settings import CompanySettings

__all__ = [
    'User', 'USER_ROLES',
    'Category', 'Item', 'Batch',
    'Sale', 'SaleItem', 'PAYMENT_METHODS', 'DISCOUNT_TYPES',
    'Attendance',
    'CompanySettings',
]
