from .catalog import Category, Product, ProductVariant
from .customers import Customer
from .orders import Order, OrderItem
from .audit import AdminAction
from .settings import CompanySettings

__all__ = [
    'Category', 'Product', 'ProductVariant',
    'Customer',
    'Order', 'OrderItem',
    'AdminAction',
    'CompanySettings',
]
