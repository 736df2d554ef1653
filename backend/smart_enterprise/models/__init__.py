from .employees import Employee
from .catalog import Product, Stock, STOCK_TYPES
from .orders import Order, OrderDetails, ORDER_PRIORITIES

__all__ = [
    'Employee',
    'Product', 'Stock', 'STOCK_TYPES',
    'Order', 'OrderDetails', 'ORDER_PRIORITIES',
]
