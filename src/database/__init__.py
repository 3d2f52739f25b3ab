"""
Database Module for Stock Forecast

SQLAlchemy models and database utilities. The repository lives in
src.database.repository.
"""

from .models import (
    db,
    User,
    Category,
    Item,
    StockIn,
    StockOut,
    Order,
    OrderItem
)

__all__ = [
    'db',
    'User',
    'Category',
    'Item',
    'StockIn',
    'StockOut',
    'Order',
    'OrderItem',
]
