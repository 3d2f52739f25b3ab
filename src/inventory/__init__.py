"""
Inventory Module for Stock Forecast

Stock movement and purchase order code generation.
"""

from .transaction_codes import (
    generate_transaction_code,
    generate_fallback_code,
    transaction_code_exists,
    generate_order_code
)

__all__ = [
    'generate_transaction_code',
    'generate_fallback_code',
    'transaction_code_exists',
    'generate_order_code',
]
