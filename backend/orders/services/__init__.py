"""
Orders services package.

- OrderService: order creation and lookups
- OrderStatusService: administrator status changes with the audit trail
"""

from .order_service import OrderService
from .status_service import OrderStatusService, VALID_STATUS_TRANSITIONS, is_valid_transition

__all__ = [
    'OrderService',
    'OrderStatusService',
    'VALID_STATUS_TRANSITIONS',
    'is_valid_transition',
]
