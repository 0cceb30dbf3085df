"""
Orders serializers package.
"""

from .order_serializers import (
    OrderItemSerializer,
    OrderListSerializer,
    OrderSerializer,
    OrderStatusHistorySerializer,
)
from .status_serializers import UpdateOrderStatusSerializer

__all__ = [
    # Orders
    'OrderItemSerializer',
    'OrderListSerializer',
    'OrderSerializer',
    'OrderStatusHistorySerializer',
    # Status
    'UpdateOrderStatusSerializer',
]
