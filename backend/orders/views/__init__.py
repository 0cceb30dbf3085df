from .admin_actions import (
    AdminOrderHistoryView,
    AdminOrderListView,
    AdminOrderStatusView,
)
from .storefront import CreateOrderView, CustomerOrdersView, OrderByNumberView, OrderDetailView

__all__ = [
    'AdminOrderHistoryView',
    'AdminOrderListView',
    'AdminOrderStatusView',
    'CreateOrderView',
    'CustomerOrdersView',
    'OrderByNumberView',
    'OrderDetailView',
]
