from django.urls import path

from .views import (
    AdminOrderHistoryView,
    AdminOrderListView,
    AdminOrderStatusView,
    CreateOrderView,
    CustomerOrdersView,
    OrderByNumberView,
    OrderDetailView,
)

urlpatterns = [
    # Storefront
    path("orders/create", CreateOrderView.as_view(), name="order-create"),
    path("orders/mine", CustomerOrdersView.as_view(), name="customer-orders"),
    path("orders/number/<str:order_number>", OrderByNumberView.as_view(), name="order-by-number"),
    path("orders/<str:order_id>", OrderDetailView.as_view(), name="order-detail"),
    # Back office
    path("admin/orders", AdminOrderListView.as_view(), name="admin-order-list"),
    path("admin/orders/<str:order_id>/status", AdminOrderStatusView.as_view(), name="admin-order-status"),
    path("admin/orders/<str:order_id>/history", AdminOrderHistoryView.as_view(), name="admin-order-history"),
]
