"""
Back-office order endpoints. Staff users only.
"""

import logging

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics
from rest_framework.pagination import LimitOffsetPagination
from rest_framework.permissions import IsAdminUser

from core_backend.base import StaffAPIView
from orders.filters import OrderFilter
from orders.models import Order
from orders.serializers import (
    OrderListSerializer,
    OrderSerializer,
    OrderStatusHistorySerializer,
    UpdateOrderStatusSerializer,
)
from orders.services import OrderService, OrderStatusService

logger = logging.getLogger(__name__)


class AdminOrderPagination(LimitOffsetPagination):
    default_limit = 50
    max_limit = 200


class AdminOrderListView(generics.ListAPIView):
    """
    GET /api/admin/orders?status=&payment_status=&email=&created_after=&created_before=&limit=&offset=
    """

    permission_classes = [IsAdminUser]
    serializer_class = OrderListSerializer
    pagination_class = AdminOrderPagination
    filter_backends = [DjangoFilterBackend]
    filterset_class = OrderFilter

    def get_queryset(self):
        return Order.objects.with_items().order_by("-created_at")


class AdminOrderStatusView(StaffAPIView):
    """
    PATCH /api/admin/orders/{orderId}/status

    Body: {status, notes?, expectedVersion?}
    """

    def patch(self, request, order_id):
        serializer = UpdateOrderStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = OrderStatusService.update_status(
            order_id,
            serializer.validated_data.get("status"),
            notes=serializer.validated_data.get("notes"),
            expected_version=serializer.validated_data.get("expectedVersion"),
        )
        logger.info(f"[AdminOrderStatus] {request.user} set {order.order_number} to {order.status}")
        return self.create_success_response({"order": OrderSerializer(order).data})


class AdminOrderHistoryView(StaffAPIView):
    """GET /api/admin/orders/{orderId}/history, newest first."""

    def get(self, request, order_id):
        history = OrderService.list_status_history(order_id)
        return self.create_success_response(
            {"success": True, "history": OrderStatusHistorySerializer(history, many=True).data}
        )
