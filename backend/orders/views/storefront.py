import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated

from core_backend.base import BaseAPIView
from orders.serializers import OrderListSerializer, OrderSerializer
from orders.services import OrderService

logger = logging.getLogger(__name__)


class CreateOrderView(BaseAPIView):
    """
    POST /api/orders/create

    Body: {customer: {email, firstName, lastName, phone?}, cartItems: [...],
    pickupTime?, pickupNotes?}. Prices are recomputed from the menu.
    """

    def post(self, request):
        data = request.data if isinstance(request.data, dict) else {}
        order = OrderService.create_order(
            customer=data.get("customer"),
            cart_items=data.get("cartItems"),
            pickup_time=data.get("pickupTime"),
            pickup_notes=data.get("pickupNotes"),
        )
        return self.create_success_response(
            {"success": True, "order": OrderSerializer(order).data},
            status_code=status.HTTP_201_CREATED,
        )


class OrderDetailView(BaseAPIView):
    """GET /api/orders/{id}"""

    def get(self, request, order_id):
        order = OrderService.get_order(order_id)
        return self.create_success_response({"success": True, "order": OrderSerializer(order).data})


class OrderByNumberView(BaseAPIView):
    """GET /api/orders/number/{orderNumber}, used by the confirmation page."""

    def get(self, request, order_number):
        order = OrderService.get_order_by_number(order_number)
        return self.create_success_response({"success": True, "order": OrderSerializer(order).data})


class CustomerOrdersView(BaseAPIView):
    """
    GET /api/orders/mine

    Order history of the signed-in customer, matched on the account's email.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request):
        orders = OrderService.list_customer_orders(request.user.email)
        return self.create_success_response(
            {"success": True, "orders": OrderListSerializer(orders, many=True).data}
        )
