"""
Session-backed cart endpoints.

The storefront can keep its cart client-side; these endpoints offer the same
operations for clients that prefer the server to hold it. The cart lives in
the visitor's Django session.
"""

import logging

from django.conf import settings

from core_backend.base import BaseAPIView
from core_backend.exceptions import NotFoundError, ValidationError
from menu.models import MenuItem

from .serializers import AddCartItemSerializer, CartSerializer, UpdateCartItemSerializer
from .services import Cart
from .storage import SessionCartStore

logger = logging.getLogger(__name__)


def get_session_cart(request):
    """Cart bound to the current session."""
    return Cart(SessionCartStore(request.session, key=settings.CART_SESSION_KEY))


class BaseCartView(BaseAPIView):

    def cart_response(self, cart, status_code=200):
        return self.create_success_response(
            {"success": True, "cart": CartSerializer(cart).data},
            status_code=status_code,
        )


class CartView(BaseCartView):
    """
    GET /api/cart     current cart
    DELETE /api/cart  empty the cart
    """

    def get(self, request):
        return self.cart_response(get_session_cart(request))

    def delete(self, request):
        cart = get_session_cart(request)
        cart.clear()
        return self.cart_response(cart)


class CartItemsView(BaseCartView):
    """
    POST /api/cart/items  {menuItemId, quantity}
    """

    def post(self, request):
        serializer = AddCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        menu_item_id = serializer.validated_data["menuItemId"]

        menu_item = MenuItem.objects.filter(id=menu_item_id).first()
        if menu_item is None:
            raise NotFoundError("Menu item not found")
        if not menu_item.is_available:
            raise ValidationError(
                f"Menu item is not available: {menu_item.name_en}",
                fields={"menuItemId": ["Not available."]},
            )

        cart = get_session_cart(request)
        cart.add_item(menu_item, serializer.validated_data["quantity"])
        logger.info(f"[Cart] Added {serializer.validated_data['quantity']} x {menu_item.id}")
        return self.cart_response(cart, status_code=201)


class CartItemDetailView(BaseCartView):
    """
    PATCH /api/cart/items/{itemId}   {quantity}
    DELETE /api/cart/items/{itemId}
    """

    def patch(self, request, item_id):
        serializer = UpdateCartItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        cart = get_session_cart(request)
        cart.update_quantity(item_id, serializer.validated_data["quantity"])
        return self.cart_response(cart)

    def delete(self, request, item_id):
        cart = get_session_cart(request)
        cart.remove_item(item_id)
        return self.cart_response(cart)
