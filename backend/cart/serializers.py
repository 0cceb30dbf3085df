"""
Cart serializers for API representation.

The cart is not a model, so these are plain serializers over
cart.services.Cart and its lines.
"""

from rest_framework import serializers


class CartItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    menuItem = serializers.DictField(source="menu_item")
    quantity = serializers.IntegerField()
    unitPrice = serializers.IntegerField(source="unit_price")
    totalPrice = serializers.IntegerField(source="total_price")


class CartSerializer(serializers.Serializer):
    """Cart with its derived totals, all amounts in cents."""

    items = CartItemSerializer(many=True)
    itemCount = serializers.IntegerField(source="item_count")
    subtotal = serializers.IntegerField()
    tax = serializers.IntegerField()
    total = serializers.IntegerField(source="grand_total")


class AddCartItemSerializer(serializers.Serializer):
    menuItemId = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)


class UpdateCartItemSerializer(serializers.Serializer):
    # Zero or negative removes the line
    quantity = serializers.IntegerField()
