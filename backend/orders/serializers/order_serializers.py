from rest_framework import serializers

from orders.models import Order, OrderItem, OrderStatusHistory


class OrderItemSerializer(serializers.ModelSerializer):
    """Snapshot of an ordered menu item, in the storefront's camelCase shape."""

    menuItemId = serializers.UUIDField(source="menu_item_id", read_only=True, allow_null=True)
    name = serializers.SerializerMethodField()
    description = serializers.SerializerMethodField()
    unitPriceCents = serializers.IntegerField(source="unit_price_cents", read_only=True)
    totalPriceCents = serializers.IntegerField(source="total_price_cents", read_only=True)
    specialInstructions = serializers.CharField(source="special_instructions", read_only=True)

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "menuItemId",
            "name",
            "description",
            "quantity",
            "unitPriceCents",
            "totalPriceCents",
            "specialInstructions",
        ]

    def get_name(self, obj):
        return {"en": obj.menu_item_name_en, "zh": obj.menu_item_name_zh}

    def get_description(self, obj):
        return {"en": obj.menu_item_description_en, "zh": obj.menu_item_description_zh}


class OrderSerializer(serializers.ModelSerializer):
    """
    One representation of an order for every endpoint (creation, lookup,
    payment confirmation and the admin views).
    """

    orderNumber = serializers.CharField(source="order_number", read_only=True)
    paymentStatus = serializers.CharField(source="payment_status", read_only=True)
    paymentMethod = serializers.CharField(source="payment_method", read_only=True)
    subtotalCents = serializers.IntegerField(source="subtotal_cents", read_only=True)
    taxCents = serializers.IntegerField(source="tax_cents", read_only=True)
    totalCents = serializers.IntegerField(source="total_cents", read_only=True)
    customer = serializers.SerializerMethodField()
    pickupTime = serializers.DateTimeField(source="pickup_time", read_only=True)
    pickupNotes = serializers.CharField(source="pickup_notes", read_only=True)
    items = OrderItemSerializer(many=True, read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "orderNumber",
            "status",
            "paymentStatus",
            "paymentMethod",
            "subtotalCents",
            "taxCents",
            "totalCents",
            "customer",
            "pickupTime",
            "pickupNotes",
            "items",
            "version",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = fields

    def get_customer(self, obj):
        return {
            "email": obj.customer_email,
            "firstName": obj.customer_first_name,
            "lastName": obj.customer_last_name,
            "phone": obj.customer_phone,
        }


class OrderListSerializer(OrderSerializer):
    """Admin list rows; items are left out to keep pages small."""

    itemCount = serializers.SerializerMethodField()

    class Meta(OrderSerializer.Meta):
        fields = [field for field in OrderSerializer.Meta.fields if field != "items"] + ["itemCount"]
        read_only_fields = fields

    def get_itemCount(self, obj):
        return sum(item.quantity for item in obj.items.all())


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)

    class Meta:
        model = OrderStatusHistory
        fields = ["id", "status", "notes", "createdAt"]
