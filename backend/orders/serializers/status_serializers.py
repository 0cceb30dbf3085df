from rest_framework import serializers


class UpdateOrderStatusSerializer(serializers.Serializer):
    """
    Body of PATCH /api/admin/orders/{orderId}/status.

    ``status`` is checked against the order workflow by OrderStatusService,
    so it is only required to be present here.
    """

    status = serializers.CharField(required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    expectedVersion = serializers.IntegerField(required=False, min_value=0, allow_null=True)
