import django_filters
from core_backend.base.filters import BaseFilterSet
from .models import Order


class OrderFilter(BaseFilterSet):
    """
    Filters for the admin order list.

    ``created_after`` / ``created_before`` come from BaseFilterSet; a date-only
    ``created_before`` covers the whole day.
    """

    status = django_filters.MultipleChoiceFilter(choices=Order.OrderStatus.choices)
    payment_status = django_filters.MultipleChoiceFilter(choices=Order.PaymentStatus.choices)
    email = django_filters.CharFilter(field_name='customer_email', lookup_expr='iexact')
    order_number = django_filters.CharFilter(field_name='order_number', lookup_expr='icontains')

    class Meta:
        model = Order
        fields = ['status', 'payment_status', 'email', 'order_number', 'created_after', 'created_before']
