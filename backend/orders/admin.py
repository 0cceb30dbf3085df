from django.contrib import admin

from core_backend.config import get_currency
from payments.money import format_money
from .models import Order, OrderItem, OrderNumberSequence, OrderStatusHistory


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("menu_item_name_en", "quantity", "get_unit_price", "get_line_item_total", "special_instructions")
    readonly_fields = fields

    @admin.display(description="Unit Price")
    def get_unit_price(self, obj):
        return format_money(get_currency(), obj.unit_price_cents)

    @admin.display(description="Line Item Total")
    def get_line_item_total(self, obj):
        return format_money(get_currency(), obj.total_price_cents)

    def has_add_permission(self, request, obj=None):
        return False


class OrderStatusHistoryInline(admin.TabularInline):
    model = OrderStatusHistory
    extra = 0
    can_delete = False
    fields = ("status", "notes", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Admin configuration for the Order model.

    Amounts and the customer snapshot are read-only; status changes made here
    bypass the API and its audit note, so prefer the order dashboard.
    """

    list_display = (
        "order_number",
        "customer_name",
        "customer_email",
        "status",
        "payment_status",
        "get_total_formatted",
        "pickup_time",
        "created_at",
    )
    list_display_links = ("order_number",)
    search_fields = ("order_number", "customer_email", "customer_last_name", "stripe_payment_intent_id")
    list_filter = ("status", "payment_status", "created_at")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline, OrderStatusHistoryInline]
    readonly_fields = (
        "id",
        "order_number",
        "subtotal_cents",
        "tax_cents",
        "total_cents",
        "stripe_payment_intent_id",
        "version",
        "created_at",
        "updated_at",
    )

    @admin.display(description="Total", ordering="total_cents")
    def get_total_formatted(self, obj):
        return format_money(get_currency(), obj.total_cents)

    def save_model(self, request, obj, form, change):
        if change:
            obj.version += 1
        super().save_model(request, obj, form, change)


@admin.register(OrderNumberSequence)
class OrderNumberSequenceAdmin(admin.ModelAdmin):
    list_display = ("day", "last_value")
    ordering = ("-day",)
