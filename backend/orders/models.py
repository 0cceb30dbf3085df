import uuid

from django.db import models
from django.db.models import F
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from menu.models import MenuItem


class OrderQuerySet(models.QuerySet):

    def compare_and_set(self, order, **changes):
        """
        Apply ``changes`` to ``order`` only if its row still carries the version
        the caller read. Issues a single ``UPDATE ... WHERE id = %s AND version = %s``.

        Returns True and refreshes ``order`` in memory on success, False when
        another writer got there first.
        """
        now = timezone.now()
        updated = self.filter(pk=order.pk, version=order.version).update(
            version=F("version") + 1,
            updated_at=now,
            **changes,
        )
        if not updated:
            return False
        for field_name, value in changes.items():
            setattr(order, field_name, value)
        order.version += 1
        order.updated_at = now
        return True

    def with_items(self):
        return self.prefetch_related("items")


class Order(models.Model):
    """
    A pickup order placed through the storefront. Money amounts are integer
    cents and are fixed at creation; only status fields change afterwards.
    """

    class OrderStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        PREPARING = "preparing", _("Preparing")
        READY = "ready", _("Ready")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        SUCCEEDED = "succeeded", _("Succeeded")
        FAILED = "failed", _("Failed")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True, editable=False)

    subtotal_cents = models.PositiveIntegerField()
    tax_cents = models.PositiveIntegerField()
    total_cents = models.PositiveIntegerField()

    customer_email = models.EmailField(db_index=True)
    customer_first_name = models.CharField(max_length=100)
    customer_last_name = models.CharField(max_length=100)
    customer_phone = models.CharField(max_length=32, blank=True)

    pickup_time = models.DateTimeField(null=True, blank=True)
    pickup_notes = models.TextField(blank=True)

    status = models.CharField(
        max_length=20, choices=OrderStatus.choices, default=OrderStatus.PENDING
    )
    payment_status = models.CharField(
        max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING
    )
    stripe_payment_intent_id = models.CharField(
        max_length=255, blank=True, db_index=True,
        help_text=_("Payment provider transaction id linked to this order"),
    )
    payment_method = models.CharField(max_length=50, blank=True)

    version = models.PositiveIntegerField(
        default=0,
        help_text=_("Incremented on every update; used for optimistic concurrency"),
    )

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        verbose_name = _("order")
        verbose_name_plural = _("orders")
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_cents=F("subtotal_cents") + F("tax_cents")),
                name="order_total_is_subtotal_plus_tax",
            ),
        ]

    def __str__(self):
        return self.order_number or str(self.id)

    @property
    def customer_name(self):
        return f"{self.customer_first_name} {self.customer_last_name}".strip()

    @property
    def is_payable(self):
        return self.status == self.OrderStatus.PENDING


class OrderItem(models.Model):
    """
    A line of an order. Name, description and price are copied from the menu
    item when the order is created, so later catalog edits don't rewrite history.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    menu_item = models.ForeignKey(
        MenuItem, on_delete=models.SET_NULL, null=True, blank=True, related_name="order_items"
    )
    menu_item_name_en = models.CharField(max_length=200)
    menu_item_name_zh = models.CharField(max_length=200, blank=True)
    menu_item_description_en = models.TextField(blank=True)
    menu_item_description_zh = models.TextField(blank=True)
    quantity = models.PositiveIntegerField()
    unit_price_cents = models.PositiveIntegerField()
    total_price_cents = models.PositiveIntegerField()
    special_instructions = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_items"
        ordering = ["created_at", "id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="order_item_quantity_positive"),
            models.CheckConstraint(
                condition=models.Q(total_price_cents=F("unit_price_cents") * F("quantity")),
                name="order_item_total_is_unit_times_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.quantity} x {self.menu_item_name_en}"


class OrderStatusHistory(models.Model):
    """Append-only audit trail of admin status changes that carried a note."""

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")
    status = models.CharField(max_length=20, choices=Order.OrderStatus.choices)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_status_history"
        ordering = ["-created_at", "-id"]
        verbose_name_plural = _("order status history")

    def __str__(self):
        return f"{self.order_id}: {self.status}"


class OrderNumberSequence(models.Model):
    """Last issued daily counter, one row per calendar day."""

    day = models.DateField(unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "order_number_sequences"

    def __str__(self):
        return f"{self.day}: {self.last_value}"
