"""
Human-readable order numbers: ``PREFIX-YYMMDD-NNN`` (e.g. ``TH-240615-003``).

The counter restarts every local calendar day. The per-day row is locked
with SELECT ... FOR UPDATE, so two checkouts in the same second never get
the same number.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from .models import OrderNumberSequence

logger = logging.getLogger(__name__)


def format_order_number(prefix, day, value):
    return f"{prefix}-{day:%y%m%d}-{value:03d}"


def next_order_number(day=None, prefix=None):
    """Issue the next order number for ``day`` (defaults to today, local time)."""
    day = day or timezone.localdate()
    prefix = prefix or getattr(settings, "ORDER_NUMBER_PREFIX", "TH")

    with transaction.atomic():
        sequence, created = OrderNumberSequence.objects.select_for_update().get_or_create(
            day=day, defaults={"last_value": 0}
        )
        sequence.last_value += 1
        sequence.save(update_fields=["last_value"])

    if created:
        logger.debug(f"Started order number sequence for {day}")
    return format_order_number(prefix, day, sequence.last_value)
