import logging
from datetime import datetime, time

import django_filters
from django.utils import timezone

logger = logging.getLogger(__name__)


class DateRangeFilter(django_filters.DateTimeFilter):
    """
    DateTimeFilter that treats a date-only upper bound as the whole day.

    ``created_before=2024-06-15`` includes orders placed at 18:00 that day,
    while a full timestamp (``2024-06-15T10:30:00Z``) is used as given.
    """

    def filter(self, qs, value):
        if isinstance(value, datetime) and value.time() == time(0, 0, 0) and self.lookup_expr in ("lte", "lt"):
            value = datetime.combine(value.date(), time.max)
            if timezone.is_naive(value):
                value = timezone.make_aware(value)
            logger.debug(f"DateRangeFilter: {self.field_name}__{self.lookup_expr} extended to end of day: {value}")
        return super().filter(qs, value)


class BaseFilterSet(django_filters.FilterSet):
    """
    Base filter set with the created-at date range every admin list offers.
    """

    created_after = DateRangeFilter(field_name="created_at", lookup_expr="gte")
    created_before = DateRangeFilter(field_name="created_at", lookup_expr="lte")
