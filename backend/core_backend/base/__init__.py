"""
Core backend base components.

Shared view and filter classes used by every app for consistent error
handling and admin list filtering.
"""

from .views import BaseAPIView, StaffAPIView
from .filters import BaseFilterSet, DateRangeFilter

__all__ = [
    # Views
    'BaseAPIView',
    'StaffAPIView',

    # Filters
    'BaseFilterSet',
    'DateRangeFilter',
]
