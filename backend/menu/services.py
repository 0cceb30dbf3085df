import logging
import uuid

from .models import MenuItem

logger = logging.getLogger(__name__)


class MenuService:
    """
    Read-only access to the menu catalog.

    The catalog is edited through the Django admin site only; nothing in the
    ordering flow writes to it.
    """

    @staticmethod
    def list_available():
        """All currently available items, ordered by category then English name."""
        return MenuItem.objects.filter(is_available=True).order_by("category", "name_en")

    @staticmethod
    def get_items_by_ids(item_ids):
        """
        Map of id -> MenuItem for the given ids, including unavailable items so
        callers can tell "unknown" from "not available". Malformed ids are skipped.
        """
        valid_ids = []
        for item_id in item_ids:
            try:
                valid_ids.append(uuid.UUID(str(item_id)))
            except (TypeError, ValueError, AttributeError):
                logger.debug(f"Ignoring malformed menu item id: {item_id!r}")
        items = MenuItem.objects.filter(id__in=valid_ids)
        return {str(item.id): item for item in items}
