import logging

from core_backend.base import BaseAPIView

from .serializers import MenuItemSerializer
from .services import MenuService

logger = logging.getLogger(__name__)


class MenuListView(BaseAPIView):
    """
    GET /api/menu

    Returns every available menu item, ordered by category then name.
    """

    def get(self, request):
        items = MenuService.list_available()
        data = MenuItemSerializer(items, many=True).data
        logger.debug(f"[MenuList] Returning {len(data)} available items")
        return self.create_success_response({"success": True, "items": data})
