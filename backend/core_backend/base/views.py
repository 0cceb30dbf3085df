"""
Base classes for the ordering API views.

Error bodies are rendered by core_backend.exceptions.api_exception_handler;
views only raise and return success payloads.
"""

import logging
import uuid

from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.views import APIView

from core_backend.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class BaseAPIView(APIView):
    """
    Base class for all API views with common functionality.
    """

    def handle_exception(self, exc):
        logger.debug(f"API view error in {self.__class__.__name__}: {exc!r}")
        return super().handle_exception(exc)

    def parse_uuid(self, value, message="Not found"):
        """
        Parse a path or body identifier as a UUID. Malformed ids are answered as
        not found rather than leaking a database error.
        """
        try:
            return uuid.UUID(str(value))
        except (TypeError, ValueError, AttributeError):
            raise NotFoundError(message)

    def require_fields(self, data, *names, message=None):
        missing = [name for name in names if data.get(name) in (None, "")]
        if missing:
            raise ValidationError(
                message or f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required",
                fields={name: ["This field is required."] for name in missing},
            )

    def create_success_response(self, data, status_code=status.HTTP_200_OK):
        return Response(data, status=status_code)


class StaffAPIView(BaseAPIView):
    """Back-office views. Access is limited to Django staff users."""

    permission_classes = [IsAdminUser]
