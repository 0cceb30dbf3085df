"""
Error taxonomy for the ordering API and the DRF exception handler that renders it.

Every service raises one of the OrderingError subclasses below. Views never
build error bodies by hand; the handler registered as
REST_FRAMEWORK["EXCEPTION_HANDLER"] turns the exception into

    {"error": <message>, "details"?: <str>, "fields"?: {<field>: [<message>]}}

``details`` only carries internal information when DEBUG is on. Provider
errors always carry the provider's own message so the storefront can show
why a card was declined.
"""

import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.http import Http404
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class OrderingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed"

    def __init__(self, message=None, details=None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def public_details(self):
        """Details safe to send to a client. Internals are only exposed in DEBUG."""
        if self.details and settings.DEBUG:
            return str(self.details)
        return None


class ValidationError(OrderingError):
    """Client-correctable input problem. ``fields`` maps field names to messages."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, message=None, details=None, fields=None):
        super().__init__(message, details)
        self.fields = fields or {}

    def public_details(self):
        return str(self.details) if self.details else None


class NotFoundError(OrderingError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InvalidStateError(OrderingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Operation not allowed in the current state"


class ConflictError(OrderingError):
    """The record changed underneath us (optimistic concurrency check failed)."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Order was modified concurrently, please retry"


class PaymentProviderError(OrderingError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Payment provider error"

    def public_details(self):
        return str(self.details) if self.details else None


class PersistenceError(OrderingError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to save data"


class ConfigurationError(ImproperlyConfigured):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Server is not configured for this operation"

    def __init__(self, setting_name, message=None):
        self.setting_name = setting_name
        self.message = message or f"Missing required setting: {setting_name}"
        super().__init__(self.message)


def error_body(message, details=None, fields=None):
    body = {"error": message}
    if details:
        body["details"] = details
    if fields:
        body["fields"] = fields
    return body


def _flatten_drf_detail(detail):
    if isinstance(detail, dict):
        return {key: [str(item) for item in value] if isinstance(value, list) else [str(value)]
                for key, value in detail.items()}
    if isinstance(detail, list):
        return {"non_field_errors": [str(item) for item in detail]}
    return None


def api_exception_handler(exc, context):
    """
    DRF exception handler producing the ``{"error": ...}`` body for every failure.
    """
    view = context.get("view")
    view_name = view.__class__.__name__ if view is not None else "unknown"

    if isinstance(exc, OrderingError):
        if exc.status_code >= 500:
            logger.error(f"[{view_name}] {exc.__class__.__name__}: {exc.message} ({exc.details})")
        else:
            logger.info(f"[{view_name}] {exc.__class__.__name__}: {exc.message}")
        fields = getattr(exc, "fields", None)
        return Response(
            error_body(exc.message, exc.public_details(), fields),
            status=exc.status_code,
        )

    if isinstance(exc, ConfigurationError):
        logger.error(f"[{view_name}] Configuration error: {exc.message}")
        details = exc.message if settings.DEBUG else None
        return Response(
            error_body(ConfigurationError.default_message, details),
            status=exc.status_code,
        )

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()

    if isinstance(exc, drf_exceptions.ValidationError):
        return Response(
            error_body("Invalid request", fields=_flatten_drf_detail(exc.detail)),
            status=exc.status_code,
        )

    if isinstance(exc, drf_exceptions.APIException):
        headers = {}
        if getattr(exc, "auth_header", None):
            headers["WWW-Authenticate"] = exc.auth_header
        if getattr(exc, "wait", None):
            headers["Retry-After"] = str(exc.wait)
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return Response(error_body(detail), status=exc.status_code, headers=headers)

    logger.exception(f"[{view_name}] Unhandled error: {exc}")
    details = str(exc) if settings.DEBUG else None
    return Response(
        error_body("Internal server error", details),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
