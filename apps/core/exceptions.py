"""
Domain exceptions shared by the PharmaPOS apps.

Services raise these; the DRF exception handler below turns them into
400 responses so views do not need to catch them one by one.
"""
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class PharmacyError(Exception):
    """Base class for business-rule violations."""

    code = "pharmacy_error"

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details


class InsufficientStockError(PharmacyError):
    code = "insufficient_stock"


class FefoViolationError(PharmacyError):
    code = "fefo_violation"


class EmptyCartError(PharmacyError):
    code = "empty_cart"


def pharmacy_exception_handler(exc, context):
    if isinstance(exc, PharmacyError):
        logger.info("Rejected request: %s (%s)", exc.message, exc.code)
        payload = {"error": exc.message, "code": exc.code}
        if exc.details:
            payload["details"] = exc.details
        return Response(payload, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, "message_dict"):
            return Response(exc.message_dict, status=status.HTTP_400_BAD_REQUEST)
        return Response({"error": exc.messages}, status=status.HTTP_400_BAD_REQUEST)

    return exception_handler(exc, context)
