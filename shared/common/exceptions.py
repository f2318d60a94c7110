# shared/common/exceptions.py
"""
Framework Exceptions and Exception Handler

Framework-level errors (authentication, permissions, serializer
validation, anything unhandled) are rendered in one envelope here:

    {"success": false, "error": {"code", "message", "request_id"}}

Domain errors are turned into ``{"error": message}`` by the views that
raise them (see api_mixins.ErrorResponseMixin).
"""

import logging
from typing import Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = 'An unexpected error occurred. Please try again later.'

# DRF exception class -> envelope code
ERROR_CODES = {
    exceptions.NotAuthenticated: 'UNAUTHORIZED',
    exceptions.AuthenticationFailed: 'UNAUTHORIZED',
    exceptions.PermissionDenied: 'FORBIDDEN',
    exceptions.NotFound: 'NOT_FOUND',
    exceptions.MethodNotAllowed: 'METHOD_NOT_ALLOWED',
    exceptions.ValidationError: 'VALIDATION_ERROR',
    exceptions.ParseError: 'VALIDATION_ERROR',
    exceptions.Throttled: 'RATE_LIMITED',
}


class UnauthorizedException(exceptions.APIException):
    """401 raised by role checks. Wrong role and no session look the same."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Unauthorized'
    default_code = 'unauthorized'
    error_code = 'UNAUTHORIZED'


def error_envelope(code: str, message: str, request_id: Optional[str] = None) -> dict:
    return {
        'success': False,
        'error': {
            'code': code,
            'message': message,
            'request_id': request_id,
        }
    }


def custom_exception_handler(exc, context) -> Optional[Response]:
    """
    DRF exception handler.

    Known framework errors keep their status; anything else is logged
    and answered with a generic 500.
    """
    request = context.get('request')
    request_id = getattr(request, 'request_id', None) if request else None

    if isinstance(exc, DjangoValidationError):
        # Model validation that escaped a service
        return Response(
            error_envelope('VALIDATION_ERROR', exc.messages[0] if exc.messages else 'Invalid input data', request_id),
            status=status.HTTP_400_BAD_REQUEST
        )

    response = exception_handler(exc, context)
    if response is not None:
        response.data = error_envelope(error_code_for(exc), error_message(exc), request_id)
        return response

    view = context.get('view')
    logger.exception(
        f"Unhandled exception in {view.__class__.__name__ if view else 'unknown view'}: {exc}",
        extra={
            'request_id': request_id,
            'exception_type': type(exc).__name__,
        }
    )
    return Response(
        error_envelope('INTERNAL_ERROR', GENERIC_ERROR_MESSAGE, request_id),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def error_code_for(exc) -> str:
    explicit = getattr(exc, 'error_code', None)
    if explicit:
        return explicit
    for exc_class, code in ERROR_CODES.items():
        if isinstance(exc, exc_class):
            return code
    return 'ERROR'


def error_message(exc) -> str:
    """First human-readable message carried by a DRF exception."""
    detail = getattr(exc, 'detail', None)

    if isinstance(detail, list) and detail:
        return str(detail[0])
    if isinstance(detail, dict):
        if 'detail' in detail:
            return str(detail['detail'])
        first = next(iter(detail.values()), None)
        if isinstance(first, list) and first:
            return str(first[0])
        return str(first) if first is not None else 'Invalid input data'
    if detail is not None:
        return str(detail)
    return GENERIC_ERROR_MESSAGE
