"""
Shared API Mixins Module.

Response helpers shared by the service API views.
"""
import logging
from typing import Any, Tuple, Type

from rest_framework import status
from rest_framework.response import Response

logger = logging.getLogger(__name__)

INVALID_INPUT_MESSAGE = 'Invalid input data'


# =============================================================================
# RESPONSE MIXIN
# =============================================================================

class ErrorResponseMixin:
    """
    Mixin that renders domain errors as ``{"error": message}``.

    Views list their domain exception base classes in ``handled_exceptions``;
    each must carry a ``status_code``. Anything else goes to the configured
    DRF exception handler.
    """

    handled_exceptions: Tuple[Type[Exception], ...] = ()

    def error_response(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST
    ) -> Response:
        return Response({'error': message}, status=status_code)

    def invalid_input_response(self, serializer: Any = None) -> Response:
        """400 for a request body or query that failed validation."""
        if serializer is not None:
            logger.info(
                f"Rejected input on {self.__class__.__name__}",
                extra={'errors': serializer.errors}
            )
        return self.error_response(INVALID_INPUT_MESSAGE)

    def handle_exception(self, exc):
        if self.handled_exceptions and isinstance(exc, self.handled_exceptions):
            status_code = getattr(exc, 'status_code', status.HTTP_400_BAD_REQUEST)
            if status_code >= 500:
                logger.error(f"{self.__class__.__name__} failed: {exc}")
            return self.error_response(str(exc), status_code)
        return super().handle_exception(exc)
