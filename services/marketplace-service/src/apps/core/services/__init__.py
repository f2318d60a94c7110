# services/marketplace-service/src/apps/core/services/__init__.py
"""
Marketplace Service Business Logic
"""

from .availability_service import AvailabilityService
from .booking_service import BookingService
from .review_service import ReviewService
from .payment_service import PaymentService, FeeBreakdown, calculate_fees
from .business_service import BusinessService
from .storage_service import StorageService
from .customer_service import CustomerService
from .notification_service import NotificationService


# Custom Exceptions
class MarketplaceError(Exception):
    """Base exception for marketplace service errors."""
    status_code = 400
    default_message = 'Request could not be processed'

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)


class InvalidRequestError(MarketplaceError):
    """Missing or invalid input."""
    status_code = 400
    default_message = 'Invalid input data'


class AuthorizationError(MarketplaceError):
    """Wrong role or no session."""
    status_code = 401
    default_message = 'Unauthorized'


class PermissionDeniedError(MarketplaceError):
    """Authenticated party is not allowed to act on the resource."""
    status_code = 403
    default_message = 'Forbidden'


class NotFoundError(MarketplaceError):
    """Entity absent or not owned by the requester."""
    status_code = 404
    default_message = 'Not found'


class BookingConflictError(InvalidRequestError):
    """Requested time overlaps a slot-holding booking."""
    default_message = 'This time slot is no longer available'


class BookingStateError(InvalidRequestError):
    """Status change not allowed from the current status."""
    pass


class ReviewNotAllowedError(InvalidRequestError):
    """Booking is not eligible for a review."""
    pass


class UpstreamError(MarketplaceError):
    """External collaborator failed."""
    status_code = 500
    default_message = 'Something went wrong'


class PaymentGatewayError(UpstreamError):
    """Payment processor call failed."""
    default_message = 'Payment processing failed'


class StorageError(UpstreamError):
    """Object storage call failed."""
    default_message = 'Storage operation failed'


__all__ = [
    # Services
    'AvailabilityService',
    'BookingService',
    'ReviewService',
    'PaymentService',
    'BusinessService',
    'StorageService',
    'CustomerService',
    'NotificationService',
    'FeeBreakdown',
    'calculate_fees',

    # Exceptions
    'MarketplaceError',
    'InvalidRequestError',
    'AuthorizationError',
    'PermissionDeniedError',
    'NotFoundError',
    'BookingConflictError',
    'BookingStateError',
    'ReviewNotAllowedError',
    'UpstreamError',
    'PaymentGatewayError',
    'StorageError',
]
