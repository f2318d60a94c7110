# services/marketplace-service/src/apps/api/views/__init__.py
"""
Marketplace API Views
"""

from .public_views import (
    PublicBusinessView,
    BusinessSearchView,
    BookedSlotsView,
    DayAvailabilityView,
    AvailableSlotsView,
    TimeOffDatesView,
    ImageView,
    ImageProxyView,
)

from .booking_views import (
    BookingListCreateView,
    PaymentIntentView,
    BookingCancelView,
    BookingRefundView,
    ReviewCreateView,
    ReviewPageView,
)

from .business_views import (
    BusinessRegisterView,
    BusinessProfileView,
    ServiceListCreateView,
    ServiceDetailView,
    WeeklyScheduleView,
    TimeOffView,
    BusinessBookingListView,
    BusinessBookingDetailView,
    BookingCompleteView,
    BusinessPhotoView,
    PresignedUploadView,
    UploadCompleteView,
)

from .customer_views import (
    CustomerListView,
    CustomerDetailView,
    CustomerMessageView,
)

from .stripe_views import (
    StripeWebhookView,
    ConnectAccountView,
    ConnectCallbackView,
    ConnectPortalView,
)


__all__ = [
    # Public
    'PublicBusinessView',
    'BusinessSearchView',
    'BookedSlotsView',
    'DayAvailabilityView',
    'AvailableSlotsView',
    'TimeOffDatesView',
    'ImageView',
    'ImageProxyView',

    # Customer bookings
    'BookingListCreateView',
    'PaymentIntentView',
    'BookingCancelView',
    'BookingRefundView',
    'ReviewCreateView',
    'ReviewPageView',

    # Business owner
    'BusinessRegisterView',
    'BusinessProfileView',
    'ServiceListCreateView',
    'ServiceDetailView',
    'WeeklyScheduleView',
    'TimeOffView',
    'BusinessBookingListView',
    'BusinessBookingDetailView',
    'BookingCompleteView',
    'BusinessPhotoView',
    'PresignedUploadView',
    'UploadCompleteView',

    # Customers
    'CustomerListView',
    'CustomerDetailView',
    'CustomerMessageView',

    # Stripe
    'StripeWebhookView',
    'ConnectAccountView',
    'ConnectCallbackView',
    'ConnectPortalView',
]
