# services/marketplace-service/src/apps/api/urls.py
"""
Marketplace API URL Configuration

Mounted under /api/v1/.
"""

from django.urls import path

from .views import (
    # Public
    PublicBusinessView,
    BusinessSearchView,
    BookedSlotsView,
    DayAvailabilityView,
    AvailableSlotsView,
    TimeOffDatesView,
    ImageView,
    ImageProxyView,
    # Customer bookings
    BookingListCreateView,
    PaymentIntentView,
    BookingCancelView,
    BookingRefundView,
    ReviewCreateView,
    # Business owner
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
    # Customers
    CustomerListView,
    CustomerDetailView,
    CustomerMessageView,
    # Stripe
    StripeWebhookView,
    ConnectAccountView,
    ConnectCallbackView,
    ConnectPortalView,
)

app_name = 'api'

urlpatterns = [
    # Listing discovery
    path('search/', BusinessSearchView.as_view(), name='search'),

    # Public booking page (fixed paths before the slug route)
    path('booking/availability/', BookedSlotsView.as_view(), name='booked-slots'),
    path('booking/slots/', AvailableSlotsView.as_view(), name='available-slots'),
    path('booking/create-payment-intent/', PaymentIntentView.as_view(), name='payment-intent'),
    path('booking/cancel/', BookingCancelView.as_view(), name='booking-cancel'),
    path('booking/refund/', BookingRefundView.as_view(), name='booking-refund'),
    path('booking/<slug:slug>/', PublicBusinessView.as_view(), name='public-business'),
    path('bookings/availability/', DayAvailabilityView.as_view(), name='day-availability'),
    path('timeoff/dates/', TimeOffDatesView.as_view(), name='time-off-dates'),

    # Customer
    path('bookings/', BookingListCreateView.as_view(), name='bookings'),
    path('reviews/', ReviewCreateView.as_view(), name='reviews'),

    # Images
    path('images/proxy/', ImageProxyView.as_view(), name='image-proxy'),
    path('images/<path:key>/', ImageView.as_view(), name='image'),

    # Business owner
    path('business/', BusinessRegisterView.as_view(), name='business-register'),
    path('business/profile/', BusinessProfileView.as_view(), name='business-profile'),
    path('business/services/', ServiceListCreateView.as_view(), name='business-services'),
    path('business/services/<str:service_id>/', ServiceDetailView.as_view(), name='business-service-detail'),
    path('business/availability/', WeeklyScheduleView.as_view(), name='business-availability'),
    path('business/timeoff/', TimeOffView.as_view(), name='business-time-off'),
    path('business/bookings/', BusinessBookingListView.as_view(), name='business-bookings'),
    path('business/bookings/<str:booking_id>/', BusinessBookingDetailView.as_view(), name='business-booking-detail'),
    path('business/bookings/<str:booking_id>/complete/', BookingCompleteView.as_view(), name='business-booking-complete'),
    path('business/customers/', CustomerListView.as_view(), name='business-customers'),
    path('business/customers/<str:customer_id>/', CustomerDetailView.as_view(), name='business-customer-detail'),
    path('business/customers/<str:customer_id>/message/', CustomerMessageView.as_view(), name='business-customer-message'),
    path('business/photos/', BusinessPhotoView.as_view(), name='business-photos'),

    # Uploads
    path('upload/presigned-url/', PresignedUploadView.as_view(), name='upload-presigned-url'),
    path('upload/complete/', UploadCompleteView.as_view(), name='upload-complete'),

    # Stripe
    path('stripe/webhook/', StripeWebhookView.as_view(), name='stripe-webhook'),
    path('stripe/connect/account/', ConnectAccountView.as_view(), name='stripe-connect-account'),
    path('stripe/connect/callback/', ConnectCallbackView.as_view(), name='stripe-connect-callback'),
    path('stripe/connect/portal/', ConnectPortalView.as_view(), name='stripe-connect-portal'),
]
