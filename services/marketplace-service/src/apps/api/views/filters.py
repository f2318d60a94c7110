# services/marketplace-service/src/apps/api/views/filters.py
"""
API Filters

Django Filter classes for the owner's booking list and listing search.
"""

import django_filters
from django.db.models import Exists, OuterRef, Q

from apps.core.models import Booking, Business, Service


class BookingFilter(django_filters.FilterSet):
    """Filter for the owner's booking list: ?startDate&endDate&status"""

    startDate = django_filters.DateFilter(
        field_name='date',
        lookup_expr='gte'
    )
    endDate = django_filters.DateFilter(
        field_name='date',
        lookup_expr='lte'
    )
    status = django_filters.ChoiceFilter(
        choices=Booking.Status.choices
    )
    serviceId = django_filters.UUIDFilter(
        field_name='service_id'
    )
    customerId = django_filters.UUIDFilter(
        field_name='customer_id'
    )

    class Meta:
        model = Booking
        fields = ['startDate', 'endDate', 'status', 'serviceId', 'customerId']


class BusinessSearchFilter(django_filters.FilterSet):
    """
    Listing search: ?q&category&city&minRating

    ``q`` matches the business name, its description or the name of one of
    its active services. Expects a queryset annotated with ``average_rating``.
    """

    q = django_filters.CharFilter(method='filter_text')
    category = django_filters.ChoiceFilter(
        choices=Business.Category.choices
    )
    city = django_filters.CharFilter(
        field_name='city',
        lookup_expr='icontains'
    )
    minRating = django_filters.NumberFilter(
        field_name='average_rating',
        lookup_expr='gte',
        min_value=0,
        max_value=5
    )

    class Meta:
        model = Business
        fields = ['q', 'category', 'city', 'minRating']

    def filter_text(self, queryset, name, value):
        offers_service = Service.objects.filter(
            business=OuterRef('pk'),
            is_active=True,
            name__icontains=value,
        )
        return queryset.filter(
            Q(business_name__icontains=value)
            | Q(description__icontains=value)
            | Exists(offers_service)
        )
