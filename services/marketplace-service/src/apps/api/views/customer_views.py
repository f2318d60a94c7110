# services/marketplace-service/src/apps/api/views/customer_views.py
"""
Customer API Views

The owner's customer book and the communications log.
"""

from rest_framework import status
from rest_framework.response import Response

from apps.core.services import CustomerService
from apps.api.serializers import (
    BookingSerializer,
    CommunicationSerializer,
    CustomerProfileSerializer,
    MessageCreateSerializer,
)
from .business_views import OwnerAPIView


class CustomerListView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.customer_service = CustomerService()

    def get(self, request):
        customers = self.customer_service.list_customers(request.user)
        return Response({'customers': CustomerProfileSerializer(customers, many=True).data})


class CustomerDetailView(OwnerAPIView):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.customer_service = CustomerService()

    def get(self, request, customer_id):
        customer, communications, bookings = self.customer_service.get_customer(request.user, customer_id)
        return Response({
            'customer': CustomerProfileSerializer(customer).data,
            'communications': CommunicationSerializer(communications, many=True).data,
            'bookings': BookingSerializer(bookings, many=True).data,
        })


class CustomerMessageView(OwnerAPIView):
    """Log a note, or send an email, to a customer."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.customer_service = CustomerService()

    def post(self, request, customer_id):
        serializer = MessageCreateSerializer(data=request.data)
        if not serializer.is_valid():
            return self.invalid_input_response(serializer)

        data = serializer.validated_data
        communication = self.customer_service.send_message(
            request.user,
            customer_id,
            content=data.get('content'),
            message_type=data['type'],
            subject=data.get('subject'),
        )
        return Response(
            {'communication': CommunicationSerializer(communication).data},
            status=status.HTTP_201_CREATED
        )
