# services/marketplace-service/src/apps/api/serializers/customer_serializers.py
"""
Customer Serializers
"""

from rest_framework import serializers

from apps.core.models import Communication, CustomerProfile


class CustomerProfileSerializer(serializers.ModelSerializer):
    customerId = serializers.UUIDField(source='customer_id', read_only=True)
    name = serializers.CharField(source='customer_name', read_only=True)
    email = serializers.CharField(source='customer_email', read_only=True)
    phone = serializers.CharField(source='customer_phone', read_only=True)
    firstVisit = serializers.DateField(source='first_visit', read_only=True)
    lastVisit = serializers.DateField(source='last_visit', read_only=True)
    totalVisits = serializers.IntegerField(source='total_visits', read_only=True)
    totalSpent = serializers.DecimalField(source='total_spent', max_digits=12, decimal_places=2, read_only=True)
    averageSpent = serializers.DecimalField(source='average_spent', max_digits=12, decimal_places=2, read_only=True)
    favoriteService = serializers.CharField(source='favorite_service', read_only=True)
    isVip = serializers.BooleanField(source='is_vip', read_only=True)

    class Meta:
        model = CustomerProfile
        fields = [
            'id', 'customerId',
            'name', 'email', 'phone',
            'firstVisit', 'lastVisit', 'totalVisits',
            'totalSpent', 'averageSpent', 'favoriteService',
            'tags', 'isVip', 'notes',
        ]
        read_only_fields = fields


class CommunicationSerializer(serializers.ModelSerializer):
    customerId = serializers.UUIDField(source='customer_id', read_only=True)
    sentAt = serializers.DateTimeField(source='sent_at', read_only=True)

    class Meta:
        model = Communication
        fields = ['id', 'customerId', 'type', 'subject', 'content', 'sentAt']
        read_only_fields = fields


class MessageCreateSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=Communication.Type.choices,
        required=False,
        default=Communication.Type.NOTE
    )
    subject = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    content = serializers.CharField(required=False, allow_blank=True)
