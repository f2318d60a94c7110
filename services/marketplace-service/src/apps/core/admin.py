from django.contrib import admin
from .models import (
    Availability,
    Booking,
    Business,
    BusinessPhoto,
    Communication,
    CustomerProfile,
    Review,
    Service,
    TimeOff,
)

@admin.register(Business)
class BusinessAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'slug', 'category', 'city', 'is_active', 'stripe_onboarded']
    list_filter = ['category', 'is_active', 'stripe_onboarded']
    search_fields = ['business_name', 'slug', 'city']

@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['name', 'business', 'price', 'duration', 'is_active']
    list_filter = ['is_active']

@admin.register(Availability)
class AvailabilityAdmin(admin.ModelAdmin):
    list_display = ['business', 'day_of_week', 'start_time', 'end_time', 'is_active']

@admin.register(TimeOff)
class TimeOffAdmin(admin.ModelAdmin):
    list_display = ['business', 'date', 'start_time', 'end_time', 'reason']

@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ['id', 'business', 'service', 'status', 'payment_status', 'start_time', 'end_time']
    list_filter = ['status', 'payment_status']

@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ['id', 'business', 'rating', 'created_at']

@admin.register(CustomerProfile)
class CustomerProfileAdmin(admin.ModelAdmin):
    list_display = ['customer_name', 'business', 'total_visits', 'total_spent', 'is_vip']

@admin.register(Communication)
class CommunicationAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer', 'type', 'sent_at']

@admin.register(BusinessPhoto)
class BusinessPhotoAdmin(admin.ModelAdmin):
    list_display = ['id', 'business', 'type', 'order', 'is_active']
