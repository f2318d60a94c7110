# services/marketplace-service/src/config/urls.py
"""
URL configuration for Marketplace Service
"""

from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

from shared.common.health import get_health_urlpatterns

from apps.api.views import ReviewPageView

urlpatterns = [
    # Admin
    path('admin/', admin.site.urls),

    # API v1
    path('api/v1/', include('apps.api.urls')),

    # Review page guard
    path('review/<str:booking_id>/', ReviewPageView.as_view(), name='review-page'),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]

# Health checks
urlpatterns += get_health_urlpatterns()
