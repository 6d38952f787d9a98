"""URL configuration for the hotel booking service.

The `urlpatterns` list routes URLs to views. It includes the Django admin,
JWT token endpoints, the OpenAPI schema and the routers of each app.
"""
from django.contrib import admin  # type: ignore
from django.urls import path, include  # type: ignore
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView  # type: ignore
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView  # type: ignore

# API versioning. v1 is our initial version; future versions can be added here.

urlpatterns = [
    path('admin/', admin.site.urls),
    # Authentication
    path('api/v1/auth/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/v1/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    # Application URLs
    path('api/v1/bookings/', include('apps.bookings.urls')),
    path('api/v1/payments/', include('apps.payments.urls')),
    # API docs
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
