"""
URL configuration for the TEM workspace API.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path('admin/', admin.site.urls),

    # API Documentation
    path('schema/', SpectacularAPIView.as_view(), name='schema'),
    path('schema/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),

    # API v1
    path('v1/', include('apps.core.urls')),  # Health check
    path('v1/', include('apps.companies.urls')),  # Company switcher and platform console
    path('v1/access/', include('apps.access.urls')),  # Company-scoped access decisions
]
