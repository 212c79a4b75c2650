"""
Root URL configuration.
"""
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from common.views import health

urlpatterns = [
    path('admin/', admin.site.urls),

    # Order intake, invoices and payment transitions
    path('', include('apps.orders.urls')),

    # Liveness checks
    path('health', health, name='health'),
    path('healthz', health, name='healthz'),

    # OpenAPI schema
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
]
