"""
URL configuration for the TooHot ordering backend.

Every API route is registered without a trailing slash (APPEND_SLASH is off),
matching the paths the storefront already calls.
"""

from django.contrib import admin
from django.urls import path, include

from .views import health_check


urlpatterns = [
    path("api/health", health_check, name="health_check"),
    path("admin/", admin.site.urls),
    path("api/menu", include("menu.urls")),
    path("api/cart", include("cart.urls")),
    # orders registers both the storefront (orders/...) and back-office (admin/orders/...) routes
    path("api/", include("orders.urls")),
    path("api/payment/", include("payments.urls")),
]
