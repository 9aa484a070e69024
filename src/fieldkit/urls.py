"""URL configuration for fieldkit project."""

from django.contrib import admin
from django.urls import include, path

from fieldkit.views import health_check

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health/", health_check, name="health_check"),
    path("api/", include("equipment.urls")),
]
