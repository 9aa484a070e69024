"""URL configuration for equipment app."""

from django.urls import path

from . import views

app_name = "equipment"

urlpatterns = [
    path(
        "owners/<str:owner_id>/equipment/",
        views.equipment_collection,
        name="equipment_collection",
    ),
    path(
        "owners/<str:owner_id>/equipment/summary/",
        views.equipment_summary,
        name="equipment_summary",
    ),
    path(
        "owners/<str:owner_id>/equipment/movements/",
        views.equipment_movement_create,
        name="equipment_movement_create",
    ),
    path(
        "owners/<str:owner_id>/equipment/<uuid:asset_id>/",
        views.equipment_detail,
        name="equipment_detail",
    ),
    path(
        "owners/<str:owner_id>/equipment/<uuid:asset_id>/return/",
        views.equipment_return,
        name="equipment_return",
    ),
    path(
        "owners/<str:owner_id>/equipment/<uuid:asset_id>/movements/",
        views.equipment_history,
        name="equipment_history",
    ),
]
