"""Admin configuration for equipment app using django-unfold."""

from unfold.admin import ModelAdmin
from unfold.contrib.filters.admin import ChoicesDropdownFilter
from unfold.decorators import display

from django.contrib import admin

from .models import EquipmentItem, Movement


@admin.register(EquipmentItem)
class EquipmentItemAdmin(ModelAdmin):
    list_display = [
        "name",
        "code",
        "serial",
        "owner_id",
        "display_status",
        "assigned_at",
        "due_at",
    ]
    list_filter = [("status", ChoicesDropdownFilter), "type"]
    search_fields = ["owner_id", "name", "code", "serial"]
    date_hierarchy = "created_at"
    # Status only changes through recorded movements.
    readonly_fields = [
        "id",
        "status",
        "assigned_at",
        "returned_at",
        "created_at",
        "created_by",
        "updated_at",
        "updated_by",
    ]

    @display(
        description="Status",
        label={
            "assigned": "info",
            "returned": "success",
            "maintenance": "warning",
            "lost": "danger",
            "damaged": "danger",
            "transferred": "default",
        },
    )
    def display_status(self, obj):
        return obj.status


@admin.register(Movement)
class MovementAdmin(ModelAdmin):
    list_display = [
        "asset_id",
        "owner_id",
        "type",
        "occurred_at",
        "created_by",
    ]
    list_filter = [("type", ChoicesDropdownFilter)]
    search_fields = ["owner_id", "notes", "idempotency_key"]
    date_hierarchy = "occurred_at"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
