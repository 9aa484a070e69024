"""Stored documents for equipment items and their movement ledger."""

import uuid

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class EquipmentItem(models.Model):
    """A physical item assigned to an owner."""

    STATUS_CHOICES = [
        ("assigned", "Assigned"),
        ("returned", "Returned"),
        ("maintenance", "Maintenance"),
        ("lost", "Lost"),
        ("damaged", "Damaged"),
        ("transferred", "Transferred"),
    ]

    # Valid state transitions: from_status -> [to_statuses]
    # lost, damaged and transferred have no entry (see services.state).
    VALID_TRANSITIONS = {
        "assigned": [
            "returned",
            "maintenance",
            "lost",
            "damaged",
            "transferred",
        ],
        "maintenance": ["assigned", "damaged"],
        "returned": [],
    }

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_id = models.CharField(
        max_length=128,
        db_index=True,
        help_text="Employee the item is assigned to",
    )
    code = models.CharField(max_length=100, blank=True)
    serial = models.CharField(max_length=120, blank=True)
    type = models.CharField(max_length=100, blank=True)
    subtype = models.CharField(max_length=100, blank=True)
    name = models.CharField(max_length=200, blank=True)
    brand = models.CharField(max_length=120, blank=True)
    model = models.CharField(max_length=120, blank=True)
    specs = models.TextField(blank=True)
    assigned_at = models.DateTimeField(null=True, blank=True)
    due_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Expected return date",
    )
    returned_at = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default="assigned"
    )
    value = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    currency = models.CharField(max_length=3, default="MXN")
    notes = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    created_by = models.CharField(max_length=150, null=True, blank=True)
    updated_at = models.DateTimeField(default=timezone.now)
    updated_by = models.CharField(max_length=150, null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(
                fields=["owner_id", "status"], name="idx_item_owner_status"
            ),
            models.Index(
                fields=["owner_id", "type"], name="idx_item_owner_type"
            ),
            models.Index(fields=["created_at"], name="idx_item_created_at"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["owner_id", "serial"],
                condition=models.Q(status="assigned") & ~models.Q(serial=""),
                name="uniq_item_assigned_serial_per_owner",
            ),
        ]

    def __str__(self):
        return f"{self.name or self.code or self.serial} ({self.status})"


class Movement(models.Model):
    """Immutable audit log of everything that happened to an item.

    Rows carry the item id without a foreign key so the history
    outlives the item it describes.
    """

    TYPE_CHOICES = [
        ("assign", "Assign"),
        ("return", "Return"),
        ("maintenance", "Maintenance"),
        ("lost", "Lost"),
        ("damage", "Damage"),
        ("transfer", "Transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    asset_id = models.UUIDField(db_index=True)
    owner_id = models.CharField(max_length=128)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    occurred_at = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)
    attachments = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    created_by = models.CharField(max_length=150, null=True, blank=True)
    idempotency_key = models.CharField(max_length=200, null=True, blank=True)

    class Meta:
        ordering = ["occurred_at"]
        indexes = [
            models.Index(
                fields=["owner_id", "asset_id", "occurred_at"],
                name="idx_movement_asset_occurred",
            ),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["asset_id", "idempotency_key"],
                condition=models.Q(idempotency_key__isnull=False),
                name="uniq_movement_idempotency_key",
            ),
        ]

    def __str__(self):
        return f"{self.get_type_display()} of {self.asset_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError(
                "Movements are immutable and cannot be modified."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Movements are immutable and cannot be deleted.")
