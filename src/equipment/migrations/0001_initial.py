import uuid

import django.core.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="EquipmentItem",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "owner_id",
                    models.CharField(
                        db_index=True,
                        help_text="Employee the item is assigned to",
                        max_length=128,
                    ),
                ),
                ("code", models.CharField(blank=True, max_length=100)),
                ("serial", models.CharField(blank=True, max_length=120)),
                ("type", models.CharField(blank=True, max_length=100)),
                ("subtype", models.CharField(blank=True, max_length=100)),
                ("name", models.CharField(blank=True, max_length=200)),
                ("brand", models.CharField(blank=True, max_length=120)),
                ("model", models.CharField(blank=True, max_length=120)),
                ("specs", models.TextField(blank=True)),
                ("assigned_at", models.DateTimeField(blank=True, null=True)),
                (
                    "due_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="Expected return date",
                        null=True,
                    ),
                ),
                ("returned_at", models.DateTimeField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("assigned", "Assigned"),
                            ("returned", "Returned"),
                            ("maintenance", "Maintenance"),
                            ("lost", "Lost"),
                            ("damaged", "Damaged"),
                            ("transferred", "Transferred"),
                        ],
                        default="assigned",
                        max_length=20,
                    ),
                ),
                (
                    "value",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=12,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0)
                        ],
                    ),
                ),
                ("currency", models.CharField(default="MXN", max_length=3)),
                ("notes", models.TextField(blank=True)),
                ("attachments", models.JSONField(blank=True, default=list)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "created_by",
                    models.CharField(blank=True, max_length=150, null=True),
                ),
                (
                    "updated_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "updated_by",
                    models.CharField(blank=True, max_length=150, null=True),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["owner_id", "status"],
                        name="idx_item_owner_status",
                    ),
                    models.Index(
                        fields=["owner_id", "type"],
                        name="idx_item_owner_type",
                    ),
                    models.Index(
                        fields=["created_at"], name="idx_item_created_at"
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(
                            ("status", "assigned"),
                            models.Q(("serial", ""), _negated=True),
                        ),
                        fields=("owner_id", "serial"),
                        name="uniq_item_assigned_serial_per_owner",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Movement",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("asset_id", models.UUIDField(db_index=True)),
                ("owner_id", models.CharField(max_length=128)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("assign", "Assign"),
                            ("return", "Return"),
                            ("maintenance", "Maintenance"),
                            ("lost", "Lost"),
                            ("damage", "Damage"),
                            ("transfer", "Transfer"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "occurred_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                ("notes", models.TextField(blank=True)),
                ("attachments", models.JSONField(blank=True, default=list)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now),
                ),
                (
                    "created_by",
                    models.CharField(blank=True, max_length=150, null=True),
                ),
                (
                    "idempotency_key",
                    models.CharField(blank=True, max_length=200, null=True),
                ),
            ],
            options={
                "ordering": ["occurred_at"],
                "indexes": [
                    models.Index(
                        fields=["owner_id", "asset_id", "occurred_at"],
                        name="idx_movement_asset_occurred",
                    ),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("idempotency_key__isnull", False)),
                        fields=("asset_id", "idempotency_key"),
                        name="uniq_movement_idempotency_key",
                    ),
                ],
            },
        ),
    ]
