"""Value types exchanged between the repository and the services.

Store documents are converted to these records at the repository
boundary; services and the state machine only ever see records.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal

from .models import EquipmentItem, Movement

STATUSES = tuple(value for value, _ in EquipmentItem.STATUS_CHOICES)
MOVEMENT_TYPES = tuple(value for value, _ in Movement.TYPE_CHOICES)

# Fields a caller may change directly, outside the movement ledger.
DESCRIPTIVE_FIELDS = (
    "code",
    "serial",
    "type",
    "subtype",
    "name",
    "brand",
    "model",
    "specs",
    "due_at",
    "value",
    "currency",
    "notes",
    "attachments",
)


@dataclass
class AssetRecord:
    """One physical item and its current lifecycle state."""

    owner_id: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    code: str = ""
    serial: str = ""
    type: str = ""
    subtype: str = ""
    name: str = ""
    brand: str = ""
    model: str = ""
    specs: str = ""
    assigned_at: datetime | None = None
    due_at: datetime | None = None
    returned_at: datetime | None = None
    status: str = "assigned"
    value: Decimal | None = None
    currency: str = "MXN"
    notes: str = ""
    attachments: list = field(default_factory=list)
    created_at: datetime | None = None
    created_by: str | None = None
    updated_at: datetime | None = None
    updated_by: str | None = None

    def validate(self):
        """Return a list of invariant violations (empty when valid)."""
        errors = []
        if not self.owner_id:
            errors.append("ownerId is required.")
        if not (self.name or self.code or self.serial):
            errors.append("Provide at least one of name, code or serial.")
        if self.status not in STATUSES:
            errors.append(f"'{self.status}' is not a valid status.")
        if self.value is not None and self.value < 0:
            errors.append("value cannot be negative.")
        if not self.currency:
            errors.append("currency is required.")
        if not isinstance(self.attachments, list) or not all(
            isinstance(a, str) for a in self.attachments
        ):
            errors.append("attachments must be a list of references.")
        if self.status == "assigned" and self.assigned_at is None:
            errors.append("assignedAt is required for assigned items.")
        if self.status != "returned" and self.returned_at is not None:
            errors.append("returnedAt is only set on returned items.")
        return errors

    def replace(self, **changes):
        return replace(self, **changes)

    def as_dict(self):
        return {
            "id": self.id,
            "ownerId": self.owner_id,
            "code": self.code,
            "serial": self.serial,
            "type": self.type,
            "subtype": self.subtype,
            "name": self.name,
            "brand": self.brand,
            "model": self.model,
            "specs": self.specs,
            "assignedAt": self.assigned_at,
            "dueAt": self.due_at,
            "returnedAt": self.returned_at,
            "status": self.status,
            "value": self.value,
            "currency": self.currency,
            "notes": self.notes,
            "attachments": list(self.attachments),
            "createdAt": self.created_at,
            "createdBy": self.created_by,
            "updatedAt": self.updated_at,
            "updatedBy": self.updated_by,
        }


@dataclass(frozen=True)
class MovementEvent:
    """Immutable ledger entry for one asset."""

    asset_id: uuid.UUID
    owner_id: str
    type: str
    occurred_at: datetime
    created_at: datetime
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    notes: str = ""
    attachments: tuple = ()
    created_by: str | None = None
    idempotency_key: str | None = None

    def as_dict(self):
        return {
            "id": self.id,
            "assetId": self.asset_id,
            "type": self.type,
            "occurredAt": self.occurred_at,
            "notes": self.notes,
            "attachments": list(self.attachments),
            "createdAt": self.created_at,
            "createdBy": self.created_by,
            "idempotencyKey": self.idempotency_key,
        }
