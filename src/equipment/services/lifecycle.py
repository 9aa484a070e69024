"""Equipment lifecycle: assignment, movements, updates, returns, removal."""

import logging
from dataclasses import dataclass
from datetime import datetime

from django.conf import settings
from django.utils import timezone

from ..exceptions import (
    AssetNotFound,
    AssetValidationError,
    DuplicateAssignment,
)
from ..records import DESCRIPTIVE_FIELDS, AssetRecord, MovementEvent
from .ledger import MovementLedger
from .state import target_status, validate_transition

logger = logging.getLogger(__name__)


@dataclass
class MovementResult:
    asset: AssetRecord
    movement: MovementEvent
    created: bool


def _check_fields(attrs):
    unknown = sorted(set(attrs) - set(DESCRIPTIVE_FIELDS))
    if unknown:
        raise AssetValidationError(
            f"Fields cannot be set directly: {', '.join(unknown)}."
        )


def _raise_if_invalid(record):
    errors = record.validate()
    if errors:
        raise AssetValidationError(" ".join(errors), errors=errors)


class LifecycleService:
    """Orchestrates the state machine, the ledger and the repository.

    Paired writes (item + movement) run inside ``repository.atomic()``
    so a failure leaves neither half behind.
    """

    def __init__(self, repository, clock=timezone.now):
        self.repository = repository
        self.clock = clock
        self.ledger = MovementLedger(repository, clock=clock)

    def get_asset(self, owner_id: str, asset_id) -> AssetRecord:
        record = self.repository.get_asset(owner_id, asset_id)
        if record is None:
            raise AssetNotFound()
        return record

    def movements(self, owner_id: str, asset_id) -> list[MovementEvent]:
        """Ledger history; still readable after the item is removed."""
        return self.ledger.history(owner_id, asset_id)

    def _guard_serial(self, owner_id, serial, exclude_id=None):
        if serial and self.repository.find_assigned(
            owner_id, serial, exclude_id=exclude_id
        ):
            logger.info(
                "Rejected duplicate assignment of serial %s to %s",
                serial,
                owner_id,
            )
            raise DuplicateAssignment()

    def assign(
        self,
        owner_id: str,
        attrs: dict,
        actor: str | None = None,
        idempotency_key: str | None = None,
        notes: str = "",
        attachments: list[str] | None = None,
    ) -> AssetRecord:
        """Create an item in ``assigned`` status and log the assignment.

        A retry carrying an idempotency key already used for an
        assignment of this owner returns the item created the first time.
        """
        _check_fields(attrs)
        now = self.clock()
        values = {
            **attrs,
            "currency": attrs.get("currency")
            or getattr(settings, "EQUIPMENT_DEFAULT_CURRENCY", "MXN"),
        }
        record = AssetRecord(
            owner_id=owner_id,
            status="assigned",
            assigned_at=now,
            created_at=now,
            created_by=actor,
            updated_at=now,
            updated_by=actor,
            **values,
        )
        _raise_if_invalid(record)

        with self.repository.atomic():
            if idempotency_key:
                existing = self.repository.find_assign_by_key(
                    owner_id, idempotency_key
                )
                if existing is not None:
                    logger.info(
                        "Replayed assignment of item %s (key %s)",
                        existing.asset_id,
                        idempotency_key,
                    )
                    return self.get_asset(owner_id, existing.asset_id)

            self._guard_serial(owner_id, record.serial)
            self.repository.create_asset(record)
            self.ledger.append(
                owner_id,
                record.id,
                "assign",
                notes=notes,
                attachments=attachments,
                actor=actor,
                idempotency_key=idempotency_key,
            )

        logger.info("Assigned item %s to owner %s", record.id, owner_id)
        return record

    def record_movement(
        self,
        owner_id: str,
        asset_id,
        movement_type: str,
        details: str = "",
        actor: str | None = None,
        attachments: list[str] | None = None,
        occurred_at: datetime | None = None,
        idempotency_key: str | None = None,
    ) -> MovementResult:
        """Append a movement and move the item to the matching status.

        Returns a ``MovementResult``. Replaying an idempotency key
        returns the stored movement and the item as it is now, without
        touching either.
        """
        with self.repository.atomic():
            asset = self.get_asset(owner_id, asset_id)
            new_status = target_status(movement_type)

            if idempotency_key:
                existing = self.repository.find_movement(
                    owner_id, asset.id, idempotency_key
                )
                if existing is not None:
                    return MovementResult(asset, existing, False)

            validate_transition(asset.status, new_status)
            if new_status == "assigned" and asset.status != "assigned":
                self._guard_serial(owner_id, asset.serial, exclude_id=asset.id)

            movement, created = self.ledger.append(
                owner_id,
                asset.id,
                movement_type,
                notes=details,
                attachments=attachments,
                occurred_at=occurred_at,
                actor=actor,
                idempotency_key=idempotency_key,
            )
            if not created:
                return MovementResult(asset, movement, False)

            now = self.clock()
            changes = {
                "status": new_status,
                "updated_at": now,
                "updated_by": actor,
            }
            if new_status == "assigned":
                changes["assigned_at"] = now
            if new_status == "returned":
                changes["returned_at"] = now
            elif asset.returned_at is not None:
                changes["returned_at"] = None

            asset = asset.replace(**changes)
            if not self.repository.save_asset(asset):
                raise AssetNotFound()

        logger.info(
            "Recorded %s movement %s for item %s",
            movement_type,
            movement.id,
            asset.id,
        )
        return MovementResult(asset, movement, True)

    def update_asset(
        self, owner_id: str, asset_id, patch: dict, actor: str | None = None
    ) -> AssetRecord:
        """Patch descriptive fields. Status changes go through movements."""
        _check_fields(patch)

        with self.repository.atomic():
            asset = self.get_asset(owner_id, asset_id)
            updated = asset.replace(
                **patch, updated_at=self.clock(), updated_by=actor
            )
            _raise_if_invalid(updated)
            if updated.status == "assigned" and updated.serial != asset.serial:
                self._guard_serial(
                    owner_id, updated.serial, exclude_id=asset.id
                )
            if not self.repository.save_asset(updated):
                raise AssetNotFound()

        return updated

    def return_asset(
        self,
        owner_id: str,
        asset_id,
        condition: str = "ok",
        notes: str = "",
        actor: str | None = None,
        attachments: list[str] | None = None,
        idempotency_key: str | None = None,
    ) -> AssetRecord:
        """Record a ``return``; an already returned item comes back as is."""
        asset = self.get_asset(owner_id, asset_id)
        if asset.status == "returned":
            return asset

        details = f"condition:{condition}"
        if notes:
            details = f"{details} - {notes}"
        result = self.record_movement(
            owner_id,
            asset.id,
            "return",
            details=details,
            actor=actor,
            attachments=attachments,
            idempotency_key=idempotency_key,
        )
        return result.asset

    def remove_asset(self, owner_id: str, asset_id) -> None:
        """Delete the item. Its movement ledger is kept as audit history."""
        if not self.repository.delete_asset(owner_id, asset_id):
            raise AssetNotFound()
        logger.info("Removed item %s of owner %s", asset_id, owner_id)
