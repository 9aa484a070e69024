"""Append-only movement ledger with idempotent writes."""

import logging

from django.utils import timezone

from ..exceptions import AssetValidationError
from ..records import MOVEMENT_TYPES, MovementEvent

logger = logging.getLogger(__name__)


class MovementLedger:
    """Per-asset event log. Events are never updated or deleted."""

    def __init__(self, repository, clock=timezone.now):
        self.repository = repository
        self.clock = clock

    def append(
        self,
        owner_id,
        asset_id,
        movement_type,
        notes="",
        attachments=None,
        occurred_at=None,
        actor=None,
        idempotency_key=None,
    ) -> tuple[MovementEvent, bool]:
        """Append a movement. Returns ``(event, created)``.

        A replay with an idempotency key already used for this asset
        returns the stored event and ``created=False``; nothing is
        written.
        """
        if movement_type not in MOVEMENT_TYPES:
            raise AssetValidationError(
                f"'{movement_type}' is not a valid movement type."
            )

        if idempotency_key:
            existing = self.repository.find_movement(
                owner_id, asset_id, idempotency_key
            )
            if existing is not None:
                logger.info(
                    "Replayed movement %s for asset %s (key %s)",
                    existing.id,
                    asset_id,
                    idempotency_key,
                )
                return existing, False

        now = self.clock()
        if occurred_at is not None and occurred_at > now:
            raise AssetValidationError("occurredAt cannot be in the future.")

        event = MovementEvent(
            asset_id=asset_id,
            owner_id=owner_id,
            type=movement_type,
            occurred_at=occurred_at or now,
            created_at=now,
            notes=notes or "",
            attachments=tuple(attachments or ()),
            created_by=actor,
            idempotency_key=idempotency_key or None,
        )
        return self.repository.add_movement(event)

    def history(self, owner_id, asset_id):
        return self.repository.list_movements(owner_id, asset_id)

    def latest(self, owner_id: str, asset_id) -> MovementEvent | None:
        """Most recent movement by ``occurred_at``, or None."""
        return self.repository.latest_movement(owner_id, asset_id)
