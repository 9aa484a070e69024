"""Persistence boundary for equipment items and their movement ledger.

The lifecycle services talk to an ``AssetRepository``; store documents
are converted to ``AssetRecord``/``MovementEvent`` here and nowhere
else. ``DjangoAssetRepository`` is the production store,
``InMemoryAssetRepository`` a dict-backed stand-in for service tests.
"""

import copy
import logging
import uuid
from contextlib import contextmanager
from dataclasses import fields

from django.db import DatabaseError, IntegrityError, transaction

from .exceptions import DuplicateAssignment, StoreError
from .models import EquipmentItem, Movement
from .records import AssetRecord, MovementEvent

logger = logging.getLogger(__name__)

ASSET_FIELDS = [f.name for f in fields(AssetRecord)]
MOVEMENT_FIELDS = [f.name for f in fields(MovementEvent)]


def _as_uuid(value):
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class AssetRepository:
    """Contract between the lifecycle services and a store."""

    def get_asset(self, owner_id, asset_id):
        """Return the ``AssetRecord`` or None."""
        raise NotImplementedError

    def find_assigned(self, owner_id, serial, exclude_id=None):
        """Return the assigned record holding ``serial`` for the owner."""
        raise NotImplementedError

    def create_asset(self, record):
        """Insert a new record.

        Raises DuplicateAssignment if the owner already holds an
        assigned item with the same serial.
        """
        raise NotImplementedError

    def save_asset(self, record):
        """Overwrite an existing record. Returns False if it is gone."""
        raise NotImplementedError

    def delete_asset(self, owner_id, asset_id):
        """Delete a record, leaving its ledger alone. Returns a bool."""
        raise NotImplementedError

    def query_assets(self, owner_id, status=None, type=None):
        """Return the owner's records, newest ``created_at`` first."""
        raise NotImplementedError

    def find_movement(self, owner_id, asset_id, idempotency_key):
        raise NotImplementedError

    def find_assign_by_key(self, owner_id, idempotency_key):
        """Return the owner's earliest ``assign`` event carrying the key."""
        raise NotImplementedError

    def add_movement(self, event):
        """Insert ``event`` unless its idempotency key is already used.

        Returns ``(stored_event, created)``.
        """
        raise NotImplementedError

    def list_movements(self, owner_id, asset_id):
        """Return the ledger ordered by ``occurred_at`` ascending."""
        raise NotImplementedError

    def latest_movement(self, owner_id, asset_id):
        raise NotImplementedError

    def atomic(self):
        """Context manager grouping writes into one transaction."""
        raise NotImplementedError


# --- Django ORM store ---


def item_to_record(item):
    return AssetRecord(
        **{
            name: getattr(item, name)
            for name in ASSET_FIELDS
            if name != "attachments"
        },
        attachments=list(item.attachments or []),
    )


def movement_to_event(movement):
    return MovementEvent(
        **{
            name: getattr(movement, name)
            for name in MOVEMENT_FIELDS
            if name != "attachments"
        },
        attachments=tuple(movement.attachments or []),
    )


@contextmanager
def _store_errors(action):
    try:
        yield
    except DatabaseError as e:
        logger.exception("Equipment store failure during %s", action)
        raise StoreError(f"Storage failure during {action}.") from e


class DjangoAssetRepository(AssetRepository):
    """Store backed by the ``EquipmentItem`` and ``Movement`` tables."""

    def _items(self, owner_id):
        return EquipmentItem.objects.filter(owner_id=owner_id)

    def _movements(self, owner_id, asset_id):
        return Movement.objects.filter(owner_id=owner_id, asset_id=asset_id)

    def get_asset(self, owner_id, asset_id):
        pk = _as_uuid(asset_id)
        if pk is None:
            return None
        with _store_errors("get_asset"):
            item = self._items(owner_id).filter(pk=pk).first()
        return item_to_record(item) if item else None

    def find_assigned(self, owner_id, serial, exclude_id=None):
        with _store_errors("find_assigned"):
            qs = self._items(owner_id).filter(serial=serial, status="assigned")
            if exclude_id is not None:
                qs = qs.exclude(pk=exclude_id)
            item = qs.first()
        return item_to_record(item) if item else None

    def create_asset(self, record):
        with _store_errors("create_asset"):
            try:
                # Savepoint so a constraint violation leaves any outer
                # transaction usable.
                with transaction.atomic():
                    EquipmentItem.objects.create(
                        **{
                            name: getattr(record, name)
                            for name in ASSET_FIELDS
                        }
                    )
            except IntegrityError:
                raise DuplicateAssignment() from None
        return record

    def save_asset(self, record):
        values = {
            name: getattr(record, name)
            for name in ASSET_FIELDS
            if name not in ("id", "owner_id", "created_at", "created_by")
        }
        with _store_errors("save_asset"):
            try:
                with transaction.atomic():
                    updated = (
                        self._items(record.owner_id)
                        .filter(pk=record.id)
                        .update(**values)
                    )
            except IntegrityError:
                raise DuplicateAssignment() from None
        return updated == 1

    def delete_asset(self, owner_id, asset_id):
        pk = _as_uuid(asset_id)
        if pk is None:
            return False
        with _store_errors("delete_asset"):
            deleted, _ = self._items(owner_id).filter(pk=pk).delete()
        return deleted > 0

    def query_assets(self, owner_id, status=None, type=None):
        qs = self._items(owner_id)
        if status:
            qs = qs.filter(status=status)
        if type:
            qs = qs.filter(type=type)
        with _store_errors("query_assets"):
            return [item_to_record(i) for i in qs.order_by("-created_at")]

    def find_movement(self, owner_id, asset_id, idempotency_key):
        with _store_errors("find_movement"):
            movement = (
                self._movements(owner_id, asset_id)
                .filter(idempotency_key=idempotency_key)
                .first()
            )
        return movement_to_event(movement) if movement else None

    def find_assign_by_key(self, owner_id, idempotency_key):
        with _store_errors("find_assign_by_key"):
            movement = (
                Movement.objects.filter(
                    owner_id=owner_id,
                    type="assign",
                    idempotency_key=idempotency_key,
                )
                .order_by("created_at")
                .first()
            )
        return movement_to_event(movement) if movement else None

    def add_movement(self, event):
        values = {name: getattr(event, name) for name in MOVEMENT_FIELDS}
        values["attachments"] = list(event.attachments)
        with _store_errors("add_movement"):
            try:
                with transaction.atomic():
                    Movement.objects.create(**values)
            except IntegrityError:
                if event.idempotency_key is None:
                    raise
                # Lost a race with a concurrent replay of the same key.
                existing = self.find_movement(
                    event.owner_id, event.asset_id, event.idempotency_key
                )
                if existing is None:
                    raise
                return existing, False
        return event, True

    def list_movements(self, owner_id, asset_id):
        pk = _as_uuid(asset_id)
        if pk is None:
            return []
        with _store_errors("list_movements"):
            return [
                movement_to_event(m)
                for m in self._movements(owner_id, pk).order_by(
                    "occurred_at", "created_at"
                )
            ]

    def latest_movement(self, owner_id, asset_id):
        with _store_errors("latest_movement"):
            movement = (
                self._movements(owner_id, asset_id)
                .order_by("-occurred_at")
                .first()
            )
        return movement_to_event(movement) if movement else None

    def atomic(self):
        return transaction.atomic()


# --- In-memory store ---


class InMemoryAssetRepository(AssetRepository):
    """Dict-backed store with the same contract as the Django one."""

    def __init__(self):
        self.assets = {}
        self.movements = {}

    def get_asset(self, owner_id, asset_id):
        record = self.assets.get((owner_id, _as_uuid(asset_id)))
        return copy.deepcopy(record)

    def find_assigned(self, owner_id, serial, exclude_id=None):
        for (owner, pk), record in self.assets.items():
            if (
                owner == owner_id
                and record.serial == serial
                and record.status == "assigned"
                and pk != exclude_id
            ):
                return copy.deepcopy(record)
        return None

    def _check_serial(self, record):
        if record.status == "assigned" and record.serial:
            if self.find_assigned(
                record.owner_id, record.serial, exclude_id=record.id
            ):
                raise DuplicateAssignment()

    def create_asset(self, record):
        self._check_serial(record)
        self.assets[(record.owner_id, record.id)] = copy.deepcopy(record)
        return record

    def save_asset(self, record):
        key = (record.owner_id, record.id)
        if key not in self.assets:
            return False
        self._check_serial(record)
        self.assets[key] = copy.deepcopy(record)
        return True

    def delete_asset(self, owner_id, asset_id):
        key = (owner_id, _as_uuid(asset_id))
        return self.assets.pop(key, None) is not None

    def query_assets(self, owner_id, status=None, type=None):
        records = [
            copy.deepcopy(r)
            for (owner, _), r in self.assets.items()
            if owner == owner_id
            and (not status or r.status == status)
            and (not type or r.type == type)
        ]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records

    def find_movement(self, owner_id, asset_id, idempotency_key):
        for event in self.movements.get((owner_id, _as_uuid(asset_id)), []):
            if event.idempotency_key == idempotency_key:
                return event
        return None

    def find_assign_by_key(self, owner_id, idempotency_key):
        matches = [
            event
            for (owner, _), ledger in self.movements.items()
            if owner == owner_id
            for event in ledger
            if event.type == "assign"
            and event.idempotency_key == idempotency_key
        ]
        return min(matches, key=lambda e: e.created_at, default=None)

    def add_movement(self, event):
        if event.idempotency_key is not None:
            existing = self.find_movement(
                event.owner_id, event.asset_id, event.idempotency_key
            )
            if existing is not None:
                return existing, False
        key = (event.owner_id, event.asset_id)
        ledger = self.movements.setdefault(key, [])
        ledger.append(event)
        return event, True

    def list_movements(self, owner_id, asset_id):
        ledger = self.movements.get((owner_id, _as_uuid(asset_id)), [])
        return sorted(ledger, key=lambda e: (e.occurred_at, e.created_at))

    def latest_movement(self, owner_id, asset_id):
        ledger = self.list_movements(owner_id, asset_id)
        return max(ledger, key=lambda e: e.occurred_at) if ledger else None

    @contextmanager
    def atomic(self):
        snapshot = copy.deepcopy((self.assets, self.movements))
        try:
            yield
        except Exception:
            self.assets, self.movements = snapshot
            raise
