"""Per-owner aggregate counts over equipment items."""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime

from django.utils import timezone


@dataclass
class Summary:
    total: int = 0
    by_status: dict = field(default_factory=dict)
    by_type: dict = field(default_factory=dict)
    pending_returns: int = 0
    lost_or_damaged: int = 0
    last_movement_at: datetime | None = None

    def as_dict(self):
        return {
            "total": self.total,
            "byStatus": dict(self.by_status),
            "byType": dict(self.by_type),
            "pendingReturns": self.pending_returns,
            "lostOrDamaged": self.lost_or_damaged,
            "lastMovementAt": self.last_movement_at,
        }


def summarize(repository, owner_id: str, now=None) -> Summary:
    """Compute the owner's summary.

    Looks up the latest movement of every item, so cost grows with the
    number of items the owner holds. An owner without items gets a
    zeroed summary.
    """
    now = now or timezone.now()
    assets = repository.query_assets(owner_id)
    if not assets:
        return Summary()

    by_status = Counter()
    by_type = Counter()
    pending_returns = 0
    lost_or_damaged = 0
    last_movement_at = None

    for asset in assets:
        by_status[asset.status] += 1
        if asset.type:
            by_type[asset.type] += 1
        if (
            asset.status == "assigned"
            and asset.due_at is not None
            and asset.due_at < now
        ):
            pending_returns += 1
        if asset.status in ("lost", "damaged"):
            lost_or_damaged += 1

        latest = repository.latest_movement(owner_id, asset.id)
        if latest and (
            last_movement_at is None or latest.occurred_at > last_movement_at
        ):
            last_movement_at = latest.occurred_at

    return Summary(
        total=len(assets),
        by_status=dict(by_status),
        by_type=dict(by_type),
        pending_returns=pending_returns,
        lost_or_damaged=lost_or_damaged,
        last_movement_at=last_movement_at,
    )
