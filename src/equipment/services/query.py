"""Owner-scoped item listing."""

import math
from dataclasses import dataclass

from django.conf import settings

from ..exceptions import AssetValidationError
from ..records import STATUSES


@dataclass
class AssetPage:
    items: list
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self):
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }


def list_assets(
    repository,
    owner_id,
    page=1,
    limit=None,
    status=None,
    type=None,
    search=None,
) -> AssetPage:
    """List the owner's items, newest first, one page at a time.

    ``status`` and ``type`` are equality filters applied by the store.
    ``search`` is accepted but not applied; free-text matching is left
    to the caller. Pagination slices the full filtered result in memory.
    """
    if limit is None:
        limit = getattr(settings, "EQUIPMENT_DEFAULT_PAGE_SIZE", 20)
    if page < 1 or limit < 1:
        raise AssetValidationError("page and limit must be positive.")
    if status and status not in STATUSES:
        raise AssetValidationError(f"'{status}' is not a valid status.")

    records = repository.query_assets(owner_id, status=status, type=type)
    start = (page - 1) * limit
    return AssetPage(
        items=records[start : start + limit],
        total=len(records),
        page=page,
        limit=limit,
    )
