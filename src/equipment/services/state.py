"""Equipment state machine and transition validation."""

from django.conf import settings

from ..exceptions import AssetValidationError, InvalidTransition
from ..models import EquipmentItem
from ..records import STATUSES

# Movement type -> status the item ends up in.
MOVEMENT_TARGET_STATUS = {
    "assign": "assigned",
    "return": "returned",
    "maintenance": "maintenance",
    "lost": "lost",
    "damage": "damaged",
    "transfer": "transferred",
}


def _strict() -> bool:
    return getattr(settings, "EQUIPMENT_STRICT_TRANSITIONS", False)


def is_legal_transition(
    current_status: str, next_status: str, strict: bool | None = None
) -> bool:
    """Return True if ``current_status -> next_status`` is allowed.

    An origin without an entry in the transition table (lost, damaged,
    transferred) places no restriction on the next status unless strict
    mode is on, in which case those origins are terminal.
    """
    if next_status == current_status:
        return True  # No-op transition is always fine

    if strict is None:
        strict = _strict()

    allowed = EquipmentItem.VALID_TRANSITIONS.get(current_status)
    if allowed is None:
        return not strict
    return next_status in allowed


def validate_transition(
    current_status: str, next_status: str, strict: bool | None = None
) -> None:
    """Validate and raise if the status transition is not allowed."""
    if next_status not in STATUSES:
        raise AssetValidationError(f"'{next_status}' is not a valid status.")

    if not is_legal_transition(current_status, next_status, strict=strict):
        allowed = EquipmentItem.VALID_TRANSITIONS.get(current_status, [])
        raise InvalidTransition(
            f"Cannot transition from '{current_status}' to "
            f"'{next_status}'. Allowed transitions: "
            f"{', '.join(allowed) or 'none'}."
        )


def target_status(movement_type: str) -> str:
    """Map a movement type to the status it produces."""
    try:
        return MOVEMENT_TARGET_STATUS[movement_type]
    except KeyError:
        raise AssetValidationError(
            f"'{movement_type}' is not a valid movement type."
        ) from None
