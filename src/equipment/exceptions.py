"""Error kinds raised by the equipment lifecycle services.

Views translate these into JSON responses; services never build HTTP
responses themselves.
"""


class EquipmentError(Exception):
    """Base class for lifecycle errors."""

    code = "ERROR"
    status_code = 500
    default_message = "Equipment operation failed."

    def __init__(self, message=None, errors=None):
        self.message = message or self.default_message
        self.errors = list(errors or [])
        super().__init__(self.message)

    def as_dict(self):
        payload = {"success": False, "error": self.message, "code": self.code}
        if self.errors:
            payload["details"] = self.errors
        return payload


class AssetValidationError(EquipmentError):
    code = "VALIDATION"
    status_code = 400
    default_message = "Invalid equipment data."


class AssetNotFound(EquipmentError):
    code = "NOT_FOUND"
    status_code = 404
    default_message = "Item not found."


class DuplicateAssignment(EquipmentError):
    code = "CONFLICT"
    status_code = 409
    default_message = (
        "An item with the same serial is already assigned to this owner."
    )


class InvalidTransition(EquipmentError):
    code = "INVALID_TRANSITION"
    status_code = 422
    default_message = "Invalid status transition."


class StoreError(EquipmentError):
    code = "STORE_ERROR"
    status_code = 500
    default_message = "Storage failure."
