"""Forms that coerce and validate JSON payloads for the equipment API."""

import re

from django import forms

from .exceptions import AssetValidationError
from .models import EquipmentItem, Movement


def snake_case_keys(data):
    """``{"dueAt": ...}`` -> ``{"due_at": ...}``."""
    return {
        re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower(): value
        for key, value in (data or {}).items()
    }


def clean_payload(form_class, data, partial=False, reject_unknown=False):
    """Validate ``data`` with ``form_class`` and return cleaned values.

    With ``partial`` only the keys present in ``data`` are returned.
    Raises AssetValidationError listing every field error.
    """
    if reject_unknown:
        unknown = sorted(set(data) - set(form_class.base_fields))
        if unknown:
            raise AssetValidationError(
                f"Fields cannot be set directly: {', '.join(unknown)}."
            )
    form = form_class(data=data)
    if not form.is_valid():
        errors = [
            f"{field}: {message}"
            for field, messages in form.errors.items()
            for message in messages
        ]
        raise AssetValidationError(" ".join(errors), errors=errors)
    if partial:
        return {k: v for k, v in form.cleaned_data.items() if k in data}
    return form.cleaned_data


class AttachmentsField(forms.JSONField):
    """A JSON list of attachment references."""

    def clean(self, value):
        value = super().clean(value)
        if value in (None, ""):
            return []
        if not isinstance(value, list) or not all(
            isinstance(v, str) for v in value
        ):
            raise forms.ValidationError("Must be a list of references.")
        return value


class ItemForm(forms.Form):
    """Descriptive item fields accepted on assignment and update."""

    code = forms.CharField(max_length=100, required=False)
    serial = forms.CharField(max_length=120, required=False)
    type = forms.CharField(max_length=100, required=False)
    subtype = forms.CharField(max_length=100, required=False)
    name = forms.CharField(max_length=200, required=False)
    brand = forms.CharField(max_length=120, required=False)
    model = forms.CharField(max_length=120, required=False)
    specs = forms.CharField(required=False)
    due_at = forms.DateTimeField(required=False)
    value = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    currency = forms.CharField(max_length=3, required=False)
    notes = forms.CharField(required=False)
    attachments = AttachmentsField(required=False)

    def clean_currency(self):
        return self.cleaned_data["currency"].upper()


class MovementForm(forms.Form):
    item_id = forms.UUIDField()
    type = forms.ChoiceField(choices=Movement.TYPE_CHOICES)
    details = forms.CharField(required=False)
    attachments = AttachmentsField(required=False)
    occurred_at = forms.DateTimeField(required=False)


class ReturnForm(forms.Form):
    condition = forms.CharField(max_length=50, required=False)
    notes = forms.CharField(required=False)
    attachments = AttachmentsField(required=False)

    def clean_condition(self):
        return self.cleaned_data["condition"] or "ok"


class AssetListForm(forms.Form):
    page = forms.IntegerField(min_value=1, required=False)
    limit = forms.IntegerField(min_value=1, max_value=100, required=False)
    status = forms.ChoiceField(
        choices=EquipmentItem.STATUS_CHOICES, required=False
    )
    type = forms.CharField(max_length=100, required=False)
    search = forms.CharField(required=False)


class AssignMovementForm(forms.Form):
    """Notes attached to the ``assign`` movement logged on assignment."""

    notes = forms.CharField(required=False)
    attachments = AttachmentsField(required=False)
