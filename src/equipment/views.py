"""JSON endpoints for owner-scoped equipment operations."""

import functools
import json

from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.http import require_http_methods

from .exceptions import AssetValidationError, EquipmentError
from .forms import (
    AssetListForm,
    AssignMovementForm,
    ItemForm,
    MovementForm,
    ReturnForm,
    clean_payload,
    snake_case_keys,
)
from .repository import DjangoAssetRepository
from .services.lifecycle import LifecycleService
from .services.query import list_assets
from .services.summary import summarize


def _repository():
    return DjangoAssetRepository()


def _service():
    return LifecycleService(_repository())


def _actor(request):
    return request.user.get_username() or "system"


def _json_body(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise AssetValidationError("Request body must be valid JSON.")
    if not isinstance(data, dict):
        raise AssetValidationError("Request body must be a JSON object.")
    return data


def _idempotency_key(request, data):
    return (
        data.pop("idempotency_key", None)
        or request.headers.get("Idempotency-Key")
        or None
    )


def equipment_api(view):
    """Render EquipmentError subclasses as JSON error responses."""

    @functools.wraps(view)
    def wrapper(request, *args, **kwargs):
        try:
            return view(request, *args, **kwargs)
        except EquipmentError as e:
            return JsonResponse(e.as_dict(), status=e.status_code)

    return wrapper


@login_required
@require_http_methods(["GET", "POST"])
@equipment_api
def equipment_collection(request, owner_id):
    """GET lists the owner's items, POST assigns a new one."""
    if request.method == "GET":
        params = clean_payload(AssetListForm, request.GET.dict())
        page = list_assets(
            _repository(),
            owner_id,
            page=params["page"] or 1,
            limit=params["limit"],
            status=params["status"] or None,
            type=params["type"] or None,
            search=params["search"] or None,
        )
        return JsonResponse(
            {
                "success": True,
                "data": [record.as_dict() for record in page.items],
                "pagination": page.pagination(),
            }
        )

    data = _json_body(request)
    item = data.get("item") or {}
    movement = data.get("movement") or {}
    if not isinstance(item, dict) or not isinstance(movement, dict):
        raise AssetValidationError("item and movement must be objects.")

    attrs = clean_payload(ItemForm, snake_case_keys(item), partial=True)
    note = clean_payload(AssignMovementForm, snake_case_keys(movement))
    record = _service().assign(
        owner_id,
        attrs,
        actor=_actor(request),
        idempotency_key=_idempotency_key(request, snake_case_keys(data)),
        notes=note["notes"],
        attachments=note["attachments"],
    )
    return JsonResponse(
        {"success": True, "data": record.as_dict()}, status=201
    )


@login_required
@require_http_methods(["GET"])
@equipment_api
def equipment_summary(request, owner_id):
    summary = summarize(_repository(), owner_id)
    return JsonResponse({"success": True, "data": summary.as_dict()})


@login_required
@require_http_methods(["POST"])
@equipment_api
def equipment_movement_create(request, owner_id):
    """Record a movement for one of the owner's items."""
    data = snake_case_keys(_json_body(request))
    key = _idempotency_key(request, data)
    params = clean_payload(MovementForm, data)
    result = _service().record_movement(
        owner_id,
        params["item_id"],
        params["type"],
        details=params["details"],
        actor=_actor(request),
        attachments=params["attachments"],
        occurred_at=params["occurred_at"],
        idempotency_key=key,
    )
    return JsonResponse(
        {
            "success": True,
            "data": result.movement.as_dict(),
            "asset": result.asset.as_dict(),
            "replayed": not result.created,
        },
        status=201 if result.created else 200,
    )


@login_required
@require_http_methods(["GET", "PUT", "PATCH", "DELETE"])
@equipment_api
def equipment_detail(request, owner_id, asset_id):
    service = _service()

    if request.method == "GET":
        record = service.get_asset(owner_id, asset_id)
        return JsonResponse({"success": True, "data": record.as_dict()})

    if request.method == "DELETE":
        service.remove_asset(owner_id, asset_id)
        return HttpResponse(status=204)

    patch = clean_payload(
        ItemForm,
        snake_case_keys(_json_body(request)),
        partial=True,
        reject_unknown=True,
    )
    record = service.update_asset(
        owner_id, asset_id, patch, actor=_actor(request)
    )
    return JsonResponse({"success": True, "data": record.as_dict()})


@login_required
@require_http_methods(["POST"])
@equipment_api
def equipment_return(request, owner_id, asset_id):
    data = snake_case_keys(_json_body(request))
    key = _idempotency_key(request, data)
    params = clean_payload(ReturnForm, data)
    record = _service().return_asset(
        owner_id,
        asset_id,
        condition=params["condition"],
        notes=params["notes"],
        actor=_actor(request),
        attachments=params["attachments"],
        idempotency_key=key,
    )
    return JsonResponse({"success": True, "data": record.as_dict()})


@login_required
@require_http_methods(["GET"])
@equipment_api
def equipment_history(request, owner_id, asset_id):
    """Movement ledger of an item, oldest first."""
    events = _service().movements(owner_id, asset_id)
    return JsonResponse(
        {"success": True, "data": [event.as_dict() for event in events]}
    )
