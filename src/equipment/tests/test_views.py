"""Tests for the equipment JSON endpoints."""

import json
import uuid

import pytest

from django.urls import reverse

from equipment.models import EquipmentItem, Movement

OWNER = "E1"


def post_json(client, url, payload, **extra):
    return client.post(
        url, data=json.dumps(payload), content_type="application/json", **extra
    )


def collection_url(owner=OWNER):
    return reverse("equipment:equipment_collection", args=[owner])


def detail_url(asset_id, owner=OWNER):
    return reverse("equipment:equipment_detail", args=[owner, asset_id])


@pytest.fixture
def laptop(client_logged_in):
    response = post_json(
        client_logged_in,
        collection_url(),
        {"item": {"serial": "LPT-01", "name": "Laptop", "type": "computer"}},
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestAuthentication:
    def test_anonymous_is_redirected(self, client, db):
        response = client.get(collection_url())
        assert response.status_code == 302
        assert "login" in response.url

    def test_wrong_method(self, client_logged_in):
        response = client_logged_in.delete(collection_url())
        assert response.status_code == 405


class TestAssignView:
    def test_assign(self, client_logged_in, user):
        response = post_json(
            client_logged_in,
            collection_url(),
            {
                "item": {
                    "serial": "LPT-01",
                    "name": "Laptop",
                    "dueAt": "2026-03-01T00:00:00+00:00",
                    "value": "15000.00",
                    "currency": "usd",
                },
                "movement": {"notes": "with charger"},
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["status"] == "assigned"
        assert data["ownerId"] == OWNER
        assert data["currency"] == "USD"
        assert data["value"] == "15000.00"
        assert data["createdBy"] == user.username
        movement = Movement.objects.get(asset_id=data["id"])
        assert movement.type == "assign"
        assert movement.notes == "with charger"

    def test_duplicate_serial(self, client_logged_in, laptop):
        response = post_json(
            client_logged_in,
            collection_url(),
            {"item": {"serial": "LPT-01", "name": "Another"}},
        )
        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "CONFLICT"

    def test_missing_identifier(self, client_logged_in):
        response = post_json(
            client_logged_in, collection_url(), {"item": {"brand": "Acme"}}
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION"

    def test_negative_value(self, client_logged_in):
        response = post_json(
            client_logged_in,
            collection_url(),
            {"item": {"name": "Radio", "value": -5}},
        )
        assert response.status_code == 400
        assert response.json()["details"]

    def test_null_currency_uses_default(self, client_logged_in):
        response = post_json(
            client_logged_in,
            collection_url(),
            {"item": {"name": "Drill", "currency": None}},
        )
        assert response.status_code == 201
        assert response.json()["data"]["currency"] == "MXN"
        item = EquipmentItem.objects.get(pk=response.json()["data"]["id"])
        assert item.currency == "MXN"

    def test_retry_with_idempotency_key(self, client_logged_in):
        payload = {"item": {"name": "Helmet"}, "idempotencyKey": "a-1"}
        first = post_json(client_logged_in, collection_url(), payload)
        second = post_json(client_logged_in, collection_url(), payload)
        assert first.status_code == second.status_code == 201
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert EquipmentItem.objects.filter(owner_id=OWNER).count() == 1
        assert Movement.objects.filter(owner_id=OWNER).count() == 1

    def test_retry_with_idempotency_header(self, client_logged_in):
        payload = {"item": {"name": "Helmet"}}
        for _ in range(2):
            post_json(
                client_logged_in,
                collection_url(),
                payload,
                HTTP_IDEMPOTENCY_KEY="a-2",
            )
        assert EquipmentItem.objects.filter(owner_id=OWNER).count() == 1

    def test_invalid_json(self, client_logged_in):
        response = client_logged_in.post(
            collection_url(), data="{", content_type="application/json"
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION"


class TestListView:
    def test_list(self, client_logged_in, laptop):
        response = client_logged_in.get(collection_url())
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [item["id"] for item in body["data"]] == [laptop["id"]]
        assert body["pagination"] == {
            "page": 1,
            "limit": 20,
            "total": 1,
            "totalPages": 1,
        }

    def test_filters(self, client_logged_in, laptop):
        response = client_logged_in.get(
            collection_url(), {"status": "returned", "type": "computer"}
        )
        assert response.json()["data"] == []

    def test_invalid_status(self, client_logged_in):
        response = client_logged_in.get(collection_url(), {"status": "gone"})
        assert response.status_code == 400

    def test_limit_capped(self, client_logged_in):
        response = client_logged_in.get(collection_url(), {"limit": 500})
        assert response.status_code == 400


class TestMovementView:
    def url(self):
        return reverse("equipment:equipment_movement_create", args=[OWNER])

    def test_record(self, client_logged_in, laptop):
        response = post_json(
            client_logged_in,
            self.url(),
            {"itemId": laptop["id"], "type": "maintenance", "details": "fan"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["data"]["type"] == "maintenance"
        assert body["data"]["notes"] == "fan"
        assert body["asset"]["status"] == "maintenance"
        assert body["replayed"] is False

    def test_replay_with_header(self, client_logged_in, laptop):
        payload = {"itemId": laptop["id"], "type": "maintenance"}
        first = post_json(
            client_logged_in,
            self.url(),
            payload,
            HTTP_IDEMPOTENCY_KEY="m-1",
        )
        second = post_json(
            client_logged_in,
            self.url(),
            payload,
            HTTP_IDEMPOTENCY_KEY="m-1",
        )
        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["replayed"] is True
        assert second.json()["data"]["id"] == first.json()["data"]["id"]
        assert Movement.objects.filter(asset_id=laptop["id"]).count() == 2

    def test_replay_with_body_key(self, client_logged_in, laptop):
        payload = {
            "itemId": laptop["id"],
            "type": "lost",
            "idempotencyKey": "l-1",
        }
        post_json(client_logged_in, self.url(), payload)
        response = post_json(client_logged_in, self.url(), payload)
        assert response.json()["data"]["idempotencyKey"] == "l-1"
        assert response.json()["replayed"] is True

    def test_invalid_transition(self, client_logged_in, laptop):
        post_json(
            client_logged_in,
            self.url(),
            {"itemId": laptop["id"], "type": "return"},
        )
        response = post_json(
            client_logged_in,
            self.url(),
            {"itemId": laptop["id"], "type": "maintenance"},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_unknown_item(self, client_logged_in):
        response = post_json(
            client_logged_in,
            self.url(),
            {"itemId": str(uuid.uuid4()), "type": "return"},
        )
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_unknown_type(self, client_logged_in, laptop):
        response = post_json(
            client_logged_in,
            self.url(),
            {"itemId": laptop["id"], "type": "teleport"},
        )
        assert response.status_code == 400


class TestDetailView:
    def test_get(self, client_logged_in, laptop):
        response = client_logged_in.get(detail_url(laptop["id"]))
        assert response.status_code == 200
        assert response.json()["data"]["serial"] == "LPT-01"

    def test_get_other_owner(self, client_logged_in, laptop):
        response = client_logged_in.get(detail_url(laptop["id"], owner="E2"))
        assert response.status_code == 404

    def test_patch(self, client_logged_in, laptop):
        response = client_logged_in.patch(
            detail_url(laptop["id"]),
            data=json.dumps({"brand": "Lenovo", "model": "T14"}),
            content_type="application/json",
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["brand"] == "Lenovo"
        assert data["name"] == "Laptop"
        assert Movement.objects.filter(asset_id=laptop["id"]).count() == 1

    def test_patch_status_rejected(self, client_logged_in, laptop):
        response = client_logged_in.put(
            detail_url(laptop["id"]),
            data=json.dumps({"status": "returned"}),
            content_type="application/json",
        )
        assert response.status_code == 400
        item = EquipmentItem.objects.get(pk=laptop["id"])
        assert item.status == "assigned"

    def test_delete_keeps_history(self, client_logged_in, laptop):
        response = client_logged_in.delete(detail_url(laptop["id"]))
        assert response.status_code == 204
        assert not EquipmentItem.objects.filter(pk=laptop["id"]).exists()

        history = client_logged_in.get(
            reverse(
                "equipment:equipment_history", args=[OWNER, laptop["id"]]
            )
        )
        assert [m["type"] for m in history.json()["data"]] == ["assign"]

    def test_delete_missing(self, client_logged_in):
        response = client_logged_in.delete(detail_url(uuid.uuid4()))
        assert response.status_code == 404


class TestReturnView:
    def url(self, asset_id):
        return reverse("equipment:equipment_return", args=[OWNER, asset_id])

    def test_return(self, client_logged_in, laptop):
        response = post_json(
            client_logged_in,
            self.url(laptop["id"]),
            {"condition": "scratched", "notes": "no bag"},
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "returned"
        assert response.json()["data"]["returnedAt"] is not None
        last = Movement.objects.filter(asset_id=laptop["id"]).last()
        assert last.notes == "condition:scratched - no bag"

    def test_return_twice(self, client_logged_in, laptop):
        post_json(client_logged_in, self.url(laptop["id"]), {})
        response = post_json(client_logged_in, self.url(laptop["id"]), {})
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "returned"
        assert Movement.objects.filter(asset_id=laptop["id"]).count() == 2


class TestSummaryView:
    def url(self, owner=OWNER):
        return reverse("equipment:equipment_summary", args=[owner])

    def test_summary(self, client_logged_in, laptop):
        response = client_logged_in.get(self.url())
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total"] == 1
        assert data["byStatus"] == {"assigned": 1}
        assert data["byType"] == {"computer": 1}
        assert data["lastMovementAt"] is not None

    def test_empty_owner(self, client_logged_in):
        data = client_logged_in.get(self.url("nobody")).json()["data"]
        assert data["total"] == 0
        assert data["lastMovementAt"] is None
