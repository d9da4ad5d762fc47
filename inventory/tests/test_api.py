import json
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.core.management import call_command
from django.urls import reverse

from inventory.models import PurchaseOrder, InventorySettings, Supplier, InventoryItem
from inventory.serializers import _flatten_errors
from inventory.services import PurchaseOrderService

Status = PurchaseOrder.Status


def post(client, url, payload=None):
    return client.post(url, data=json.dumps(payload or {}), content_type="application/json")


def put(client, url, payload):
    return client.put(url, data=json.dumps(payload), content_type="application/json")


@pytest.fixture
def order_payload(supplier, location, item, user):
    return {
        "supplier_id": supplier.id,
        "delivery_location_id": location.id,
        "requested_by_id": user.id,
        "notes": "Monthly glove restock",
        "items": [{"item_id": item.id, "quantity_ordered": 10, "unit_cost": "5.00"}],
    }


@pytest.mark.django_db
class TestPurchaseOrderApi:

    def test_create(self, client, order_payload, user):
        response = post(client, reverse("inventory:po-list"), order_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["order"]["status"] == Status.DRAFT
        assert body["order"]["total_amount"] == "50.0000"
        assert body["order"]["requested_by"]["name"] == "Dana Reyes"
        assert body["order"]["items"][0]["quantity_backordered"] == 10

    def test_create_as_logged_in_user(self, client, order_payload, approver):
        client.force_login(approver)
        del order_payload["requested_by_id"]

        response = post(client, reverse("inventory:po-list"), order_payload)

        assert response.status_code == 201
        assert response.json()["order"]["requested_by_id"] == approver.id

    def test_validation_errors_are_listed(self, client, order_payload):
        order_payload["items"][0]["quantity_ordered"] = 0
        order_payload["items"][0]["unit_cost"] = "-1"

        response = post(client, reverse("inventory:po-list"), order_payload)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "validation_error"
        fields = {e["field"] for e in error["details"]["errors"]}
        assert fields == {"items[0].quantity_ordered", "items[0].unit_cost"}
        assert PurchaseOrder.objects.count() == 0

    def test_malformed_json(self, client):
        response = client.post(
            reverse("inventory:po-list"), data="{not json", content_type="application/json"
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "validation_error"

    def test_inactive_supplier(self, client, order_payload, inactive_supplier):
        order_payload["supplier_id"] = inactive_supplier.id
        response = post(client, reverse("inventory:po-list"), order_payload)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "business_rule"

    def test_not_found(self, client):
        response = client.get(reverse("inventory:po-detail", args=[777]))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"

    def test_detail_includes_current_stock(self, client, sent_order, user):
        poi = sent_order.items.get()
        post(client, reverse("inventory:po-receive", args=[sent_order.id]), {
            "received_by_id": user.id,
            "items": [{"purchase_order_item_id": poi.id, "quantity_received": 4}],
        })

        body = client.get(reverse("inventory:po-detail", args=[sent_order.id])).json()

        assert body["order"]["status"] == Status.PARTIALLY_RECEIVED
        assert body["order"]["items"][0]["current_stock"] == 4
        assert body["order"]["supplier"]["code"] == "MEDLINE"
        assert body["order"]["approved_by_id"] is not None

    def test_full_flow(self, client, order_payload, approver, user):
        po_id = post(client, reverse("inventory:po-list"), order_payload).json()["id"]

        def act(action, payload=None):
            return post(client, reverse("inventory:po-action", args=[po_id, action]), payload)

        assert act("submit").json()["order"]["status"] == Status.PENDING_APPROVAL
        assert act("approve", {"approved_by_id": approver.id}).json()["order"]["status"] == Status.APPROVED
        assert act("send").json()["order"]["status"] == Status.SENT_TO_SUPPLIER

        poi_id = PurchaseOrder.objects.get(id=po_id).items.get().id
        response = post(client, reverse("inventory:po-receive", args=[po_id]), {
            "received_by_id": user.id,
            "items": [{
                "purchase_order_item_id": poi_id,
                "quantity_received": 10,
                "lot_number": "GL-0425",
                "expiration_date": "2028-04-30",
            }],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["order"]["status"] == Status.RECEIVED
        assert body["transactions"][0]["lot_number"] == "GL-0425"

        assert act("close").json()["order"]["status"] == Status.CLOSED

    def test_update_after_send_is_conflict(self, client, sent_order):
        response = put(client, reverse("inventory:po-detail", args=[sent_order.id]), {
            "notes": "Change of plans",
        })

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "state_conflict"
        assert error["details"] == {"current_status": Status.SENT_TO_SUPPLIER, "action": "update"}

    def test_cancel_with_reason(self, client, make_order):
        po = make_order()
        response = post(client, reverse("inventory:po-action", args=[po.id, "cancel"]), {
            "reason": "Duplicate order",
        })

        assert response.status_code == 200
        assert response.json()["order"]["notes"].endswith("Cancellation reason: Duplicate order")

    def test_approve_without_user(self, client, make_order):
        po = make_order(submit=True)
        response = post(client, reverse("inventory:po-action", args=[po.id, "approve"]))
        assert response.status_code == 400

    def test_unknown_action(self, client, make_order):
        po = make_order()
        response = post(client, reverse("inventory:po-action", args=[po.id, "teleport"]))
        assert response.status_code == 404

    def test_delete(self, client, make_order):
        po = make_order()
        response = client.delete(reverse("inventory:po-detail", args=[po.id]))

        assert response.status_code == 200
        assert not PurchaseOrder.objects.filter(id=po.id).exists()

    def test_list_summaries_and_filters(self, client, make_order, sent_order, user):
        make_order(notes="Surgical backorder")
        poi = sent_order.items.get()
        post(client, reverse("inventory:po-receive", args=[sent_order.id]), {
            "received_by_id": user.id,
            "items": [{"purchase_order_item_id": poi.id, "quantity_received": 7}],
        })

        body = client.get(reverse("inventory:po-list"), {"status": Status.PARTIALLY_RECEIVED}).json()
        assert body["pagination"]["total"] == 1
        summary = body["orders"][0]["summary"]
        assert summary == {"total_items": 1, "total_ordered": 10, "total_received": 7}

        searched = client.get(reverse("inventory:po-list"), {"search": "surgical"}).json()
        assert searched["pagination"]["total"] == 1

        paged = client.get(reverse("inventory:po-list"), {"limit": 1, "page": 2}).json()
        assert paged["pagination"]["has_prev"] is True
        assert len(paged["orders"]) == 1

    def test_stats(self, client, make_order, sent_order):
        make_order(submit=True)
        make_order()

        stats = client.get(reverse("inventory:po-stats")).json()["stats"]

        assert stats["total_orders"] == 3
        assert stats["total_value"] == "150.00"
        assert stats["pending_approval"] == 1
        assert stats["pending_receipt"] == 1
        by_status = {row["status"]: row["count"] for row in stats["by_status"]}
        assert by_status == {
            Status.DRAFT: 1, Status.PENDING_APPROVAL: 1, Status.SENT_TO_SUPPLIER: 1,
        }

    def test_unexpected_error_is_opaque(self, client):
        with patch.object(PurchaseOrderService, "get", side_effect=RuntimeError("db password is hunter2")):
            response = client.get(reverse("inventory:po-detail", args=[1]))

        assert response.status_code == 500
        assert response.json()["error"]["message"] == "Internal server error"


@pytest.mark.django_db
class TestReferenceDataApi:

    def test_supplier_create_and_update(self, client):
        response = post(client, reverse("inventory:supplier-list"), {
            "code": "OWENS", "name": "Owens & Minor", "email": "orders@example.com",
        })
        assert response.status_code == 201
        supplier_id = response.json()["id"]

        response = put(client, reverse("inventory:supplier-detail", args=[supplier_id]), {
            "is_active": False,
        })
        assert response.status_code == 200
        assert Supplier.objects.get(id=supplier_id).is_active is False

    def test_duplicate_supplier_code(self, client, supplier):
        response = post(client, reverse("inventory:supplier-list"), {
            "code": supplier.code, "name": "Copy",
        })
        assert response.status_code == 400
        assert response.json()["error"]["details"]["errors"][0]["field"] == "code"

    def test_locations(self, client, location):
        response = post(client, reverse("inventory:location-list"), {
            "code": "LAB", "name": "Clinical Lab", "location_type": "LABORATORY",
        })
        assert response.status_code == 201

        body = client.get(reverse("inventory:location-list")).json()
        assert {loc["code"] for loc in body["locations"]} == {"CW", "LAB"}

    def test_location_detail(self, client, location):
        response = client.get(reverse("inventory:location-detail", args=[location.id]))
        assert response.status_code == 200
        assert response.json()["location"]["code"] == "CW"

        missing = client.get(reverse("inventory:location-detail", args=[location.id + 999]))
        assert missing.status_code == 404

    def test_items(self, client, item):
        response = post(client, reverse("inventory:item-list"), {
            "sku": "GAUZE-4X4", "name": "Gauze 4x4", "category": "MEDICAL_SUPPLIES",
            "unit_cost": "0.12",
        })
        assert response.status_code == 201
        assert InventoryItem.objects.get(sku="GAUZE-4X4").average_cost == Decimal("0.1200")

        detail = client.get(reverse("inventory:item-detail", args=[item.id])).json()
        assert detail["item"]["current_stock"] == 0
        assert detail["item"]["stock"] == []

    def test_stock_and_transactions(self, client, sent_order, user, item):
        poi = sent_order.items.get()
        post(client, reverse("inventory:po-receive", args=[sent_order.id]), {
            "received_by_id": user.id,
            "items": [{"purchase_order_item_id": poi.id, "quantity_received": 3}],
        })

        stock = client.get(reverse("inventory:stock-list"), {"item_id": item.id}).json()
        assert stock["stock"][0]["quantity_on_hand"] == 3
        assert stock["stock"][0]["lot_number"] is None

        ledger = client.get(reverse("inventory:transaction-list"), {"reference_type": "PO"}).json()
        assert ledger["pagination"]["total"] == 1
        assert ledger["transactions"][0]["reference_number"] == sent_order.order_number

    def test_settings(self, client, pharmacy):
        response = put(client, reverse("inventory:settings"), {
            "costing_method": "WEIGHTED",
            "default_receiving_location_id": pharmacy.id,
        })
        assert response.status_code == 200

        settings = InventorySettings.load()
        assert settings.costing_method == InventorySettings.CostingMethod.WEIGHTED
        assert settings.default_receiving_location_id == pharmacy.id

        body = client.get(reverse("inventory:settings")).json()
        assert body["settings"]["default_receiving_location"] == "Main Pharmacy"

    def test_schema(self, client):
        response = client.get(reverse("schema"))
        assert response.status_code == 200


@pytest.mark.django_db
def test_seed_inventory_command():
    call_command("seed_inventory", "--costing-method", "WEIGHTED")
    call_command("seed_inventory")

    assert Supplier.objects.count() == 2
    assert InventoryItem.objects.count() == 4
    settings = InventorySettings.load()
    assert settings.default_receiving_location.code == "CW"
    assert settings.costing_method == InventorySettings.CostingMethod.WEIGHTED


@pytest.mark.parametrize("detail", [
    {"items": {0: {"quantity_ordered": ["Too small."]}}},
    {"items": [{"quantity_ordered": ["Too small."]}]},
])
def test_nested_line_errors_use_index_brackets(detail):
    assert list(_flatten_errors(detail)) == [
        {"field": "items[0].quantity_ordered", "message": "Too small."}
    ]
