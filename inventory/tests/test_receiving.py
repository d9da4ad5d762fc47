from datetime import date
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import transaction

from inventory.models import (
    PurchaseOrder, InventoryStock, InventoryTransaction, InventorySettings, InventoryItem
)
from inventory.services import (
    PurchaseReceivingService, InventoryStockService, InventoryTransactionService,
    StateConflictError, ValidationError, NotFoundError, BusinessRuleError,
)

Status = PurchaseOrder.Status


def receive(po, user, *lines, **kwargs):
    return PurchaseReceivingService.receive(
        po.id, items=list(lines), received_by_id=user.id, **kwargs
    )


def line(poi, quantity, **extra):
    return {"purchase_order_item_id": poi.id, "quantity_received": quantity, **extra}


@pytest.mark.django_db
class TestPartialReceipts:

    def test_partial_then_complete(self, sent_order, user, location):
        poi = sent_order.items.get()

        receive(sent_order, user, line(poi, 6))
        poi.refresh_from_db()
        sent_order.refresh_from_db()

        assert poi.quantity_received == 6
        assert poi.quantity_backordered == 4
        assert poi.is_received is False
        assert sent_order.status == Status.PARTIALLY_RECEIVED
        assert sent_order.received_date is None

        txn = InventoryTransaction.objects.get()
        assert txn.transaction_type == InventoryTransaction.TransactionType.RECEIPT
        assert txn.quantity == 6
        assert txn.unit_cost == Decimal("5.0000")
        assert txn.total_cost == Decimal("30.0000")
        assert (txn.reference_type, txn.reference_id, txn.reference_number) == (
            "PO", sent_order.id, sent_order.order_number
        )
        assert txn.performed_by_id == user.id

        stock = InventoryStock.objects.get(item=poi.item, location=location)
        assert stock.quantity_on_hand == 6
        assert stock.quantity_available == 6
        assert txn.stock_id == stock.id

        receive(sent_order, user, line(poi, 4))
        poi.refresh_from_db()
        sent_order.refresh_from_db()

        assert poi.quantity_received == 10
        assert poi.quantity_backordered == 0
        assert poi.is_received is True
        assert sent_order.status == Status.RECEIVED
        assert sent_order.received_date is not None
        assert InventoryTransaction.objects.count() == 2

        stock.refresh_from_db()
        assert stock.quantity_on_hand == 10

    def test_zero_quantity_line_writes_nothing(self, sent_order, user):
        poi = sent_order.items.get()

        result = receive(sent_order, user, line(poi, 0))

        sent_order.refresh_from_db()
        assert sent_order.status == Status.SENT_TO_SUPPLIER
        assert result["transactions"] == []
        assert InventoryTransaction.objects.count() == 0
        assert InventoryStock.objects.count() == 0

    def test_over_receipt_floors_backorder(self, sent_order, user):
        poi = sent_order.items.get()

        receive(sent_order, user, line(poi, 12))
        poi.refresh_from_db()
        sent_order.refresh_from_db()

        assert poi.quantity_received == 12
        assert poi.quantity_backordered == 0
        assert poi.is_received is True
        assert sent_order.status == Status.RECEIVED

    def test_one_line_of_two(self, make_order, release, item, second_item, user):
        po = release(make_order(submit=True, lines=[
            {"item_id": item.id, "quantity_ordered": 5, "unit_cost": 2},
            {"item_id": second_item.id, "quantity_ordered": 50, "unit_cost": "0.30"},
        ]))
        first, second = po.items.order_by("id")

        receive(po, user, line(first, 5))
        po.refresh_from_db()
        assert po.status == Status.PARTIALLY_RECEIVED

        receive(po, user, line(second, 50))
        po.refresh_from_db()
        assert po.status == Status.RECEIVED

    def test_received_date_not_overwritten(self, sent_order, user):
        poi = sent_order.items.get()
        receive(sent_order, user, line(poi, 10))
        sent_order.refresh_from_db()
        first_received = sent_order.received_date

        PurchaseReceivingService._update_order_status(sent_order)
        sent_order.refresh_from_db()
        assert sent_order.received_date == first_received

    def test_cost_override_and_lot_details(self, sent_order, user):
        poi = sent_order.items.get()

        receive(sent_order, user, line(
            poi, 4,
            unit_cost=Decimal("6.25"),
            lot_number="LOT-2291",
            expiration_date=date(2027, 6, 30),
        ))

        txn = InventoryTransaction.objects.get()
        assert txn.unit_cost == Decimal("6.2500")
        assert txn.total_cost == Decimal("25.0000")
        assert txn.lot_number == "LOT-2291"

        stock = InventoryStock.objects.get()
        assert stock.lot_number == "LOT-2291"
        assert stock.expiration_date == date(2027, 6, 30)
        assert stock.unit_cost == Decimal("6.2500")

        item = InventoryItem.objects.get(id=poi.item_id)
        assert item.last_cost == Decimal("6.2500")

    def test_response_contains_order_and_transactions(self, sent_order, user):
        poi = sent_order.items.get()
        result = receive(sent_order, user, line(poi, 3))

        assert result["success"] is True
        assert result["order"]["status"] == Status.PARTIALLY_RECEIVED
        assert result["order"]["items"][0]["quantity_received"] == 3
        assert result["order"]["items"][0]["current_stock"] == 3
        assert result["transactions"][0]["quantity"] == 3


@pytest.mark.django_db
class TestReceivingLocation:

    def test_explicit_location_wins(self, sent_order, user, pharmacy):
        poi = sent_order.items.get()
        receive(sent_order, user, line(poi, 2), location_id=pharmacy.id)
        assert InventoryStock.objects.get().location_id == pharmacy.id

    def test_settings_default_when_order_has_none(self, make_order, release, user, pharmacy):
        po = release(make_order(submit=True, delivery_location_id=None))
        settings = InventorySettings.load()
        settings.default_receiving_location = pharmacy
        settings.save()

        receive(po, user, line(po.items.get(), 2))
        assert InventoryStock.objects.get().location_id == pharmacy.id

    def test_no_location_available(self, make_order, release, user):
        po = release(make_order(submit=True, delivery_location_id=None))

        with pytest.raises(ValidationError) as exc:
            receive(po, user, line(po.items.get(), 2))
        assert exc.value.field == "location_id"

    def test_inactive_location(self, sent_order, user, pharmacy):
        pharmacy.is_active = False
        pharmacy.save()

        with pytest.raises(BusinessRuleError):
            receive(sent_order, user, line(sent_order.items.get(), 2), location_id=pharmacy.id)


@pytest.mark.django_db
class TestRejectedReceipts:

    def test_draft_order_not_receivable(self, make_order, user):
        po = make_order()
        poi = po.items.get()

        with pytest.raises(StateConflictError) as exc:
            receive(po, user, line(poi, 1))

        assert exc.value.current_status == Status.DRAFT
        assert exc.value.action == "receive"
        poi.refresh_from_db()
        assert poi.quantity_received == 0

    def test_line_from_another_order(self, sent_order, make_order, user):
        other = make_order().items.get()

        with pytest.raises(NotFoundError):
            receive(sent_order, user, line(other, 1))
        assert InventoryTransaction.objects.count() == 0

    def test_negative_quantity(self, sent_order, user):
        with pytest.raises(ValidationError):
            receive(sent_order, user, line(sent_order.items.get(), -1))

    def test_negative_cost_override(self, sent_order, user):
        with pytest.raises(ValidationError):
            receive(sent_order, user, line(sent_order.items.get(), 1, unit_cost="-0.01"))

    def test_unknown_user(self, sent_order):
        with pytest.raises(NotFoundError):
            PurchaseReceivingService.receive(
                sent_order.id,
                items=[line(sent_order.items.get(), 1)],
                received_by_id=99999,
            )

    def test_ledger_failure_undoes_stock_upsert(self, sent_order, user, item):
        poi = sent_order.items.get()

        with patch.object(
            InventoryTransactionService, "record_receipt", side_effect=RuntimeError("ledger down")
        ):
            with pytest.raises(RuntimeError):
                receive(sent_order, user, line(poi, 6))

        sent_order.refresh_from_db()
        poi.refresh_from_db()
        item.refresh_from_db()
        assert sent_order.status == Status.SENT_TO_SUPPLIER
        assert poi.quantity_received == 0
        assert InventoryStock.objects.count() == 0
        assert InventoryTransaction.objects.count() == 0
        assert item.last_cost == Decimal("4.0000")

    def test_fault_mid_receipt_rolls_back(self, make_order, release, item, second_item, user):
        po = release(make_order(submit=True, lines=[
            {"item_id": item.id, "quantity_ordered": 5, "unit_cost": 2},
            {"item_id": second_item.id, "quantity_ordered": 50, "unit_cost": "0.30"},
        ]))
        first, second = po.items.order_by("id")
        original = InventoryStockService.apply_receipt
        calls = []

        def flaky(**kwargs):
            calls.append(kwargs["item"].id)
            if len(calls) == 2:
                raise RuntimeError("storage unavailable")
            return original(**kwargs)

        with patch.object(InventoryStockService, "apply_receipt", side_effect=flaky):
            with pytest.raises(RuntimeError):
                receive(po, user, line(first, 5), line(second, 20))

        assert len(calls) == 2
        po.refresh_from_db()
        first.refresh_from_db()
        second.refresh_from_db()
        item.refresh_from_db()

        assert po.status == Status.SENT_TO_SUPPLIER
        assert first.quantity_received == 0
        assert second.quantity_received == 0
        assert InventoryStock.objects.count() == 0
        assert InventoryTransaction.objects.count() == 0
        assert item.average_cost == Decimal("4.0000")


@pytest.mark.django_db
def test_disjoint_receipts_commute(make_order, release, item, second_item, user):
    po = release(make_order(submit=True, lines=[
        {"item_id": item.id, "quantity_ordered": 8, "unit_cost": 3},
        {"item_id": second_item.id, "quantity_ordered": 20, "unit_cost": 1},
    ]))
    first, second = po.items.order_by("id")
    receipts = [line(first, 8, lot_number="LOT-A"), line(second, 5)]

    def snapshot():
        po.refresh_from_db()
        return {
            "status": po.status,
            "lines": [
                (i.id, i.quantity_received, i.quantity_backordered, i.is_received)
                for i in po.items.order_by("id")
            ],
            "stock": sorted(InventoryStock.objects.values_list(
                "item_id", "location_id", "lot_number", "serial_number",
                "quantity_on_hand", "quantity_available",
            )),
            "costs": sorted(InventoryItem.objects.values_list("id", "average_cost", "last_cost")),
            "ledger": sorted(InventoryTransaction.objects.values_list("item_id", "quantity")),
        }

    def run(ordering):
        savepoint = transaction.savepoint()
        for receipt in ordering:
            receive(po, user, receipt)
        result = snapshot()
        transaction.savepoint_rollback(savepoint)
        return result

    forward = run(receipts)
    backward = run(list(reversed(receipts)))

    assert forward["status"] == Status.PARTIALLY_RECEIVED
    assert forward["stock"] == sorted([
        (item.id, po.delivery_location_id, "LOT-A", "", 8, 8),
        (second_item.id, po.delivery_location_id, "", "", 5, 5),
    ])
    assert forward == backward
