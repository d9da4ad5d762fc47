from decimal import Decimal

import pytest

from inventory.models import InventoryStock, InventoryTransaction, ImmutableRecordError
from inventory.services import (
    InventoryStockService, InventoryTransactionService, ValidationError,
)


@pytest.mark.django_db
class TestApplyReceipt:

    def test_absent_lot_and_serial_share_a_row(self, item, location):
        first, created = InventoryStockService.apply_receipt(item, location, 5, Decimal("4.00"))
        second, created_again = InventoryStockService.apply_receipt(
            item, location, 3, Decimal("4.50"), lot_number="", serial_number=None
        )

        assert created is True
        assert created_again is False
        assert first.id == second.id
        assert second.quantity_on_hand == 8
        assert second.quantity_available == 8
        assert second.quantity_reserved == 0
        assert second.unit_cost == Decimal("4.5000")
        assert InventoryStock.objects.count() == 1

    def test_lots_are_kept_apart(self, item, location):
        InventoryStockService.apply_receipt(item, location, 5, 4, lot_number="A1")
        InventoryStockService.apply_receipt(item, location, 2, 4, lot_number="B7")
        InventoryStockService.apply_receipt(item, location, 1, 4, lot_number="A1")

        rows = dict(InventoryStock.objects.values_list("lot_number", "quantity_on_hand"))
        assert rows == {"A1": 6, "B7": 2}

    def test_locations_are_kept_apart(self, item, location, pharmacy):
        InventoryStockService.apply_receipt(item, location, 5, 4)
        InventoryStockService.apply_receipt(item, pharmacy, 5, 4)
        assert InventoryStock.objects.filter(item=item).count() == 2

    def test_available_follows_reservations(self, item, location):
        row, _ = InventoryStockService.apply_receipt(item, location, 10, 4)
        InventoryStock.objects.filter(pk=row.pk).update(quantity_reserved=3, quantity_available=7)

        row, _ = InventoryStockService.apply_receipt(item, location, 5, 4)
        assert row.quantity_on_hand == 15
        assert row.quantity_available == 12

    def test_quantity_must_be_positive(self, item, location):
        with pytest.raises(ValidationError):
            InventoryStockService.apply_receipt(item, location, 0, 4)


@pytest.mark.django_db
class TestLedger:

    @pytest.fixture
    def receipt(self, item, location, user):
        return InventoryTransactionService.record_receipt(
            item=item,
            location=location,
            quantity=4,
            unit_cost=Decimal("2.50"),
            performed_by_id=user.id,
            reference_type="PO",
            reference_id=1,
            reference_number="PO-000001",
        )

    def test_record_receipt(self, receipt):
        assert receipt.transaction_number == "TRX-000001"
        assert receipt.total_cost == Decimal("10.0000")
        assert receipt.lot_number == ""

    def test_rows_cannot_be_modified(self, receipt):
        receipt.notes = "edited"
        with pytest.raises(ImmutableRecordError):
            receipt.save()

        receipt.refresh_from_db()
        assert receipt.notes == ""

    def test_rows_cannot_be_deleted(self, receipt):
        with pytest.raises(ImmutableRecordError):
            receipt.delete()
        assert InventoryTransaction.objects.filter(pk=receipt.pk).exists()

    def test_list_filters(self, receipt, item, second_item, location, user):
        InventoryTransactionService.record_receipt(
            item=second_item, location=location, quantity=1, unit_cost=1,
            performed_by_id=user.id, reference_type="ADJ",
        )

        by_reference = InventoryTransactionService.list(reference_type="PO")
        assert [t["id"] for t in by_reference["transactions"]] == [receipt.id]

        by_item = InventoryTransactionService.list(item_id=second_item.id)
        assert by_item["pagination"]["total"] == 1

        by_search = InventoryTransactionService.list(search="PO-000001")
        assert by_search["transactions"][0]["reference_number"] == "PO-000001"

    def test_get_by_reference(self, receipt):
        result = InventoryTransactionService.get_by_reference("PO", 1)
        assert result["count"] == 1
