import pytest
from django.db import transaction

from inventory.models import DocumentSequence
from inventory.services import SequenceService
from inventory.services.sequence_service import (
    PURCHASE_ORDER_SEQUENCE, INVENTORY_TRANSACTION_SEQUENCE,
)


@pytest.mark.django_db
class TestSequences:

    def test_numbers_are_formatted_and_increasing(self):
        assert SequenceService.next_order_number() == "PO-000001"
        assert SequenceService.next_order_number() == "PO-000002"
        assert DocumentSequence.objects.get(name=PURCHASE_ORDER_SEQUENCE).current_value == 2

    def test_sequences_are_independent(self):
        SequenceService.next_order_number()
        SequenceService.next_order_number()
        assert SequenceService.next_transaction_number() == "TRX-000001"
        assert DocumentSequence.objects.get(name=INVENTORY_TRANSACTION_SEQUENCE).current_value == 1

    def test_rolled_back_allocation_is_reused(self):
        with pytest.raises(RuntimeError):
            with transaction.atomic():
                SequenceService.next_order_number()
                raise RuntimeError("abort")

        assert SequenceService.next_order_number() == "PO-000001"

    def test_width_follows_settings(self, settings):
        settings.DOCUMENT_NUMBER_WIDTH = 8
        assert SequenceService.format_number("PO", 42) == "PO-00000042"

    def test_orders_get_distinct_numbers(self, make_order):
        numbers = [make_order().order_number for _ in range(3)]
        assert numbers == ["PO-000001", "PO-000002", "PO-000003"]
