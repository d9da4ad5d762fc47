import logging

from django.conf import settings
from django.db import transaction
from django.db.models import F

from inventory.models import DocumentSequence

logger = logging.getLogger(__name__)

PURCHASE_ORDER_SEQUENCE = "purchase_order"
INVENTORY_TRANSACTION_SEQUENCE = "inventory_transaction"


class SequenceService:
    """
    Allocates document numbers from DocumentSequence counter rows.

    The counter row is locked with select_for_update for the rest of the
    caller's transaction, so two writers never see the same value and a
    rolled back caller gives its value back.
    """

    @classmethod
    @transaction.atomic
    def next_value(cls, name: str) -> int:
        DocumentSequence.objects.get_or_create(name=name)
        seq = DocumentSequence.objects.select_for_update().get(name=name)
        DocumentSequence.objects.filter(pk=seq.pk).update(
            current_value=F("current_value") + 1
        )
        seq.refresh_from_db(fields=["current_value"])
        return seq.current_value

    @classmethod
    def format_number(cls, prefix: str, value: int) -> str:
        width = getattr(settings, "DOCUMENT_NUMBER_WIDTH", 6)
        return f"{prefix}-{value:0{width}d}"

    @classmethod
    def next_number(cls, prefix: str, name: str) -> str:
        number = cls.format_number(prefix, cls.next_value(name))
        logger.debug("Allocated %s from sequence %s", number, name)
        return number

    @classmethod
    def next_order_number(cls) -> str:
        return cls.next_number(
            getattr(settings, "PURCHASE_ORDER_PREFIX", "PO"),
            PURCHASE_ORDER_SEQUENCE,
        )

    @classmethod
    def next_transaction_number(cls) -> str:
        return cls.next_number(
            getattr(settings, "INVENTORY_TRANSACTION_PREFIX", "TRX"),
            INVENTORY_TRANSACTION_SEQUENCE,
        )
