import logging
from typing import Dict, Any, Tuple
from decimal import Decimal
from datetime import date

from django.db import transaction
from django.db.models import Q, F
from django.utils import timezone

from inventory.models import (
    InventoryStock, InventoryTransaction, InventoryItem, InventoryLocation
)
from inventory.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, to_decimal, iso_or_none
)
from inventory.services.sequence_service import SequenceService

logger = logging.getLogger(__name__)


class InventoryStockService(BaseService):
    model = InventoryStock

    @classmethod
    def serialize(cls, row: InventoryStock) -> Dict[str, Any]:
        return {
            "id": row.id,
            "uuid": str(row.uuid),
            "item_id": row.item_id,
            "item": {
                "id": row.item.id,
                "sku": row.item.sku,
                "name": row.item.name,
            },
            "location_id": row.location_id,
            "location": {
                "id": row.location.id,
                "code": row.location.code,
                "name": row.location.name,
            },
            "lot_number": row.lot_number or None,
            "serial_number": row.serial_number or None,
            "quantity_on_hand": row.quantity_on_hand,
            "quantity_reserved": row.quantity_reserved,
            "quantity_available": row.quantity_available,
            "unit_cost": str(row.unit_cost),
            "expiration_date": iso_or_none(row.expiration_date),
            "received_date": iso_or_none(row.received_date),
        }

    @classmethod
    def list(cls,
             item_id: int = None,
             location_id: int = None,
             lot_number: str = None,
             in_stock_only: bool = False,
             page: int = 1,
             per_page: int = 50) -> Dict[str, Any]:
        queryset = cls.model.objects.select_related("item", "location")

        if item_id:
            queryset = queryset.filter(item_id=item_id)

        if location_id:
            queryset = queryset.filter(location_id=location_id)

        if lot_number:
            queryset = queryset.filter(lot_number=lot_number)

        if in_stock_only:
            queryset = queryset.filter(quantity_on_hand__gt=0)

        queryset = queryset.order_by("item__name", "location__name", "lot_number", "serial_number")

        rows, pagination = paginate_queryset(queryset, page, per_page)

        return success_response({
            "stock": [cls.serialize(r) for r in rows],
            "pagination": pagination,
        })

    @classmethod
    @transaction.atomic
    def apply_receipt(cls,
                      item: InventoryItem,
                      location: InventoryLocation,
                      quantity: int,
                      unit_cost: Decimal,
                      lot_number: str = None,
                      serial_number: str = None,
                      expiration_date: date = None) -> Tuple[InventoryStock, bool]:
        """
        Add received quantity to the stock row for the exact
        (item, location, lot, serial) key, creating it if missing.

        Every call adds quantity, so each receipt must be applied once.
        Returns (row, created).
        """
        if quantity <= 0:
            raise ValidationError("Receipt quantity must be positive", "quantity")

        lot_number = lot_number or ""
        serial_number = serial_number or ""
        unit_cost = to_decimal(unit_cost)

        row = cls.model.objects.select_for_update().filter(
            item=item,
            location=location,
            lot_number=lot_number,
            serial_number=serial_number,
        ).first()

        if row:
            cls.model.objects.filter(pk=row.pk).update(
                quantity_on_hand=F("quantity_on_hand") + quantity,
                quantity_available=F("quantity_available") + quantity,
                unit_cost=unit_cost,
                updated_at=timezone.now(),
            )
            row.refresh_from_db()
            return row, False

        row = cls.model.objects.create(
            item=item,
            location=location,
            lot_number=lot_number,
            serial_number=serial_number,
            quantity_on_hand=quantity,
            quantity_reserved=0,
            quantity_available=quantity,
            unit_cost=unit_cost,
            expiration_date=expiration_date,
            received_date=timezone.now(),
        )
        return row, True


class InventoryTransactionService(BaseService):
    model = InventoryTransaction

    @classmethod
    def serialize(cls, txn: InventoryTransaction) -> Dict[str, Any]:
        return {
            "id": txn.id,
            "uuid": str(txn.uuid),
            "transaction_number": txn.transaction_number,
            "transaction_type": txn.transaction_type,
            "transaction_type_display": txn.get_transaction_type_display(),
            "item_id": txn.item_id,
            "item_name": txn.item.name,
            "item_sku": txn.item.sku,
            "location_id": txn.location_id,
            "location_name": txn.location.name,
            "stock_id": txn.stock_id,
            "quantity": txn.quantity,
            "unit_cost": str(txn.unit_cost),
            "total_cost": str(txn.total_cost),
            "lot_number": txn.lot_number or None,
            "serial_number": txn.serial_number or None,
            "expiration_date": iso_or_none(txn.expiration_date),
            "reference_type": txn.reference_type,
            "reference_id": txn.reference_id,
            "reference_number": txn.reference_number,
            "performed_by_id": txn.performed_by_id,
            "notes": txn.notes,
            "transaction_date": txn.transaction_date.isoformat(),
        }

    @classmethod
    def list(cls,
             item_id: int = None,
             location_id: int = None,
             transaction_type: str = None,
             reference_type: str = None,
             reference_id: int = None,
             date_from: date = None,
             date_to: date = None,
             search: str = None,
             page: int = 1,
             per_page: int = 50) -> Dict[str, Any]:
        queryset = cls.model.objects.select_related("item", "location")

        if item_id:
            queryset = queryset.filter(item_id=item_id)

        if location_id:
            queryset = queryset.filter(location_id=location_id)

        if transaction_type:
            queryset = queryset.filter(transaction_type=transaction_type)

        if reference_type:
            queryset = queryset.filter(reference_type=reference_type)

        if reference_id:
            queryset = queryset.filter(reference_id=reference_id)

        if date_from:
            queryset = queryset.filter(transaction_date__date__gte=date_from)

        if date_to:
            queryset = queryset.filter(transaction_date__date__lte=date_to)

        if search:
            queryset = queryset.filter(
                Q(transaction_number__icontains=search) |
                Q(reference_number__icontains=search) |
                Q(item__name__icontains=search) |
                Q(item__sku__icontains=search) |
                Q(lot_number__icontains=search)
            )

        queryset = queryset.order_by("-transaction_date", "-id")

        transactions, pagination = paginate_queryset(queryset, page, per_page)

        return success_response({
            "transactions": [cls.serialize(t) for t in transactions],
            "pagination": pagination,
            "transaction_types": [
                {"value": c[0], "label": c[1]}
                for c in InventoryTransaction.TransactionType.choices
            ]
        })

    @classmethod
    def get_by_reference(cls, reference_type: str, reference_id: int) -> Dict[str, Any]:
        transactions = cls.model.objects.filter(
            reference_type=reference_type,
            reference_id=reference_id
        ).select_related("item", "location").order_by("transaction_date", "id")

        return success_response({
            "transactions": [cls.serialize(t) for t in transactions],
            "count": transactions.count()
        })

    @classmethod
    @transaction.atomic
    def record_receipt(cls,
                       item: InventoryItem,
                       location: InventoryLocation,
                       quantity: int,
                       unit_cost: Decimal,
                       performed_by_id: int,
                       stock: InventoryStock = None,
                       lot_number: str = None,
                       serial_number: str = None,
                       expiration_date: date = None,
                       reference_type: str = "",
                       reference_id: int = None,
                       reference_number: str = "",
                       notes: str = "") -> InventoryTransaction:
        unit_cost = to_decimal(unit_cost)

        txn = cls.model.objects.create(
            transaction_number=SequenceService.next_transaction_number(),
            transaction_type=InventoryTransaction.TransactionType.RECEIPT,
            item=item,
            location=location,
            stock=stock,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=unit_cost * quantity,
            lot_number=lot_number or "",
            serial_number=serial_number or "",
            expiration_date=expiration_date,
            reference_type=reference_type,
            reference_id=reference_id,
            reference_number=reference_number,
            performed_by_id=performed_by_id,
            notes=notes or "",
        )

        logger.info(
            "Receipt %s: %s x %s at %s (%s %s)",
            txn.transaction_number, quantity, item.sku, location.code,
            reference_type, reference_number,
        )
        return txn
