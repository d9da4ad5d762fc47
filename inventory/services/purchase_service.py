import logging
from typing import Dict, Any, Optional, List
from decimal import Decimal
from datetime import date

from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import Q, Sum, Count
from django.utils import timezone

from inventory.models import (
    PurchaseOrder, PurchaseOrderItem, InventoryItem, InventoryStock,
    InventoryLocation
)
from inventory.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError,
    to_decimal, round_decimal, iso_or_none
)
from inventory.services.lifecycle_service import OrderLifecycle
from inventory.services.sequence_service import SequenceService
from inventory.services.settings_service import InventorySettingsService
from inventory.services.supplier_service import SupplierService
from inventory.services.location_service import InventoryLocationService
from inventory.services.item_service import InventoryItemService
from inventory.services.level_service import InventoryStockService, InventoryTransactionService

logger = logging.getLogger(__name__)

Status = PurchaseOrder.Status

PO_REFERENCE_TYPE = "PO"
HEADER_FIELDS = ("expected_delivery_date", "notes", "terms")


def _user_brief(user) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.get_username(),
        "name": user.get_full_name() or user.get_username(),
    }


def _get_user_or_error(user_id: int, field: str):
    if user_id is None:
        raise ValidationError("User is required", field)
    User = get_user_model()
    try:
        return User.objects.get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFoundError("User", user_id)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _stock_by_item(item_ids) -> Dict[int, int]:
    rows = InventoryStock.objects.filter(item_id__in=item_ids).values("item_id").annotate(
        total=Sum("quantity_on_hand")
    )
    return {row["item_id"]: row["total"] or 0 for row in rows}


class PurchaseOrderItemService(BaseService):
    model = PurchaseOrderItem

    @classmethod
    def serialize(cls, poi: PurchaseOrderItem, current_stock: int = None) -> Dict[str, Any]:
        data = {
            "id": poi.id,
            "uuid": str(poi.uuid),
            "item_id": poi.item_id,
            "item": InventoryItemService.serialize_brief(poi.item),
            "quantity_ordered": poi.quantity_ordered,
            "quantity_received": poi.quantity_received,
            "quantity_backordered": poi.quantity_backordered,
            "unit_cost": str(poi.unit_cost),
            "total_cost": str(poi.total_cost),
            "is_received": poi.is_received,
            "expected_delivery_date": iso_or_none(poi.expected_delivery_date),
            "notes": poi.notes,
        }
        if current_stock is not None:
            data["current_stock"] = current_stock
        return data


class PurchaseOrderService(BaseService):
    model = PurchaseOrder

    @classmethod
    def serialize(cls, po: PurchaseOrder, include_items: bool = True) -> Dict[str, Any]:
        location = po.delivery_location
        data = {
            "id": po.id,
            "uuid": str(po.uuid),
            "order_number": po.order_number,

            "supplier_id": po.supplier_id,
            "supplier": SupplierService.serialize_brief(po.supplier),

            "delivery_location_id": po.delivery_location_id,
            "delivery_location": {
                "id": location.id,
                "code": location.code,
                "name": location.name,
            } if location else None,

            "status": po.status,
            "status_display": po.get_status_display(),
            "allowed_actions": OrderLifecycle.allowed_actions(po.status),

            "order_date": po.order_date.isoformat(),
            "expected_delivery_date": iso_or_none(po.expected_delivery_date),
            "received_date": iso_or_none(po.received_date),

            "subtotal": str(po.subtotal),
            "total_amount": str(po.total_amount),

            "requested_by_id": po.requested_by_id,
            "requested_by": _user_brief(po.requested_by),
            "approved_by_id": po.approved_by_id,
            "approved_by": _user_brief(po.approved_by),
            "approved_at": iso_or_none(po.approved_at),

            "notes": po.notes,
            "terms": po.terms,
            "created_at": po.created_at.isoformat(),
            "updated_at": po.updated_at.isoformat(),
        }

        if include_items:
            items = list(po.items.select_related("item"))
            stock = _stock_by_item([i.item_id for i in items])
            data["items"] = [
                PurchaseOrderItemService.serialize(i, current_stock=stock.get(i.item_id, 0))
                for i in items
            ]
            data["item_count"] = len(items)

        return data

    @classmethod
    def serialize_brief(cls, po: PurchaseOrder) -> Dict[str, Any]:
        return {
            "id": po.id,
            "order_number": po.order_number,
            "supplier_id": po.supplier_id,
            "supplier_name": po.supplier.name,
            "status": po.status,
            "status_display": po.get_status_display(),
            "order_date": po.order_date.isoformat(),
            "expected_delivery_date": iso_or_none(po.expected_delivery_date),
            "total_amount": str(po.total_amount),
            "summary": {
                "total_items": getattr(po, "total_items", 0) or 0,
                "total_ordered": getattr(po, "total_ordered", 0) or 0,
                "total_received": getattr(po, "total_received", 0) or 0,
            },
        }

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             search: str = None,
             supplier_id: int = None,
             status: str = None,
             date_from: date = None,
             date_to: date = None) -> Dict[str, Any]:
        queryset = cls.model.objects.select_related("supplier").annotate(
            total_items=Count("items", distinct=True),
            total_ordered=Sum("items__quantity_ordered"),
            total_received=Sum("items__quantity_received"),
        )

        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search) |
                Q(supplier__name__icontains=search) |
                Q(notes__icontains=search)
            )

        if supplier_id:
            queryset = queryset.filter(supplier_id=supplier_id)

        if status:
            queryset = queryset.filter(status=status)

        if date_from:
            queryset = queryset.filter(order_date__gte=date_from)

        if date_to:
            queryset = queryset.filter(order_date__lte=date_to)

        queryset = queryset.order_by("-order_date", "-created_at")

        orders, pagination = paginate_queryset(queryset, page, per_page)

        return success_response({
            "orders": [cls.serialize_brief(po) for po in orders],
            "pagination": pagination,
            "statuses": [{"value": c[0], "label": c[1]} for c in Status.choices],
        })

    @classmethod
    def get(cls, po_id: int) -> Dict[str, Any]:
        po = cls.model.objects.select_related(
            "supplier", "delivery_location", "requested_by", "approved_by"
        ).filter(id=po_id).first()

        if not po:
            raise NotFoundError("Purchase order", po_id)

        return success_response({"order": cls.serialize(po)})

    @classmethod
    def get_stats(cls, date_from: date = None, date_to: date = None) -> Dict[str, Any]:
        queryset = cls.model.objects.all()

        if date_from:
            queryset = queryset.filter(order_date__gte=date_from)

        if date_to:
            queryset = queryset.filter(order_date__lte=date_to)

        totals = queryset.aggregate(total=Count("id"), value=Sum("total_amount"))

        by_status = [
            {
                "status": row["status"],
                "count": row["count"],
                "value": str(round_decimal(row["value"] or Decimal("0"), 2)),
            }
            for row in queryset.values("status").annotate(
                count=Count("id"), value=Sum("total_amount")
            ).order_by("status")
        ]

        return success_response({
            "stats": {
                "total_orders": totals["total"] or 0,
                "total_value": str(round_decimal(totals["value"] or Decimal("0"), 2)),
                "by_status": by_status,
                "pending_approval": queryset.filter(status=Status.PENDING_APPROVAL).count(),
                "pending_receipt": queryset.filter(status__in=[
                    Status.APPROVED, Status.SENT_TO_SUPPLIER, Status.PARTIALLY_RECEIVED,
                ]).count(),
            }
        })

    @classmethod
    def _clean_lines(cls, items: List[Dict]) -> List[Dict]:
        if not items:
            raise ValidationError("At least one item is required", "items")

        errors = []
        lines = []
        for index, line in enumerate(items):
            prefix = f"items[{index}]"
            quantity = line.get("quantity_ordered")
            unit_cost = to_decimal(line.get("unit_cost"), default=None)

            if not _is_int(quantity) or quantity < 1:
                errors.append({
                    "field": f"{prefix}.quantity_ordered",
                    "message": "Quantity must be a whole number of at least 1",
                })
            if unit_cost is None or unit_cost < 0:
                errors.append({
                    "field": f"{prefix}.unit_cost",
                    "message": "Unit cost must be zero or greater",
                })
            if not line.get("item_id"):
                errors.append({"field": f"{prefix}.item_id", "message": "Item is required"})

            lines.append({**line, "unit_cost": unit_cost})

        if errors:
            raise ValidationError("Invalid purchase order items", errors=errors)

        item_ids = {line["item_id"] for line in lines}
        found = InventoryItem.objects.in_bulk(item_ids)
        for item_id in item_ids:
            if item_id not in found:
                raise NotFoundError("Inventory item", item_id)

        for line in lines:
            line["item"] = found[line["item_id"]]
        return lines

    @classmethod
    def create(cls,
               supplier_id: int,
               requested_by_id: int,
               items: List[Dict] = None,
               delivery_location_id: int = None,
               order_date: date = None,
               expected_delivery_date: date = None,
               notes: str = "",
               terms: str = "",
               submit_for_approval: bool = False) -> Dict[str, Any]:
        supplier = SupplierService.get_active_or_error(supplier_id)
        requester = _get_user_or_error(requested_by_id, "requested_by_id")
        location = None
        if delivery_location_id:
            location = InventoryLocationService.get_active_or_error(delivery_location_id)
        lines = cls._clean_lines(items)

        for line in lines:
            line["total_cost"] = round_decimal(line["unit_cost"] * line["quantity_ordered"])
        subtotal = sum((line["total_cost"] for line in lines), Decimal("0"))

        with transaction.atomic():
            po = cls.model.objects.create(
                order_number=SequenceService.next_order_number(),
                supplier=supplier,
                delivery_location=location,
                status=Status.PENDING_APPROVAL if submit_for_approval else Status.DRAFT,
                order_date=order_date or timezone.localdate(),
                expected_delivery_date=expected_delivery_date,
                subtotal=subtotal,
                total_amount=subtotal,
                requested_by=requester,
                notes=notes or "",
                terms=terms or "",
            )

            PurchaseOrderItem.objects.bulk_create([
                PurchaseOrderItem(
                    purchase_order=po,
                    item=line["item"],
                    quantity_ordered=line["quantity_ordered"],
                    unit_cost=line["unit_cost"],
                    total_cost=line["total_cost"],
                    quantity_received=0,
                    quantity_backordered=line["quantity_ordered"],
                    expected_delivery_date=line.get("expected_delivery_date"),
                    notes=line.get("notes") or "",
                )
                for line in lines
            ])

        logger.info(
            "Purchase order %s created for supplier %s (%s lines, total %s)",
            po.order_number, supplier.code, len(lines), po.total_amount,
        )

        return success_response({
            "id": po.id,
            "order_number": po.order_number,
            "order": cls.serialize(po)
        }, f"Purchase order {po.order_number} created")

    @classmethod
    def _lock(cls, po_id: int) -> PurchaseOrder:
        po = cls.model.objects.select_for_update().filter(id=po_id).first()
        if not po:
            raise NotFoundError("Purchase order", po_id)
        return po

    @classmethod
    def update(cls, po_id: int, **kwargs) -> Dict[str, Any]:
        if not cls.exists(po_id):
            raise NotFoundError("Purchase order", po_id)

        supplier = None
        if kwargs.get("supplier_id") is not None:
            supplier = SupplierService.get_active_or_error(kwargs["supplier_id"])

        location = None
        if kwargs.get("delivery_location_id") is not None:
            location = InventoryLocationService.get_active_or_error(kwargs["delivery_location_id"])

        with transaction.atomic():
            po = cls._lock(po_id)
            OrderLifecycle.ensure_can(po, OrderLifecycle.UPDATE)

            update_fields = ["updated_at"]

            if supplier:
                po.supplier = supplier
                update_fields.append("supplier")

            if "delivery_location_id" in kwargs:
                po.delivery_location = location
                update_fields.append("delivery_location")

            for field in HEADER_FIELDS:
                if field in kwargs:
                    value = kwargs[field]
                    if field != "expected_delivery_date":
                        value = value or ""
                    setattr(po, field, value)
                    update_fields.append(field)

            po.save(update_fields=update_fields)

        return success_response({
            "order": cls.serialize(po)
        }, "Purchase order updated")

    @classmethod
    def _transition(cls, po_id: int, action: str, **changes) -> PurchaseOrder:
        with transaction.atomic():
            po = cls._lock(po_id)
            OrderLifecycle.ensure_can(po, action)

            previous = po.status
            po.status = OrderLifecycle.TARGET[action]
            for field, value in changes.items():
                setattr(po, field, value)
            po.save(update_fields=["status", "updated_at", *changes.keys()])

        logger.info("Purchase order %s: %s -> %s", po.order_number, previous, po.status)
        return po

    @classmethod
    def submit(cls, po_id: int) -> Dict[str, Any]:
        po = cls._transition(po_id, OrderLifecycle.SUBMIT)
        return success_response({
            "order": cls.serialize(po)
        }, "Purchase order submitted for approval")

    @classmethod
    def approve(cls, po_id: int, approved_by_id: int) -> Dict[str, Any]:
        approver = _get_user_or_error(approved_by_id, "approved_by_id")
        po = cls._transition(
            po_id,
            OrderLifecycle.APPROVE,
            approved_by=approver,
            approved_at=timezone.now(),
        )
        return success_response({
            "order": cls.serialize(po)
        }, "Purchase order approved")

    @classmethod
    def send(cls, po_id: int) -> Dict[str, Any]:
        po = cls._transition(po_id, OrderLifecycle.SEND)
        return success_response({
            "order": cls.serialize(po)
        }, "Purchase order sent to supplier")

    @classmethod
    def cancel(cls, po_id: int, reason: str = "") -> Dict[str, Any]:
        with transaction.atomic():
            po = cls._lock(po_id)
            OrderLifecycle.ensure_can(po, OrderLifecycle.CANCEL)

            po.status = Status.CANCELLED
            if reason:
                po.notes = f"{po.notes}\n\nCancellation reason: {reason}" if po.notes \
                    else f"Cancellation reason: {reason}"
            po.save(update_fields=["status", "notes", "updated_at"])

        logger.info("Purchase order %s cancelled", po.order_number)

        return success_response({
            "order": cls.serialize(po)
        }, "Purchase order cancelled")

    @classmethod
    def close(cls, po_id: int) -> Dict[str, Any]:
        po = cls._transition(po_id, OrderLifecycle.CLOSE)
        return success_response({
            "order": cls.serialize(po)
        }, "Purchase order closed")

    @classmethod
    def delete(cls, po_id: int) -> Dict[str, Any]:
        with transaction.atomic():
            po = cls._lock(po_id)
            OrderLifecycle.ensure_can(po, OrderLifecycle.DELETE)
            order_number = po.order_number
            po.delete()

        logger.info("Purchase order %s deleted", order_number)

        return success_response({
            "id": po_id,
            "order_number": order_number,
        }, f"Purchase order {order_number} deleted")


class PurchaseReceivingService:
    """Records goods received against a purchase order."""

    @classmethod
    def _resolve_location(cls, po: PurchaseOrder, location_id: int = None) -> InventoryLocation:
        location_id = (
            location_id
            or po.delivery_location_id
            or InventorySettingsService.default_receiving_location_id()
        )
        if not location_id:
            raise ValidationError("A receiving location is required", "location_id")
        return InventoryLocationService.get_active_or_error(location_id)

    @classmethod
    def _clean_lines(cls, po: PurchaseOrder, items: List[Dict]) -> List[Dict]:
        if not items:
            raise ValidationError("At least one receipt line is required", "items")

        errors = []
        lines = []
        for index, line in enumerate(items):
            prefix = f"items[{index}]"
            quantity = line.get("quantity_received")
            override = line.get("unit_cost")

            if not _is_int(quantity) or quantity < 0:
                errors.append({
                    "field": f"{prefix}.quantity_received",
                    "message": "Quantity received must be a whole number of zero or more",
                })
            if override is not None:
                override = to_decimal(override, default=None)
                if override is None or override < 0:
                    errors.append({
                        "field": f"{prefix}.unit_cost",
                        "message": "Unit cost must be zero or greater",
                    })
            lines.append({**line, "unit_cost": override})

        if errors:
            raise ValidationError("Invalid receipt lines", errors=errors)

        order_item_ids = set(po.items.values_list("id", flat=True))
        for line in lines:
            if line.get("purchase_order_item_id") not in order_item_ids:
                raise NotFoundError("Purchase order item", line.get("purchase_order_item_id"))

        return lines

    @classmethod
    def receive(cls,
                po_id: int,
                items: List[Dict],
                received_by_id: int,
                location_id: int = None,
                notes: str = "") -> Dict[str, Any]:
        po = PurchaseOrderService.get_by_id(po_id)
        if not po:
            raise NotFoundError("Purchase order", po_id)

        receiver = _get_user_or_error(received_by_id, "received_by_id")
        location = cls._resolve_location(po, location_id)
        lines = cls._clean_lines(po, items)
        costing_method = InventorySettingsService.costing_method()

        with transaction.atomic():
            po = PurchaseOrderService._lock(po_id)
            OrderLifecycle.ensure_can(po, OrderLifecycle.RECEIVE)

            order_items = {
                poi.id: poi
                for poi in po.items.select_for_update().order_by("id")
            }

            transactions = []
            for line in lines:
                poi = order_items[line["purchase_order_item_id"]]
                quantity = line["quantity_received"]

                poi.quantity_received += quantity
                poi.quantity_backordered = max(0, poi.quantity_ordered - poi.quantity_received)
                poi.is_received = poi.quantity_received >= poi.quantity_ordered
                poi.save(update_fields=[
                    "quantity_received", "quantity_backordered", "is_received", "updated_at"
                ])

                if quantity <= 0:
                    continue

                unit_cost = line["unit_cost"] if line["unit_cost"] is not None else poi.unit_cost
                item = InventoryItem.objects.select_for_update().get(pk=poi.item_id)
                on_hand_before = InventoryItemService.get_on_hand(item.id)

                stock, _ = InventoryStockService.apply_receipt(
                    item=item,
                    location=location,
                    quantity=quantity,
                    unit_cost=unit_cost,
                    lot_number=line.get("lot_number"),
                    serial_number=line.get("serial_number"),
                    expiration_date=line.get("expiration_date"),
                )

                transactions.append(InventoryTransactionService.record_receipt(
                    item=item,
                    location=location,
                    quantity=quantity,
                    unit_cost=unit_cost,
                    performed_by_id=receiver.id,
                    stock=stock,
                    lot_number=line.get("lot_number"),
                    serial_number=line.get("serial_number"),
                    expiration_date=line.get("expiration_date"),
                    reference_type=PO_REFERENCE_TYPE,
                    reference_id=po.id,
                    reference_number=po.order_number,
                    notes=notes,
                ))

                InventoryItemService.update_cost(
                    item, unit_cost, quantity, on_hand_before, method=costing_method
                )

            cls._update_order_status(po)

        logger.info(
            "Received %s line(s) on %s into %s; status %s",
            len(transactions), po.order_number, location.code, po.status,
        )

        return success_response({
            "order": PurchaseOrderService.serialize(po),
            "transactions": [InventoryTransactionService.serialize(t) for t in transactions],
        }, f"Items received for purchase order {po.order_number}")

    @classmethod
    def _update_order_status(cls, po: PurchaseOrder) -> PurchaseOrder:
        items = list(po.items.all())

        if items and all(i.is_received for i in items):
            po.status = Status.RECEIVED
            if not po.received_date:
                po.received_date = timezone.now()
        elif any(i.quantity_received > 0 for i in items):
            po.status = Status.PARTIALLY_RECEIVED

        po.save(update_fields=["status", "received_date", "updated_at"])
        return po
