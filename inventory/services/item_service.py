import logging
from typing import Dict, Any
from decimal import Decimal

from django.db.models import Q, Sum

from inventory.models import InventoryItem, InventoryStock, InventorySettings
from inventory.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, to_decimal, round_decimal
)
from inventory.services.settings_service import InventorySettingsService

logger = logging.getLogger(__name__)


class InventoryItemService(BaseService):
    model = InventoryItem

    @classmethod
    def serialize(cls, item: InventoryItem, include_stock: bool = False) -> Dict[str, Any]:
        data = {
            "id": item.id,
            "uuid": str(item.uuid),
            "sku": item.sku,
            "name": item.name,
            "description": item.description,
            "category": item.category,
            "category_display": item.get_category_display(),
            "unit_of_measure": item.unit_of_measure,
            "reorder_point": item.reorder_point,
            "unit_cost": str(item.unit_cost),
            "average_cost": str(item.average_cost),
            "last_cost": str(item.last_cost),
            "is_lot_tracked": item.is_lot_tracked,
            "is_serialized": item.is_serialized,
            "is_expirable": item.is_expirable,
            "is_active": item.is_active,
        }

        if include_stock:
            from inventory.services.level_service import InventoryStockService

            rows = item.stock.select_related("location").order_by("location__name", "lot_number")
            data["stock"] = [InventoryStockService.serialize(row) for row in rows]
            data["current_stock"] = cls.get_on_hand(item.id)

        return data

    @classmethod
    def serialize_brief(cls, item: InventoryItem) -> Dict[str, Any]:
        return {
            "id": item.id,
            "sku": item.sku,
            "name": item.name,
            "unit_of_measure": item.unit_of_measure,
        }

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             search: str = None,
             category: str = None,
             active_only: bool = True) -> Dict[str, Any]:
        queryset = cls.model.objects.all()

        if active_only:
            queryset = queryset.filter(is_active=True)

        if category:
            queryset = queryset.filter(category=category)

        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(sku__icontains=search) |
                Q(description__icontains=search)
            )

        items, pagination = paginate_queryset(queryset.order_by("name"), page, per_page)

        return success_response({
            "items": [cls.serialize(i) for i in items],
            "pagination": pagination,
            "categories": [{"value": c[0], "label": c[1]} for c in InventoryItem.Category.choices],
        })

    @classmethod
    def get(cls, item_id: int) -> Dict[str, Any]:
        item = cls.get_or_404(item_id)
        return success_response({"item": cls.serialize(item, include_stock=True)})

    @classmethod
    def create(cls,
               sku: str,
               name: str,
               description: str = "",
               category: str = InventoryItem.Category.GENERAL,
               unit_of_measure: str = "EA",
               reorder_point: int = 0,
               unit_cost: Decimal = Decimal("0"),
               is_lot_tracked: bool = False,
               is_serialized: bool = False,
               is_expirable: bool = False,
               is_active: bool = True) -> Dict[str, Any]:
        if cls.model.objects.filter(sku=sku).exists():
            raise ValidationError(f"SKU '{sku}' already exists", "sku")

        if category not in InventoryItem.Category.values:
            raise ValidationError(f"Unknown category '{category}'", "category")

        unit_cost = to_decimal(unit_cost)
        if unit_cost < 0:
            raise ValidationError("Unit cost cannot be negative", "unit_cost")

        item = cls.model.objects.create(
            sku=sku,
            name=name,
            description=description,
            category=category,
            unit_of_measure=unit_of_measure,
            reorder_point=reorder_point,
            unit_cost=unit_cost,
            average_cost=unit_cost,
            last_cost=unit_cost,
            is_lot_tracked=is_lot_tracked,
            is_serialized=is_serialized,
            is_expirable=is_expirable,
            is_active=is_active,
        )

        return success_response({
            "id": item.id,
            "item": cls.serialize(item)
        }, f"Item '{name}' created")

    @classmethod
    def get_on_hand(cls, item_id: int) -> int:
        return InventoryStock.objects.filter(item_id=item_id).aggregate(
            total=Sum("quantity_on_hand")
        )["total"] or 0

    @classmethod
    def update_cost(cls,
                    item: InventoryItem,
                    unit_cost: Decimal,
                    quantity: int,
                    on_hand_before: int,
                    method: str = None) -> InventoryItem:
        """
        Fold a received unit cost into the item's running average.

        TWO_POINT averages the current average with the new cost, ignoring
        quantities. WEIGHTED blends by the on-hand quantity before the receipt.
        last_cost always becomes the new cost.
        """
        if item is None:
            raise NotFoundError("Inventory item", None)

        unit_cost = to_decimal(unit_cost)
        method = method or InventorySettingsService.costing_method()
        current = to_decimal(item.average_cost)

        if method == InventorySettings.CostingMethod.WEIGHTED:
            if on_hand_before > 0 and on_hand_before + quantity > 0:
                new_avg = (
                    (current * on_hand_before) + (unit_cost * quantity)
                ) / (on_hand_before + quantity)
            else:
                new_avg = unit_cost
        else:
            new_avg = (current + unit_cost) / 2

        item.average_cost = round_decimal(new_avg, 4)
        item.last_cost = unit_cost
        item.save(update_fields=["average_cost", "last_cost", "updated_at"])

        logger.debug(
            "Cost updated for %s (%s): average=%s last=%s",
            item.sku, method, item.average_cost, item.last_cost,
        )
        return item
