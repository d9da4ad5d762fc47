from rest_framework import serializers

from inventory.models import (
    PurchaseOrder, InventoryItem, InventoryLocation, InventorySettings,
    InventoryTransaction
)
from inventory.services.base_service import ValidationError


def _flatten_errors(detail, prefix: str = ""):
    if isinstance(detail, dict):
        for key, value in detail.items():
            if isinstance(key, int):
                name = f"{prefix}[{key}]"
            elif not prefix:
                name = key
            else:
                name = f"{prefix}.{key}" if key != "non_field_errors" else prefix
            yield from _flatten_errors(value, name)
    elif isinstance(detail, list):
        for index, value in enumerate(detail):
            if isinstance(value, (dict, list)):
                yield from _flatten_errors(value, f"{prefix}[{index}]")
            else:
                yield {"field": prefix or None, "message": str(value)}
    else:
        yield {"field": prefix or None, "message": str(detail)}


def validate_payload(serializer_class, data, partial: bool = False) -> dict:
    """Run a serializer and raise the service ValidationError on failure."""
    serializer = serializer_class(data=data, partial=partial)
    if not serializer.is_valid():
        errors = [e for e in _flatten_errors(serializer.errors) if e["message"]]
        message = errors[0]["message"] if errors else "Invalid request"
        if errors and errors[0]["field"]:
            message = f"{errors[0]['field']}: {message}"
        raise ValidationError(message, errors=errors)
    return serializer.validated_data


# ==================== REFERENCE DATA ====================

class SupplierCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=200)
    contact_person = serializers.CharField(max_length=100, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    phone = serializers.CharField(max_length=50, required=False, allow_blank=True)
    address = serializers.CharField(required=False, allow_blank=True)
    payment_terms = serializers.CharField(max_length=100, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class SupplierUpdateSerializer(SupplierCreateSerializer):
    code = None
    name = serializers.CharField(max_length=200, required=False)


class LocationCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=100)
    location_type = serializers.ChoiceField(
        choices=InventoryLocation.LocationType.choices, required=False
    )
    parent_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False)


class ItemCreateSerializer(serializers.Serializer):
    sku = serializers.CharField(max_length=50)
    name = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    category = serializers.ChoiceField(choices=InventoryItem.Category.choices, required=False)
    unit_of_measure = serializers.CharField(max_length=20, required=False)
    reorder_point = serializers.IntegerField(min_value=0, required=False)
    unit_cost = serializers.DecimalField(
        max_digits=15, decimal_places=4, min_value=0, required=False
    )
    is_lot_tracked = serializers.BooleanField(required=False)
    is_serialized = serializers.BooleanField(required=False)
    is_expirable = serializers.BooleanField(required=False)
    is_active = serializers.BooleanField(required=False)


class SettingsUpdateSerializer(serializers.Serializer):
    costing_method = serializers.ChoiceField(
        choices=InventorySettings.CostingMethod.choices, required=False
    )
    default_receiving_location_id = serializers.IntegerField(
        min_value=1, required=False, allow_null=True
    )


# ==================== PURCHASE ORDERS ====================

class PurchaseOrderLineSerializer(serializers.Serializer):
    item_id = serializers.IntegerField(min_value=1)
    quantity_ordered = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=15, decimal_places=4, min_value=0)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class PurchaseOrderCreateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField(min_value=1)
    delivery_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    requested_by_id = serializers.IntegerField(min_value=1, required=False)
    order_date = serializers.DateField(required=False)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    terms = serializers.CharField(required=False, allow_blank=True)
    submit_for_approval = serializers.BooleanField(required=False, default=False)
    items = PurchaseOrderLineSerializer(many=True, allow_empty=False)


class PurchaseOrderUpdateSerializer(serializers.Serializer):
    supplier_id = serializers.IntegerField(min_value=1, required=False)
    delivery_location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    terms = serializers.CharField(required=False, allow_blank=True)


class ReceiptLineSerializer(serializers.Serializer):
    purchase_order_item_id = serializers.IntegerField(min_value=1)
    quantity_received = serializers.IntegerField(min_value=0)
    lot_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    serial_number = serializers.CharField(max_length=100, required=False, allow_blank=True, allow_null=True)
    expiration_date = serializers.DateField(required=False, allow_null=True)
    unit_cost = serializers.DecimalField(
        max_digits=15, decimal_places=4, min_value=0, required=False, allow_null=True
    )


class ReceivePurchaseOrderSerializer(serializers.Serializer):
    items = ReceiptLineSerializer(many=True, allow_empty=False)
    location_id = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    received_by_id = serializers.IntegerField(min_value=1, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)


class ApproveSerializer(serializers.Serializer):
    approved_by_id = serializers.IntegerField(min_value=1, required=False)


class CancelSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, max_length=1000)


# ==================== QUERY PARAMS ====================

class PaginationQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, required=False, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False, default=20)
    search = serializers.CharField(max_length=100, required=False, allow_blank=True)


class PurchaseOrderListQuerySerializer(PaginationQuerySerializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.Status.choices, required=False)
    supplier_id = serializers.IntegerField(min_value=1, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class StatsQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)


class StockQuerySerializer(PaginationQuerySerializer):
    item_id = serializers.IntegerField(min_value=1, required=False)
    location_id = serializers.IntegerField(min_value=1, required=False)
    lot_number = serializers.CharField(max_length=100, required=False)
    in_stock_only = serializers.BooleanField(required=False, default=False)


class TransactionQuerySerializer(PaginationQuerySerializer):
    item_id = serializers.IntegerField(min_value=1, required=False)
    location_id = serializers.IntegerField(min_value=1, required=False)
    transaction_type = serializers.ChoiceField(
        choices=InventoryTransaction.TransactionType.choices, required=False
    )
    reference_type = serializers.CharField(max_length=20, required=False)
    reference_id = serializers.IntegerField(min_value=1, required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
