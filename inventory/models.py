import uuid as uuid_lib

from django.conf import settings
from django.db import models
from django.utils import timezone


class Supplier(models.Model):
    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=200)
    contact_person = models.CharField(max_length=100, blank=True, default="")
    email = models.EmailField(blank=True, default="")
    phone = models.CharField(max_length=50, blank=True, default="")
    address = models.TextField(blank=True, default="")
    payment_terms = models.CharField(max_length=100, blank=True, default="")
    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.code} - {self.name}"


class InventoryLocation(models.Model):
    class LocationType(models.TextChoices):
        WAREHOUSE = "WAREHOUSE", "Warehouse"
        PHARMACY = "PHARMACY", "Pharmacy"
        WARD = "WARD", "Ward"
        OPERATING_ROOM = "OPERATING_ROOM", "Operating Room"
        LABORATORY = "LABORATORY", "Laboratory"
        OTHER = "OTHER", "Other"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=100)
    location_type = models.CharField(
        max_length=20, choices=LocationType.choices, default=LocationType.WAREHOUSE
    )
    parent_location = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
    )
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.get_location_type_display()})"


class InventoryItem(models.Model):
    class Category(models.TextChoices):
        MEDICAL_SUPPLIES = "MEDICAL_SUPPLIES", "Medical Supplies"
        PHARMACEUTICALS = "PHARMACEUTICALS", "Pharmaceuticals"
        LABORATORY_SUPPLIES = "LABORATORY_SUPPLIES", "Laboratory Supplies"
        SURGICAL_SUPPLIES = "SURGICAL_SUPPLIES", "Surgical Supplies"
        DURABLE_MEDICAL_EQUIPMENT = "DURABLE_MEDICAL_EQUIPMENT", "Durable Medical Equipment"
        OFFICE_SUPPLIES = "OFFICE_SUPPLIES", "Office Supplies"
        LINEN = "LINEN", "Linen"
        NUTRITION = "NUTRITION", "Nutrition"
        RADIOLOGY_SUPPLIES = "RADIOLOGY_SUPPLIES", "Radiology Supplies"
        GENERAL = "GENERAL", "General"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    sku = models.CharField(max_length=50, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    category = models.CharField(
        max_length=40, choices=Category.choices, default=Category.GENERAL
    )
    unit_of_measure = models.CharField(max_length=20, default="EA")
    reorder_point = models.PositiveIntegerField(default=0)

    # Cost tracking
    unit_cost = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    average_cost = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    last_cost = models.DecimalField(max_digits=15, decimal_places=4, default=0)

    # Flags
    is_lot_tracked = models.BooleanField(default=False)
    is_serialized = models.BooleanField(default=False)
    is_expirable = models.BooleanField(default=False)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.sku} - {self.name}"


class PurchaseOrder(models.Model):
    class Status(models.TextChoices):
        DRAFT = "DRAFT", "Draft"
        PENDING_APPROVAL = "PENDING_APPROVAL", "Pending Approval"
        APPROVED = "APPROVED", "Approved"
        SENT_TO_SUPPLIER = "SENT_TO_SUPPLIER", "Sent to Supplier"
        PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED", "Partially Received"
        RECEIVED = "RECEIVED", "Received"
        CANCELLED = "CANCELLED", "Cancelled"
        CLOSED = "CLOSED", "Closed"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    order_number = models.CharField(max_length=50, unique=True)
    supplier = models.ForeignKey(
        Supplier, on_delete=models.PROTECT, related_name="purchase_orders"
    )
    delivery_location = models.ForeignKey(
        InventoryLocation,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchase_orders",
    )
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.DRAFT, db_index=True
    )
    order_date = models.DateField(default=timezone.localdate)
    expected_delivery_date = models.DateField(null=True, blank=True)
    received_date = models.DateTimeField(null=True, blank=True)

    subtotal = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    total_amount = models.DecimalField(max_digits=15, decimal_places=4, default=0)

    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="requested_purchase_orders",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="approved_purchase_orders",
    )
    approved_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, default="")
    terms = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-order_date", "-created_at"]

    def __str__(self):
        return self.order_number


class PurchaseOrderItem(models.Model):
    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    purchase_order = models.ForeignKey(
        PurchaseOrder, on_delete=models.CASCADE, related_name="items"
    )
    item = models.ForeignKey(
        InventoryItem, on_delete=models.PROTECT, related_name="purchase_order_items"
    )
    quantity_ordered = models.PositiveIntegerField()
    unit_cost = models.DecimalField(max_digits=15, decimal_places=4)
    total_cost = models.DecimalField(max_digits=15, decimal_places=4)
    quantity_received = models.PositiveIntegerField(default=0)
    quantity_backordered = models.PositiveIntegerField(default=0)
    is_received = models.BooleanField(default=False)
    expected_delivery_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.item.name} × {self.quantity_ordered}"


class InventoryStock(models.Model):
    """
    On-hand balance per (item, location, lot, serial).

    Lot and serial numbers that are absent are stored as "" so that two
    unlotted receipts land on the same row and the unique constraint covers
    the whole key.
    """

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    item = models.ForeignKey(
        InventoryItem, on_delete=models.CASCADE, related_name="stock"
    )
    location = models.ForeignKey(
        InventoryLocation, on_delete=models.PROTECT, related_name="stock"
    )
    lot_number = models.CharField(max_length=100, blank=True, default="")
    serial_number = models.CharField(max_length=100, blank=True, default="")
    quantity_on_hand = models.IntegerField(default=0)
    quantity_reserved = models.IntegerField(default=0)
    quantity_available = models.IntegerField(default=0)
    unit_cost = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    expiration_date = models.DateField(null=True, blank=True, db_index=True)
    received_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "inventory stock"
        constraints = [
            models.UniqueConstraint(
                fields=["item", "location", "lot_number", "serial_number"],
                name="unique_stock_key",
            ),
        ]

    def __str__(self):
        return f"{self.item.name} @ {self.location.name}: {self.quantity_on_hand}"


class ImmutableRecordError(Exception):
    pass


class InventoryTransaction(models.Model):
    """
    Append-only ledger row. Saved rows are never updated or deleted.
    """

    class TransactionType(models.TextChoices):
        RECEIPT = "RECEIPT", "Receipt"
        ISSUE = "ISSUE", "Issue"
        RETURN = "RETURN", "Return"
        ADJUSTMENT = "ADJUSTMENT", "Adjustment"
        TRANSFER_IN = "TRANSFER_IN", "Transfer In"
        TRANSFER_OUT = "TRANSFER_OUT", "Transfer Out"
        WASTE = "WASTE", "Waste"
        EXPIRED = "EXPIRED", "Expired"
        RECALLED = "RECALLED", "Recalled"
        COUNT = "COUNT", "Count"

    uuid = models.UUIDField(default=uuid_lib.uuid4, unique=True, editable=False)
    transaction_number = models.CharField(max_length=50, unique=True)
    transaction_type = models.CharField(
        max_length=20, choices=TransactionType.choices, db_index=True
    )
    item = models.ForeignKey(
        InventoryItem, on_delete=models.PROTECT, related_name="transactions"
    )
    location = models.ForeignKey(
        InventoryLocation, on_delete=models.PROTECT, related_name="transactions"
    )
    stock = models.ForeignKey(
        InventoryStock,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transactions",
    )
    quantity = models.IntegerField()
    unit_cost = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    total_cost = models.DecimalField(max_digits=15, decimal_places=4, default=0)
    lot_number = models.CharField(max_length=100, blank=True, default="")
    serial_number = models.CharField(max_length=100, blank=True, default="")
    expiration_date = models.DateField(null=True, blank=True)

    # Reference to source document
    reference_type = models.CharField(max_length=20, blank=True, default="")
    reference_id = models.PositiveIntegerField(null=True, blank=True)
    reference_number = models.CharField(max_length=50, blank=True, default="")

    performed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="inventory_transactions",
    )
    notes = models.TextField(blank=True, default="")
    transaction_date = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ["-transaction_date", "-id"]
        indexes = [
            models.Index(fields=["item", "transaction_date"], name="inventory_txn_item_date_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="inventory_txn_reference_idx"),
        ]

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise ImmutableRecordError(
                f"Inventory transaction {self.transaction_number} cannot be modified"
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError(
            f"Inventory transaction {self.transaction_number} cannot be deleted"
        )

    def __str__(self):
        return f"{self.transaction_number} | {self.get_transaction_type_display()}"


class DocumentSequence(models.Model):
    """Named counter row. Incremented under a row lock."""

    name = models.CharField(max_length=50, unique=True)
    current_value = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name}: {self.current_value}"


class InventorySettings(models.Model):
    """
    Singleton settings table. Use InventorySettings.load() to get the instance.
    """

    class CostingMethod(models.TextChoices):
        TWO_POINT = "TWO_POINT", "Two-point running average"
        WEIGHTED = "WEIGHTED", "Quantity-weighted average"

    costing_method = models.CharField(
        max_length=20, choices=CostingMethod.choices, default=CostingMethod.TWO_POINT
    )
    default_receiving_location = models.ForeignKey(
        InventoryLocation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "inventory settings"
        verbose_name_plural = "inventory settings"

    def save(self, *args, **kwargs):
        # Enforce singleton: always use pk=1
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj

    def __str__(self):
        return "Inventory Settings"
