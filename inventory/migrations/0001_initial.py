import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DocumentSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=50, unique=True)),
                ("current_value", models.PositiveBigIntegerField(default=0)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="InventoryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("sku", models.CharField(max_length=50, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("description", models.TextField(blank=True, default="")),
                ("category", models.CharField(
                    choices=[
                        ("MEDICAL_SUPPLIES", "Medical Supplies"),
                        ("PHARMACEUTICALS", "Pharmaceuticals"),
                        ("LABORATORY_SUPPLIES", "Laboratory Supplies"),
                        ("SURGICAL_SUPPLIES", "Surgical Supplies"),
                        ("DURABLE_MEDICAL_EQUIPMENT", "Durable Medical Equipment"),
                        ("OFFICE_SUPPLIES", "Office Supplies"),
                        ("LINEN", "Linen"),
                        ("NUTRITION", "Nutrition"),
                        ("RADIOLOGY_SUPPLIES", "Radiology Supplies"),
                        ("GENERAL", "General"),
                    ],
                    default="GENERAL",
                    max_length=40,
                )),
                ("unit_of_measure", models.CharField(default="EA", max_length=20)),
                ("reorder_point", models.PositiveIntegerField(default=0)),
                ("unit_cost", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("average_cost", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("last_cost", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("is_lot_tracked", models.BooleanField(default=False)),
                ("is_serialized", models.BooleanField(default=False)),
                ("is_expirable", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="InventoryLocation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=100)),
                ("location_type", models.CharField(
                    choices=[
                        ("WAREHOUSE", "Warehouse"),
                        ("PHARMACY", "Pharmacy"),
                        ("WARD", "Ward"),
                        ("OPERATING_ROOM", "Operating Room"),
                        ("LABORATORY", "Laboratory"),
                        ("OTHER", "Other"),
                    ],
                    default="WAREHOUSE",
                    max_length=20,
                )),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("parent_location", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="children",
                    to="inventory.inventorylocation",
                )),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("code", models.CharField(max_length=20, unique=True)),
                ("name", models.CharField(max_length=200)),
                ("contact_person", models.CharField(blank=True, default="", max_length=100)),
                ("email", models.EmailField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=50)),
                ("address", models.TextField(blank=True, default="")),
                ("payment_terms", models.CharField(blank=True, default="", max_length=100)),
                ("is_active", models.BooleanField(default=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="InventorySettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("costing_method", models.CharField(
                    choices=[
                        ("TWO_POINT", "Two-point running average"),
                        ("WEIGHTED", "Quantity-weighted average"),
                    ],
                    default="TWO_POINT",
                    max_length=20,
                )),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("default_receiving_location", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+",
                    to="inventory.inventorylocation",
                )),
            ],
            options={
                "verbose_name": "inventory settings",
                "verbose_name_plural": "inventory settings",
            },
        ),
        migrations.CreateModel(
            name="InventoryStock",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("lot_number", models.CharField(blank=True, default="", max_length=100)),
                ("serial_number", models.CharField(blank=True, default="", max_length=100)),
                ("quantity_on_hand", models.IntegerField(default=0)),
                ("quantity_reserved", models.IntegerField(default=0)),
                ("quantity_available", models.IntegerField(default=0)),
                ("unit_cost", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("expiration_date", models.DateField(blank=True, db_index=True, null=True)),
                ("received_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("item", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="stock",
                    to="inventory.inventoryitem",
                )),
                ("location", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="stock",
                    to="inventory.inventorylocation",
                )),
            ],
            options={
                "verbose_name_plural": "inventory stock",
            },
        ),
        migrations.AddConstraint(
            model_name="inventorystock",
            constraint=models.UniqueConstraint(
                fields=("item", "location", "lot_number", "serial_number"),
                name="unique_stock_key",
            ),
        ),
        migrations.CreateModel(
            name="PurchaseOrder",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("order_number", models.CharField(max_length=50, unique=True)),
                ("status", models.CharField(
                    choices=[
                        ("DRAFT", "Draft"),
                        ("PENDING_APPROVAL", "Pending Approval"),
                        ("APPROVED", "Approved"),
                        ("SENT_TO_SUPPLIER", "Sent to Supplier"),
                        ("PARTIALLY_RECEIVED", "Partially Received"),
                        ("RECEIVED", "Received"),
                        ("CANCELLED", "Cancelled"),
                        ("CLOSED", "Closed"),
                    ],
                    db_index=True,
                    default="DRAFT",
                    max_length=20,
                )),
                ("order_date", models.DateField(default=django.utils.timezone.localdate)),
                ("expected_delivery_date", models.DateField(blank=True, null=True)),
                ("received_date", models.DateTimeField(blank=True, null=True)),
                ("subtotal", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("total_amount", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("terms", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("approved_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="approved_purchase_orders",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("delivery_location", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="purchase_orders",
                    to="inventory.inventorylocation",
                )),
                ("requested_by", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="requested_purchase_orders",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("supplier", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="purchase_orders",
                    to="inventory.supplier",
                )),
            ],
            options={
                "ordering": ["-order_date", "-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PurchaseOrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("quantity_ordered", models.PositiveIntegerField()),
                ("unit_cost", models.DecimalField(decimal_places=4, max_digits=15)),
                ("total_cost", models.DecimalField(decimal_places=4, max_digits=15)),
                ("quantity_received", models.PositiveIntegerField(default=0)),
                ("quantity_backordered", models.PositiveIntegerField(default=0)),
                ("is_received", models.BooleanField(default=False)),
                ("expected_delivery_date", models.DateField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("item", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="purchase_order_items",
                    to="inventory.inventoryitem",
                )),
                ("purchase_order", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="items",
                    to="inventory.purchaseorder",
                )),
            ],
            options={
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="InventoryTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("transaction_number", models.CharField(max_length=50, unique=True)),
                ("transaction_type", models.CharField(
                    choices=[
                        ("RECEIPT", "Receipt"),
                        ("ISSUE", "Issue"),
                        ("RETURN", "Return"),
                        ("ADJUSTMENT", "Adjustment"),
                        ("TRANSFER_IN", "Transfer In"),
                        ("TRANSFER_OUT", "Transfer Out"),
                        ("WASTE", "Waste"),
                        ("EXPIRED", "Expired"),
                        ("RECALLED", "Recalled"),
                        ("COUNT", "Count"),
                    ],
                    db_index=True,
                    max_length=20,
                )),
                ("quantity", models.IntegerField()),
                ("unit_cost", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("total_cost", models.DecimalField(decimal_places=4, default=0, max_digits=15)),
                ("lot_number", models.CharField(blank=True, default="", max_length=100)),
                ("serial_number", models.CharField(blank=True, default="", max_length=100)),
                ("expiration_date", models.DateField(blank=True, null=True)),
                ("reference_type", models.CharField(blank=True, default="", max_length=20)),
                ("reference_id", models.PositiveIntegerField(blank=True, null=True)),
                ("reference_number", models.CharField(blank=True, default="", max_length=50)),
                ("notes", models.TextField(blank=True, default="")),
                ("transaction_date", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("item", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transactions",
                    to="inventory.inventoryitem",
                )),
                ("location", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="transactions",
                    to="inventory.inventorylocation",
                )),
                ("performed_by", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="inventory_transactions",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("stock", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="transactions",
                    to="inventory.inventorystock",
                )),
            ],
            options={
                "ordering": ["-transaction_date", "-id"],
                "indexes": [
                    models.Index(fields=["item", "transaction_date"], name="inventory_txn_item_date_idx"),
                    models.Index(fields=["reference_type", "reference_id"], name="inventory_txn_reference_idx"),
                ],
            },
        ),
    ]
