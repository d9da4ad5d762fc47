from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from inventory.models import Supplier, InventoryLocation, InventoryItem, PurchaseOrder
from inventory.services import PurchaseOrderService


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(
        username="nurse.manager", password="secret", first_name="Dana", last_name="Reyes"
    )


@pytest.fixture
def approver(db):
    return get_user_model().objects.create_user(username="supply.director", password="secret")


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(code="MEDLINE", name="Medline Industries")


@pytest.fixture
def inactive_supplier(db):
    return Supplier.objects.create(code="OLDCO", name="Old Medical Co", is_active=False)


@pytest.fixture
def location(db):
    return InventoryLocation.objects.create(code="CW", name="Central Warehouse")


@pytest.fixture
def pharmacy(db):
    return InventoryLocation.objects.create(
        code="PHARM", name="Main Pharmacy",
        location_type=InventoryLocation.LocationType.PHARMACY,
    )


@pytest.fixture
def item(db):
    return InventoryItem.objects.create(
        sku="GLV-NIT-M", name="Nitrile gloves, medium", unit_of_measure="BX",
        unit_cost=Decimal("4.0000"), average_cost=Decimal("4.0000"), last_cost=Decimal("4.0000"),
    )


@pytest.fixture
def second_item(db):
    return InventoryItem.objects.create(
        sku="SYR-10ML", name="Syringe 10 ml", average_cost=Decimal("0.3000"),
    )


@pytest.fixture
def make_order(user, supplier, item, location):
    def _make(lines=None, submit=False, **kwargs):
        kwargs.setdefault("delivery_location_id", location.id)
        result = PurchaseOrderService.create(
            supplier_id=supplier.id,
            requested_by_id=user.id,
            items=lines or [
                {"item_id": item.id, "quantity_ordered": 10, "unit_cost": Decimal("5.00")}
            ],
            submit_for_approval=submit,
            **kwargs
        )
        return PurchaseOrder.objects.get(id=result["id"])
    return _make


@pytest.fixture
def release(approver):
    """Move a pending order through approval and dispatch."""
    def _release(po):
        PurchaseOrderService.approve(po.id, approved_by_id=approver.id)
        PurchaseOrderService.send(po.id)
        po.refresh_from_db()
        return po
    return _release


@pytest.fixture
def sent_order(make_order, release):
    return release(make_order(submit=True))
