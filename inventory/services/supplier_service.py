from typing import Dict, Any

from django.db import transaction
from django.db.models import Q, Sum, Count

from inventory.models import Supplier, PurchaseOrder
from inventory.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, BusinessRuleError, to_decimal, round_decimal
)


class SupplierService(BaseService):
    model = Supplier

    UPDATABLE_FIELDS = (
        "name", "contact_person", "email", "phone", "address",
        "payment_terms", "is_active", "notes",
    )

    @classmethod
    def serialize(cls, supplier: Supplier, include_stats: bool = False) -> Dict[str, Any]:
        data = {
            "id": supplier.id,
            "uuid": str(supplier.uuid),
            "code": supplier.code,
            "name": supplier.name,
            "contact_person": supplier.contact_person,
            "email": supplier.email,
            "phone": supplier.phone,
            "address": supplier.address,
            "payment_terms": supplier.payment_terms,
            "is_active": supplier.is_active,
            "notes": supplier.notes,
            "created_at": supplier.created_at.isoformat(),
        }

        if include_stats:
            po_stats = PurchaseOrder.objects.filter(supplier=supplier).aggregate(
                total_orders=Count("id"),
                total_value=Sum("total_amount"),
            )
            data["stats"] = {
                "total_orders": po_stats["total_orders"] or 0,
                "total_value": str(round_decimal(to_decimal(po_stats["total_value"]), 2)),
            }

        return data

    @classmethod
    def serialize_brief(cls, supplier: Supplier) -> Dict[str, Any]:
        return {
            "id": supplier.id,
            "code": supplier.code,
            "name": supplier.name,
            "contact_person": supplier.contact_person,
            "email": supplier.email,
            "phone": supplier.phone,
        }

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 20,
             search: str = None,
             active_only: bool = True) -> Dict[str, Any]:
        queryset = cls.model.objects.all()

        if active_only:
            queryset = queryset.filter(is_active=True)

        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(code__icontains=search) |
                Q(contact_person__icontains=search) |
                Q(email__icontains=search)
            )

        suppliers, pagination = paginate_queryset(queryset.order_by("name"), page, per_page)

        return success_response({
            "suppliers": [cls.serialize(s) for s in suppliers],
            "pagination": pagination
        })

    @classmethod
    def get(cls, supplier_id: int) -> Dict[str, Any]:
        supplier = cls.get_or_404(supplier_id)
        return success_response({"supplier": cls.serialize(supplier, include_stats=True)})

    @classmethod
    def get_active_or_error(cls, supplier_id: int) -> Supplier:
        supplier = cls.get_by_id(supplier_id)
        if not supplier:
            raise NotFoundError("Supplier", supplier_id)
        if not supplier.is_active:
            raise BusinessRuleError(
                f"Supplier '{supplier.name}' is inactive", "supplier_active"
            )
        return supplier

    @classmethod
    def create(cls,
               code: str,
               name: str,
               contact_person: str = "",
               email: str = "",
               phone: str = "",
               address: str = "",
               payment_terms: str = "",
               is_active: bool = True,
               notes: str = "") -> Dict[str, Any]:
        if cls.model.objects.filter(code=code).exists():
            raise ValidationError(f"Supplier code '{code}' already exists", "code")

        supplier = cls.model.objects.create(
            code=code,
            name=name,
            contact_person=contact_person,
            email=email,
            phone=phone,
            address=address,
            payment_terms=payment_terms,
            is_active=is_active,
            notes=notes,
        )

        return success_response({
            "id": supplier.id,
            "supplier": cls.serialize(supplier)
        }, f"Supplier '{name}' created")

    @classmethod
    @transaction.atomic
    def update(cls, supplier_id: int, **kwargs) -> Dict[str, Any]:
        supplier = cls.get_or_404(supplier_id)

        for field in cls.UPDATABLE_FIELDS:
            if field in kwargs:
                setattr(supplier, field, kwargs[field])

        supplier.save()

        return success_response({
            "supplier": cls.serialize(supplier)
        }, "Supplier updated")
