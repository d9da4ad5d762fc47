from typing import Dict, Any

from django.db.models import Q

from inventory.models import InventoryLocation
from inventory.services.base_service import (
    BaseService, success_response, paginate_queryset,
    ValidationError, NotFoundError, BusinessRuleError
)


class InventoryLocationService(BaseService):
    model = InventoryLocation

    @classmethod
    def serialize(cls, location: InventoryLocation) -> Dict[str, Any]:
        return {
            "id": location.id,
            "uuid": str(location.uuid),
            "code": location.code,
            "name": location.name,
            "location_type": location.location_type,
            "location_type_display": location.get_location_type_display(),
            "parent_location_id": location.parent_location_id,
            "is_active": location.is_active,
        }

    @classmethod
    def list(cls,
             page: int = 1,
             per_page: int = 50,
             search: str = None,
             location_type: str = None,
             active_only: bool = True) -> Dict[str, Any]:
        queryset = cls.model.objects.all()

        if active_only:
            queryset = queryset.filter(is_active=True)

        if location_type:
            queryset = queryset.filter(location_type=location_type)

        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(code__icontains=search)
            )

        locations, pagination = paginate_queryset(queryset.order_by("name"), page, per_page)

        return success_response({
            "locations": [cls.serialize(loc) for loc in locations],
            "pagination": pagination,
            "location_types": [
                {"value": c[0], "label": c[1]} for c in InventoryLocation.LocationType.choices
            ],
        })

    @classmethod
    def get(cls, location_id: int) -> Dict[str, Any]:
        return success_response({"location": cls.serialize(cls.get_or_404(location_id))})

    @classmethod
    def get_active_or_error(cls, location_id: int) -> InventoryLocation:
        location = cls.get_by_id(location_id)
        if not location:
            raise NotFoundError("Location", location_id)
        if not location.is_active:
            raise BusinessRuleError(f"Location '{location.name}' is inactive", "location_active")
        return location

    @classmethod
    def create(cls,
               code: str,
               name: str,
               location_type: str = InventoryLocation.LocationType.WAREHOUSE,
               parent_location_id: int = None,
               is_active: bool = True) -> Dict[str, Any]:
        if cls.model.objects.filter(code=code).exists():
            raise ValidationError(f"Location code '{code}' already exists", "code")

        if location_type not in InventoryLocation.LocationType.values:
            raise ValidationError(f"Unknown location type '{location_type}'", "location_type")

        if parent_location_id and not cls.exists(parent_location_id):
            raise NotFoundError("Location", parent_location_id)

        location = cls.model.objects.create(
            code=code,
            name=name,
            location_type=location_type,
            parent_location_id=parent_location_id,
            is_active=is_active,
        )

        return success_response({
            "id": location.id,
            "location": cls.serialize(location),
        }, f"Location '{name}' created")
