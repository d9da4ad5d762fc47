from typing import Dict, Any, Optional

from django.db import transaction

from inventory.models import InventorySettings, InventoryLocation
from inventory.services.base_service import (
    BaseService, success_response, ValidationError, NotFoundError
)


class InventorySettingsService(BaseService):
    model = InventorySettings

    @classmethod
    def load(cls) -> InventorySettings:
        return InventorySettings.load()

    @classmethod
    def costing_method(cls) -> str:
        return cls.load().costing_method

    @classmethod
    def default_receiving_location_id(cls) -> Optional[int]:
        return cls.load().default_receiving_location_id

    @classmethod
    def serialize(cls, settings: InventorySettings) -> Dict[str, Any]:
        location = settings.default_receiving_location
        return {
            "costing_method": settings.costing_method,
            "costing_method_display": settings.get_costing_method_display(),
            "costing_methods": [
                {"value": c[0], "label": c[1]}
                for c in InventorySettings.CostingMethod.choices
            ],
            "default_receiving_location_id": settings.default_receiving_location_id,
            "default_receiving_location": location.name if location else None,
            "updated_at": settings.updated_at.isoformat() if settings.updated_at else None,
        }

    @classmethod
    def get_all(cls) -> Dict[str, Any]:
        return success_response({"settings": cls.serialize(cls.load())})

    @classmethod
    @transaction.atomic
    def update(cls, **kwargs) -> Dict[str, Any]:
        settings = cls.load()

        if "costing_method" in kwargs:
            method = kwargs["costing_method"]
            if method not in InventorySettings.CostingMethod.values:
                raise ValidationError(f"Unknown costing method '{method}'", "costing_method")
            settings.costing_method = method

        if "default_receiving_location_id" in kwargs:
            location_id = kwargs["default_receiving_location_id"]
            if location_id is not None and not InventoryLocation.objects.filter(id=location_id).exists():
                raise NotFoundError("Location", location_id)
            settings.default_receiving_location_id = location_id

        settings.save()
        return success_response({"settings": cls.serialize(settings)}, "Settings updated")
