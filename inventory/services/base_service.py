from typing import Dict, Any, Optional, List, Tuple
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from django.db.models import Model


class ServiceError(Exception):
    def __init__(self, message: str, code: str = "ERROR", details: Dict = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ValidationError(ServiceError):
    """Malformed input. ``errors`` lists every field-level problem found."""

    def __init__(self, message: str, field: str = None, errors: List[Dict] = None):
        if errors is None:
            errors = [{"field": field, "message": message}] if field else []
        super().__init__(message, "VALIDATION_ERROR", {"errors": errors})
        self.field = field
        self.errors = errors


class NotFoundError(ServiceError):
    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            f"{resource} not found: {identifier}",
            "NOT_FOUND",
            {"resource": resource, "identifier": str(identifier)}
        )


class BusinessRuleError(ServiceError):
    def __init__(self, message: str, rule: str = None):
        super().__init__(message, "BUSINESS_RULE_VIOLATION", {"rule": rule})


class StateConflictError(BusinessRuleError):
    def __init__(self, current_status: str, action: str, message: str = None):
        super().__init__(
            message or f"Cannot {action} purchase order in {current_status} status",
            rule="order_status",
        )
        self.code = "STATE_CONFLICT"
        self.current_status = current_status
        self.action = action
        self.details.update({"current_status": current_status, "action": action})


def success_response(data: Any = None, message: str = "Success") -> Dict:
    response = {"success": True, "message": message}
    if data is not None:
        if isinstance(data, dict):
            response.update(data)
        else:
            response["data"] = data
    return response


def paginate_queryset(queryset, page: int = 1, per_page: int = 20) -> Tuple[List, Dict]:
    page = max(1, page)
    per_page = min(max(1, per_page), 100)

    total = queryset.count()
    total_pages = (total + per_page - 1) // per_page

    offset = (page - 1) * per_page
    items = list(queryset[offset:offset + per_page])

    return items, {
        "page": page,
        "limit": per_page,
        "total": total,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1
    }


def to_decimal(value: Any, default: Decimal = Decimal("0")) -> Decimal:
    if value is None:
        return default
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return default


def round_decimal(value: Decimal, places: int = 4) -> Decimal:
    if value is None:
        return Decimal("0")
    quantize_str = "0." + "0" * places
    return value.quantize(Decimal(quantize_str), rounding=ROUND_HALF_UP)


def iso_or_none(value) -> Optional[str]:
    return value.isoformat() if value else None


class BaseService:
    model = None

    @classmethod
    def get_by_id(cls, id: int) -> Optional[Model]:
        try:
            return cls.model.objects.get(id=id)
        except (cls.model.DoesNotExist, ValueError, TypeError):
            return None

    @classmethod
    def get_or_404(cls, id: int) -> Model:
        obj = cls.get_by_id(id)
        if not obj:
            raise NotFoundError(cls.model._meta.verbose_name.capitalize(), id)
        return obj

    @classmethod
    def exists(cls, id: int) -> bool:
        return cls.model.objects.filter(id=id).exists()

    @classmethod
    def get_active(cls):
        if hasattr(cls.model, 'is_active'):
            return cls.model.objects.filter(is_active=True)
        return cls.model.objects.all()
