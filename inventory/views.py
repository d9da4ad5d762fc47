import logging

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import ParseError
from rest_framework.response import Response
from rest_framework.views import APIView

from inventory.serializers import (
    validate_payload,
    SupplierCreateSerializer, SupplierUpdateSerializer,
    LocationCreateSerializer, ItemCreateSerializer, SettingsUpdateSerializer,
    PurchaseOrderCreateSerializer, PurchaseOrderUpdateSerializer,
    ReceivePurchaseOrderSerializer, ApproveSerializer, CancelSerializer,
    PaginationQuerySerializer, PurchaseOrderListQuerySerializer, StatsQuerySerializer,
    StockQuerySerializer, TransactionQuerySerializer,
)
from inventory.services import (
    ValidationError, NotFoundError, BusinessRuleError, StateConflictError,
    InventorySettingsService, SupplierService, InventoryLocationService,
    InventoryItemService, InventoryStockService, InventoryTransactionService,
    PurchaseOrderService, PurchaseReceivingService,
)

logger = logging.getLogger(__name__)


def error_response(message: str, code: str = "error", status: int = 400, details: dict = None):
    data = {"success": False, "error": {"code": code, "message": message}}
    if details:
        data["error"]["details"] = details
    return Response(data, status=status)


def handle_service_error(e: Exception):
    if isinstance(e, ValidationError):
        return error_response(e.message, "validation_error", 400, {"errors": e.errors})
    elif isinstance(e, ParseError):
        return error_response(str(e.detail), "validation_error", 400, {"errors": []})
    elif isinstance(e, NotFoundError):
        return error_response(e.message, "not_found", 404, e.details)
    elif isinstance(e, StateConflictError):
        return error_response(e.message, "state_conflict", 409, {
            "current_status": e.current_status,
            "action": e.action,
        })
    elif isinstance(e, BusinessRuleError):
        return error_response(e.message, "business_rule", 400, e.details)
    else:
        logger.exception("Unhandled error in inventory API")
        return error_response("Internal server error", "server_error", 500)


class BaseInventoryView(APIView):

    def get_json_body(self, request):
        data = request.data
        if hasattr(data, "dict"):
            data = data.dict()
        return data or {}

    def get_user_id(self, request, data: dict = None, field: str = None):
        if request.user and request.user.is_authenticated:
            return request.user.id
        if data and field:
            return data.get(field)
        return None

    def get_query(self, request, serializer_class) -> dict:
        params = dict(validate_payload(serializer_class, request.query_params))
        if "limit" in params:
            params["per_page"] = params.pop("limit")
        if "search" in params and not params["search"]:
            params.pop("search")
        return params

    def include_inactive(self, request) -> bool:
        return request.query_params.get("include_inactive", "").lower() in ("1", "true", "yes")

    def success(self, data: dict, status: int = 200):
        return Response({"success": True, **data}, status=status)


# ==================== SETTINGS ====================

class InventorySettingsView(BaseInventoryView):

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            return self.success(InventorySettingsService.get_all())
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=SettingsUpdateSerializer, responses=OpenApiTypes.OBJECT)
    def put(self, request):
        try:
            data = validate_payload(SettingsUpdateSerializer, self.get_json_body(request))
            return self.success(InventorySettingsService.update(**data))
        except Exception as e:
            return handle_service_error(e)


# ==================== SUPPLIERS ====================

class SupplierListView(BaseInventoryView):

    @extend_schema(parameters=[PaginationQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = self.get_query(request, PaginationQuerySerializer)
            result = SupplierService.list(active_only=not self.include_inactive(request), **params)
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=SupplierCreateSerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        try:
            data = validate_payload(SupplierCreateSerializer, self.get_json_body(request))
            return self.success(SupplierService.create(**data), 201)
        except Exception as e:
            return handle_service_error(e)


class SupplierDetailView(BaseInventoryView):

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, supplier_id):
        try:
            return self.success(SupplierService.get(supplier_id))
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=SupplierUpdateSerializer, responses=OpenApiTypes.OBJECT)
    def put(self, request, supplier_id):
        try:
            data = validate_payload(SupplierUpdateSerializer, self.get_json_body(request))
            return self.success(SupplierService.update(supplier_id, **data))
        except Exception as e:
            return handle_service_error(e)


# ==================== LOCATIONS ====================

class LocationListView(BaseInventoryView):

    @extend_schema(parameters=[PaginationQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = self.get_query(request, PaginationQuerySerializer)
            result = InventoryLocationService.list(
                location_type=request.query_params.get("location_type") or None,
                active_only=not self.include_inactive(request),
                **params
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=LocationCreateSerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        try:
            data = validate_payload(LocationCreateSerializer, self.get_json_body(request))
            return self.success(InventoryLocationService.create(**data), 201)
        except Exception as e:
            return handle_service_error(e)


class LocationDetailView(BaseInventoryView):

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, location_id):
        try:
            return self.success(InventoryLocationService.get(location_id))
        except Exception as e:
            return handle_service_error(e)


# ==================== ITEMS ====================

class ItemListView(BaseInventoryView):

    @extend_schema(parameters=[PaginationQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = self.get_query(request, PaginationQuerySerializer)
            result = InventoryItemService.list(
                category=request.query_params.get("category") or None,
                active_only=not self.include_inactive(request),
                **params
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=ItemCreateSerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        try:
            data = validate_payload(ItemCreateSerializer, self.get_json_body(request))
            return self.success(InventoryItemService.create(**data), 201)
        except Exception as e:
            return handle_service_error(e)


class ItemDetailView(BaseInventoryView):

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, item_id):
        try:
            return self.success(InventoryItemService.get(item_id))
        except Exception as e:
            return handle_service_error(e)


# ==================== STOCK LEDGER ====================

class StockListView(BaseInventoryView):

    @extend_schema(parameters=[StockQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = self.get_query(request, StockQuerySerializer)
            params.pop("search", None)
            return self.success(InventoryStockService.list(**params))
        except Exception as e:
            return handle_service_error(e)


class TransactionListView(BaseInventoryView):

    @extend_schema(parameters=[TransactionQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = self.get_query(request, TransactionQuerySerializer)
            return self.success(InventoryTransactionService.list(**params))
        except Exception as e:
            return handle_service_error(e)


# ==================== PURCHASE ORDERS ====================

class PurchaseOrderListView(BaseInventoryView):

    @extend_schema(parameters=[PurchaseOrderListQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = self.get_query(request, PurchaseOrderListQuerySerializer)
            return self.success(PurchaseOrderService.list(**params))
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=PurchaseOrderCreateSerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request):
        try:
            body = self.get_json_body(request)
            data = dict(validate_payload(PurchaseOrderCreateSerializer, body))
            data["requested_by_id"] = self.get_user_id(request, data, "requested_by_id")
            data["items"] = [dict(line) for line in data["items"]]
            return self.success(PurchaseOrderService.create(**data), 201)
        except Exception as e:
            return handle_service_error(e)


class PurchaseOrderStatsView(BaseInventoryView):

    @extend_schema(parameters=[StatsQuerySerializer], responses=OpenApiTypes.OBJECT)
    def get(self, request):
        try:
            params = validate_payload(StatsQuerySerializer, request.query_params)
            return self.success(PurchaseOrderService.get_stats(**params))
        except Exception as e:
            return handle_service_error(e)


class PurchaseOrderDetailView(BaseInventoryView):

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def get(self, request, po_id):
        try:
            return self.success(PurchaseOrderService.get(po_id))
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(request=PurchaseOrderUpdateSerializer, responses=OpenApiTypes.OBJECT)
    def put(self, request, po_id):
        try:
            data = validate_payload(PurchaseOrderUpdateSerializer, self.get_json_body(request))
            return self.success(PurchaseOrderService.update(po_id, **data))
        except Exception as e:
            return handle_service_error(e)

    @extend_schema(responses=OpenApiTypes.OBJECT)
    def delete(self, request, po_id):
        try:
            return self.success(PurchaseOrderService.delete(po_id))
        except Exception as e:
            return handle_service_error(e)


class PurchaseOrderReceiveView(BaseInventoryView):

    @extend_schema(request=ReceivePurchaseOrderSerializer, responses=OpenApiTypes.OBJECT)
    def post(self, request, po_id):
        try:
            data = dict(validate_payload(ReceivePurchaseOrderSerializer, self.get_json_body(request)))
            result = PurchaseReceivingService.receive(
                po_id=po_id,
                items=[dict(line) for line in data["items"]],
                received_by_id=self.get_user_id(request, data, "received_by_id"),
                location_id=data.get("location_id"),
                notes=data.get("notes", ""),
            )
            return self.success(result)
        except Exception as e:
            return handle_service_error(e)


class PurchaseOrderActionView(BaseInventoryView):
    ACTIONS = ("submit", "approve", "send", "cancel", "close")

    @extend_schema(request=OpenApiTypes.OBJECT, responses=OpenApiTypes.OBJECT)
    def post(self, request, po_id, action):
        try:
            if action not in self.ACTIONS:
                raise NotFoundError("Action", action)

            body = self.get_json_body(request)

            if action == "approve":
                data = validate_payload(ApproveSerializer, body)
                result = PurchaseOrderService.approve(
                    po_id, approved_by_id=self.get_user_id(request, data, "approved_by_id")
                )
            elif action == "cancel":
                data = validate_payload(CancelSerializer, body)
                result = PurchaseOrderService.cancel(po_id, reason=data.get("reason", ""))
            else:
                result = getattr(PurchaseOrderService, action)(po_id)

            return self.success(result)
        except Exception as e:
            return handle_service_error(e)
