"""
Inventory services - procurement and receiving business logic

Usage:
    from inventory.services import PurchaseOrderService, PurchaseReceivingService

    # Create and approve an order
    result = PurchaseOrderService.create(supplier_id=1, requested_by_id=1, items=[...])
    PurchaseOrderService.approve(result["id"], approved_by_id=2)

    # Receive goods
    PurchaseReceivingService.receive(po_id=1, items=[...], received_by_id=3)
"""

# Base utilities
from inventory.services.base_service import (
    ServiceError,
    ValidationError,
    NotFoundError,
    BusinessRuleError,
    StateConflictError,
    success_response,
    paginate_queryset,
    to_decimal,
    round_decimal,
    BaseService,
)
from .sequence_service import SequenceService
from .settings_service import InventorySettingsService

# Reference data
from .supplier_service import SupplierService
from .location_service import InventoryLocationService
from .item_service import InventoryItemService

# Stock ledger
from .level_service import InventoryStockService, InventoryTransactionService

# Purchasing
from .lifecycle_service import OrderLifecycle
from .purchase_service import (
    PurchaseOrderService,
    PurchaseOrderItemService,
    PurchaseReceivingService,
)

__all__ = [
    "ServiceError",
    "ValidationError",
    "NotFoundError",
    "BusinessRuleError",
    "StateConflictError",
    "success_response",
    "paginate_queryset",
    "to_decimal",
    "round_decimal",
    "BaseService",
    "SequenceService",
    "InventorySettingsService",
    "SupplierService",
    "InventoryLocationService",
    "InventoryItemService",
    "InventoryStockService",
    "InventoryTransactionService",
    "OrderLifecycle",
    "PurchaseOrderService",
    "PurchaseOrderItemService",
    "PurchaseReceivingService",
]
