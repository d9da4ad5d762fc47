from inventory.models import PurchaseOrder
from inventory.services.base_service import StateConflictError

Status = PurchaseOrder.Status


class OrderLifecycle:
    """Which statuses each purchase order action may start from."""

    UPDATE = "update"
    SUBMIT = "submit"
    APPROVE = "approve"
    SEND = "send"
    RECEIVE = "receive"
    CANCEL = "cancel"
    CLOSE = "close"
    DELETE = "delete"

    ALLOWED_FROM = {
        UPDATE: frozenset({Status.DRAFT, Status.PENDING_APPROVAL}),
        SUBMIT: frozenset({Status.DRAFT}),
        APPROVE: frozenset({Status.PENDING_APPROVAL}),
        SEND: frozenset({Status.APPROVED}),
        RECEIVE: frozenset({Status.SENT_TO_SUPPLIER, Status.PARTIALLY_RECEIVED}),
        CANCEL: frozenset({
            Status.DRAFT, Status.PENDING_APPROVAL, Status.APPROVED,
            Status.SENT_TO_SUPPLIER, Status.PARTIALLY_RECEIVED, Status.CANCELLED,
        }),
        CLOSE: frozenset({Status.RECEIVED, Status.CANCELLED}),
        DELETE: frozenset({Status.DRAFT, Status.PENDING_APPROVAL}),
    }

    # Target status for actions that move the order unconditionally.
    TARGET = {
        SUBMIT: Status.PENDING_APPROVAL,
        APPROVE: Status.APPROVED,
        SEND: Status.SENT_TO_SUPPLIER,
        CANCEL: Status.CANCELLED,
        CLOSE: Status.CLOSED,
    }

    MESSAGES = {
        UPDATE: "Cannot modify purchase order in {status} status",
        APPROVE: "Only pending purchase orders can be approved",
        SEND: "Only approved purchase orders can be sent",
        RECEIVE: "Purchase order is not ready for receiving",
        CANCEL: "Cannot cancel purchase order in {status} status",
        CLOSE: "Only received or cancelled purchase orders can be closed",
    }

    @classmethod
    def can(cls, status: str, action: str) -> bool:
        return status in cls.ALLOWED_FROM[action]

    @classmethod
    def ensure_can(cls, po: PurchaseOrder, action: str) -> None:
        if not cls.can(po.status, action):
            template = cls.MESSAGES.get(action)
            raise StateConflictError(
                po.status,
                action,
                template.format(status=po.status) if template else None,
            )

    @classmethod
    def allowed_actions(cls, status: str) -> list:
        return [action for action, sources in cls.ALLOWED_FROM.items() if status in sources]
