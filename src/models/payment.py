from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from src.models.payment_method import PaymentMethod
from src.models.wire import optional_decimal, parse_datetime, to_decimal


class PaymentStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"
    PARTIALLY_REFUNDED = "PARTIALLY_REFUNDED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"
    ON_HOLD = "ON_HOLD"
    DISPUTED = "DISPUTED"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def color(self) -> str:
        return STATUS_COLORS[self]

    @classmethod
    def parse(cls, value: "PaymentStatus | str") -> "PaymentStatus":
        """Case-insensitive lookup. Raises ValueError for unknown values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"not a payment status: {value!r}")
        return cls(value.strip().upper())


STATUS_LABELS: dict[PaymentStatus, str] = {
    PaymentStatus.PENDING: "Pending",
    PaymentStatus.PROCESSING: "Processing",
    PaymentStatus.COMPLETED: "Completed",
    PaymentStatus.DECLINED: "Declined",
    PaymentStatus.CANCELLED: "Cancelled",
    PaymentStatus.REFUNDED: "Refunded",
    PaymentStatus.PARTIALLY_REFUNDED: "Partially Refunded",
    PaymentStatus.FAILED: "Failed",
    PaymentStatus.EXPIRED: "Expired",
    PaymentStatus.ON_HOLD: "On Hold",
    PaymentStatus.DISPUTED: "Disputed",
}

# Severity tags for UI emphasis only
STATUS_COLORS: dict[PaymentStatus, str] = {
    PaymentStatus.PENDING: "warning",
    PaymentStatus.PROCESSING: "info",
    PaymentStatus.COMPLETED: "success",
    PaymentStatus.DECLINED: "error",
    PaymentStatus.CANCELLED: "default",
    PaymentStatus.REFUNDED: "secondary",
    PaymentStatus.PARTIALLY_REFUNDED: "secondary",
    PaymentStatus.FAILED: "error",
    PaymentStatus.EXPIRED: "default",
    PaymentStatus.ON_HOLD: "warning",
    PaymentStatus.DISPUTED: "error",
}

_missing = [s.value for s in PaymentStatus if s not in STATUS_LABELS or s not in STATUS_COLORS]
if _missing:
    raise ImportError(f"payment statuses without label or color: {_missing}")


def status_label(status: PaymentStatus | str) -> str | None:
    """Human label for a status, or None when the value is not a known status."""
    try:
        return STATUS_LABELS[PaymentStatus.parse(status)]
    except ValueError:
        return None


def status_color(status: PaymentStatus | str) -> str | None:
    """Severity tag for a status, or None when the value is not a known status."""
    try:
        return STATUS_COLORS[PaymentStatus.parse(status)]
    except ValueError:
        return None


def _optional_status(value) -> PaymentStatus | None:
    if value is None:
        return None
    return PaymentStatus.parse(value)


@dataclass(frozen=True)
class PaymentHistoryEntry:
    timestamp: datetime
    previous_status: PaymentStatus | None
    new_status: PaymentStatus
    notes: str | None = None
    id: int | None = None
    action_type: str | None = None
    description: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentHistoryEntry":
        if not isinstance(data, dict):
            raise ValueError(f"history entry must be an object, got {type(data).__name__}")
        # The backend entity names the previous status column "status".
        previous = data.get("previousStatus", data.get("status"))
        return cls(
            timestamp=parse_datetime(data["timestamp"]),
            previous_status=_optional_status(previous),
            new_status=PaymentStatus.parse(data["newStatus"]),
            notes=data.get("notes"),
            id=data.get("id"),
            action_type=data.get("actionType"),
            description=data.get("description"),
        )


@dataclass
class Payment:
    id: int | str
    amount: Decimal
    status: PaymentStatus
    payment_method: PaymentMethod | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    transaction_id: str | None = None
    description: str | None = None
    notes: str | None = None
    history: tuple[PaymentHistoryEntry, ...] = ()
    total_amount: Decimal | None = None
    discount_amount: Decimal | None = None
    tax_amount: Decimal | None = None
    reference_number: str | None = None
    receipt_number: str | None = None
    gateway_transaction_id: str | None = None
    payment_date: datetime | None = None
    expiration_date: datetime | None = None

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"payment amount must be non-negative, got {self.amount}")

    @property
    def status_label(self) -> str:
        return self.status.label

    @property
    def status_color(self) -> str:
        return self.status.color

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        """Build a Payment from the backend's camelCase JSON.

        Raises KeyError, TypeError or ValueError when required fields are
        missing or invalid.
        """
        method = data.get("paymentMethod")
        history = data.get("history") or []
        if not isinstance(history, list):
            raise ValueError(f"payment history must be a list, got {type(history).__name__}")
        return cls(
            id=data["id"],
            amount=to_decimal(data["amount"]),
            status=PaymentStatus.parse(data["status"]),
            payment_method=PaymentMethod.from_dict(method) if isinstance(method, dict) else None,
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
            transaction_id=data.get("transactionId"),
            description=data.get("description"),
            notes=data.get("notes"),
            history=tuple(PaymentHistoryEntry.from_dict(entry) for entry in history),
            total_amount=optional_decimal(data.get("totalAmount")),
            discount_amount=optional_decimal(data.get("discountAmount")),
            tax_amount=optional_decimal(data.get("taxAmount")),
            reference_number=data.get("referenceNumber"),
            receipt_number=data.get("receiptNumber"),
            gateway_transaction_id=data.get("gatewayTransactionId"),
            payment_date=parse_datetime(data.get("paymentDate")),
            expiration_date=parse_datetime(data.get("expirationDate")),
        )
