from dataclasses import dataclass, field
from decimal import Decimal

from src.models.wire import optional_decimal, to_decimal


def _mapping(data) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"expected an object keyed by name, got {type(data).__name__}")
    return data


def _counts(data) -> dict[str, int]:
    return {str(k): int(v) for k, v in _mapping(data).items()}


def _amounts(data) -> dict[str, Decimal]:
    return {str(k): to_decimal(v) for k, v in _mapping(data).items()}


@dataclass
class PaymentStatistics:
    """Aggregate counters computed by the backend for a date range."""

    total_revenue: Decimal
    total_transactions: int
    average_transaction: Decimal
    status_distribution: dict[str, int] = field(default_factory=dict)
    payment_method_distribution: dict[str, int] = field(default_factory=dict)
    daily_revenue: dict[str, Decimal] = field(default_factory=dict)
    monthly_revenue: dict[str, Decimal] = field(default_factory=dict)
    total_refunded: Decimal | None = None
    pending_transactions: int | None = None
    completed_transactions: int | None = None
    failed_transactions: int | None = None
    success_rate: Decimal | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentStatistics":
        def optional_int(key):
            value = data.get(key)
            return None if value is None else int(value)

        return cls(
            total_revenue=to_decimal(data.get("totalRevenue") or 0),
            total_transactions=int(data.get("totalTransactions") or 0),
            average_transaction=to_decimal(data.get("averageTransaction") or 0),
            status_distribution=_counts(data.get("statusDistribution")),
            payment_method_distribution=_counts(data.get("paymentMethodDistribution")),
            daily_revenue=_amounts(data.get("dailyRevenue")),
            monthly_revenue=_amounts(data.get("monthlyRevenue")),
            total_refunded=optional_decimal(data.get("totalRefunded")),
            pending_transactions=optional_int("pendingTransactions"),
            completed_transactions=optional_int("completedTransactions"),
            failed_transactions=optional_int("failedTransactions"),
            success_rate=optional_decimal(data.get("successRate")),
        )
