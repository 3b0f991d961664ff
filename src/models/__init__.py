from .payment import (
    Payment,
    PaymentHistoryEntry,
    PaymentStatus,
    STATUS_COLORS,
    STATUS_LABELS,
    status_color,
    status_label,
)
from .payment_method import (
    PaymentMethod,
    PaymentMethodType,
    payment_method_type_label,
    sort_by_display_order,
)
from .statistics import PaymentStatistics
from .page import Page
from .request_attempt import RequestAttempt

__all__ = [
    "Payment", "PaymentHistoryEntry", "PaymentStatus",
    "STATUS_COLORS", "STATUS_LABELS", "status_color", "status_label",
    "PaymentMethod", "PaymentMethodType",
    "payment_method_type_label", "sort_by_display_order",
    "PaymentStatistics",
    "Page",
    "RequestAttempt",
]
