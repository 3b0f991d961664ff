import itertools
import uuid
from datetime import datetime, timedelta
from decimal import Decimal

from src.models.payment import Payment, PaymentStatus
from src.models.payment_method import PaymentMethod, PaymentMethodType

_payment_ids = itertools.count(1)
_method_ids = itertools.count(1)


class PaymentMethodFactory:
    """Factory for PaymentMethod instances and their wire dicts."""

    @staticmethod
    def create(**overrides) -> PaymentMethod:
        suffix = uuid.uuid4().hex[:6].upper()
        defaults = {
            "name": f"Method {suffix}",
            "code": f"METHOD_{suffix}",
            "type": PaymentMethodType.CASH,
            "description": "Pay at the clinic counter",
            "is_active": True,
            "is_online": False,
            "display_order": 0,
        }
        defaults.update(overrides)
        return PaymentMethod(**defaults)

    @staticmethod
    def create_wire(**overrides) -> dict:
        suffix = uuid.uuid4().hex[:6].upper()
        defaults = {
            "id": next(_method_ids),
            "name": f"Method {suffix}",
            "code": f"METHOD_{suffix}",
            "type": "CASH",
            "description": "Pay at the clinic counter",
            "logoUrl": None,
            "apiEndpoint": None,
            "merchantId": None,
            "publicKey": None,
            "isActive": True,
            "isOnline": False,
            "displayOrder": 0,
            "displayInstructions": None,
            "createdAt": "2025-01-01T08:00:00",
            "updatedAt": "2025-01-01T08:00:00",
        }
        defaults.update(overrides)
        return defaults


class PaymentFactory:
    """Factory for Payment instances and the backend JSON they come from."""

    @staticmethod
    def create(**overrides) -> Payment:
        defaults = {
            "id": next(_payment_ids),
            "amount": Decimal("100.00"),
            "status": PaymentStatus.PENDING,
            "created_at": datetime(2025, 3, 1, 9, 30),
            "updated_at": datetime(2025, 3, 1, 9, 30),
            "transaction_id": f"txn_{uuid.uuid4().hex[:16]}",
        }
        defaults.update(overrides)
        return Payment(**defaults)

    @staticmethod
    def create_wire(**overrides) -> dict:
        """Backend-shaped payment dict (camelCase, amounts as JSON numbers)."""
        defaults = {
            "id": next(_payment_ids),
            "userId": "user-1",
            "amount": 100.0,
            "totalAmount": 100.0,
            "status": "PENDING",
            "paymentMethod": None,
            "transactionId": f"txn_{uuid.uuid4().hex[:16]}",
            "description": None,
            "notes": None,
            "history": [],
            "createdAt": "2025-03-01T09:30:00",
            "updatedAt": "2025-03-01T09:30:00",
        }
        defaults.update(overrides)
        return defaults

    @staticmethod
    def create_history_wire(*transitions: tuple[str | None, str], start: str = "2025-03-01T09:30:00") -> list[dict]:
        """History entries for (previous, new) status pairs, one minute apart."""
        base = datetime.fromisoformat(start)
        return [
            {
                "id": i + 1,
                "previousStatus": previous,
                "newStatus": new,
                "actionType": "STATUS_UPDATE",
                "timestamp": (base + timedelta(minutes=i)).isoformat(),
                "notes": None,
            }
            for i, (previous, new) in enumerate(transitions)
        ]
