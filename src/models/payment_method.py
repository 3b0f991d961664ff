from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from src.models.wire import parse_datetime


class PaymentMethodType(Enum):
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    E_WALLET = "E_WALLET"
    CASH = "CASH"
    MOBILE_PAYMENT = "MOBILE_PAYMENT"
    QR_CODE = "QR_CODE"
    INSURANCE = "INSURANCE"
    VOUCHER = "VOUCHER"
    OTHER = "OTHER"
    MOMO = "MOMO"
    VISA = "VISA"

    @property
    def label(self) -> str:
        return METHOD_TYPE_LABELS[self]


METHOD_TYPE_LABELS: dict[PaymentMethodType, str] = {
    PaymentMethodType.CREDIT_CARD: "Credit Card",
    PaymentMethodType.DEBIT_CARD: "Debit Card",
    PaymentMethodType.BANK_TRANSFER: "Bank Transfer",
    PaymentMethodType.E_WALLET: "E-Wallet",
    PaymentMethodType.CASH: "Cash",
    PaymentMethodType.MOBILE_PAYMENT: "Mobile Payment",
    PaymentMethodType.QR_CODE: "QR Code",
    PaymentMethodType.INSURANCE: "Insurance",
    PaymentMethodType.VOUCHER: "Voucher",
    PaymentMethodType.OTHER: "Other",
    PaymentMethodType.MOMO: "Momo",
    PaymentMethodType.VISA: "Visa",
}


def payment_method_type_label(method_type: PaymentMethodType | str) -> str | None:
    if isinstance(method_type, str):
        try:
            method_type = PaymentMethodType(method_type.strip().upper())
        except ValueError:
            return None
    return METHOD_TYPE_LABELS.get(method_type)


@dataclass
class PaymentMethod:
    name: str
    code: str
    type: PaymentMethodType | None
    id: int | None = None
    description: str | None = None
    logo_url: str | None = None
    api_endpoint: str | None = None
    merchant_id: str | None = None
    public_key: str | None = None
    is_active: bool = True
    is_online: bool = True
    display_order: int = 0
    display_instructions: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def missing_required_fields(self) -> list[str]:
        """Names of required fields that are empty (name, code, type)."""
        missing = []
        if not self.name or not self.name.strip():
            missing.append("name")
        if not self.code or not self.code.strip():
            missing.append("code")
        if self.type is None:
            missing.append("type")
        return missing

    def to_dict(self) -> dict:
        """Request body for create/update. Server-managed timestamps are omitted."""
        body = {
            "name": self.name,
            "code": self.code,
            "type": self.type.value if self.type else None,
            "description": self.description,
            "logoUrl": self.logo_url,
            "apiEndpoint": self.api_endpoint,
            "merchantId": self.merchant_id,
            "publicKey": self.public_key,
            "isActive": self.is_active,
            "isOnline": self.is_online,
            "displayOrder": self.display_order,
            "displayInstructions": self.display_instructions,
        }
        if self.id is not None:
            body["id"] = self.id
        return body

    @classmethod
    def from_dict(cls, data: dict) -> "PaymentMethod":
        """Build a PaymentMethod from camelCase JSON. Raises KeyError or ValueError on bad input."""
        if not isinstance(data, dict):
            raise ValueError(f"payment method must be an object, got {type(data).__name__}")
        raw_type = data.get("type")
        if raw_type is not None and not isinstance(raw_type, str):
            raise ValueError(f"payment method type must be a string, got {raw_type!r}")
        return cls(
            id=data.get("id"),
            name=data["name"],
            code=data["code"],
            type=PaymentMethodType(raw_type.upper()) if raw_type else None,
            description=data.get("description"),
            logo_url=data.get("logoUrl"),
            api_endpoint=data.get("apiEndpoint"),
            merchant_id=data.get("merchantId"),
            public_key=data.get("publicKey"),
            is_active=data.get("isActive") is not False,
            is_online=data.get("isOnline") is not False,
            display_order=int(data.get("displayOrder") or 0),
            display_instructions=data.get("displayInstructions"),
            created_at=parse_datetime(data.get("createdAt")),
            updated_at=parse_datetime(data.get("updatedAt")),
        )


def sort_by_display_order(methods) -> list[PaymentMethod]:
    """Stable ascending sort on display_order."""
    return sorted(methods, key=lambda m: m.display_order)
