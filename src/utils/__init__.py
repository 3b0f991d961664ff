from .factories import PaymentFactory, PaymentMethodFactory

__all__ = ["PaymentFactory", "PaymentMethodFactory"]
