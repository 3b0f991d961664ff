from .server import BackendStore, FakePaymentBackend

__all__ = ["BackendStore", "FakePaymentBackend"]
