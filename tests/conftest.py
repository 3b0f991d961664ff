import socket

import pytest

from src.fake_backend.server import FakePaymentBackend
from src.payment_client.client import PaymentClient
from src.payment_client.config import ClientConfig
from src.payment_client.credentials import TokenCredentials
from src.payment_client.logger import RequestLogger
from src.utils.factories import PaymentFactory, PaymentMethodFactory


API_TOKEN = "test-admin-token"


def _closed_port() -> int:
    """A local port with nothing listening on it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def api_token():
    return API_TOKEN


@pytest.fixture
def credentials():
    return TokenCredentials(API_TOKEN)


@pytest.fixture
def request_logger():
    return RequestLogger()


@pytest.fixture
def backend():
    server = FakePaymentBackend()
    server.start()
    yield server
    server.stop()


@pytest.fixture
def client(backend, credentials, request_logger):
    payment_client = PaymentClient(
        config=ClientConfig(base_url=backend.url, timeout_seconds=5),
        credentials=credentials,
        request_logger=request_logger,
    )
    yield payment_client
    payment_client.close()


@pytest.fixture
def unreachable_client(credentials, request_logger):
    """Client pointed at a port nobody listens on (connection refused)."""
    payment_client = PaymentClient(
        config=ClientConfig(base_url=f"http://127.0.0.1:{_closed_port()}/api", timeout_seconds=5),
        credentials=credentials,
        request_logger=request_logger,
    )
    yield payment_client
    payment_client.close()


@pytest.fixture
def payment_factory():
    return PaymentFactory


@pytest.fixture
def payment_method_factory():
    return PaymentMethodFactory
