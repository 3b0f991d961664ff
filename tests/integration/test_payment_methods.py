"""Integration tests for payment method administration (all fail-loud)."""

import threading

import pytest

from src.models.payment_method import PaymentMethod, PaymentMethodType
from src.payment_client.client import PaymentClient
from src.payment_client.config import ClientConfig
from src.payment_client.errors import (
    HTTPStatusError,
    InvalidArgument,
    MalformedResponse,
    TransportError,
)
from src.utils.factories import PaymentMethodFactory


pytestmark = pytest.mark.integration


@pytest.fixture
def seeded(backend):
    backend.store.add_method(PaymentMethodFactory.create_wire(
        id=1, name="Visa", code="VISA", type="VISA", displayOrder=3, isOnline=True))
    backend.store.add_method(PaymentMethodFactory.create_wire(
        id=2, name="Cash", code="CASH", type="CASH", displayOrder=1, isOnline=False))
    backend.store.add_method(PaymentMethodFactory.create_wire(
        id=3, name="MoMo", code="MOMO", type="MOMO", displayOrder=2, isOnline=True, isActive=False))
    return backend


class TestListPaymentMethods:

    def test_sorted_by_display_order(self, client, seeded):
        methods = client.list_payment_methods()
        assert [m.code for m in methods] == ["CASH", "MOMO", "VISA"]

    def test_active_only(self, client, seeded):
        methods = client.list_active_payment_methods()
        assert [m.code for m in methods] == ["CASH", "VISA"]
        assert seeded.last_request()["path"] == "/api/payment-methods/active"

    def test_online_only(self, client, seeded):
        methods = client.list_online_payment_methods()
        assert [m.code for m in methods] == ["MOMO", "VISA"]

    def test_network_failure_raises(self, unreachable_client):
        with pytest.raises(TransportError):
            unreachable_client.list_payment_methods()

    def test_http_error_raises(self, client, seeded):
        seeded.set_response_code(500)
        with pytest.raises(HTTPStatusError):
            client.list_payment_methods()

    def test_unexpected_shape_raises(self, client, backend):
        backend.set_raw_response("GET", "payment-methods", 200, {"methods": []})
        with pytest.raises(MalformedResponse):
            client.list_payment_methods()

    @pytest.mark.parametrize(
        "bad_fields",
        [{"displayOrder": "first"}, {"displayOrder": [1]}, {"type": 5}],
    )
    def test_malformed_method_raises_malformed_response(self, client, backend, bad_fields):
        good = PaymentMethodFactory.create_wire(code="CASH", displayOrder=1)
        bad = PaymentMethodFactory.create_wire(code="VISA", **bad_fields)
        backend.set_raw_response("GET", "payment-methods", 200, {"code": 100, "result": [good, bad]})
        with pytest.raises(MalformedResponse):
            client.list_payment_methods()

    def test_numeric_string_display_order_is_coerced(self, client, backend):
        backend.set_raw_response("GET", "payment-methods", 200, {"result": [
            PaymentMethodFactory.create_wire(code="B", displayOrder="2"),
            PaymentMethodFactory.create_wire(code="A", displayOrder=1),
        ]})
        methods = client.list_payment_methods()
        assert [(m.code, m.display_order) for m in methods] == [("A", 1), ("B", 2)]


class TestPaymentMethodCrud:

    def test_get(self, client, seeded):
        method = client.get_payment_method(3)
        assert method.name == "MoMo"
        assert method.type is PaymentMethodType.MOMO
        assert method.is_active is False

    def test_get_missing_raises(self, client, seeded):
        with pytest.raises(HTTPStatusError) as exc_info:
            client.get_payment_method(42)
        assert exc_info.value.status_code == 404

    def test_create_sends_camel_case_body(self, client, backend):
        method = PaymentMethodFactory.create(
            name="Bank Transfer",
            code="BANK",
            type=PaymentMethodType.BANK_TRANSFER,
            display_instructions="Use the appointment number as reference",
            display_order=4,
        )
        created = client.create_payment_method(method)

        body = backend.last_request()["body"]
        assert body["type"] == "BANK_TRANSFER"
        assert body["displayInstructions"] == "Use the appointment number as reference"
        assert body["displayOrder"] == 4
        assert created.id is not None
        assert created.code == "BANK"
        assert created.created_at is not None

    def test_create_duplicate_code_raises(self, client, seeded):
        duplicate = PaymentMethodFactory.create(code="CASH")
        with pytest.raises(HTTPStatusError) as exc_info:
            client.create_payment_method(duplicate)
        assert exc_info.value.status_code == 400
        assert "already exists" in exc_info.value.message

    def test_concurrent_creates_with_same_code_store_one_method(self, backend, credentials):
        results: list = []
        lock = threading.Lock()

        def create():
            with PaymentClient(
                config=ClientConfig(base_url=backend.url, timeout_seconds=5),
                credentials=credentials,
            ) as own_client:
                try:
                    own_client.create_payment_method(PaymentMethodFactory.create(code="QR"))
                    outcome = "created"
                except HTTPStatusError as e:
                    outcome = e.status_code
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=create) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("created") == 1
        assert sorted(r for r in results if r != "created") == [400] * 9
        assert [m["code"] for m in backend.store.methods.values()] == ["QR"]

    @pytest.mark.parametrize(
        "overrides,missing",
        [
            ({"name": ""}, "name"),
            ({"code": "  "}, "code"),
            ({"type": None}, "type"),
        ],
    )
    def test_create_requires_name_code_type(self, client, backend, overrides, missing):
        method = PaymentMethodFactory.create(**overrides)
        with pytest.raises(InvalidArgument, match=missing):
            client.create_payment_method(method)
        assert backend.get_received_requests() == []

    def test_create_rejects_plain_dict(self, client, backend):
        with pytest.raises(InvalidArgument):
            client.create_payment_method({"name": "Cash", "code": "CASH", "type": "CASH"})
        assert backend.get_received_requests() == []

    def test_update(self, client, seeded):
        method = client.get_payment_method(2)
        method.description = "Counter payment only"
        method.is_active = False
        updated = client.update_payment_method(2, method)

        assert updated.description == "Counter payment only"
        assert updated.is_active is False
        assert client.get_payment_method(2).is_active is False

    def test_update_validates_before_request(self, client, seeded):
        seeded.clear_requests()
        with pytest.raises(InvalidArgument):
            client.update_payment_method(2, PaymentMethod(name="", code="CASH", type=PaymentMethodType.CASH))
        assert seeded.get_received_requests() == []

    def test_update_missing_raises(self, client, seeded):
        with pytest.raises(HTTPStatusError):
            client.update_payment_method(99, PaymentMethodFactory.create())

    def test_delete_then_reload(self, client, seeded):
        assert client.delete_payment_method(1) is None
        assert [m.code for m in client.list_payment_methods()] == ["CASH", "MOMO"]
        with pytest.raises(HTTPStatusError):
            client.get_payment_method(1)

    def test_delete_missing_raises(self, client, seeded):
        with pytest.raises(HTTPStatusError) as exc_info:
            client.delete_payment_method(99)
        assert exc_info.value.status_code == 404

    def test_delete_network_failure_raises(self, unreachable_client):
        with pytest.raises(TransportError):
            unreachable_client.delete_payment_method(1)
