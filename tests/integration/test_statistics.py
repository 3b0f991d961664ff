"""Integration tests for payment statistics."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from src.payment_client.errors import HTTPStatusError, InvalidArgument, MalformedResponse, TransportError
from src.utils.factories import PaymentFactory, PaymentMethodFactory


pytestmark = pytest.mark.integration


@pytest.fixture
def seeded(backend):
    cash = PaymentMethodFactory.create_wire(code="CASH", type="CASH")
    momo = PaymentMethodFactory.create_wire(code="MOMO", type="MOMO")
    backend.store.add_payment(PaymentFactory.create_wire(
        id=1, amount=50.0, status="COMPLETED", paymentMethod=cash, createdAt="2025-03-02T10:00:00"))
    backend.store.add_payment(PaymentFactory.create_wire(
        id=2, amount=150.0, status="COMPLETED", paymentMethod=momo, createdAt="2025-03-05T10:00:00"))
    backend.store.add_payment(PaymentFactory.create_wire(
        id=3, amount=20.0, status="PENDING", paymentMethod=cash, createdAt="2025-03-06T10:00:00"))
    backend.store.add_payment(PaymentFactory.create_wire(
        id=4, amount=999.0, status="COMPLETED", paymentMethod=cash, createdAt="2025-04-20T10:00:00"))
    return backend


class TestPaymentStatistics:

    def test_aggregates_for_range(self, client, seeded):
        stats = client.get_payment_statistics(date(2025, 3, 1), date(2025, 3, 31))
        assert stats.total_revenue == Decimal("200")
        assert stats.total_transactions == 3
        assert stats.average_transaction == Decimal("100.00")
        assert stats.status_distribution == {"COMPLETED": 2, "PENDING": 1}
        assert stats.payment_method_distribution == {"CASH": 2, "MOMO": 1}
        assert stats.pending_transactions == 1

    def test_dates_sent_as_iso_date_times(self, client, seeded):
        client.get_payment_statistics(date(2025, 3, 1), datetime(2025, 3, 31, 23, 59, 59))
        params = seeded.last_request()["params"]
        assert params == {"startDate": "2025-03-01T00:00:00", "endDate": "2025-03-31T23:59:59"}

    @pytest.mark.parametrize(
        "start,end",
        [
            ("2025-03-01", date(2025, 3, 31)),
            (date(2025, 3, 1), "2025-03-31"),
            (None, None),
            (1740787200, 1743379200),
        ],
    )
    def test_non_date_arguments_raise_before_any_request(self, client, backend, request_logger, start, end):
        with pytest.raises(InvalidArgument):
            client.get_payment_statistics(start, end)
        assert request_logger.get_attempts() == []
        assert backend.get_received_requests() == []

    def test_non_date_arguments_raise_even_when_backend_is_down(self, unreachable_client, request_logger):
        with pytest.raises(InvalidArgument):
            unreachable_client.get_payment_statistics("yesterday", "today")
        assert request_logger.get_attempts() == []

    def test_network_failure_raises(self, unreachable_client):
        with pytest.raises(TransportError):
            unreachable_client.get_payment_statistics(date(2025, 3, 1), date(2025, 3, 31))

    @pytest.mark.parametrize(
        "result",
        [
            {"statusDistribution": [1]},
            {"paymentMethodDistribution": "CASH"},
            {"dailyRevenue": [["2025-03-01", 300]]},
        ],
    )
    def test_malformed_distribution_raises_malformed_response(self, client, backend, result):
        backend.set_raw_response("GET", "payments/statistics", 200, {"code": 100, "result": result})
        with pytest.raises(MalformedResponse):
            client.get_payment_statistics(date(2025, 1, 1), date(2025, 2, 1))

    def test_http_error_raises(self, client, backend):
        backend.set_response_code(403)
        with pytest.raises(HTTPStatusError):
            client.get_payment_statistics(date(2025, 3, 1), date(2025, 3, 31))
