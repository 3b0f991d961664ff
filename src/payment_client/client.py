import logging
import time
import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from urllib.parse import quote

import requests

from src.models.page import Page
from src.models.payment import Payment, PaymentStatus
from src.models.payment_method import PaymentMethod, sort_by_display_order
from src.models.request_attempt import RequestAttempt
from src.models.statistics import PaymentStatistics
from src.models.wire import format_datetime
from src.payment_client.config import ClientConfig
from src.payment_client.credentials import CredentialSource, resolve_token
from src.payment_client.envelope import (
    error_message,
    parse_entity,
    parse_entity_list,
    parse_page,
    unwrap_result,
)
from src.payment_client.errors import (
    HTTPStatusError,
    InvalidArgument,
    MalformedResponse,
    PaymentClientError,
    TransportError,
)
from src.payment_client.logger import RequestLogger
from src.payment_client.pagination import Pageable

logger = logging.getLogger(__name__)

PAYMENTS_PATH = "payments"
PAYMENT_METHODS_PATH = "payment-methods"


def _segment(value, name: str) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgument(f"{name} is required")
    return quote(str(value), safe="")


def _status_param(status: PaymentStatus | str, name: str = "status") -> str:
    if isinstance(status, PaymentStatus):
        return status.value
    if not isinstance(status, str) or not status.strip():
        raise InvalidArgument(f"{name} must be a non-empty string, got {status!r}")
    return status.strip().upper()


class PaymentClient:
    """Client for the payment administration REST API.

    List reads (list_payments, list_user_payments, get_expired_payments) are
    fail-soft: any transport, HTTP or shape error is logged and an empty Page
    is returned. Every other operation is fail-loud and raises a
    PaymentClientError subclass. Invalid arguments always raise
    InvalidArgument before a request is sent. Nothing is retried.
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        credentials: CredentialSource = None,
        request_logger: RequestLogger | None = None,
        session: requests.Session | None = None,
    ):
        self.config = config or ClientConfig()
        self.credentials = credentials
        self.request_logger = request_logger or RequestLogger()
        self._owns_session = session is None
        self._session = session or requests.Session()

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    # -- transport ---------------------------------------------------------

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        token = resolve_token(self.credentials)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        else:
            logger.warning("No authentication token found, sending request without Authorization")
        return headers

    def _request(self, method: str, path: str, params: dict | None = None, json_body=None):
        """Send one request and return the decoded JSON body (None when empty)."""
        url = self.config.url(path)
        logger.debug("%s %s params=%s", method, url, params)

        start = time.monotonic()
        resp = None
        failure = None
        error = None

        try:
            resp = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=self._headers(),
                timeout=self.config.timeout_seconds,
            )
        except requests.exceptions.Timeout as e:
            failure, error = e, "timeout"
        except requests.exceptions.ConnectionError as e:
            failure, error = e, "connection_error"
        except requests.exceptions.RequestException as e:
            failure, error = e, str(e)

        elapsed_ms = (time.monotonic() - start) * 1000
        self.request_logger.log(
            RequestAttempt(
                attempt_id=f"req_{uuid.uuid4().hex[:16]}",
                method=method,
                url=url,
                status_code=resp.status_code if resp is not None else None,
                timestamp=datetime.now(timezone.utc),
                response_time_ms=elapsed_ms,
                params=dict(params or {}),
                error=error,
            )
        )

        if failure is not None:
            raise TransportError(f"{method} {url} failed: {error}") from failure

        body = None
        decode_error = None
        if resp.content:
            try:
                body = resp.json()
            except ValueError as e:
                decode_error = e

        if resp.status_code >= 400:
            raise HTTPStatusError(resp.status_code, error_message(body), url=url)
        if decode_error is not None:
            raise MalformedResponse(f"{method} {url} returned a non-JSON body") from decode_error
        return body

    @contextmanager
    def _fail_loud(self, operation: str):
        try:
            yield
        except PaymentClientError as e:
            logger.error("Error %s: %s", operation, e)
            raise

    def _fetch_page(self, operation: str, path: str, params: dict) -> Page:
        try:
            return parse_page(self._request("GET", path, params=params))
        except MalformedResponse as e:
            logger.warning("Unexpected response format %s, returning empty page: %s", operation, e)
        except PaymentClientError as e:
            logger.error("Error %s, returning empty page: %s", operation, e)
        return Page.empty()

    # -- payments ----------------------------------------------------------

    def list_payments(self, status: PaymentStatus | str | None = None, pageable=None) -> Page:
        params = Pageable.coerce(pageable).to_params()
        if status:
            params["status"] = _status_param(status)
        return self._fetch_page("fetching payments", PAYMENTS_PATH, params)

    def get_payment_by_id(self, payment_id) -> Payment:
        path = f"{PAYMENTS_PATH}/{_segment(payment_id, 'payment_id')}"
        with self._fail_loud(f"fetching payment {payment_id}"):
            return parse_entity(self._request("GET", path), Payment.from_dict)

    def update_payment_status(self, payment_id, status: PaymentStatus | str) -> Payment:
        """Ask the backend to move a payment to a new status.

        The backend decides whether the transition is allowed; no transition
        rules are checked here.
        """
        path = f"{PAYMENTS_PATH}/{_segment(payment_id, 'payment_id')}/status"
        params = {"status": _status_param(status)}
        with self._fail_loud(f"updating status of payment {payment_id}"):
            return parse_entity(self._request("PUT", path, params=params), Payment.from_dict)

    def list_user_payments(self, user_id, pageable=None) -> Page:
        params = Pageable.coerce(pageable).to_params()
        path = f"{PAYMENTS_PATH}/user/{_segment(user_id, 'user_id')}"
        return self._fetch_page(f"fetching payments of user {user_id}", path, params)

    def get_payment_statistics(self, start_date: date, end_date: date) -> PaymentStatistics:
        if not isinstance(start_date, date) or not isinstance(end_date, date):
            raise InvalidArgument("start_date and end_date must be date or datetime objects")

        params = {
            "startDate": format_datetime(start_date),
            "endDate": format_datetime(end_date),
        }
        with self._fail_loud("fetching payment statistics"):
            body = self._request("GET", f"{PAYMENTS_PATH}/statistics", params=params)
            return parse_entity(body, PaymentStatistics.from_dict)

    def get_expired_payments(self, pageable=None) -> Page:
        params = Pageable.coerce(pageable).to_params()
        return self._fetch_page("fetching expired payments", f"{PAYMENTS_PATH}/expired", params)

    # -- payment methods ---------------------------------------------------

    def _method_list(self, operation: str, path: str) -> list[PaymentMethod]:
        with self._fail_loud(operation):
            body = self._request("GET", path)
            return sort_by_display_order(parse_entity_list(body, PaymentMethod.from_dict))

    def list_payment_methods(self) -> list[PaymentMethod]:
        return self._method_list("fetching payment methods", PAYMENT_METHODS_PATH)

    def list_active_payment_methods(self) -> list[PaymentMethod]:
        return self._method_list("fetching active payment methods", f"{PAYMENT_METHODS_PATH}/active")

    def list_online_payment_methods(self) -> list[PaymentMethod]:
        return self._method_list("fetching online payment methods", f"{PAYMENT_METHODS_PATH}/online")

    def get_payment_method(self, method_id) -> PaymentMethod:
        path = f"{PAYMENT_METHODS_PATH}/{_segment(method_id, 'method_id')}"
        with self._fail_loud(f"fetching payment method {method_id}"):
            return parse_entity(self._request("GET", path), PaymentMethod.from_dict)

    @staticmethod
    def _method_body(method: PaymentMethod) -> dict:
        if not isinstance(method, PaymentMethod):
            raise InvalidArgument(f"expected a PaymentMethod, got {type(method).__name__}")
        missing = method.missing_required_fields()
        if missing:
            raise InvalidArgument(f"payment method is missing required fields: {', '.join(missing)}")
        return method.to_dict()

    def create_payment_method(self, method: PaymentMethod) -> PaymentMethod:
        body = self._method_body(method)
        with self._fail_loud("creating payment method"):
            resp = self._request("POST", PAYMENT_METHODS_PATH, json_body=body)
            return parse_entity(resp, PaymentMethod.from_dict)

    def update_payment_method(self, method_id, method: PaymentMethod) -> PaymentMethod:
        path = f"{PAYMENT_METHODS_PATH}/{_segment(method_id, 'method_id')}"
        body = self._method_body(method)
        with self._fail_loud(f"updating payment method {method_id}"):
            return parse_entity(self._request("PUT", path, json_body=body), PaymentMethod.from_dict)

    def delete_payment_method(self, method_id) -> None:
        path = f"{PAYMENT_METHODS_PATH}/{_segment(method_id, 'method_id')}"
        with self._fail_loud(f"deleting payment method {method_id}"):
            body = self._request("DELETE", path)
            if body is not None:
                unwrap_result(body, allow_empty=True)
