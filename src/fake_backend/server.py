import json
import math
import re
import threading
import time
from datetime import datetime
from decimal import Decimal
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Self
from urllib.parse import parse_qs, urlparse

from src.models.payment import PaymentStatus
from src.models.payment_method import PaymentMethodType

SUCCESS_CODE = 100

SORTABLE_FIELDS = {
    "id", "amount", "status", "createdAt", "updatedAt", "transactionId",
    "totalAmount", "paymentDate", "expirationDate",
}


def _envelope(result) -> dict:
    return {"code": SUCCESS_CODE, "message": "Success", "result": result}


def _error(status: int, message: str) -> tuple[int, dict]:
    return status, {"code": status, "message": message}


def _camel(field: str) -> str:
    """created_at -> createdAt, as the backend maps sort columns to entity properties."""
    head, *rest = field.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


def _now() -> str:
    return datetime.now().replace(microsecond=0).isoformat()


def _page(items: list[dict], params: dict) -> tuple[int, dict]:
    try:
        page = int(params.get("page", 0))
        size = int(params.get("size", 10))
    except ValueError:
        return _error(400, "page and size must be integers")
    if page < 0 or size <= 0:
        return _error(400, "invalid page request")

    sort_by = _camel(params.get("sortBy", "created_at"))
    if sort_by not in SORTABLE_FIELDS:
        return _error(400, f"No property '{sort_by}' found for type 'Payment'")
    descending = params.get("direction", "desc").lower() != "asc"

    ordered = sorted(
        items,
        key=lambda p: (p.get(sort_by) is None, p.get(sort_by)),
        reverse=descending,
    )
    start = page * size
    return 200, _envelope({
        "content": ordered[start:start + size],
        "totalElements": len(items),
        "totalPages": math.ceil(len(items) / size) if items else 0,
        "number": page,
        "size": size,
    })


class BackendStore:
    """In-memory payments and payment methods, keyed by id."""

    def __init__(self):
        self.payments: dict[int, dict] = {}
        self.methods: dict[int, dict] = {}
        self.lock = threading.Lock()
        self._next_method_id = 1

    def add_payment(self, payment: dict) -> dict:
        with self.lock:
            self.payments[int(payment["id"])] = payment
        return payment

    def add_method(self, method: dict) -> dict:
        with self.lock:
            return self.insert_method(method)

    def insert_method(self, method: dict) -> dict:
        """Store a method, assigning an id when it has none. Caller holds the lock."""
        if method.get("id") is None:
            method = {**method, "id": self._next_method_id}
        self._next_method_id = max(self._next_method_id, int(method["id"])) + 1
        self.methods[int(method["id"])] = method
        return method

    def clear(self) -> None:
        with self.lock:
            self.payments.clear()
            self.methods.clear()
            self._next_method_id = 1


# -- route handlers: (store, match, params, body) -> (status, payload) -------

def _list_payments(store, match, params, body):
    with store.lock:
        items = list(store.payments.values())
    status = params.get("status")
    if status:
        if status not in PaymentStatus.__members__:
            return _error(400, f"Invalid payment status: {status}")
        items = [p for p in items if p.get("status") == status]
    return _page(items, params)


def _expired_payments(store, match, params, body):
    with store.lock:
        items = [p for p in store.payments.values() if p.get("status") == "EXPIRED"]
    return _page(items, params)


def _user_payments(store, match, params, body):
    user_id = match.group(1)
    with store.lock:
        items = [p for p in store.payments.values() if str(p.get("userId")) == user_id]
    return _page(items, params)


def _get_payment(store, match, params, body):
    with store.lock:
        payment = store.payments.get(int(match.group(1)))
    if payment is None:
        return _error(404, "Payment not found")
    return 200, _envelope(payment)


def _update_status(store, match, params, body):
    new_status = params.get("status")
    if not new_status or new_status not in PaymentStatus.__members__:
        return _error(400, f"Invalid payment status: {new_status}")
    with store.lock:
        payment = store.payments.get(int(match.group(1)))
        if payment is None:
            return _error(404, "Payment not found")
        history = list(payment.get("history") or [])
        now = _now()
        history.append({
            "id": len(history) + 1,
            "previousStatus": payment["status"],
            "newStatus": new_status,
            "actionType": "STATUS_UPDATE",
            "timestamp": now,
            "notes": None,
        })
        payment.update(status=new_status, history=history, updatedAt=now)
        return 200, _envelope(dict(payment))


def _statistics(store, match, params, body):
    try:
        start = datetime.fromisoformat(params["startDate"]).replace(tzinfo=None)
        end = datetime.fromisoformat(params["endDate"]).replace(tzinfo=None)
    except (KeyError, ValueError):
        return _error(400, "startDate and endDate must be ISO-8601 date-times")

    with store.lock:
        payments = [
            p for p in store.payments.values()
            if p.get("createdAt") and start <= datetime.fromisoformat(p["createdAt"]) <= end
        ]

    completed = [Decimal(str(p["amount"])) for p in payments if p["status"] == "COMPLETED"]
    revenue = sum(completed, Decimal("0"))
    statuses: dict[str, int] = {}
    methods: dict[str, int] = {}
    for p in payments:
        statuses[p["status"]] = statuses.get(p["status"], 0) + 1
        method = (p.get("paymentMethod") or {}).get("code")
        if method:
            methods[method] = methods.get(method, 0) + 1

    return 200, _envelope({
        "totalRevenue": revenue,
        "totalTransactions": len(payments),
        "averageTransaction": (revenue / len(completed)).quantize(Decimal("0.01")) if completed else Decimal("0"),
        "statusDistribution": statuses,
        "paymentMethodDistribution": methods,
        "pendingTransactions": statuses.get("PENDING", 0),
        "completedTransactions": statuses.get("COMPLETED", 0),
        "failedTransactions": statuses.get("FAILED", 0),
    })


def _list_methods(predicate):
    def handler(store, match, params, body):
        with store.lock:
            items = [m for m in store.methods.values() if predicate(m)]
        return 200, _envelope(items)
    return handler


def _validate_method(store, body, method_id=None):
    if not isinstance(body, dict):
        return _error(400, "Request body must be a JSON object")
    missing = [f for f in ("name", "code", "type") if not body.get(f)]
    if missing:
        return _error(400, f"Missing required fields: {missing}")
    if body["type"] not in PaymentMethodType.__members__:
        return _error(400, f"Invalid payment method type: {body['type']}")
    for existing in store.methods.values():
        if existing["code"] == body["code"] and existing["id"] != method_id:
            return _error(400, f"Payment method code already exists: {body['code']}")
    return None


def _get_method(store, match, params, body):
    with store.lock:
        method = store.methods.get(int(match.group(1)))
    if method is None:
        return _error(404, "Payment method not found")
    return 200, _envelope(method)


def _create_method(store, match, params, body):
    now = _now()
    with store.lock:
        invalid = _validate_method(store, body)
        if invalid:
            return invalid
        method = {k: v for k, v in body.items() if k != "id"}
        method.update(createdAt=now, updatedAt=now, id=None)
        return 200, _envelope(store.insert_method(method))


def _update_method(store, match, params, body):
    method_id = int(match.group(1))
    with store.lock:
        existing = store.methods.get(method_id)
        if existing is None:
            return _error(404, "Payment method not found")
        invalid = _validate_method(store, body, method_id)
        if invalid:
            return invalid
        existing.update({k: v for k, v in body.items() if k not in ("id", "createdAt")})
        existing["updatedAt"] = _now()
        return 200, _envelope(dict(existing))


def _delete_method(store, match, params, body):
    with store.lock:
        if store.methods.pop(int(match.group(1)), None) is None:
            return _error(404, "Payment method not found")
    return 200, _envelope(None)


ROUTES = [
    ("GET", re.compile(r"^/api/payments$"), _list_payments),
    ("GET", re.compile(r"^/api/payments/expired$"), _expired_payments),
    ("GET", re.compile(r"^/api/payments/statistics$"), _statistics),
    ("GET", re.compile(r"^/api/payments/user/([^/]+)$"), _user_payments),
    ("GET", re.compile(r"^/api/payments/(\d+)$"), _get_payment),
    ("PUT", re.compile(r"^/api/payments/(\d+)/status$"), _update_status),
    ("GET", re.compile(r"^/api/payment-methods$"), _list_methods(lambda m: True)),
    ("GET", re.compile(r"^/api/payment-methods/active$"), _list_methods(lambda m: m.get("isActive", True))),
    ("GET", re.compile(r"^/api/payment-methods/online$"), _list_methods(lambda m: m.get("isOnline", True))),
    ("POST", re.compile(r"^/api/payment-methods$"), _create_method),
    ("GET", re.compile(r"^/api/payment-methods/(\d+)$"), _get_method),
    ("PUT", re.compile(r"^/api/payment-methods/(\d+)$"), _update_method),
    ("DELETE", re.compile(r"^/api/payment-methods/(\d+)$"), _delete_method),
]


class _BackendHandler(BaseHTTPRequestHandler):
    """HTTP request handler speaking the payment backend's REST contract."""

    def do_GET(self):
        self._dispatch("GET")

    def do_POST(self):
        self._dispatch("POST")

    def do_PUT(self):
        self._dispatch("PUT")

    def do_DELETE(self):
        self._dispatch("DELETE")

    def _send(self, status: int, payload) -> None:
        if isinstance(payload, str):
            data = payload.encode()
        else:
            data = json.dumps(payload, default=str).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(data)))
        self.end_headers()
        self.wfile.write(data)

    def _dispatch(self, method: str) -> None:
        server_config = self.server.config  # type: ignore[attr-defined]
        store: BackendStore = self.server.store  # type: ignore[attr-defined]

        parsed = urlparse(self.path)
        path = parsed.path
        params = {k: v[-1] for k, v in parse_qs(parsed.query, keep_blank_values=True).items()}

        content_length = int(self.headers.get("Content-Length", 0))
        raw = self.rfile.read(content_length) if content_length else b""
        try:
            body = json.loads(raw) if raw else None
        except (json.JSONDecodeError, ValueError):
            self._send(*_error(400, "invalid JSON"))
            return

        with server_config["lock"]:
            server_config["received_requests"].append({
                "method": method,
                "path": path,
                "params": params,
                "headers": dict(self.headers),
                "body": body,
            })

        if server_config["response_delay"] > 0:
            time.sleep(server_config["response_delay"])

        override = server_config["overrides"].get((method, path))
        if override is not None:
            self._send(*override)
            return

        if server_config["response_code"] >= 400:
            self._send(*_error(server_config["response_code"], "Forced failure"))
            return

        token = server_config["required_token"]
        if token and self.headers.get("Authorization") != f"Bearer {token}":
            self._send(*_error(401, "Unauthenticated"))
            return

        for route_method, pattern, handler in ROUTES:
            match = pattern.match(path)
            if match and route_method == method:
                status, payload = handler(store, match, params, body)
                if status == 200 and server_config["bare_lists"] and isinstance(payload, dict):
                    result = payload.get("result")
                    if isinstance(result, dict) and "content" in result:
                        payload = result["content"]
                self._send(status, payload)
                return

        self._send(*_error(404, f"No handler for {method} {path}"))

    def log_message(self, format, *args):
        """Suppress default request logging."""
        pass


class FakePaymentBackend:
    """In-process HTTP server that mimics the payment administration backend."""

    def __init__(self, host: str = "127.0.0.1", port: int = 0):
        self._host = host
        self._port = port
        self.store = BackendStore()
        self._config = {
            "response_code": 200,
            "response_delay": 0,
            "required_token": None,
            "bare_lists": False,
            "overrides": {},
            "received_requests": [],
            "lock": threading.Lock(),
        }
        self._server: ThreadingHTTPServer | None = None
        self._thread: threading.Thread | None = None

    def set_response_code(self, code: int) -> Self:
        """Answer every request with this status (>= 400 short-circuits routing)."""
        self._config["response_code"] = code
        return self

    def set_response_delay(self, seconds: float) -> Self:
        self._config["response_delay"] = seconds
        return self

    def require_token(self, token: str) -> Self:
        self._config["required_token"] = token
        return self

    def serve_bare_lists(self, enabled: bool = True) -> Self:
        """Return paged results as a bare JSON array instead of an envelope."""
        self._config["bare_lists"] = enabled
        return self

    def set_raw_response(self, method: str, path: str, status: int, body) -> Self:
        """Answer METHOD path (relative to /api) with a fixed status and body.

        A str body is sent verbatim, anything else is JSON-encoded.
        """
        full_path = "/api/" + path.lstrip("/")
        self._config["overrides"][(method.upper(), full_path)] = (status, body)
        return self

    def start(self) -> None:
        self._server = ThreadingHTTPServer((self._host, self._port), _BackendHandler)
        self._server.config = self._config  # type: ignore[attr-defined]
        self._server.store = self.store  # type: ignore[attr-defined]
        # Get the actual port (useful when port=0)
        self._port = self._server.server_address[1]
        self._thread = threading.Thread(target=self._server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._server:
            self._server.shutdown()
            self._server.server_close()
            self._server = None
        if self._thread:
            self._thread.join(timeout=5)
            self._thread = None

    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}/api"

    @property
    def port(self) -> int:
        return self._port

    def get_received_requests(self, method: str | None = None) -> list[dict]:
        with self._config["lock"]:
            requests = list(self._config["received_requests"])
        if method is None:
            return requests
        return [r for r in requests if r["method"] == method.upper()]

    def last_request(self) -> dict | None:
        with self._config["lock"]:
            received = self._config["received_requests"]
            return received[-1] if received else None

    def clear_requests(self) -> None:
        with self._config["lock"]:
            self._config["received_requests"].clear()

    def reset(self) -> None:
        """Drop stored data, recorded requests and every configured behaviour."""
        self.store.clear()
        with self._config["lock"]:
            self._config["received_requests"].clear()
        self._config.update(
            response_code=200,
            response_delay=0,
            required_token=None,
            bare_lists=False,
            overrides={},
        )
