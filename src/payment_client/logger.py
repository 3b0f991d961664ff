import logging
import threading
from urllib.parse import urlparse

from src.models.request_attempt import RequestAttempt

logger = logging.getLogger(__name__)


class RequestLogger:
    """Thread-safe record of every HTTP request the client sent.

    Each attempt is also echoed to the module logger: failures at WARNING,
    everything else at DEBUG.
    """

    def __init__(self):
        self._attempts: list[RequestAttempt] = []
        self._lock = threading.Lock()

    def log(self, attempt: RequestAttempt) -> None:
        with self._lock:
            self._attempts.append(attempt)
        level = logging.WARNING if attempt.failed else logging.DEBUG
        logger.log(
            level,
            "%s %s -> %s in %.1fms",
            attempt.method,
            attempt.url,
            attempt.status_code if attempt.status_code is not None else attempt.error,
            attempt.response_time_ms,
        )

    def get_attempts(self, method: str | None = None, path: str | None = None) -> list[RequestAttempt]:
        """Attempts in send order, optionally narrowed by HTTP method and URL path suffix."""
        with self._lock:
            attempts = list(self._attempts)
        if method is not None:
            attempts = [a for a in attempts if a.method == method.upper()]
        if path is not None:
            suffix = "/" + path.strip("/")
            attempts = [a for a in attempts if urlparse(a.url).path.rstrip("/").endswith(suffix)]
        return attempts

    def get_failed_attempts(self) -> list[RequestAttempt]:
        with self._lock:
            return [a for a in self._attempts if a.failed]

    def status_counts(self) -> dict[int | None, int]:
        """How many attempts ended with each status code (None for transport failures)."""
        counts: dict[int | None, int] = {}
        with self._lock:
            for a in self._attempts:
                counts[a.status_code] = counts.get(a.status_code, 0) + 1
        return counts

    def last(self) -> RequestAttempt | None:
        with self._lock:
            return self._attempts[-1] if self._attempts else None

    def clear(self) -> None:
        with self._lock:
            self._attempts.clear()
