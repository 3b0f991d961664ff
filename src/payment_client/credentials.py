import threading
from typing import Callable, Union


class TokenCredentials:
    """Holds the bearer token handed to PaymentClient.

    The client reads the token on every request, so set_token/clear take
    effect on the next call.
    """

    def __init__(self, token: str | None = None):
        self._token = token
        self._lock = threading.Lock()

    def get_token(self) -> str | None:
        with self._lock:
            return self._token or None

    def set_token(self, token: str | None) -> None:
        with self._lock:
            self._token = token

    def clear(self) -> None:
        self.set_token(None)


CredentialSource = Union[TokenCredentials, Callable[[], "str | None"], str, None]


def resolve_token(source: CredentialSource) -> str | None:
    """Read the current token from any supported credential source."""
    if source is None:
        return None
    if isinstance(source, str):
        return source or None
    if isinstance(source, TokenCredentials):
        return source.get_token()
    return source() or None
