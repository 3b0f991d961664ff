import os
from dataclasses import dataclass

DEFAULT_BASE_URL = "http://localhost:8080/api"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for PaymentClient.

    timeout_seconds=None leaves the timeout to the transport (requests
    applies none).
    """

    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float | None = None

    def __post_init__(self):
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Read PAYMENT_API_BASE_URL and PAYMENT_API_TIMEOUT, falling back to defaults."""
        timeout = os.environ.get("PAYMENT_API_TIMEOUT")
        return cls(
            base_url=os.environ.get("PAYMENT_API_BASE_URL", DEFAULT_BASE_URL),
            timeout_seconds=float(timeout) if timeout else None,
        )

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"
