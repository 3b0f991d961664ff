from .client import PaymentClient
from .config import ClientConfig
from .credentials import TokenCredentials
from .errors import (
    HTTPStatusError,
    InvalidArgument,
    MalformedResponse,
    PaymentClientError,
    TransportError,
)
from .logger import RequestLogger
from .pagination import Pageable, parse_sort

__all__ = [
    "PaymentClient",
    "ClientConfig",
    "TokenCredentials",
    "PaymentClientError", "InvalidArgument", "TransportError",
    "HTTPStatusError", "MalformedResponse",
    "RequestLogger",
    "Pageable", "parse_sort",
]
