class PaymentClientError(Exception):
    """Base class for every error raised by the payment client."""


class InvalidArgument(PaymentClientError, ValueError):
    """Caller input rejected before any request was sent."""


class TransportError(PaymentClientError):
    """The request never produced an HTTP response (DNS, refused connection, timeout)."""


class HTTPStatusError(PaymentClientError):
    """The backend answered with a 4xx or 5xx status."""

    def __init__(self, status_code: int, message: str | None = None, url: str | None = None):
        self.status_code = status_code
        self.message = message
        self.url = url
        detail = f": {message}" if message else ""
        super().__init__(f"HTTP {status_code} from {url}{detail}")


class MalformedResponse(PaymentClientError):
    """The response body does not have the expected shape."""

    def __init__(self, message: str, body=None):
        self.body = body
        super().__init__(message)
