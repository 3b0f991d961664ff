"""Deserialization of backend response bodies into canonical models.

Successful backend responses are wrapped as ``{"code": 100, "message":
"Success", "result": <payload>}``. List endpoints have also been seen to
return a bare JSON array. Every body is classified into a ResponseShape
first, then converted; anything that does not fit raises MalformedResponse.
"""

from enum import Enum
from typing import Callable, TypeVar

from src.models.page import Page
from src.models.payment import Payment
from src.payment_client.errors import MalformedResponse

T = TypeVar("T")


class ResponseShape(Enum):
    PAGED_ENVELOPE = "paged_envelope"  # {"result": {"content": [...]}}
    LIST_ENVELOPE = "list_envelope"  # {"result": [...]}
    ENTITY_ENVELOPE = "entity_envelope"  # {"result": {...}}
    EMPTY_ENVELOPE = "empty_envelope"  # {"result": null}
    BARE_ARRAY = "bare_array"  # [...]
    UNKNOWN = "unknown"


def classify(body) -> ResponseShape:
    if isinstance(body, list):
        return ResponseShape.BARE_ARRAY
    if not isinstance(body, dict) or "result" not in body:
        return ResponseShape.UNKNOWN

    result = body["result"]
    if result is None:
        return ResponseShape.EMPTY_ENVELOPE
    if isinstance(result, list):
        return ResponseShape.LIST_ENVELOPE
    if isinstance(result, dict):
        if isinstance(result.get("content"), list):
            return ResponseShape.PAGED_ENVELOPE
        return ResponseShape.ENTITY_ENVELOPE
    return ResponseShape.UNKNOWN


def _convert(factory: Callable[[dict], T], item, body) -> T:
    if not isinstance(item, dict):
        raise MalformedResponse(f"expected an object, got {type(item).__name__}", body=body)
    try:
        return factory(item)
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise MalformedResponse(f"invalid {getattr(factory, '__qualname__', 'entity')}: {e!r}", body=body) from e


def _optional_int(value) -> int | None:
    return value if isinstance(value, int) and not isinstance(value, bool) else None


def parse_page(body) -> Page:
    """Normalize a paged envelope or a bare array of payments into a Page."""
    shape = classify(body)

    if shape is ResponseShape.BARE_ARRAY:
        items, meta = body, {}
    elif shape is ResponseShape.LIST_ENVELOPE:
        items, meta = body["result"], {}
    elif shape is ResponseShape.PAGED_ENVELOPE:
        meta = body["result"]
        items = meta["content"]
    else:
        raise MalformedResponse(f"expected a page of payments, got {shape.value}", body=body)

    return Page(
        content=tuple(_convert(Payment.from_dict, item, body) for item in items),
        total_elements=_optional_int(meta.get("totalElements")),
        total_pages=_optional_int(meta.get("totalPages")),
        number=_optional_int(meta.get("number")),
        size=_optional_int(meta.get("size")),
    )


def unwrap_result(body, allow_empty: bool = False):
    """Return the envelope payload.

    A missing envelope is always malformed; a null payload is accepted only
    when allow_empty is set (delete endpoints answer with no result).
    """
    shape = classify(body)
    if shape in (ResponseShape.UNKNOWN, ResponseShape.BARE_ARRAY):
        raise MalformedResponse(f"expected a {{result: ...}} envelope, got {shape.value}", body=body)
    if shape is ResponseShape.EMPTY_ENVELOPE and not allow_empty:
        raise MalformedResponse("envelope has no result", body=body)
    return body["result"]


def parse_entity(body, factory: Callable[[dict], T]) -> T:
    return _convert(factory, unwrap_result(body), body)


def parse_entity_list(body, factory: Callable[[dict], T]) -> list[T]:
    shape = classify(body)
    if shape is ResponseShape.LIST_ENVELOPE:
        items = body["result"]
    elif shape is ResponseShape.BARE_ARRAY:
        items = body
    else:
        raise MalformedResponse(f"expected a list, got {shape.value}", body=body)
    return [_convert(factory, item, body) for item in items]


def error_message(body) -> str | None:
    """Pull the server's message out of an error body, if it has one."""
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str):
            return message
    return None
