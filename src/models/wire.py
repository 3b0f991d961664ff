from datetime import date, datetime
from decimal import Decimal, InvalidOperation


def to_decimal(value) -> Decimal:
    """Convert a JSON number or numeric string to Decimal without float noise."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"not a decimal amount: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"not a decimal amount: {value!r}") from None


def optional_decimal(value) -> Decimal | None:
    if value is None:
        return None
    return to_decimal(value)


def parse_datetime(value) -> datetime | None:
    """Parse a backend timestamp.

    The backend serializes LocalDateTime either as an ISO-8601 string or as
    a [year, month, day, hour, minute, second, nanos] array.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value[:-1] + "+00:00" if value.endswith("Z") else value
        return datetime.fromisoformat(text)
    if isinstance(value, (list, tuple)) and len(value) >= 3:
        parts = list(value[:7])
        if len(parts) == 7:
            parts[6] = parts[6] // 1000  # nanos -> micros
        return datetime(*parts)
    raise ValueError(f"unrecognized timestamp: {value!r}")


def format_datetime(value: date) -> str:
    """ISO-8601 date-time for query params; bare dates become midnight."""
    if not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    return value.isoformat()
