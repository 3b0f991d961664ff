from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from src.payment_client.errors import InvalidArgument

DEFAULT_SORT_BY = "created_at"
DEFAULT_DIRECTION = "desc"
DEFAULT_SORT = f"{DEFAULT_SORT_BY},{DEFAULT_DIRECTION}"


def parse_sort(sort) -> tuple[str, str]:
    """Return (sortBy, direction) from a "field,direction" string or a sequence of them.

    Only the first entry of a sequence is used. Anything that does not split
    into exactly two non-empty parts falls back to created_at/desc.
    """
    if isinstance(sort, Sequence) and not isinstance(sort, str):
        sort = sort[0] if len(sort) > 0 else None
    if not isinstance(sort, str):
        return DEFAULT_SORT_BY, DEFAULT_DIRECTION

    parts = [p.strip() for p in sort.split(",")]
    if len(parts) != 2 or not all(parts):
        return DEFAULT_SORT_BY, DEFAULT_DIRECTION
    return parts[0], parts[1]


@dataclass(frozen=True)
class Pageable:
    page: int = 0
    size: int = 10
    sort: str | Sequence[str] | None = DEFAULT_SORT

    def __post_init__(self):
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 0:
            raise InvalidArgument(f"page must be a non-negative integer, got {self.page!r}")
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise InvalidArgument(f"size must be a positive integer, got {self.size!r}")

    @classmethod
    def coerce(cls, value) -> "Pageable":
        """Accept a Pageable, a {page, size, sort} mapping, or None for defaults."""
        if value is None:
            return cls()
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            unknown = set(value) - {"page", "size", "sort"}
            if unknown:
                raise InvalidArgument(f"unknown pagination keys: {sorted(unknown)}")
            return cls(**value)
        raise InvalidArgument(f"not a pagination descriptor: {value!r}")

    def to_params(self) -> dict:
        sort_by, direction = parse_sort(self.sort)
        return {
            "page": self.page,
            "size": self.size,
            "sortBy": sort_by,
            "direction": direction,
        }
