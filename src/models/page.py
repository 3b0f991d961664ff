from dataclasses import dataclass

from src.models.payment import Payment


@dataclass(frozen=True)
class Page:
    """Canonical list result. Page metadata is present only when the server sent it."""

    content: tuple[Payment, ...] = ()
    total_elements: int | None = None
    total_pages: int | None = None
    number: int | None = None
    size: int | None = None

    @classmethod
    def empty(cls) -> "Page":
        return cls()

    def __len__(self) -> int:
        return len(self.content)

    def __iter__(self):
        return iter(self.content)
