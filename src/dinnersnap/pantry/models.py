"""Pantry value type."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Pantry:
    """Deduplicated canonical ingredients available for one request."""

    items: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, items: Iterable[str]) -> "Pantry":
        return cls(frozenset(items))

    def __contains__(self, item: object) -> bool:
        return item in self.items

    def __iter__(self) -> Iterator[str]:
        return iter(self.as_list())

    def __len__(self) -> int:
        return len(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)

    def as_list(self) -> list[str]:
        """Sorted view for stable output."""
        return sorted(self.items)
