"""Per-item outcomes of workspace-wide operations.

Scans, repairs and migrations never stop at the first bad function. Each
function gets an :class:`ItemResult` and the caller receives the whole
report, so partial failure is part of the return value.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class ItemResult(Generic[T]):
    """Outcome for one function: a value, a skip reason, or an error."""

    name: str
    path: Path
    value: Optional[T] = None
    skipped: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.skipped is None


@dataclass
class Report(Generic[T]):
    """Collected item results of one workspace operation."""

    items: list[ItemResult[T]] = field(default_factory=list)

    def add(self, item: ItemResult[T]) -> ItemResult[T]:
        self.items.append(item)
        return item

    @property
    def succeeded(self) -> list[ItemResult[T]]:
        return [item for item in self.items if item.ok]

    @property
    def skipped(self) -> list[ItemResult[T]]:
        return [item for item in self.items if item.skipped is not None]

    @property
    def failed(self) -> list[ItemResult[T]]:
        return [item for item in self.items if item.error is not None]

    @property
    def values(self) -> list[T]:
        return [item.value for item in self.succeeded if item.value is not None]
