"""Selection set — list positions marked for bulk deletion."""

from __future__ import annotations

from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")


class SelectionSet:
    """
    Marked indices into the currently displayed backup listing.

    Indices are only meaningful against the listing they were made on;
    callers clear the set whenever that listing is re-fetched.
    """

    def __init__(self) -> None:
        self._marked: set[int] = set()

    def __contains__(self, index: object) -> bool:
        return index in self._marked

    def __len__(self) -> int:
        return len(self._marked)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._marked))

    def toggle(self, index: int) -> None:
        if index in self._marked:
            self._marked.discard(index)
        else:
            self._marked.add(index)

    def select_all(self, count: int) -> None:
        self._marked = set(range(count))

    def clear(self) -> None:
        self._marked.clear()

    def pick(self, items: Sequence[T]) -> list[T]:
        """Items at the marked positions, in listing order."""
        return [items[i] for i in self if 0 <= i < len(items)]
