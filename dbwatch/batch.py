"""A batch of change events collected during a transaction."""

from __future__ import annotations

from collections.abc import Iterator

from dbwatch.event import Event
from dbwatch.request import WatcherRequest


class Batch:
    """Pairs of request and event, yielded last-added first."""

    def __init__(self) -> None:
        self._items: list[tuple[WatcherRequest, Event]] = []

    def add(self, request: WatcherRequest, event: Event) -> None:
        """Append a change to the batch."""
        self._items.append((request, event))

    def __iter__(self) -> Iterator[tuple[WatcherRequest, Event]]:
        return reversed(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        parts = "".join(
            f"({request.primary_key!r}, {type(event).__name__}), "
            for request, event in self._items
        )
        return f"[{parts}]"