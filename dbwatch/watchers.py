"""Registered watchers, their event channels and batch delivery."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator

from dbwatch.batch import Batch
from dbwatch.event import Event
from dbwatch.filter import TableFilter
from dbwatch.request import WatcherRequest


class WatchEventError(Exception):
    """Base error for event delivery."""


class ChannelClosedError(WatchEventError):
    """The receiving side of a channel has been closed."""


class EventChannel:
    """Unbounded, thread-safe queue of events for one watcher."""

    def __init__(self) -> None:
        self._events: deque[Event] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def send(self, event: Event) -> None:
        """Queue an event; raise ChannelClosedError if the channel is closed."""
        with self._cond:
            if self._closed:
                raise ChannelClosedError("event channel is closed")
            self._events.append(event)
            self._cond.notify()

    def recv(self, timeout: float | None = None) -> Event:
        """Wait for the next event; raise TimeoutError or ChannelClosedError."""
        with self._cond:
            ready = self._cond.wait_for(
                lambda: bool(self._events) or self._closed, timeout
            )
            if not ready:
                raise TimeoutError("no event received in time")
            if self._events:
                return self._events.popleft()
            raise ChannelClosedError("event channel is closed")

    def try_recv(self) -> Event | None:
        """Return the next pending event, or None if there is none."""
        with self._cond:
            return self._events.popleft() if self._events else None

    def close(self) -> None:
        """Refuse further events; pending ones can still be received."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[Event]:
        """Yield the events pending now, without waiting for more."""
        while (event := self.try_recv()) is not None:
            yield event


class Watchers:
    """Thread-safe registry of watcher ids, filters and channels."""

    def __init__(self) -> None:
        self._senders: dict[int, tuple[TableFilter, EventChannel]] = {}
        self._lock = threading.Lock()

    def add_sender(
        self, watcher_id: int, table_filter: TableFilter, sender: EventChannel
    ) -> None:
        with self._lock:
            self._senders[watcher_id] = (table_filter, sender)

    def remove_sender(self, watcher_id: int) -> bool:
        """Unregister a watcher; return whether it was registered."""
        with self._lock:
            return self._senders.pop(watcher_id, None) is not None

    def find_senders(self, request: WatcherRequest) -> list[tuple[int, EventChannel]]:
        """Channels whose filters match the request, once per match."""
        with self._lock:
            entries = list(self._senders.items())
        return [
            (watcher_id, sender)
            for watcher_id, (table_filter, sender) in entries
            for _ in range(table_filter.match_count(request))
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._senders)


def push_batch(watchers: Watchers, batch: Batch) -> None:
    """Deliver every event of the batch; drop watchers whose channel is closed."""
    unused: list[int] = []
    for request, event in batch:
        for watcher_id, sender in watchers.find_senders(request):
            try:
                sender.send(event)
            except ChannelClosedError:
                unused.append(watcher_id)
    for watcher_id in unused:
        watchers.remove_sender(watcher_id)