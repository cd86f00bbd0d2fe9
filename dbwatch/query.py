"""Watch queries: register interest in changes to records."""

from __future__ import annotations

import struct
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from dbwatch.filter import TableFilter
from dbwatch.request import KeyDefinition
from dbwatch.watchers import EventChannel, Watchers

_MAX_WATCHER_ID = 2**64 - 1
_INT_MIN = -(2**63)
_INT_MAX = 2**63 - 1


class MaxWatcherReachedError(RuntimeError):
    """No more watcher ids can be handed out."""


class KeyTypeMismatchError(TypeError):
    """The type of a key does not match the key's declared types."""

    def __init__(self, key_type: str, expected: tuple[str, ...]) -> None:
        super().__init__(
            f"key of type {key_type!r} does not match expected types {list(expected)!r}"
        )
        self.key_type = key_type
        self.expected = expected


def _encode_key(value: Any) -> tuple[bytes, str]:
    """Encode a key value to bytes and name its type."""
    if value is None:
        return b"", "None"
    if isinstance(value, bool):
        return bytes([int(value)]), "bool"
    if isinstance(value, int):
        if not _INT_MIN <= value <= _INT_MAX:
            raise OverflowError(f"integer key out of range: {value}")
        return (value - _INT_MIN).to_bytes(8, "big"), "int"
    if isinstance(value, float):
        return struct.pack(">d", value), "float"
    if isinstance(value, str):
        return value.encode("utf-8"), "str"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value), "bytes"
    if isinstance(value, list):
        parts = [_encode_key(item) for item in value]
        names = {name for _, name in parts}
        if len(names) > 1:
            raise TypeError(f"list key with mixed element types: {sorted(names)}")
        name = f"list[{names.pop()}]" if names else "list"
        return b"".join(data for data, _ in parts), name
    if isinstance(value, tuple):
        parts = [_encode_key(item) for item in value]
        name = "tuple[" + ", ".join(name for _, name in parts) + "]"
        return b"".join(data for data, _ in parts), name
    raise TypeError(f"unsupported key type: {type(value).__name__}")


def _check_key_type(expected: tuple[str, ...], key: Any) -> None:
    """Raise KeyTypeMismatchError unless the key's type is among ``expected``."""
    _, name = _encode_key(key)
    if expected and name not in expected:
        raise KeyTypeMismatchError(name, expected)


def _key_bytes(key: Any) -> bytes:
    return _encode_key(key)[0]


class InternalWatch:
    """Creates channels, hands out watcher ids and registers filters."""

    def __init__(
        self,
        watchers: Watchers,
        primary_key_types: Mapping[str, tuple[str, ...]] | None = None,
        next_id: int = 0,
    ) -> None:
        self.watchers = watchers
        self.primary_key_types = dict(primary_key_types or {})
        self._next_id = next_id
        self._id_lock = threading.Lock()

    def _generate_watcher_id(self) -> int:
        with self._id_lock:
            value = self._next_id
            self._next_id = (value + 1) % (_MAX_WATCHER_ID + 1)
        if value == _MAX_WATCHER_ID:
            raise MaxWatcherReachedError("maximum number of watchers reached")
        return value

    def _watch(self, table_filter: TableFilter) -> tuple[EventChannel, int]:
        channel = EventChannel()
        watcher_id = self._generate_watcher_id()
        self.watchers.add_sender(watcher_id, table_filter, channel)
        return channel, watcher_id

    def watch_primary(self, table_name: str, key: Any) -> tuple[EventChannel, int]:
        return self._watch(TableFilter.primary(table_name, _key_bytes(key)))

    def watch_primary_all(self, table_name: str) -> tuple[EventChannel, int]:
        return self._watch(TableFilter.primary(table_name, None))

    def watch_primary_start_with(
        self, table_name: str, start_with: Any
    ) -> tuple[EventChannel, int]:
        return self._watch(
            TableFilter.primary_start_with(table_name, _key_bytes(start_with))
        )

    def watch_secondary(
        self, table_name: str, key_def: KeyDefinition, key: Any
    ) -> tuple[EventChannel, int]:
        return self._watch(TableFilter.secondary(table_name, key_def, _key_bytes(key)))

    def watch_secondary_all(
        self, table_name: str, key_def: KeyDefinition
    ) -> tuple[EventChannel, int]:
        return self._watch(TableFilter.secondary(table_name, key_def, None))

    def watch_secondary_start_with(
        self, table_name: str, key_def: KeyDefinition, start_with: Any
    ) -> tuple[EventChannel, int]:
        return self._watch(
            TableFilter.secondary_start_with(table_name, key_def, _key_bytes(start_with))
        )


@dataclass(frozen=True)
class WatchGet:
    """Watch a single value."""

    internal: InternalWatch

    def primary(self, table_name: str, key: Any) -> tuple[EventChannel, int]:
        """Watch one primary key; return the channel and the watcher id."""
        _check_key_type(self.internal.primary_key_types.get(table_name, ()), key)
        return self.internal.watch_primary(table_name, key)

    def secondary(
        self, table_name: str, key_def: KeyDefinition, key: Any
    ) -> tuple[EventChannel, int]:
        """Watch one secondary key value; return the channel and the watcher id."""
        _check_key_type(key_def.key_types, key)
        return self.internal.watch_secondary(table_name, key_def, key)


@dataclass(frozen=True)
class WatchScanPrimary:
    """Watch several values by primary key."""

    internal: InternalWatch

    def all(self, table_name: str) -> tuple[EventChannel, int]:
        """Watch every record of the table."""
        return self.internal.watch_primary_all(table_name)

    def start_with(self, table_name: str, start_with: Any) -> tuple[EventChannel, int]:
        """Watch records whose primary key starts with ``start_with``."""
        _check_key_type(self.internal.primary_key_types.get(table_name, ()), start_with)
        return self.internal.watch_primary_start_with(table_name, start_with)


@dataclass(frozen=True)
class WatchScanSecondary:
    """Watch several values by one secondary key."""

    internal: InternalWatch
    key_def: KeyDefinition

    def all(self, table_name: str) -> tuple[EventChannel, int]:
        """Watch every record carrying this secondary key."""
        return self.internal.watch_secondary_all(table_name, self.key_def)

    def start_with(self, table_name: str, start_with: Any) -> tuple[EventChannel, int]:
        """Watch records whose secondary key starts with ``start_with``."""
        _check_key_type(self.key_def.key_types, start_with)
        return self.internal.watch_secondary_start_with(
            table_name, self.key_def, start_with
        )


@dataclass(frozen=True)
class WatchScan:
    """Watch several values."""

    internal: InternalWatch

    def primary(self) -> WatchScanPrimary:
        return WatchScanPrimary(self.internal)

    def secondary(self, key_def: KeyDefinition) -> WatchScanSecondary:
        return WatchScanSecondary(self.internal, key_def)


@dataclass(frozen=True)
class Watch:
    """Entry point of watch queries."""

    internal: InternalWatch

    def get(self) -> WatchGet:
        """Watch a single value."""
        return WatchGet(self.internal)

    def scan(self) -> WatchScan:
        """Watch several values."""
        return WatchScan(self.internal)