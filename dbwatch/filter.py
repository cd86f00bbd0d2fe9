"""Filters that decide which watchers a change concerns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from dbwatch.request import KeyDefinition, WatcherRequest


@dataclass(frozen=True)
class PrimaryFilter:
    """Match one primary key, or every key when ``key`` is None."""

    key: bytes | None = None

    def _match_count(self, request: WatcherRequest) -> int:
        return int(self.key is None or self.key == request.primary_key)


@dataclass(frozen=True)
class PrimaryPrefixFilter:
    """Match primary keys starting with ``prefix``."""

    prefix: bytes

    def _match_count(self, request: WatcherRequest) -> int:
        return int(request.primary_key.startswith(self.prefix))


@dataclass(frozen=True)
class SecondaryFilter:
    """Match one value of a secondary key, or any value when ``key`` is None."""

    key_def: KeyDefinition
    key: bytes | None = None

    def _match_count(self, request: WatcherRequest) -> int:
        return sum(
            1
            for key_def, entry in request.secondary_keys_value.items()
            if key_def == self.key_def and (self.key is None or entry.value == self.key)
        )


@dataclass(frozen=True)
class SecondaryPrefixFilter:
    """Match secondary key values starting with ``prefix``."""

    key_def: KeyDefinition
    prefix: bytes

    def _match_count(self, request: WatcherRequest) -> int:
        return sum(
            1
            for key_def, entry in request.secondary_keys_value.items()
            if entry.value is not None
            and key_def == self.key_def
            and entry.value.startswith(self.prefix)
        )


KeyFilter = Union[PrimaryFilter, PrimaryPrefixFilter, SecondaryFilter, SecondaryPrefixFilter]


@dataclass(frozen=True)
class TableFilter:
    """A key filter bound to one table."""

    table_name: str
    key_filter: KeyFilter

    @classmethod
    def primary(cls, table_name: str, key: bytes | None) -> TableFilter:
        return cls(table_name, PrimaryFilter(key))

    @classmethod
    def primary_start_with(cls, table_name: str, key_prefix: bytes) -> TableFilter:
        return cls(table_name, PrimaryPrefixFilter(key_prefix))

    @classmethod
    def secondary(
        cls, table_name: str, key_def: KeyDefinition, key: bytes | None
    ) -> TableFilter:
        return cls(table_name, SecondaryFilter(key_def, key))

    @classmethod
    def secondary_start_with(
        cls, table_name: str, key_def: KeyDefinition, key_prefix: bytes
    ) -> TableFilter:
        return cls(table_name, SecondaryPrefixFilter(key_def, key_prefix))

    def match_count(self, request: WatcherRequest) -> int:
        """How many times the request satisfies this filter (0 if not at all)."""
        if self.table_name != request.table_name:
            return 0
        return self.key_filter._match_count(request)