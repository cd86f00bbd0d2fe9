"""Key descriptions and the change requests matched against watchers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class KeyDefinition:
    """Describes a secondary key: its table, accepted key types and options."""

    unique_table_name: str
    key_types: tuple[str, ...] = ()
    unique: bool = False
    optional: bool = False


@dataclass(frozen=True)
class KeyEntry:
    """The value of a secondary key for one record; optional keys may be absent."""

    value: bytes | None
    is_optional: bool = False

    def __post_init__(self) -> None:
        if self.value is None:
            if not self.is_optional:
                raise ValueError("a non-optional key entry needs a value")
        else:
            object.__setattr__(self, "value", bytes(self.value))

    @classmethod
    def default(cls, value: bytes) -> KeyEntry:
        """Entry of a key that always has a value."""
        return cls(value, False)

    @classmethod
    def optional(cls, value: bytes | None) -> KeyEntry:
        """Entry of an optional key, possibly without a value."""
        return cls(value, True)


@dataclass
class WatcherRequest:
    """A change to one record: its table, primary key and secondary key values."""

    table_name: str
    primary_key: bytes
    secondary_keys_value: dict[KeyDefinition, KeyEntry] = field(default_factory=dict)