"""Change events delivered to watchers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Insert:
    """A value was inserted."""

    value: Any

    def inner(self) -> Any:
        """Return the inserted value."""
        return self.value


@dataclass(frozen=True)
class Update:
    """A value was replaced by a new one."""

    old: Any
    new: Any

    def inner(self) -> Any:
        """Return the new value."""
        return self.new

    def inner_old(self) -> Any:
        """Return the value before the update."""
        return self.old

    def inner_new(self) -> Any:
        """Return the value after the update."""
        return self.new


@dataclass(frozen=True)
class Delete:
    """A value was removed."""

    value: Any

    def inner(self) -> Any:
        """Return the removed value."""
        return self.value


Event = Union[Insert, Update, Delete]