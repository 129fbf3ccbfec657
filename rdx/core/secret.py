"""Opaque wrapper for credentials."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["Secret"]


@dataclass(frozen=True, slots=True)
class Secret:
    """A credential whose value never shows up in repr/str.

    Hand the value to tools through stdin or the environment only; command
    lines end up in error messages and process listings.
    """

    name: str
    _value: str = field(repr=False)

    def reveal(self) -> str:
        return self._value

    def __str__(self) -> str:
        return f"<secret {self.name}>"

    def __bool__(self) -> bool:
        return bool(self._value)
