"""Errors and shared types for noteplayer."""

from __future__ import annotations

from typing import Callable

type EndedCallback = Callable[[], None]
"""Zero-argument callback fired once a tone has finished playing."""


class NotePlayerError(Exception):
    """Base class for failures to resolve or build a note."""


class NotFoundError(NotePlayerError):
    """Raised when no keyboard entry matches a name or key number."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"No key with {field} {value!r}")
        self.field = field
        self.value = value


class OutOfRangeError(NotePlayerError):
    """Raised when a frequency falls outside the keyboard's span."""

    def __init__(self, frequency: float, low: float, high: float) -> None:
        super().__init__(f"Frequency {frequency} out of range ({low} - {high})")
        self.frequency = frequency
        self.low = low
        self.high = high


class ConstructionError(NotePlayerError):
    """Raised when the input used to build a note is malformed."""
