"""Resolution of note identifiers into playable notes.

A note may be requested by name ("C#4"), by frequency in Hertz, or by piano
key number. Each request is matched against the keyboard table and produces
a `Note` carrying the key's identity plus mutable playback settings.
"""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from functools import cache
from numbers import Integral, Real
from typing import TYPE_CHECKING, Optional

from noteplayer import constants
from noteplayer.common import (
    ConstructionError,
    EndedCallback,
    NotFoundError,
    OutOfRangeError,
)
from noteplayer.destination import Destination
from noteplayer.keyboard import KeyEntry, KeyIndex, KeyTable, default_index

if TYPE_CHECKING:
    from noteplayer.emitter import Playback, ToneEmitter

logger = logging.getLogger(__name__)


def sample_duration(rng: random.Random) -> float:
    """Draw a default duration, uniform in [MIN_DURATION, MAX_DURATION)."""
    span = constants.MAX_DURATION - constants.MIN_DURATION
    return constants.MIN_DURATION + span * rng.random()


@dataclass
class Note:
    """A resolved note ready to be handed to a tone emitter.

    The key identity is fixed at construction. Duration, volume and
    destination may be changed up until playback.
    """

    entry: KeyEntry
    duration: float
    volume: float = constants.DEFAULT_VOLUME
    destination: Optional[Destination] = None

    def __post_init__(self) -> None:
        if not isinstance(self.entry, KeyEntry):
            raise ConstructionError(f"Expected a KeyEntry, got {type(self.entry)}")
        name = self.entry.name
        if not name or not name[-1].isdigit():
            raise ConstructionError(f"Key name {name!r} has no octave digit")

    def __setattr__(self, name: str, value: object) -> None:
        if name == "entry" and "entry" in self.__dict__:
            raise AttributeError("Note identity cannot be reassigned")
        super().__setattr__(name, value)

    @property
    def key_number(self) -> int:
        return self.entry.key_number

    @property
    def frequency(self) -> float:
        return self.entry.frequency

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def octave(self) -> int:
        return self.entry.octave

    def set_duration(self, duration: Optional[float]) -> None:
        """Replace the duration in seconds; None leaves it unchanged."""
        if duration is not None:
            self.duration = duration

    def set_volume(self, volume: Optional[float]) -> None:
        """Replace the volume; None leaves it unchanged.

        Values are expected in [0, 1] but are not clamped here.
        """
        if volume is not None:
            self.volume = volume

    def set_destination(self, destination: Optional[Destination]) -> None:
        """Replace the output destination; None leaves it unchanged."""
        if destination is not None:
            self.destination = destination

    def play(
        self, emitter: ToneEmitter, on_ended: Optional[EndedCallback] = None
    ) -> Playback:
        """Start playing this note through an emitter.

        Args:
            emitter: The tone emitter that produces the sound.
            on_ended: Called once the destination reports the tone has ended.

        Returns:
            A handle that can be waited on for completion.
        """
        if self.destination is None:
            raise ValueError(f"Note {self.name} has no destination to play to")
        logger.info("note %s will play for %.3fs", self.name, self.duration)
        return emitter.emit(
            frequency=self.frequency,
            volume=self.volume,
            duration=self.duration,
            destination=self.destination,
            on_ended=on_ended,
        )


def _check_name(name: object) -> str:
    if not isinstance(name, str):
        raise ConstructionError(f"Note name must be a string, got {type(name)}")
    return name


def _check_frequency(frequency: object) -> float:
    if isinstance(frequency, bool) or not isinstance(frequency, Real):
        raise ConstructionError(f"Frequency must be a number, got {type(frequency)}")
    value = float(frequency)
    if math.isnan(value):
        raise ConstructionError("Frequency must not be NaN")
    return value


def _check_key_number(key_number: object) -> int:
    if isinstance(key_number, bool) or not isinstance(key_number, Integral):
        raise ConstructionError(
            f"Key number must be an integer, got {type(key_number)}"
        )
    return int(key_number)


class NoteResolver:
    """Builds notes from names, frequencies or key numbers.

    Resolution only reads the keyboard table and stores the destination it
    is given; it never opens or touches audio outputs.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        table: Optional[KeyTable] = None,
    ) -> None:
        """Initialize the resolver.

        Args:
            rng: Source for default durations. A fresh unseeded generator
                is used when absent.
            table: Keyboard table to resolve against. Defaults to the
                process-wide 88-key table.
        """
        self._rng = rng if rng is not None else random.Random()
        self._index = default_index() if table is None else KeyIndex.build(table)

    @property
    def table(self) -> KeyTable:
        return self._index.table

    def _make(self, entry: KeyEntry, destination: Optional[Destination]) -> Note:
        return Note(
            entry=entry,
            duration=sample_duration(self._rng),
            destination=destination,
        )

    def by_name(self, name: str, destination: Optional[Destination] = None) -> Note:
        """Resolve an exact, case-sensitive note name such as "A4" or "C#5".

        Raises:
            NotFoundError: No key carries this name.
            ConstructionError: The name is not a string.
        """
        entry = self._index.by_name.get(_check_name(name))
        if entry is None:
            raise NotFoundError("name", name)
        return self._make(entry, destination)

    def by_frequency(
        self, frequency: float, destination: Optional[Destination] = None
    ) -> Note:
        """Resolve the key whose frequency is closest to the given one.

        Equidistant candidates resolve to the lower key.

        Raises:
            OutOfRangeError: The frequency lies outside the keyboard's span.
            ConstructionError: The frequency is not a number.
        """
        freq = _check_frequency(frequency)
        low = self._index.lowest.frequency
        high = self._index.highest.frequency
        if freq < low or freq > high:
            raise OutOfRangeError(freq, low, high)
        closest = self._index.closest(freq)
        logger.debug(
            "closest frequency to %s is %s which is for %s",
            freq,
            closest.frequency,
            closest.name,
        )
        return self.by_name(closest.name, destination)

    def by_key_number(
        self, key_number: int, destination: Optional[Destination] = None
    ) -> Note:
        """Resolve a piano key number, A0 = 1 through C8 = 88.

        Raises:
            NotFoundError: No key carries this number.
            ConstructionError: The key number is not an integer.
        """
        entry = self._index.by_key_number.get(_check_key_number(key_number))
        if entry is None:
            raise NotFoundError("key number", key_number)
        return self._make(entry, destination)


@cache
def default_resolver() -> NoteResolver:
    """Resolver over the process-wide table, created on first use."""
    return NoteResolver()


def build_from_name(name: str, destination: Optional[Destination] = None) -> Note:
    return default_resolver().by_name(name, destination)


def build_from_frequency(
    frequency: float, destination: Optional[Destination] = None
) -> Note:
    return default_resolver().by_frequency(frequency, destination)


def build_from_key_number(
    key_number: int, destination: Optional[Destination] = None
) -> Note:
    return default_resolver().by_key_number(key_number, destination)
