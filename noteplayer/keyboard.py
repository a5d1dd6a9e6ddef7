"""The 88-key piano keyboard in twelve-tone equal temperament.

The table is built by walking octaves 0..8 and, within each, the pitch class
cycle A..G#, multiplying a running frequency by one semitone per step from a
reference one semitone below A0. The running product is order-sensitive, so
the walk must stay octave-major to reproduce identical frequencies.

Names follow scientific pitch notation, where the octave number increments
at C: the walk starts at A0, A#0, B0 and then continues C1, C#1 and so on up
to C8.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from types import MappingProxyType
from typing import List, Mapping, Tuple

from noteplayer import constants


@dataclass(frozen=True)
class KeyEntry:
    """A single piano key with its name and frequency."""

    key_number: int  # 1-based piano key index, A0 = 1
    frequency: float  # Hertz
    name: str  # Pitch class followed by octave digit, e.g. "C#4"

    @property
    def pitch_class(self) -> str:
        return self.name[:-1]

    @property
    def octave(self) -> int:
        return int(self.name[-1])

    @property
    def midi_note(self) -> int:
        return self.key_number + constants.MIDI_KEY_OFFSET


type KeyTable = Tuple[KeyEntry, ...]


def generate_keyboard() -> KeyTable:
    """Generate the keyboard table from scratch.

    Returns:
        The 88 keys A0..C8 in ascending key number order.
    """
    entries: List[KeyEntry] = []
    freq = constants.REFERENCE_FREQUENCY
    key_number = 0
    for octave in range(constants.NUM_OCTAVES):
        for step, pitch_class in enumerate(constants.PITCH_CLASSES):
            key_number += 1
            freq = freq * constants.SEMITONE_RATIO
            number = octave + 1 if step >= constants.OCTAVE_BOUNDARY else octave
            entries.append(KeyEntry(key_number, freq, f"{pitch_class}{number}"))
    return tuple(entries[: constants.NUM_KEYS])


@cache
def keyboard_table() -> KeyTable:
    """Return the process-wide keyboard table, generating it on first use."""
    return generate_keyboard()


def get_notes_info() -> KeyTable:
    """Return the ordered 88 key entries."""
    return keyboard_table()


@dataclass(frozen=True, eq=False)
class KeyIndex:
    """Lookup maps over a keyboard table."""

    table: KeyTable
    by_name: Mapping[str, KeyEntry]
    by_key_number: Mapping[int, KeyEntry]

    @staticmethod
    def build(table: KeyTable) -> KeyIndex:
        by_name = {e.name: e for e in table}
        by_key_number = {e.key_number: e for e in table}
        assert len(by_name) == len(table)
        assert len(by_key_number) == len(table)
        return KeyIndex(
            table, MappingProxyType(by_name), MappingProxyType(by_key_number)
        )

    @property
    def lowest(self) -> KeyEntry:
        return self.table[0]

    @property
    def highest(self) -> KeyEntry:
        return self.table[-1]

    def closest(self, frequency: float) -> KeyEntry:
        """Find the entry nearest to a frequency.

        Scans in ascending key order and only replaces the current best on a
        strictly smaller distance, so equidistant candidates resolve to the
        lower key.

        Args:
            frequency: Target frequency in Hertz.

        Returns:
            The closest entry.
        """
        best = self.table[0]
        best_dist = abs(best.frequency - frequency)
        for entry in self.table[1:]:
            dist = abs(entry.frequency - frequency)
            if dist < best_dist:
                best = entry
                best_dist = dist
        return best


@cache
def default_index() -> KeyIndex:
    """Lookup maps over the process-wide keyboard table."""
    return KeyIndex.build(keyboard_table())
