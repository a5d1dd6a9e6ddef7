"""Tests for resolving notes by name, frequency and key number."""

import math
import random
from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st

from noteplayer import constants
from noteplayer.common import (
    ConstructionError,
    NotePlayerError,
    NotFoundError,
    OutOfRangeError,
)
from noteplayer.destination import BufferDestination
from noteplayer.keyboard import KeyEntry, get_notes_info
from noteplayer.note import (
    Note,
    NoteResolver,
    build_from_frequency,
    build_from_key_number,
    build_from_name,
    default_resolver,
    sample_duration,
)
from tests.noteplayer.hypo import configure_hypo

configure_hypo()

TABLE = get_notes_info()
LOW = TABLE[0].frequency
HIGH = TABLE[-1].frequency


def test_a4_is_concert_pitch() -> None:
    note = build_from_name("A4")
    assert math.isclose(note.frequency, 440.0, rel_tol=1e-6)
    assert note.key_number == 49
    assert note.octave == 4
    assert note.name == "A4"


def test_key_number_endpoints() -> None:
    assert build_from_key_number(1).name == "A0"
    assert build_from_key_number(88).name == "C8"


def test_sharp_name() -> None:
    note = build_from_name("C#4")
    assert note.key_number == 41
    assert note.octave == 4


@pytest.mark.parametrize("name", ["Z9", "a4", "A", "A9", "Bb4", "", " A4"])
def test_unknown_name(name: str) -> None:
    with pytest.raises(NotFoundError):
        build_from_name(name)


@pytest.mark.parametrize("key_number", [0, 89, -1, 1000])
def test_unknown_key_number(key_number: int) -> None:
    with pytest.raises(NotFoundError):
        build_from_key_number(key_number)


@pytest.mark.parametrize("frequency", [20, 5000, 0.0, -440.0, math.inf])
def test_frequency_out_of_range(frequency: float) -> None:
    with pytest.raises(OutOfRangeError):
        build_from_frequency(frequency)


def test_frequency_range_is_inclusive() -> None:
    assert build_from_frequency(LOW).key_number == 1
    assert build_from_frequency(HIGH).key_number == 88


def test_frequency_round_trip() -> None:
    for entry in TABLE:
        assert build_from_frequency(entry.frequency).key_number == entry.key_number


def test_frequency_approximates() -> None:
    assert build_from_frequency(442.0).name == "A4"
    assert build_from_frequency(261.0).name == "C4"


@given(st.floats(min_value=LOW, max_value=HIGH))
def test_frequency_picks_nearest(frequency: float) -> None:
    note = build_from_frequency(frequency)
    best = abs(note.frequency - frequency)
    assert all(abs(e.frequency - frequency) >= best for e in TABLE)


def test_frequency_tie_prefers_lower_key() -> None:
    resolver = NoteResolver(
        table=(KeyEntry(1, 100.0, "X1"), KeyEntry(2, 200.0, "Y1"))
    )
    assert resolver.by_frequency(150.0).key_number == 1


@pytest.mark.parametrize(
    "call, value",
    [
        (build_from_name, 4),
        (build_from_name, None),
        (build_from_frequency, "440"),
        (build_from_frequency, math.nan),
        (build_from_frequency, True),
        (build_from_key_number, 49.0),
        (build_from_key_number, "49"),
        (build_from_key_number, True),
    ],
)
def test_malformed_input(call: Any, value: Any) -> None:
    with pytest.raises(ConstructionError):
        call(value)


def test_failures_share_a_base() -> None:
    for fn, value in [
        (build_from_name, "Z9"),
        (build_from_frequency, 20),
        (build_from_key_number, 0),
        (build_from_key_number, "x"),
    ]:
        with pytest.raises(NotePlayerError):
            fn(value)


def test_note_requires_octave_digit() -> None:
    with pytest.raises(ConstructionError):
        Note(entry=KeyEntry(1, 100.0, "X"), duration=1.0)


def test_defaults() -> None:
    note = build_from_name("C4")
    assert note.volume == constants.DEFAULT_VOLUME
    assert note.destination is None
    assert constants.MIN_DURATION <= note.duration < constants.MAX_DURATION


@given(st.integers(min_value=0, max_value=2**32))
def test_sample_duration_in_range(seed: int) -> None:
    duration = sample_duration(random.Random(seed))
    assert constants.MIN_DURATION <= duration < constants.MAX_DURATION


def test_seeded_resolver_is_reproducible() -> None:
    first = NoteResolver(rng=random.Random(7))
    second = NoteResolver(rng=random.Random(7))
    assert [first.by_key_number(k).duration for k in range(1, 6)] == [
        second.by_key_number(k).duration for k in range(1, 6)
    ]


def test_frequency_delegates_through_name() -> None:
    # Same seed, same single draw: both paths produce the same default duration
    by_name = NoteResolver(rng=random.Random(3)).by_name("A4")
    by_freq = NoteResolver(rng=random.Random(3)).by_frequency(440.0)
    assert by_name.name == by_freq.name
    assert by_name.duration == by_freq.duration


def test_set_duration() -> None:
    note = build_from_name("A4")
    before = note.duration
    note.set_duration(None)
    assert note.duration == before
    note.set_duration(1.5)
    assert note.duration == 1.5


def test_set_volume_is_not_clamped() -> None:
    note = build_from_name("A4")
    note.set_volume(None)
    assert note.volume == 1.0
    note.set_volume(0.25)
    assert note.volume == 0.25
    note.set_volume(2.0)
    assert note.volume == 2.0


def test_set_destination() -> None:
    note = build_from_name("A4")
    dest = BufferDestination()
    note.set_destination(None)
    assert note.destination is None
    note.set_destination(dest)
    assert note.destination is dest
    note.set_destination(None)
    assert note.destination is dest


def test_destination_is_stored_not_touched() -> None:
    dest = BufferDestination()
    note = build_from_key_number(49, dest)
    assert note.destination is dest
    assert len(dest.samples()) == 0


def test_identity_is_read_only() -> None:
    note = build_from_name("A4")
    with pytest.raises(AttributeError):
        note.frequency = 1.0  # type: ignore[misc]


def test_entry_cannot_be_reassigned() -> None:
    note = build_from_name("A4")
    with pytest.raises(AttributeError):
        note.entry = KeyEntry(1, 27.5, "A0")
    assert note.key_number == 49
    assert note.name == "A4"


def test_default_resolver_is_shared() -> None:
    assert default_resolver() is default_resolver()
    assert default_resolver().table is get_notes_info()
