"""Resolve piano notes by name, frequency or key number and play them."""

from noteplayer.common import (
    ConstructionError,
    NotePlayerError,
    NotFoundError,
    OutOfRangeError,
)
from noteplayer.destination import BufferDestination, Destination, MidiDestination
from noteplayer.emitter import GraphToneEmitter, Playback, ToneEmitter
from noteplayer.keyboard import KeyEntry, generate_keyboard, get_notes_info
from noteplayer.note import (
    Note,
    NoteResolver,
    build_from_frequency,
    build_from_key_number,
    build_from_name,
)

__all__ = [
    "BufferDestination",
    "ConstructionError",
    "Destination",
    "GraphToneEmitter",
    "KeyEntry",
    "MidiDestination",
    "Note",
    "NotePlayerError",
    "NoteResolver",
    "NotFoundError",
    "OutOfRangeError",
    "Playback",
    "ToneEmitter",
    "build_from_frequency",
    "build_from_key_number",
    "build_from_name",
    "generate_keyboard",
    "get_notes_info",
]
