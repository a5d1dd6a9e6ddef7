"""Constants for the noteplayer keyboard model and playback.

This module collects the tuning anchor, the pitch class cycle and the
defaults used when building and playing notes.
"""

from typing import Tuple

REFERENCE_FREQUENCY = 25.95654359874657
"""Frequency of G#-1 under A4 = 440 Hz tuning, one semitone below A0 (Hz)."""

SEMITONE_RATIO = 2 ** (1 / 12)
"""Equal temperament ratio between adjacent semitones."""

PITCH_CLASSES: Tuple[str, ...] = (
    "A",
    "A#",
    "B",
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
)
"""Pitch class cycle starting at A, in keyboard order."""

OCTAVE_BOUNDARY = PITCH_CLASSES.index("C")
"""Index of the pitch class at which scientific octave numbers increment."""

NUM_OCTAVES = 9
"""Octave indices 0 through 8 are generated before truncation."""

NUM_KEYS = 88
"""Number of keys on a standard piano (A0..C8)."""

MIDI_KEY_OFFSET = 20
"""Offset from piano key number to MIDI note number (A0 = 21, A4 = 69)."""

MIN_DURATION = 0.5
"""Lower bound of the randomly sampled default duration (seconds, inclusive)."""

MAX_DURATION = 3.0
"""Upper bound of the randomly sampled default duration (seconds, exclusive)."""

DEFAULT_VOLUME = 1.0
"""Default note volume in [0, 1]."""

DEFAULT_SAMPLE_RATE = 44100
"""Sample rate for rendered buffers (Hz)."""

DEFAULT_MIDI_CHANNEL = 0
"""MIDI channel used by the MIDI destination."""

DEFAULT_BEND_RANGE = 2.0
"""Pitch-bend range of the receiving synth (semitones, each direction)."""

MAX_PITCHWHEEL = 8191
"""Largest signed MIDI pitchwheel value."""

MIN_PITCHWHEEL = -8192
"""Smallest signed MIDI pitchwheel value."""

DEFAULT_LOG_LEVEL = "INFO"
"""Logging level used when the command line does not set one."""
