"""Output destinations that terminate a tone graph.

A destination receives a `Voice` when a tone starts and again when it stops.
`stop_tone` returns only once the output has finished with the voice, which
is what lets the oscillator raise its ended signal afterwards.
"""

from __future__ import annotations

import logging
import math
import time
import wave
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Callable, Dict, List, Tuple, override

import mido
import numpy as np
import numpy.typing as npt

from noteplayer import constants

type Array = npt.NDArray[np.float64]

TAU = np.float64(2 * np.pi)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class Voice:
    """A sounding tone as seen by a destination (compared by identity)."""

    frequency: float  # Hertz
    gain: float  # Product of all gain stages between source and destination


class Destination(metaclass=ABCMeta):
    """Abstract sink at the end of a tone graph."""

    @abstractmethod
    def start_tone(self, voice: Voice) -> None:
        """Begin sounding a voice."""
        raise NotImplementedError()

    @abstractmethod
    def stop_tone(self, voice: Voice) -> None:
        """Stop sounding a voice, returning once the output is done with it."""
        raise NotImplementedError()


def render_tone(
    frequency: float, gain: float, duration: float, sample_rate: int
) -> Array:
    """Render a sine tone.

    Args:
        frequency: Tone frequency in Hertz.
        gain: Linear amplitude.
        duration: Length in seconds.
        sample_rate: Samples per second.

    Returns:
        `round(duration * sample_rate)` samples of `gain * sin(2 pi f t)`.
    """
    assert frequency > 0
    assert sample_rate > 0
    num = max(0, round(duration * sample_rate))
    arr = np.arange(num, dtype=np.float64)
    np.multiply(arr, TAU * np.float64(frequency) / sample_rate, out=arr)
    np.mod(arr, TAU, out=arr)
    np.sin(arr, out=arr)
    np.multiply(arr, np.float64(gain), out=arr)
    return arr


class BufferDestination(Destination):
    """Renders every stopped voice into an in-memory sample buffer.

    Each voice is rendered for the time that elapsed between its start and
    stop, measured on the given clock, and appended to the buffer.
    """

    def __init__(
        self,
        sample_rate: int = constants.DEFAULT_SAMPLE_RATE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sample_rate = sample_rate
        self._clock = clock
        self._lock = Lock()
        self._started: Dict[Voice, float] = {}
        self._chunks: List[Array] = []

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @override
    def start_tone(self, voice: Voice) -> None:
        with self._lock:
            self._started[voice] = self._clock()

    @override
    def stop_tone(self, voice: Voice) -> None:
        with self._lock:
            start = self._started.pop(voice)
            elapsed = self._clock() - start
            chunk = render_tone(voice.frequency, voice.gain, elapsed, self._sample_rate)
            self._chunks.append(chunk)
        logger.debug("rendered %d samples at %s Hz", len(chunk), voice.frequency)

    def samples(self) -> Array:
        """Return all rendered samples, in stop order."""
        with self._lock:
            if not self._chunks:
                return np.zeros(0, dtype=np.float64)
            return np.concatenate(self._chunks)

    def write_wav(self, path: Path) -> None:
        """Write the buffer as 16-bit mono PCM."""
        arr = np.clip(self.samples(), -1.0, 1.0)
        pcm = (arr * 32767).astype("<i2")
        with wave.open(str(path), "wb") as wav:
            wav.setnchannels(1)
            wav.setsampwidth(2)
            wav.setframerate(self._sample_rate)
            wav.writeframes(pcm.tobytes())
        logger.info("wrote %d samples to %s", len(pcm), path)


def frequency_to_midi(frequency: float, bend_range: float) -> Tuple[int, int]:
    """Split a frequency into a MIDI note and a pitchwheel offset.

    Args:
        frequency: Frequency in Hertz.
        bend_range: Semitones covered by a full pitchwheel deflection.

    Returns:
        Tuple of (note, pitch) where note is the nearest MIDI note (0-127)
        and pitch the signed pitchwheel value that corrects the remainder.
    """
    exact = 69 + 12 * math.log2(frequency / 440.0)
    note = min(127, max(0, round(exact)))
    steps = (exact - note) / bend_range
    pitch = round(steps * (constants.MAX_PITCHWHEEL + 1))
    pitch = min(constants.MAX_PITCHWHEEL, max(constants.MIN_PITCHWHEEL, pitch))
    return note, pitch


def volume_to_velocity(volume: float) -> int:
    return min(127, max(0, round(volume * 127)))


class MidiDestination(Destination):
    """Plays voices on a MIDI output port.

    The nearest MIDI note is sounded with a pitchwheel offset for the
    remainder, so the receiving synth must use the same bend range.
    """

    def __init__(
        self,
        port: mido.ports.BaseOutput,
        channel: int = constants.DEFAULT_MIDI_CHANNEL,
        bend_range: float = constants.DEFAULT_BEND_RANGE,
    ) -> None:
        if not (0 <= channel <= 15):
            raise ValueError(f"channel {channel} out of range (0-15)")
        if bend_range <= 0:
            raise ValueError(f"bend range must be positive, got {bend_range}")
        self._port = port
        self._channel = channel
        self._bend_range = bend_range
        self._lock = Lock()
        self._notes: Dict[Voice, int] = {}

    @override
    def start_tone(self, voice: Voice) -> None:
        note, pitch = frequency_to_midi(voice.frequency, self._bend_range)
        velocity = volume_to_velocity(voice.gain)
        with self._lock:
            self._notes[voice] = note
            self._port.send(
                mido.Message("pitchwheel", channel=self._channel, pitch=pitch)
            )
            self._port.send(
                mido.Message(
                    "note_on", channel=self._channel, note=note, velocity=velocity
                )
            )

    @override
    def stop_tone(self, voice: Voice) -> None:
        with self._lock:
            note = self._notes.pop(voice)
            self._port.send(
                mido.Message("note_off", channel=self._channel, note=note, velocity=0)
            )
            self._port.send(mido.Message("pitchwheel", channel=self._channel, pitch=0))
