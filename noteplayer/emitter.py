"""Tone emission through a small oscillator -> gain -> destination graph.

Starting a tone does not block. The stop is scheduled on a timer `duration`
seconds later, and the caller's completion callback runs on the oscillator's
ended signal, which is raised only after the destination has stopped the
voice.
"""

from __future__ import annotations

import logging
from abc import ABCMeta, abstractmethod
from enum import Enum, auto, unique
from threading import Event, Lock, Timer
from typing import List, Optional, Union, override

from noteplayer.common import EndedCallback
from noteplayer.destination import Destination, Voice

logger = logging.getLogger(__name__)


class Gain:
    """A gain stage multiplying the amplitude of its input."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.output: Optional[Node] = None

    def connect(self, node: Node) -> None:
        self.output = node


type Node = Union[Gain, Destination]


@unique
class OscState(Enum):
    Idle = auto()
    Started = auto()
    Stopped = auto()


class Oscillator:
    """A sine source that sounds at a fixed frequency once started.

    Each oscillator can be started and stopped exactly once.
    """

    def __init__(self, frequency: float) -> None:
        self.frequency = frequency
        self.output: Optional[Node] = None
        self._state = OscState.Idle
        self._voice: Optional[Voice] = None
        self._destination: Optional[Destination] = None
        self._listeners: List[EndedCallback] = []
        self._lock = Lock()

    @property
    def state(self) -> OscState:
        return self._state

    def connect(self, node: Node) -> None:
        self.output = node

    def add_ended_listener(self, callback: EndedCallback) -> None:
        self._listeners.append(callback)

    def _resolve(self) -> tuple[Destination, float]:
        gain = 1.0
        node = self.output
        while isinstance(node, Gain):
            gain *= node.value
            node = node.output
        if node is None:
            raise ValueError("Oscillator graph does not end at a destination")
        return node, gain

    def start(self) -> None:
        with self._lock:
            if self._state != OscState.Idle:
                raise ValueError(f"Cannot start oscillator in state {self._state.name}")
            destination, gain = self._resolve()
            voice = Voice(self.frequency, gain)
            destination.start_tone(voice)
            self._voice = voice
            self._destination = destination
            self._state = OscState.Started

    def stop(self) -> None:
        """Stop the tone, then notify ended listeners."""
        with self._lock:
            if self._state != OscState.Started:
                raise ValueError(f"Cannot stop oscillator in state {self._state.name}")
            assert self._destination is not None and self._voice is not None
            self._destination.stop_tone(self._voice)
            self._state = OscState.Stopped
        for callback in self._listeners:
            callback()


class Playback:
    """Handle on an emitted tone that completes on its ended signal."""

    def __init__(self) -> None:
        self._done = Event()
        self._error: Optional[BaseException] = None

    @property
    def ended(self) -> bool:
        return self._done.is_set()

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def finish(self, error: Optional[BaseException] = None) -> None:
        self._error = error
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until the tone has ended.

        Args:
            timeout: Maximum seconds to wait, or None to wait indefinitely.

        Returns:
            True if the tone ended, False on timeout.

        Raises:
            Exception: Whatever stopping the tone or the ended callback
                raised, if either failed.
        """
        if not self._done.wait(timeout=timeout):
            return False
        if self._error is not None:
            raise self._error
        return True


class ToneEmitter(metaclass=ABCMeta):
    """Produces an audible tone for a duration, then signals completion."""

    @abstractmethod
    def emit(
        self,
        frequency: float,
        volume: float,
        duration: float,
        destination: Destination,
        on_ended: Optional[EndedCallback] = None,
    ) -> Playback:
        """Start a tone without blocking.

        Args:
            frequency: Tone frequency in Hertz.
            volume: Linear gain, expected in [0, 1].
            duration: Seconds between start and the scheduled stop.
            destination: Output the tone is routed to.
            on_ended: Called after the destination reports the tone ended.

        Returns:
            A handle that can be waited on.
        """
        raise NotImplementedError()


class GraphToneEmitter(ToneEmitter):
    """Emits each tone through a fresh oscillator and gain stage."""

    @override
    def emit(
        self,
        frequency: float,
        volume: float,
        duration: float,
        destination: Destination,
        on_ended: Optional[EndedCallback] = None,
    ) -> Playback:
        playback = Playback()
        osc = Oscillator(frequency)
        gain = Gain(volume)
        osc.connect(gain)
        gain.connect(destination)

        def ended() -> None:
            logger.info("tone at %s Hz has finished playing", frequency)
            try:
                if on_ended is not None:
                    on_ended()
            except Exception as e:
                logger.exception("ended callback failed for tone at %s Hz", frequency)
                playback.finish(e)
            else:
                playback.finish()

        def stop() -> None:
            try:
                osc.stop()
            except Exception as e:
                logger.exception("failed to stop tone at %s Hz", frequency)
                playback.finish(e)

        osc.add_ended_listener(ended)
        osc.start()
        timer = Timer(duration, stop)
        timer.daemon = True
        timer.start()
        logger.debug("tone at %s Hz started for %.3fs", frequency, duration)
        return playback
