"""
Audio Backend
=============
Audio output context dan backend yang membuatnya.

MixerContext memainkan graph lewat pygame.mixer, OfflineContext
me-render ke numpy buffer (untuk export WAV dan tests).
"""

import logging
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np
import pygame

from ..config import (
    AUDIO_BUFFER_SIZE, AUDIO_CHANNELS, AUDIO_ENABLED, AUDIO_SAMPLE_RATE,
    MIXER_CHANNELS
)
from .nodes import (
    AudioBuffer, AudioBufferSourceNode, AudioDestinationNode, AudioNode,
    AudioScheduledSourceNode, BiquadFilterNode, GainNode, InvalidStateError,
    OscillatorNode
)
from .timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class ContextState(Enum):
    """State dari audio output context"""
    RUNNING = "running"
    SUSPENDED = "suspended"
    CLOSED = "closed"


class AudioContext(ABC):
    """
    Base audio output context.
    Membuat nodes, menerima source yang di-start, lalu me-render
    source tersebut lewat graph sampai ke destination.
    """

    def __init__(self, scheduler: Scheduler, sample_rate: int):
        self.scheduler = scheduler
        self._sample_rate = int(sample_rate)
        self._state = ContextState.RUNNING
        self.destination = AudioDestinationNode(self)

        self._pending: List[AudioScheduledSourceNode] = []
        self._flush_handle: Optional[TimerHandle] = None

    @property
    def state(self) -> ContextState:
        return self._state

    @property
    def sample_rate(self) -> int:
        return self._sample_rate

    @property
    @abstractmethod
    def current_time(self) -> float:
        """Waktu context dalam seconds"""
        pass

    async def resume(self):
        if self.state == ContextState.CLOSED:
            raise InvalidStateError("cannot resume a closed context")
        self._state = ContextState.RUNNING

    async def suspend(self):
        if self.state == ContextState.CLOSED:
            raise InvalidStateError("cannot suspend a closed context")
        self._state = ContextState.SUSPENDED

    def close(self):
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None
        self._pending.clear()
        self._state = ContextState.CLOSED

    # =========================================================================
    # NODE FACTORIES
    # =========================================================================

    def _adopt(self, node: AudioNode) -> AudioNode:
        if self.state == ContextState.CLOSED:
            raise InvalidStateError("context is closed")
        return node

    def create_oscillator(self) -> OscillatorNode:
        return self._adopt(OscillatorNode(self))

    def create_buffer_source(self) -> AudioBufferSourceNode:
        return self._adopt(AudioBufferSourceNode(self))

    def create_biquad_filter(self) -> BiquadFilterNode:
        return self._adopt(BiquadFilterNode(self))

    def create_gain(self) -> GainNode:
        return self._adopt(GainNode(self))

    def create_buffer(self, number_of_channels: int, length: int,
                      sample_rate: int) -> AudioBuffer:
        return AudioBuffer(number_of_channels, length, sample_rate)

    # =========================================================================
    # RENDERING
    # =========================================================================

    def _source_started(self, source: AudioScheduledSourceNode):
        if self._flush_handle is not None and not self._flush_handle.pending:
            # Flush dari event loop yang sudah mati: source lama tidak dimainkan
            logger.debug("[Audio] Dropping %d sources from a stale flush", len(self._pending))
            self._flush_handle = None
            self._pending.clear()

        self._pending.append(source)
        if self._flush_handle is None:
            self._flush_handle = self.scheduler.call_later(0.0, self._flush)

    def _source_stopped(self, source: AudioScheduledSourceNode):
        pass

    def _flush(self):
        """Render semua source yang baru di-start"""
        self._flush_handle = None
        pending, self._pending = self._pending, []
        if self.state == ContextState.CLOSED:
            return

        for source in pending:
            try:
                rendered = self.render_source(source)
                if rendered is not None:
                    self._output(source, *rendered)
            except Exception:
                logger.exception("[Audio] Failed to render %r", source)

    def render_source(self, source: AudioScheduledSourceNode
                      ) -> Optional[Tuple[float, np.ndarray]]:
        """
        Render satu source dari start sampai end lewat semua path
        ke destination.

        Returns:
            (start_time, samples) atau None jika tidak terdengar
        """
        start = source.start_time
        num_samples = int(round((source.end_time() - start) * self.sample_rate))
        if num_samples <= 0:
            return None

        times = start + np.arange(num_samples, dtype=np.float64) / self.sample_rate
        block = source.render(times)
        mixed = self._propagate(source, block, times, ())
        if mixed is None:
            return None
        return start, mixed

    def _propagate(self, node: AudioNode, block: np.ndarray, times: np.ndarray,
                   visited: tuple) -> Optional[np.ndarray]:
        if node is self.destination:
            return block

        total = None
        for target in node.outputs:
            if target in visited:
                continue
            rendered = self._propagate(target, target.process(block, times),
                                       times, visited + (node,))
            if rendered is not None:
                total = rendered if total is None else total + rendered
        return total

    @abstractmethod
    def _output(self, source: AudioScheduledSourceNode, start_time: float,
                samples: np.ndarray):
        """Kirim audio yang sudah di-render ke output"""
        pass


class MixerContext(AudioContext):
    """Context yang memainkan audio lewat pygame.mixer"""

    def __init__(self, scheduler: Scheduler,
                 sample_rate: int = AUDIO_SAMPLE_RATE,
                 channels: int = AUDIO_CHANNELS,
                 buffer_size: int = AUDIO_BUFFER_SIZE):
        # Only init if not already initialized
        if not pygame.mixer.get_init():
            pygame.mixer.pre_init(
                frequency=sample_rate,
                size=-16,
                channels=channels,
                buffer=buffer_size
            )
            pygame.mixer.init()
        pygame.mixer.set_num_channels(MIXER_CHANNELS)

        frequency, _size, mixer_channels = pygame.mixer.get_init()
        super().__init__(scheduler, frequency)
        self._mixer_channels = mixer_channels
        self._origin = time.monotonic()
        self._playing: Dict[AudioScheduledSourceNode,
                            Tuple[pygame.mixer.Channel, pygame.mixer.Sound]] = {}

        logger.info("[Audio] Mixer context ready (%d Hz, %d ch)",
                    frequency, mixer_channels)

    @property
    def state(self) -> ContextState:
        # Mixer bisa di-quit dari luar
        if self._state != ContextState.CLOSED and not pygame.mixer.get_init():
            self._state = ContextState.CLOSED
        return self._state

    @property
    def current_time(self) -> float:
        return time.monotonic() - self._origin

    async def resume(self):
        await super().resume()
        pygame.mixer.unpause()

    async def suspend(self):
        await super().suspend()
        pygame.mixer.pause()

    def close(self):
        if pygame.mixer.get_init():
            pygame.mixer.quit()
        self._playing.clear()
        super().close()

    def _make_sound(self, samples: np.ndarray) -> pygame.mixer.Sound:
        samples = np.clip(samples, -1, 1)
        samples_int = (samples * 32767).astype(np.int16)
        if self._mixer_channels == 2:
            stereo = np.column_stack((samples_int, samples_int))
            return pygame.sndarray.make_sound(np.ascontiguousarray(stereo))
        return pygame.sndarray.make_sound(samples_int)

    def _output(self, source: AudioScheduledSourceNode, start_time: float,
                samples: np.ndarray):
        sound = self._make_sound(samples)
        delay = start_time - self.current_time
        if delay > 0:
            self.scheduler.call_later(delay, self._play, source, sound)
        else:
            self._play(source, sound)

    def _play(self, source: AudioScheduledSourceNode, sound: pygame.mixer.Sound):
        if self.state == ContextState.CLOSED:
            return
        try:
            channel = sound.play()
        except pygame.error as e:
            logger.warning("[Audio] Could not play sound: %s", e)
            return
        if channel is not None:
            self._playing[source] = (channel, sound)

    def _source_stopped(self, source: AudioScheduledSourceNode):
        # Stop lebih awal dari render: potong channel yang sedang bunyi
        if source.stop_time is None or source.stop_time > self.current_time:
            return
        entry = self._playing.pop(source, None)
        if entry is None:
            return
        channel, sound = entry
        if channel.get_busy() and channel.get_sound() is sound:
            channel.stop()


class OfflineContext(AudioContext):
    """Context yang me-render semua output ke satu numpy buffer"""

    def __init__(self, scheduler: Scheduler, sample_rate: int = AUDIO_SAMPLE_RATE):
        super().__init__(scheduler, sample_rate)
        self._buffer = np.zeros(0, dtype=np.float32)
        # Clock mulai dari 0 saat context dibuat, sample 0 = waktu 0
        self._origin = scheduler.time()

    @property
    def current_time(self) -> float:
        return self.scheduler.time() - self._origin

    @property
    def duration(self) -> float:
        return len(self._buffer) / self.sample_rate

    def _output(self, source: AudioScheduledSourceNode, start_time: float,
                samples: np.ndarray):
        offset = int(round(start_time * self.sample_rate))
        end = offset + len(samples)
        if end > len(self._buffer):
            self._buffer = np.pad(self._buffer, (0, end - len(self._buffer)))
        self._buffer[offset:end] += samples.astype(np.float32)

    def render(self) -> np.ndarray:
        """Copy dari semua audio yang sudah di-render"""
        return self._buffer.copy()


class AudioBackend(ABC):
    """Platform audio backend: capability probe dan context factory"""

    @abstractmethod
    def is_available(self) -> bool:
        pass

    @abstractmethod
    def create_context(self, scheduler: Scheduler) -> AudioContext:
        pass


def _mixer_supported() -> bool:
    """Check apakah pygame dibangun dengan mixer module"""
    try:
        import pygame.mixer  # noqa: F401
    except (ImportError, NotImplementedError):
        return False
    return True


class MixerBackend(AudioBackend):
    """Backend pygame.mixer (speaker)"""

    def __init__(self, enabled: bool = AUDIO_ENABLED):
        self.enabled = enabled

    def is_available(self) -> bool:
        return self.enabled and _mixer_supported()

    def create_context(self, scheduler: Scheduler) -> AudioContext:
        return MixerContext(scheduler)


class OfflineBackend(AudioBackend):
    """Backend tanpa device, semua audio masuk ke OfflineContext"""

    def __init__(self, sample_rate: int = AUDIO_SAMPLE_RATE):
        self.sample_rate = sample_rate
        self.contexts: List[OfflineContext] = []

    def is_available(self) -> bool:
        return True

    def create_context(self, scheduler: Scheduler) -> AudioContext:
        context = OfflineContext(scheduler, self.sample_rate)
        self.contexts.append(context)
        return context


class UnavailableBackend(AudioBackend):
    """Environment tanpa audio sama sekali"""

    def is_available(self) -> bool:
        return False

    def create_context(self, scheduler: Scheduler) -> AudioContext:
        raise RuntimeError("Audio is not supported in this environment")
