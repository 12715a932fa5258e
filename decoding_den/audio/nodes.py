"""
Audio Nodes
===========
Node untuk synthesis graph: source -> filter -> gain -> destination.
Setiap node me-render audio sebagai numpy array (mono, float).
"""

import math
from enum import Enum
from typing import List, Optional, Tuple, Union

import numpy as np
from scipy.signal import lfilter

from ..config import MAX_SOURCE_SECONDS, RENDER_QUANTUM
from .generator import WaveType, generate_wave
from .params import AudioParam


class InvalidStateError(Exception):
    """Operasi tidak valid untuk state node saat ini"""


class FilterType(Enum):
    """Jenis biquad filter"""
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"
    BANDPASS = "bandpass"


class AudioNode:
    """
    Base node. Menyimpan koneksi keluar dan meneruskan audio apa adanya.
    """

    def __init__(self, context):
        self.context = context
        self.outputs: List["AudioNode"] = []

    def connect(self, destination: "AudioNode") -> "AudioNode":
        """Connect ke node lain, return node tujuan supaya bisa di-chain"""
        if destination.context is not self.context:
            raise InvalidStateError("cannot connect nodes from different contexts")
        if destination not in self.outputs:
            self.outputs.append(destination)
        return destination

    def disconnect(self, destination: Optional["AudioNode"] = None):
        """
        Putus koneksi. Tanpa argumen semua output diputus dan selalu
        aman dipanggil berulang kali.
        """
        if destination is None:
            self.outputs.clear()
            return
        if destination not in self.outputs:
            raise InvalidStateError("node is not connected to the given destination")
        self.outputs.remove(destination)

    @property
    def is_connected(self) -> bool:
        return bool(self.outputs)

    def process(self, block: np.ndarray, times: np.ndarray) -> np.ndarray:
        return block

    def __repr__(self) -> str:
        return f"<{type(self).__name__} outputs={len(self.outputs)}>"


class AudioDestinationNode(AudioNode):
    """Sink akhir dari graph (speaker / offline buffer)"""

    def connect(self, destination: AudioNode) -> AudioNode:
        raise InvalidStateError("destination node has no outputs")


class AudioScheduledSourceNode(AudioNode):
    """
    Base untuk source yang bisa di-start dan di-stop pada waktu tertentu.
    """

    def __init__(self, context):
        super().__init__(context)
        self.start_time: Optional[float] = None
        self.stop_time: Optional[float] = None

    @property
    def started(self) -> bool:
        return self.start_time is not None

    @property
    def stopped(self) -> bool:
        return self.stop_time is not None

    def start(self, when: float = 0.0):
        if self.started:
            raise InvalidStateError("source can only be started once")
        self.start_time = max(float(when), self.context.current_time)
        self.context._source_started(self)

    def stop(self, when: Optional[float] = None):
        if not self.started:
            raise InvalidStateError("source stopped before it was started")
        when = self.context.current_time if when is None else float(when)
        when = max(when, self.start_time)
        self.stop_time = when if self.stop_time is None else min(self.stop_time, when)
        self.context._source_stopped(self)

    def natural_end(self) -> Optional[float]:
        """Waktu source selesai sendiri, None jika tidak pernah"""
        return None

    def end_time(self) -> float:
        """Waktu akhir render: stop, natural end, atau batas maksimum"""
        limit = self.start_time + MAX_SOURCE_SECONDS
        candidates = [limit]
        if self.stop_time is not None:
            candidates.append(self.stop_time)
        natural = self.natural_end()
        if natural is not None:
            candidates.append(natural)
        return min(candidates)

    def render(self, times: np.ndarray) -> np.ndarray:
        raise NotImplementedError


class OscillatorNode(AudioScheduledSourceNode):
    """Periodic waveform dengan a-rate frequency"""

    def __init__(self, context):
        super().__init__(context)
        self._type = WaveType.SINE
        self.frequency = AudioParam("frequency", 440.0)

    @property
    def type(self) -> WaveType:
        return self._type

    @type.setter
    def type(self, value: Union[WaveType, str]):
        self._type = WaveType(value)

    def render(self, times: np.ndarray) -> np.ndarray:
        if len(times) == 0:
            return np.zeros(0, dtype=np.float64)
        freqs = self.frequency.values(times)
        # Phase mulai dari 0 pada start time
        steps = np.empty_like(freqs)
        steps[0] = 0.0
        steps[1:] = np.cumsum(freqs[:-1])
        phase = 2 * np.pi * steps / self.context.sample_rate
        return generate_wave(phase, self._type)


class AudioBuffer:
    """Sample data untuk buffer source (float32, per channel)"""

    def __init__(self, number_of_channels: int, length: int, sample_rate: int):
        if number_of_channels < 1:
            raise ValueError("buffer needs at least one channel")
        if length < 1:
            raise ValueError("buffer length must be positive")
        self.sample_rate = int(sample_rate)
        self._data = np.zeros((number_of_channels, int(length)), dtype=np.float32)

    @property
    def number_of_channels(self) -> int:
        return self._data.shape[0]

    @property
    def length(self) -> int:
        return self._data.shape[1]

    @property
    def duration(self) -> float:
        return self.length / self.sample_rate

    def get_channel_data(self, channel: int) -> np.ndarray:
        """Writable view ke satu channel"""
        return self._data[channel]

    def mixdown(self) -> np.ndarray:
        return self._data.mean(axis=0)


class AudioBufferSourceNode(AudioScheduledSourceNode):
    """Memainkan AudioBuffer sekali dari awal"""

    def __init__(self, context):
        super().__init__(context)
        self.buffer: Optional[AudioBuffer] = None

    def natural_end(self) -> Optional[float]:
        if self.buffer is None:
            return self.start_time
        return self.start_time + self.buffer.duration

    def render(self, times: np.ndarray) -> np.ndarray:
        if self.buffer is None or len(times) == 0:
            return np.zeros(len(times), dtype=np.float64)
        data = self.buffer.mixdown().astype(np.float64)
        positions = (times - self.start_time) * self.buffer.sample_rate
        return np.interp(positions, np.arange(len(data)), data, right=0.0)


class BiquadFilterNode(AudioNode):
    """
    Second-order filter (RBJ cookbook).
    Frequency dan Q di-sample sekali per render quantum.
    Lowpass/highpass Q dalam dB, bandpass Q linear.
    """

    def __init__(self, context):
        super().__init__(context)
        self._type = FilterType.LOWPASS
        self.frequency = AudioParam("frequency", 350.0)
        self.Q = AudioParam("Q", 1.0)

    @property
    def type(self) -> FilterType:
        return self._type

    @type.setter
    def type(self, value: Union[FilterType, str]):
        self._type = FilterType(value)

    def coefficients(self, frequency: float, q: float) -> Tuple[np.ndarray, np.ndarray]:
        """Hitung (b, a) ter-normalisasi untuk satu setting"""
        sample_rate = self.context.sample_rate
        nyquist = sample_rate / 2
        frequency = min(max(frequency, 1.0), nyquist * 0.999)

        w0 = 2 * math.pi * frequency / sample_rate
        cos_w0 = math.cos(w0)
        sin_w0 = math.sin(w0)

        if self._type == FilterType.BANDPASS:
            alpha = sin_w0 / (2 * max(q, 1e-4))
            b = [alpha, 0.0, -alpha]
        else:
            alpha = sin_w0 / (2 * math.pow(10, q / 20))
            if self._type == FilterType.LOWPASS:
                b = [(1 - cos_w0) / 2, 1 - cos_w0, (1 - cos_w0) / 2]
            else:
                b = [(1 + cos_w0) / 2, -(1 + cos_w0), (1 + cos_w0) / 2]

        a = [1 + alpha, -2 * cos_w0, 1 - alpha]
        a0 = a[0]
        return np.array(b) / a0, np.array(a) / a0

    def process(self, block: np.ndarray, times: np.ndarray) -> np.ndarray:
        out = np.empty(len(block), dtype=np.float64)
        zi = np.zeros(2, dtype=np.float64)

        for offset in range(0, len(block), RENDER_QUANTUM):
            chunk = block[offset:offset + RENDER_QUANTUM]
            t = times[offset]
            b, a = self.coefficients(self.frequency.value_at(t), self.Q.value_at(t))
            out[offset:offset + len(chunk)], zi = lfilter(b, a, chunk, zi=zi)

        return out


class GainNode(AudioNode):
    """Volume dengan a-rate gain"""

    def __init__(self, context):
        super().__init__(context)
        self.gain = AudioParam("gain", 1.0)

    def process(self, block: np.ndarray, times: np.ndarray) -> np.ndarray:
        return block * self.gain.values(times)
