"""
Sound Generator
===============
Raw signal sources untuk procedural sound effects.
Waveforms dan noise, semua sebagai numpy arrays.
"""

from enum import Enum
from typing import Optional

import numpy as np
from scipy.signal import lfilter


class WaveType(Enum):
    """Jenis gelombang oscillator"""
    SINE = "sine"
    SQUARE = "square"
    SAWTOOTH = "sawtooth"
    TRIANGLE = "triangle"


class NoiseColor(Enum):
    """Warna noise untuk noise bursts"""
    WHITE = "white"
    PINK = "pink"


# Paul Kellet's economy pink filter: (feedback, input gain) per pole
PINK_POLES = (
    (0.99886, 0.0555179),
    (0.99332, 0.0750759),
    (0.96900, 0.1538520),
    (0.86650, 0.3104856),
    (0.55000, 0.5329522),
    (-0.7616, -0.0168980),
)
PINK_DIRECT_GAIN = 0.5362
PINK_DELAYED_GAIN = 0.115926
PINK_OUTPUT_SCALE = 0.11


def generate_wave(phase: np.ndarray, wave_type: WaveType) -> np.ndarray:
    """
    Generate waveform dari phase (radians).
    Semua bentuk mulai dari 0 dan naik, sama seperti sine.
    """
    if wave_type == WaveType.SINE:
        return np.sin(phase)

    cycles = phase / (2 * np.pi)

    if wave_type == WaveType.SQUARE:
        return np.sign(np.sin(phase))

    elif wave_type == WaveType.SAWTOOTH:
        return 2 * ((cycles + 0.5) % 1) - 1

    elif wave_type == WaveType.TRIANGLE:
        return 1 - 4 * np.abs((cycles + 0.25) % 1 - 0.5)

    return np.zeros_like(phase)


def _default_rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng()


def white_noise(num_samples: int,
                rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Uniform white noise di [-1, 1)"""
    rng = _default_rng(rng)
    return (rng.random(num_samples) * 2 - 1).astype(np.float32)


def pink_noise(num_samples: int,
               rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """
    Pink noise (kira-kira -3 dB/octave) dari white noise.

    Setiap pole adalah one-pole recursive filter:
        b[n] = feedback * b[n-1] + gain * white[n]
    Hasilnya dijumlah bersama white langsung dan satu sample white
    yang tertunda, lalu di-scale.
    """
    rng = _default_rng(rng)
    white = rng.random(num_samples) * 2 - 1
    if num_samples == 0:
        return np.zeros(0, dtype=np.float32)

    total = white * PINK_DIRECT_GAIN
    for feedback, gain in PINK_POLES:
        total = total + lfilter([gain], [1.0, -feedback], white)

    delayed = np.empty_like(white)
    delayed[0] = 0.0
    delayed[1:] = white[:-1] * PINK_DELAYED_GAIN
    total = total + delayed

    return (total * PINK_OUTPUT_SCALE).astype(np.float32)


def generate_noise(color: NoiseColor, num_samples: int,
                   rng: Optional[np.random.Generator] = None) -> np.ndarray:
    """Generate noise sesuai warna"""
    if color == NoiseColor.PINK:
        return pink_noise(num_samples, rng)
    return white_noise(num_samples, rng)
