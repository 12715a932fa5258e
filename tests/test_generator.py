import numpy as np
import pytest

from decoding_den.audio.generator import (
    NoiseColor, WaveType, generate_noise, generate_wave, pink_noise, white_noise
)


def kellet_reference(white):
    """Paul Kellet economy filter, satu sample per iterasi"""
    b0 = b1 = b2 = b3 = b4 = b5 = b6 = 0.0
    out = []
    for w in white:
        b0 = 0.99886 * b0 + w * 0.0555179
        b1 = 0.99332 * b1 + w * 0.0750759
        b2 = 0.96900 * b2 + w * 0.1538520
        b3 = 0.86650 * b3 + w * 0.3104856
        b4 = 0.55000 * b4 + w * 0.5329522
        b5 = -0.7616 * b5 - w * 0.0168980
        out.append((b0 + b1 + b2 + b3 + b4 + b5 + b6 + w * 0.5362) * 0.11)
        b6 = w * 0.115926
    return np.array(out)


def test_pink_noise_matches_kellet_filter():
    white = np.random.default_rng(42).random(2000) * 2 - 1
    expected = kellet_reference(white)

    actual = pink_noise(2000, np.random.default_rng(42))

    assert actual.dtype == np.float32
    np.testing.assert_allclose(actual, expected, atol=1e-5)


def test_pink_noise_is_reproducible_with_seed():
    first = pink_noise(1024, np.random.default_rng(99))
    second = pink_noise(1024, np.random.default_rng(99))
    other = pink_noise(1024, np.random.default_rng(100))

    np.testing.assert_array_equal(first, second)
    assert not np.array_equal(first, other)


def test_pink_noise_empty():
    assert len(pink_noise(0, np.random.default_rng(1))) == 0


def test_white_noise_range_and_seed():
    noise = white_noise(5000, np.random.default_rng(3))
    assert noise.dtype == np.float32
    assert noise.min() >= -1.0
    assert noise.max() < 1.0
    np.testing.assert_array_equal(noise, white_noise(5000, np.random.default_rng(3)))


def test_pink_noise_has_less_high_frequency_energy_than_white():
    n = 1 << 14
    white = white_noise(n, np.random.default_rng(5)).astype(np.float64)
    pink = pink_noise(n, np.random.default_rng(5)).astype(np.float64)

    def high_ratio(signal):
        spectrum = np.abs(np.fft.rfft(signal)) ** 2
        half = len(spectrum) // 2
        return spectrum[half:].sum() / spectrum.sum()

    assert high_ratio(pink) < high_ratio(white) / 3


def test_generate_noise_dispatches_on_color():
    rng_seed = 11
    np.testing.assert_array_equal(
        generate_noise(NoiseColor.PINK, 64, np.random.default_rng(rng_seed)),
        pink_noise(64, np.random.default_rng(rng_seed)),
    )
    np.testing.assert_array_equal(
        generate_noise(NoiseColor.WHITE, 64, np.random.default_rng(rng_seed)),
        white_noise(64, np.random.default_rng(rng_seed)),
    )


@pytest.mark.parametrize("wave_type", list(WaveType))
def test_waves_start_at_zero_and_stay_in_range(wave_type):
    phase = np.linspace(0, 4 * np.pi, 400, endpoint=False)
    wave = generate_wave(phase, wave_type)

    assert wave[0] == pytest.approx(0.0, abs=1e-9)
    assert wave.max() <= 1.0 + 1e-9
    assert wave.min() >= -1.0 - 1e-9


def test_triangle_and_sawtooth_shape():
    quarter = np.array([np.pi / 2])
    assert generate_wave(quarter, WaveType.TRIANGLE)[0] == pytest.approx(1.0)
    assert generate_wave(quarter, WaveType.SAWTOOTH)[0] == pytest.approx(0.5)
    assert generate_wave(quarter, WaveType.SQUARE)[0] == pytest.approx(1.0)
