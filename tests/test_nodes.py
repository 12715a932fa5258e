import numpy as np
import pytest

from decoding_den.audio.generator import WaveType
from decoding_den.audio.nodes import FilterType, InvalidStateError

from conftest import RecordingContext


def sine_block(ctx, frequency, seconds=0.2):
    times = np.arange(int(ctx.sample_rate * seconds)) / ctx.sample_rate
    return np.sin(2 * np.pi * frequency * times), times


def rms(signal):
    return float(np.sqrt(np.mean(np.square(signal))))


def test_connect_returns_target_for_chaining(ctx):
    osc = ctx.create_oscillator()
    gain = ctx.create_gain()

    assert osc.connect(gain).connect(ctx.destination) is ctx.destination
    assert osc.outputs == [gain]
    assert gain.outputs == [ctx.destination]


def test_connect_across_contexts_raises(ctx, scheduler):
    other = RecordingContext(scheduler)
    with pytest.raises(InvalidStateError):
        ctx.create_gain().connect(other.destination)


def test_destination_has_no_outputs(ctx):
    with pytest.raises(InvalidStateError):
        ctx.destination.connect(ctx.create_gain())


def test_disconnect_all_is_repeatable(ctx):
    gain = ctx.create_gain()
    gain.connect(ctx.destination)

    gain.disconnect()
    gain.disconnect()

    assert not gain.is_connected


def test_disconnect_unknown_destination_raises(ctx):
    gain = ctx.create_gain()
    with pytest.raises(InvalidStateError):
        gain.disconnect(ctx.destination)


def test_start_twice_raises(ctx):
    osc = ctx.create_oscillator()
    osc.start(0)
    with pytest.raises(InvalidStateError):
        osc.start(0)


def test_stop_before_start_raises(ctx):
    with pytest.raises(InvalidStateError):
        ctx.create_oscillator().stop()


def test_stop_keeps_earliest_time(ctx):
    osc = ctx.create_oscillator()
    osc.start(0)
    osc.stop(0.3)
    osc.stop(0.5)

    assert osc.stop_time == pytest.approx(0.3)


def test_start_in_the_past_is_clamped_to_now(ctx, scheduler):
    scheduler.advance(1.0)
    osc = ctx.create_oscillator()
    osc.start(0.2)

    assert osc.start_time == pytest.approx(1.0)


def test_closed_context_refuses_new_nodes(ctx):
    ctx.close()
    with pytest.raises(InvalidStateError):
        ctx.create_oscillator()


def test_oscillator_renders_sine_from_zero_phase(ctx):
    osc = ctx.create_oscillator()
    osc.frequency.value = 441.0
    osc.start(0)
    times = np.arange(200) / ctx.sample_rate

    out = osc.render(times)

    expected = np.sin(2 * np.pi * 441.0 * times)
    np.testing.assert_allclose(out, expected, atol=1e-9)


def test_oscillator_type_accepts_strings(ctx):
    osc = ctx.create_oscillator()
    osc.type = "triangle"
    assert osc.type == WaveType.TRIANGLE


def test_buffer_source_plays_buffer_then_silence(ctx):
    buffer = ctx.create_buffer(1, 4, ctx.sample_rate)
    buffer.get_channel_data(0)[:] = [0.1, 0.2, 0.3, 0.4]
    source = ctx.create_buffer_source()
    source.buffer = buffer
    source.start(0)

    out = source.render(np.arange(6) / ctx.sample_rate)

    np.testing.assert_allclose(out, [0.1, 0.2, 0.3, 0.4, 0.0, 0.0], atol=1e-7)
    assert source.natural_end() == pytest.approx(4 / ctx.sample_rate)


def test_gain_node_scales_block(ctx):
    gain = ctx.create_gain()
    gain.gain.value = 0.25
    block = np.ones(10)

    np.testing.assert_allclose(gain.process(block, np.zeros(10)), 0.25)


def test_lowpass_attenuates_high_frequencies(ctx):
    lowpass = ctx.create_biquad_filter()
    lowpass.type = FilterType.LOWPASS
    lowpass.frequency.value = 500.0

    low, times = sine_block(ctx, 100)
    high, _ = sine_block(ctx, 10000)

    assert rms(lowpass.process(low, times)) > 0.6
    assert rms(lowpass.process(high, times)) < 0.01


def test_bandpass_passes_center_frequency(ctx):
    bandpass = ctx.create_biquad_filter()
    bandpass.type = "bandpass"
    bandpass.frequency.value = 1000.0
    bandpass.Q.value = 10.0

    center, times = sine_block(ctx, 1000)
    far, _ = sine_block(ctx, 8000)

    assert rms(bandpass.process(center, times)) > 0.6
    assert rms(bandpass.process(far, times)) < 0.05


def test_filter_follows_frequency_automation(ctx):
    lowpass = ctx.create_biquad_filter()
    lowpass.frequency.set_value_at_time(200.0, 0.0)
    lowpass.frequency.set_value_at_time(15000.0, 0.1)

    signal, times = sine_block(ctx, 5000)
    out = lowpass.process(signal, times)
    split = int(ctx.sample_rate * 0.1)

    assert rms(out[:split]) < 0.05
    assert rms(out[split + 512:]) > 0.6


def test_render_follows_every_path_to_destination(ctx, scheduler):
    osc = ctx.create_oscillator()
    left = ctx.create_gain()
    right = ctx.create_gain()
    dangling = ctx.create_gain()
    left.gain.value = 0.25
    right.gain.value = 0.5

    osc.connect(left).connect(ctx.destination)
    osc.connect(right).connect(ctx.destination)
    osc.connect(dangling)
    osc.start(0)
    osc.stop(0.01)

    start, samples = ctx.render_source(osc)
    direct = osc.render(start + np.arange(len(samples)) / ctx.sample_rate)

    assert start == 0.0
    np.testing.assert_allclose(samples, direct * 0.75, atol=1e-9)


def test_unconnected_source_is_silent(ctx, scheduler):
    osc = ctx.create_oscillator()
    osc.start(0)
    osc.stop(0.1)

    assert ctx.render_source(osc) is None
    scheduler.advance(0)
    assert ctx.duration == 0.0


def test_started_sources_render_on_next_tick(ctx, scheduler):
    osc = ctx.create_oscillator()
    osc.connect(ctx.destination)
    osc.start(0)
    osc.stop(0.05)

    assert ctx.duration == 0.0
    scheduler.advance(0)
    assert ctx.duration == pytest.approx(0.05, abs=1 / ctx.sample_rate)
