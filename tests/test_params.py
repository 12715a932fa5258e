import numpy as np
import pytest

from decoding_den.audio.params import AudioParam


def test_value_before_any_event():
    param = AudioParam("gain", 1.0)
    param.value = 0.5
    np.testing.assert_allclose(param.values(np.array([0.0, 1.0])), [0.5, 0.5])


def test_set_value_holds_from_event_time():
    param = AudioParam("gain", 1.0)
    param.set_value_at_time(0.3, 0.5)

    assert param.value_at(0.25) == pytest.approx(1.0)
    assert param.value_at(0.5) == pytest.approx(0.3)
    assert param.value_at(10.0) == pytest.approx(0.3)


def test_linear_ramp_interpolates_from_previous_event():
    param = AudioParam("gain", 1.0)
    param.set_value_at_time(0.0, 1.0)
    param.linear_ramp_to_value_at_time(1.0, 2.0)

    assert param.value_at(1.0) == pytest.approx(0.0)
    assert param.value_at(1.5) == pytest.approx(0.5)
    assert param.value_at(2.0) == pytest.approx(1.0)
    assert param.value_at(3.0) == pytest.approx(1.0)


def test_exponential_ramp_is_geometric():
    param = AudioParam("frequency", 440.0)
    param.set_value_at_time(1000.0, 0.0)
    param.exponential_ramp_to_value_at_time(2000.0, 0.05)

    assert param.value_at(0.025) == pytest.approx(1000.0 * np.sqrt(2.0))
    assert param.value_at(0.05) == pytest.approx(2000.0)


def test_exponential_ramp_rejects_zero_target():
    param = AudioParam("gain", 1.0)
    with pytest.raises(ValueError):
        param.exponential_ramp_to_value_at_time(0.0, 1.0)


def test_exponential_ramp_from_zero_holds_previous_value():
    param = AudioParam("gain", 1.0)
    param.set_value_at_time(0.0, 0.0)
    param.exponential_ramp_to_value_at_time(0.5, 1.0)

    assert param.value_at(0.5) == pytest.approx(0.0)
    assert param.value_at(1.0) == pytest.approx(0.5)


def test_negative_event_time_rejected():
    param = AudioParam("gain", 1.0)
    with pytest.raises(ValueError):
        param.set_value_at_time(0.5, -0.1)


def test_events_at_same_time_keep_insertion_order():
    param = AudioParam("gain", 1.0)
    param.set_value_at_time(0.0, 0.2)
    param.linear_ramp_to_value_at_time(0.8, 0.2)

    assert param.value_at(0.2) == pytest.approx(0.8)
    assert [e.value for e in param.events] == [0.0, 0.8]


def test_cancel_scheduled_values():
    param = AudioParam("gain", 1.0)
    param.set_value_at_time(0.2, 0.1)
    param.set_value_at_time(0.9, 0.5)
    param.cancel_scheduled_values(0.5)

    assert len(param.events) == 1
    assert param.value_at(1.0) == pytest.approx(0.2)


def test_values_keeps_shape():
    param = AudioParam("gain", 1.0)
    param.linear_ramp_to_value_at_time(0.0, 1.0)
    times = np.linspace(0, 1, 11)

    out = param.values(times)

    assert out.shape == times.shape
    np.testing.assert_allclose(out, 1.0 - times)
