"""
Audio Params
============
Automation timeline untuk parameter node (frequency, gain, Q).
Mengikuti semantics Web Audio AudioParam.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

import numpy as np


class RampKind(Enum):
    """Jenis automation event"""
    SET = "set"
    LINEAR = "linear"
    EXPONENTIAL = "exponential"


@dataclass(frozen=True)
class AutomationEvent:
    """Satu titik automation"""
    kind: RampKind
    value: float
    time: float


class AudioParam:
    """
    Parameter yang bisa di-automate terhadap waktu context.

    Sebelum event pertama nilainya `value`. Ramp selalu mulai dari
    nilai dan waktu event sebelumnya. Setelah event terakhir nilainya
    tetap.
    """

    def __init__(self, name: str, default: float):
        self.name = name
        self.default = float(default)
        self._value = float(default)
        self._events: List[AutomationEvent] = []

    @property
    def value(self) -> float:
        return self._value

    @value.setter
    def value(self, new_value: float):
        self._value = float(new_value)

    @property
    def events(self) -> List[AutomationEvent]:
        return list(self._events)

    def set_value_at_time(self, value: float, time: float) -> "AudioParam":
        self._insert(AutomationEvent(RampKind.SET, float(value), float(time)))
        return self

    def linear_ramp_to_value_at_time(self, value: float, time: float) -> "AudioParam":
        self._insert(AutomationEvent(RampKind.LINEAR, float(value), float(time)))
        return self

    def exponential_ramp_to_value_at_time(self, value: float, time: float) -> "AudioParam":
        if value == 0:
            raise ValueError(
                f"{self.name}: exponential ramp target must be non-zero"
            )
        self._insert(AutomationEvent(RampKind.EXPONENTIAL, float(value), float(time)))
        return self

    def cancel_scheduled_values(self, start_time: float) -> "AudioParam":
        """Hapus semua event pada atau setelah start_time"""
        self._events = [e for e in self._events if e.time < start_time]
        return self

    def _insert(self, event: AutomationEvent):
        if event.time < 0:
            raise ValueError(f"{self.name}: event time must be >= 0")
        # Events dengan waktu sama tetap urut sesuai insertion
        idx = len(self._events)
        while idx > 0 and self._events[idx - 1].time > event.time:
            idx -= 1
        self._events.insert(idx, event)

    def value_at(self, time: float) -> float:
        """Nilai pada satu titik waktu"""
        return float(self.values(np.array([time], dtype=np.float64))[0])

    def values(self, times: np.ndarray) -> np.ndarray:
        """
        Render nilai parameter untuk array waktu (seconds).

        Returns:
            float64 array dengan shape sama seperti times
        """
        times = np.asarray(times, dtype=np.float64)
        out = np.full(times.shape, self._value, dtype=np.float64)
        if not self._events:
            return out

        prev_value = self._value
        prev_time = 0.0

        for event in self._events:
            if event.kind == RampKind.SET:
                out[times >= event.time] = event.value

            else:
                in_ramp = (times >= prev_time) & (times < event.time)
                span = event.time - prev_time

                if event.kind == RampKind.LINEAR:
                    if span > 0:
                        frac = (times[in_ramp] - prev_time) / span
                        out[in_ramp] = prev_value + (event.value - prev_value) * frac

                elif event.kind == RampKind.EXPONENTIAL:
                    same_sign = prev_value * event.value > 0
                    if span > 0 and same_sign:
                        frac = (times[in_ramp] - prev_time) / span
                        ratio = event.value / prev_value
                        out[in_ramp] = prev_value * np.power(ratio, frac)
                    else:
                        out[in_ramp] = prev_value

                out[times >= event.time] = event.value

            prev_value = event.value
            prev_time = event.time

        return out

    def __repr__(self) -> str:
        return f"AudioParam({self.name}={self._value}, events={len(self._events)})"
