"""
Effects
=======
Pre-defined sound effects untuk Decoding Den.
Recipe immutable, synthesizer membangun graph baru setiap dipanggil.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np

from .backend import AudioContext, ContextState
from .best_effort import PlayResult, best_effort
from .generator import NoiseColor, WaveType, generate_noise
from .nodes import FilterType
from .timers import Scheduler
from .tracker import NodeTracker


class Effect(Enum):
    """Effect yang bisa di-trigger dari UI"""
    CLEAR = "clear"
    SUCCESS = "success"
    WORD_BUILT = "word_built"
    WORD_LIST = "word_list"
    ERASER = "eraser"


# =============================================================================
# RECIPES
# =============================================================================

@dataclass(frozen=True)
class ToneNote:
    """Satu nada dalam chord/arpeggio"""
    frequency: float
    offset: float       # seconds setelah trigger
    duration: float     # seconds

    @property
    def end(self) -> float:
        return self.offset + self.duration


@dataclass(frozen=True)
class ChordRecipe:
    """
    Arpeggio: beberapa oscillator dengan start bertahap.
    peak_gain dan floor_gain adalah nilai pada volume 1.0.
    """
    name: str
    wave_type: WaveType
    notes: Tuple[ToneNote, ...]
    peak_gain: float
    floor_gain: float

    @property
    def duration(self) -> float:
        return max(note.end for note in self.notes)


@dataclass(frozen=True)
class NoiseBurstRecipe:
    """Noise buffer -> sweeping filter -> gain envelope (gain pada volume 1.0)"""
    name: str
    color: NoiseColor
    duration: float
    filter_type: FilterType
    filter_start: float
    filter_end: float
    filter_sweep: float     # seconds sampai filter_end
    filter_q: float
    peak_gain: float
    floor_gain: float
    attack: float = 0.0     # linear rise dari 0; 0 berarti langsung peak


@dataclass(frozen=True)
class PlopRecipe:
    """Nada rendah pendek yang menyusul pop (gain pada volume 1.0)"""
    delay: float
    wave_type: WaveType
    frequency_start: float
    frequency_end: float
    duration: float
    peak_gain: float
    floor_gain: float


CLEAR_POP = NoiseBurstRecipe(
    name="clear",
    color=NoiseColor.WHITE,
    duration=0.1,
    filter_type=FilterType.BANDPASS,
    filter_start=1000.0,
    filter_end=2000.0,
    filter_sweep=0.05,
    filter_q=10.0,
    peak_gain=0.3,
    floor_gain=0.01,
)

CLEAR_PLOP = PlopRecipe(
    delay=0.05,
    wave_type=WaveType.SINE,
    frequency_start=200.0,
    frequency_end=100.0,
    duration=0.1,
    peak_gain=0.1,
    floor_gain=0.01,
)

# C-E-G
SUCCESS_CHORD = ChordRecipe(
    name="success",
    wave_type=WaveType.SINE,
    notes=(
        ToneNote(523.0, 0.0, 0.15),   # C5
        ToneNote(659.0, 0.1, 0.15),   # E5
        ToneNote(784.0, 0.2, 0.2),    # G5
    ),
    peak_gain=0.1,
    floor_gain=0.01,
)

# F-A-C, lebih lembut dari success
WORD_LIST_CHORD = ChordRecipe(
    name="word list",
    wave_type=WaveType.TRIANGLE,
    notes=(
        ToneNote(349.0, 0.0, 0.2),    # F4
        ToneNote(440.0, 0.05, 0.2),   # A4
        ToneNote(523.0, 0.1, 0.25),   # C5
    ),
    peak_gain=0.08,
    floor_gain=0.005,
)

ERASER_SWOOSH = NoiseBurstRecipe(
    name="eraser",
    color=NoiseColor.PINK,
    duration=0.3,
    filter_type=FilterType.LOWPASS,
    filter_start=2000.0,
    filter_end=500.0,
    filter_sweep=0.3,
    filter_q=1.0,
    peak_gain=0.15,
    floor_gain=0.01,
    attack=0.05,
)


def _ms(seconds: float) -> float:
    return seconds * 1000.0


# =============================================================================
# SYNTHESIZER
# =============================================================================

class EffectSynthesizer:
    """
    Membangun dan menjadwalkan synthesis graph untuk setiap effect.
    Setiap node di-track supaya pasti dilepas.

    Semua gain recipe dikali volume. SoundManager mengirim
    settings.master_volume (default 0.8), jadi success default
    peak di 0.08, bukan 0.1. Pakai master_volume=1.0 untuk gain asli.
    """

    def __init__(self, tracker: NodeTracker, scheduler: Scheduler,
                 rng: Optional[np.random.Generator] = None):
        self.tracker = tracker
        self.scheduler = scheduler
        self.rng = rng if rng is not None else np.random.default_rng()

    def play(self, effect: Effect, ctx: AudioContext, volume: float = 1.0) -> PlayResult:
        """Dispatch effect ke synthesizer-nya"""
        handlers = {
            Effect.CLEAR: self.clear,
            Effect.SUCCESS: self.success,
            # Word built sengaja memakai recipe yang sama dengan success
            Effect.WORD_BUILT: self.success,
            Effect.WORD_LIST: self.word_list,
            Effect.ERASER: self.eraser,
        }
        return handlers[effect](ctx, volume)

    @best_effort("clear sound")
    def clear(self, ctx: AudioContext, volume: float = 1.0) -> PlayResult:
        """Bubble pop: filtered white noise, lalu plop 50ms kemudian"""
        self._noise_burst(ctx, CLEAR_POP, volume)
        self.scheduler.call_later(CLEAR_PLOP.delay, self._plop, ctx, CLEAR_PLOP, volume)
        return PlayResult.PLAYED

    @best_effort("success sound")
    def success(self, ctx: AudioContext, volume: float = 1.0) -> PlayResult:
        """C-E-G arpeggio"""
        self._chord(ctx, SUCCESS_CHORD, volume)
        return PlayResult.PLAYED

    @best_effort("word list sound")
    def word_list(self, ctx: AudioContext, volume: float = 1.0) -> PlayResult:
        """F-A-C arpeggio, triangle wave"""
        self._chord(ctx, WORD_LIST_CHORD, volume)
        return PlayResult.PLAYED

    @best_effort("eraser sound")
    def eraser(self, ctx: AudioContext, volume: float = 1.0) -> PlayResult:
        """Soft swoosh: pink noise lewat lowpass yang turun"""
        self._noise_burst(ctx, ERASER_SWOOSH, volume)
        return PlayResult.PLAYED

    def _chord(self, ctx: AudioContext, recipe: ChordRecipe, volume: float):
        start_time = ctx.current_time

        for note in recipe.notes:
            track_ms = _ms(note.end)
            osc = self.tracker.track(ctx.create_oscillator(), track_ms)
            gain = self.tracker.track(ctx.create_gain(), track_ms)

            osc.connect(gain)
            gain.connect(ctx.destination)

            note_start = start_time + note.offset
            note_end = note_start + note.duration

            osc.type = recipe.wave_type
            osc.frequency.set_value_at_time(note.frequency, note_start)

            gain.gain.set_value_at_time(recipe.peak_gain * volume, note_start)
            gain.gain.exponential_ramp_to_value_at_time(recipe.floor_gain * volume, note_end)

            osc.start(note_start)
            osc.stop(note_end)

    def _noise_burst(self, ctx: AudioContext, recipe: NoiseBurstRecipe, volume: float):
        start_time = ctx.current_time
        end_time = start_time + recipe.duration
        track_ms = _ms(recipe.duration)

        buffer_size = int(ctx.sample_rate * recipe.duration)
        buffer = ctx.create_buffer(1, buffer_size, ctx.sample_rate)
        buffer.get_channel_data(0)[:] = generate_noise(recipe.color, buffer_size, self.rng)

        source = self.tracker.track(ctx.create_buffer_source(), track_ms)
        source.buffer = buffer

        noise_filter = self.tracker.track(ctx.create_biquad_filter(), track_ms)
        noise_filter.type = recipe.filter_type
        noise_filter.frequency.set_value_at_time(recipe.filter_start, start_time)
        noise_filter.frequency.exponential_ramp_to_value_at_time(
            recipe.filter_end, start_time + recipe.filter_sweep
        )
        noise_filter.Q.value = recipe.filter_q

        gain = self.tracker.track(ctx.create_gain(), track_ms)
        if recipe.attack > 0:
            gain.gain.set_value_at_time(0.0, start_time)
            gain.gain.linear_ramp_to_value_at_time(
                recipe.peak_gain * volume, start_time + recipe.attack
            )
        else:
            gain.gain.set_value_at_time(recipe.peak_gain * volume, start_time)
        gain.gain.exponential_ramp_to_value_at_time(recipe.floor_gain * volume, end_time)

        source.connect(noise_filter)
        noise_filter.connect(gain)
        gain.connect(ctx.destination)

        source.start(start_time)
        source.stop(end_time)

    @best_effort("plop sound")
    def _plop(self, ctx: AudioContext, recipe: PlopRecipe, volume: float) -> PlayResult:
        if ctx.state == ContextState.CLOSED:
            return PlayResult.SILENT

        track_ms = _ms(recipe.duration)
        osc = self.tracker.track(ctx.create_oscillator(), track_ms)
        gain = self.tracker.track(ctx.create_gain(), track_ms)

        osc.connect(gain)
        gain.connect(ctx.destination)

        now = ctx.current_time
        osc.type = recipe.wave_type
        osc.frequency.set_value_at_time(recipe.frequency_start, now)
        osc.frequency.exponential_ramp_to_value_at_time(recipe.frequency_end, now + recipe.duration)

        gain.gain.set_value_at_time(recipe.peak_gain * volume, now)
        gain.gain.exponential_ramp_to_value_at_time(recipe.floor_gain * volume, now + recipe.duration)

        osc.start(now)
        osc.stop(now + recipe.duration)
        return PlayResult.PLAYED
