"""
Definition Player
=================
Memainkan SoundDefinition dari registry lewat master gain per context.
"""

import logging
from typing import Dict, Optional

import numpy as np

from ..config import MASTER_VOLUME
from .backend import AudioContext, ContextState
from .best_effort import PlayResult, best_effort
from .generator import WaveType, generate_noise
from .nodes import GainNode
from .params import AudioParam
from .registry import Envelope, SoundDefinition, SoundKind, SoundParameters
from .timers import Scheduler
from .tracker import NodeTracker

logger = logging.getLogger(__name__)

ENVELOPE_FLOOR = 0.01
FOLLOW_UP_GAP_MS = 50
FOLLOW_UP_VOLUME = 0.3


def apply_envelope(param: AudioParam, envelope: Envelope, start_time: float,
                   peak_volume: float):
    """ADSR di atas automation param (waktu envelope dalam ms)"""
    attack = envelope.attack / 1000
    decay = envelope.decay / 1000
    release = envelope.release / 1000
    sustain_level = envelope.sustain * peak_volume

    param.set_value_at_time(0.0, start_time)
    param.linear_ramp_to_value_at_time(peak_volume, start_time + attack)
    param.linear_ramp_to_value_at_time(sustain_level, start_time + attack + decay)
    param.exponential_ramp_to_value_at_time(
        ENVELOPE_FLOOR, start_time + attack + decay + release
    )


class DefinitionPlayer:
    """
    Player untuk sound dari registry (procedural, sequence, file).
    Semua sound lewat master gain supaya master volume berlaku.
    """

    def __init__(self, tracker: NodeTracker, scheduler: Scheduler,
                 rng: Optional[np.random.Generator] = None,
                 master_volume: float = MASTER_VOLUME):
        self.tracker = tracker
        self.scheduler = scheduler
        self.rng = rng if rng is not None else np.random.default_rng()
        self.master_volume = max(0.0, min(1.0, master_volume))
        self._masters: Dict[AudioContext, GainNode] = {}

    def master_gain(self, ctx: AudioContext) -> GainNode:
        """Master gain untuk context ini, dibuat saat pertama dipakai"""
        self._prune_closed()
        master = self._masters.get(ctx)
        if master is None:
            master = ctx.create_gain()
            master.gain.value = self.master_volume
            master.connect(ctx.destination)
            self._masters[ctx] = master
        return master

    def set_master_volume(self, volume: float):
        self.master_volume = max(0.0, min(1.0, volume))
        self._prune_closed()
        for ctx, master in list(self._masters.items()):
            now = ctx.current_time
            # Satu event saja: nilai lama jadi base value, timeline di-reset
            master.gain.value = master.gain.value_at(now)
            master.gain.cancel_scheduled_values(0.0)
            master.gain.set_value_at_time(self.master_volume, now)

    def _prune_closed(self):
        for ctx in [c for c in self._masters if c.state == ContextState.CLOSED]:
            del self._masters[ctx]

    @best_effort("registry sound")
    def play(self, definition: SoundDefinition, ctx: AudioContext,
             volume: float = 1.0) -> PlayResult:
        final_volume = definition.volume * volume
        params = definition.parameters

        if params.kind == SoundKind.PROCEDURAL:
            self._play_procedural(ctx, params, final_volume)
        elif params.kind == SoundKind.SEQUENCE:
            self._play_sequence(ctx, params, final_volume)
        elif params.kind == SoundKind.FILE:
            url = params.file.url if params.file else None
            logger.info("[Audio] File-based audio not yet implemented: %s", url)
            return PlayResult.SILENT
        else:
            logger.warning("[Audio] Unknown sound type: %s", params.kind)
            return PlayResult.SILENT

        return PlayResult.PLAYED

    def _play_procedural(self, ctx: AudioContext, params: SoundParameters, volume: float):
        start_time = ctx.current_time
        master = self.master_gain(ctx)

        if params.oscillator:
            oscillator = params.oscillator
            osc = self.tracker.track(ctx.create_oscillator(), oscillator.duration)
            gain = self.tracker.track(ctx.create_gain(), oscillator.duration)

            osc.connect(gain)
            gain.connect(master)

            osc.type = oscillator.wave_type
            osc.frequency.set_value_at_time(oscillator.frequency, start_time)

            if params.envelope:
                apply_envelope(gain.gain, params.envelope, start_time, volume)
            else:
                gain.gain.set_value_at_time(volume, start_time)

            osc.start(start_time)
            osc.stop(start_time + oscillator.duration / 1000)

        if params.noise:
            self._play_noise(ctx, params, volume, start_time)

    def _play_sequence(self, ctx: AudioContext, params: SoundParameters, volume: float):
        if ctx.state == ContextState.CLOSED:
            return
        start_time = ctx.current_time
        master = self.master_gain(ctx)

        for note in params.sequence:
            note_ms = note.start + note.duration
            osc = self.tracker.track(ctx.create_oscillator(), note_ms)
            gain = self.tracker.track(ctx.create_gain(), note_ms)

            osc.connect(gain)
            gain.connect(master)

            note_start = start_time + note.start / 1000
            note_end = start_time + note_ms / 1000

            # Clean tone untuk musical notes
            osc.type = WaveType.SINE
            osc.frequency.set_value_at_time(note.frequency, note_start)

            note_volume = note.volume * volume
            if params.envelope:
                apply_envelope(gain.gain, params.envelope, note_start, note_volume)
            else:
                gain.gain.set_value_at_time(note_volume, note_start)
                gain.gain.exponential_ramp_to_value_at_time(ENVELOPE_FLOOR, note_end)

            osc.start(note_start)
            osc.stop(note_end)

    def _play_noise(self, ctx: AudioContext, params: SoundParameters, volume: float,
                    start_time: float):
        noise = params.noise
        duration = noise.duration / 1000
        master = self.master_gain(ctx)

        buffer_size = max(1, int(ctx.sample_rate * duration))
        buffer = ctx.create_buffer(1, buffer_size, ctx.sample_rate)
        buffer.get_channel_data(0)[:] = generate_noise(noise.color, buffer_size, self.rng)

        source = self.tracker.track(ctx.create_buffer_source(), noise.duration)
        source.buffer = buffer
        node = source

        if noise.filter:
            noise_filter = self.tracker.track(ctx.create_biquad_filter(), noise.duration)
            noise_filter.type = noise.filter.filter_type
            noise_filter.frequency.set_value_at_time(noise.filter.frequency, start_time)
            if noise.filter.q:
                noise_filter.Q.value = noise.filter.q
            node.connect(noise_filter)
            node = noise_filter

        gain = self.tracker.track(ctx.create_gain(), noise.duration)
        node.connect(gain)
        gain.connect(master)

        if params.envelope:
            apply_envelope(gain.gain, params.envelope, start_time, volume)
        else:
            gain.gain.set_value_at_time(volume, start_time)

        source.start(start_time)
        source.stop(start_time + duration)

        # Follow-up "plop" untuk sound seperti clear
        if params.sequence:
            delay = (noise.duration + FOLLOW_UP_GAP_MS) / 1000
            self.scheduler.call_later(delay, self._follow_up, ctx, params,
                                      volume * FOLLOW_UP_VOLUME)

    @best_effort("follow-up sequence")
    def _follow_up(self, ctx: AudioContext, params: SoundParameters,
                   volume: float) -> PlayResult:
        if ctx.state == ContextState.CLOSED:
            return PlayResult.SILENT
        self._play_sequence(ctx, params, volume)
        return PlayResult.PLAYED
