"""
Audio System
============
Sound manager, effect synthesizers dan procedural sound generation.
"""

from .backend import (
    AudioBackend, AudioContext, ContextState, MixerBackend, OfflineBackend,
    UnavailableBackend
)
from .best_effort import PlayResult, best_effort
from .context_manager import ContextManager
from .effects import Effect, EffectSynthesizer
from .generator import NoiseColor, WaveType, pink_noise, white_noise
from .registry import SOUND_REGISTRY, SoundCategory, get_sound
from .settings import AudioSettings, load_settings, save_settings
from .sound_manager import (
    SoundManager, get_sound_manager, is_audio_supported, play_clear,
    play_eraser, play_sound, play_success, play_word_built, play_word_list,
    set_sound_manager
)
from .timers import AsyncioScheduler, ManualScheduler, Scheduler
from .tracker import NodeTracker

__all__ = [
    'AudioBackend', 'AudioContext', 'ContextState',
    'MixerBackend', 'OfflineBackend', 'UnavailableBackend',
    'PlayResult', 'best_effort',
    'ContextManager', 'Effect', 'EffectSynthesizer',
    'NoiseColor', 'WaveType', 'pink_noise', 'white_noise',
    'SOUND_REGISTRY', 'SoundCategory', 'get_sound',
    'AudioSettings', 'load_settings', 'save_settings',
    'SoundManager', 'get_sound_manager', 'set_sound_manager', 'is_audio_supported',
    'play_clear', 'play_success', 'play_word_built', 'play_word_list',
    'play_eraser', 'play_sound',
    'AsyncioScheduler', 'ManualScheduler', 'Scheduler',
    'NodeTracker',
]
