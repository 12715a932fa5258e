"""
Sound Manager
=============
Entry point untuk semua audio feedback di Decoding Den.
Tidak ada yang raise ke caller: hasil terburuk adalah tidak ada suara.

Trigger butuh event loop yang hidup lama (loop aplikasi). Cleanup timer
berjalan di loop itu; `asyncio.run(play_clear())` menutup loop sebelum
timer jatuh tempo, jadi node baru dilepas saat cleanup() dipanggil.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np

from .backend import AudioBackend, ContextState, MixerBackend
from .best_effort import PlayResult, best_effort
from .context_manager import ContextManager
from .effects import Effect, EffectSynthesizer
from .engine import DefinitionPlayer
from .registry import SoundCategory, get_sound
from .settings import AudioSettings, load_settings, save_settings
from .timers import AsyncioScheduler, Scheduler
from .tracker import NodeTracker

logger = logging.getLogger(__name__)

# Kategori settings yang mengontrol setiap effect
EFFECT_CATEGORIES = {
    Effect.CLEAR: SoundCategory.UI_FEEDBACK,
    Effect.SUCCESS: SoundCategory.UI_FEEDBACK,
    Effect.ERASER: SoundCategory.UI_FEEDBACK,
    Effect.WORD_BUILT: SoundCategory.EDUCATIONAL,
    Effect.WORD_LIST: SoundCategory.EDUCATIONAL,
}


class SoundManager:
    """
    Manager untuk semua sound effects.
    Backend dan scheduler bisa di-inject (tests, offline render).
    """

    def __init__(
        self,
        backend: Optional[AudioBackend] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[AudioSettings] = None,
        rng: Optional[np.random.Generator] = None,
        settings_path: Optional[Union[str, Path]] = None
    ):
        self.backend = backend if backend is not None else MixerBackend()
        self.scheduler = scheduler if scheduler is not None else AsyncioScheduler()
        self.settings_path = settings_path
        self.settings = settings if settings is not None else load_settings(settings_path)

        rng = rng if rng is not None else np.random.default_rng()

        self.contexts = ContextManager(self.backend, self.scheduler)
        self.tracker = NodeTracker(self.scheduler)
        self.effects = EffectSynthesizer(self.tracker, self.scheduler, rng)
        self.player = DefinitionPlayer(self.tracker, self.scheduler, rng,
                                       master_volume=self.settings.master_volume)

    def is_supported(self) -> bool:
        """Apakah platform punya audio sama sekali"""
        return self.contexts.is_supported()

    @best_effort("sound effect")
    async def play(self, effect: Effect) -> PlayResult:
        """
        Play satu effect. Return setelah playback dijadwalkan,
        bukan setelah suara selesai.
        """
        effect = Effect(effect)
        volume = self.settings.volume_for(EFFECT_CATEGORIES[effect])
        if volume <= 0:
            return PlayResult.SILENT

        ctx = await self.contexts.acquire_context()
        if ctx is None:
            return PlayResult.SILENT

        await self.contexts.ensure_running(ctx)
        return self.effects.play(effect, ctx, volume)

    async def play_clear(self) -> PlayResult:
        """Bubble pop saat workspace di-clear"""
        return await self.play(Effect.CLEAR)

    async def play_success(self) -> PlayResult:
        """C-E-G chime untuk jawaban benar"""
        return await self.play(Effect.SUCCESS)

    async def play_word_built(self) -> PlayResult:
        """Sama dengan success"""
        return await self.play(Effect.WORD_BUILT)

    async def play_word_list(self) -> PlayResult:
        """F-A-C chime saat kata di-drop ke word list"""
        return await self.play(Effect.WORD_LIST)

    async def play_eraser(self) -> PlayResult:
        """Swoosh untuk eraser di phoneme keyboard"""
        return await self.play(Effect.ERASER)

    @best_effort("registry sound")
    async def play_sound(self, sound_id: str, volume: float = 1.0) -> PlayResult:
        """
        Play sound dari registry.

        Args:
            sound_id: Id di SOUND_REGISTRY atau alias di COMMON_SOUNDS
            volume: Volume multiplier (0.0 - 1.0)
        """
        if not self.settings.sounds_enabled:
            return PlayResult.SILENT

        definition = get_sound(sound_id)
        if definition is None:
            logger.warning("[Audio] Sound not found in registry: %s", sound_id)
            return PlayResult.SILENT

        if not definition.enabled or not self.settings.is_category_enabled(definition.category):
            return PlayResult.SILENT

        ctx = await self.contexts.acquire_context()
        if ctx is None:
            return PlayResult.SILENT

        await self.contexts.ensure_running(ctx)
        return self.player.play(definition, ctx, volume)

    async def resume(self) -> bool:
        """
        Resume audio setelah user gesture.
        Return True jika context sekarang running.
        """
        try:
            ctx = await self.contexts.resume()
        except Exception:
            logger.exception("[Audio] Failed to resume audio")
            return False
        return ctx is not None and ctx.state == ContextState.RUNNING

    def update_settings(self, **changes: Any) -> AudioSettings:
        """Merge perubahan settings lalu simpan"""
        self.settings = self.settings.merged(**changes)
        self.player.set_master_volume(self.settings.master_volume)
        try:
            save_settings(self.settings, self.settings_path)
        except OSError as e:
            logger.error("[Audio] Failed to save audio settings: %s", e)
        return self.settings

    @property
    def active_nodes(self) -> int:
        return self.tracker.active_count

    def cleanup(self):
        """
        Cleanup audio resources. Juga melepas node yang cleanup timer-nya
        tidak pernah jalan karena event loop-nya sudah ditutup.
        """
        released = self.tracker.release_all()
        self.contexts.close()
        logger.info("[Audio] Sound manager cleaned up (%d nodes released)", released)


# Global sound manager instance
_sound_manager: Optional[SoundManager] = None


def get_sound_manager() -> SoundManager:
    """Get atau create global sound manager"""
    global _sound_manager
    if _sound_manager is None:
        _sound_manager = SoundManager()
    return _sound_manager


def set_sound_manager(manager: Optional[SoundManager]):
    """Ganti global sound manager (None untuk reset)"""
    global _sound_manager
    _sound_manager = manager


def is_audio_supported() -> bool:
    """Shortcut capability probe"""
    return get_sound_manager().is_supported()


async def play_clear() -> PlayResult:
    return await get_sound_manager().play_clear()


async def play_success() -> PlayResult:
    return await get_sound_manager().play_success()


async def play_word_built() -> PlayResult:
    return await get_sound_manager().play_word_built()


async def play_word_list() -> PlayResult:
    return await get_sound_manager().play_word_list()


async def play_eraser() -> PlayResult:
    return await get_sound_manager().play_eraser()


async def play_sound(sound_id: str, volume: float = 1.0) -> PlayResult:
    """Shortcut untuk play sound dari registry"""
    return await get_sound_manager().play_sound(sound_id, volume)
