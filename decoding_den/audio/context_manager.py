"""
Context Manager
===============
Satu shared audio context untuk semua effect.
Dibuat lazily, dibuat ulang jika sudah closed, dan di-resume
jika platform men-suspend-nya (autoplay policy).
"""

import asyncio
import logging
from typing import Optional

from ..config import CONTEXT_POLL_INTERVAL, RESUME_TIMEOUT
from .backend import AudioBackend, AudioContext, ContextState
from .timers import Scheduler

logger = logging.getLogger(__name__)


class ContextManager:
    """
    Pemilik tunggal dari shared context.
    Semua failure non-fatal: hasil terburuk adalah None (tidak ada suara).
    """

    def __init__(self, backend: AudioBackend, scheduler: Scheduler,
                 poll_interval: float = CONTEXT_POLL_INTERVAL,
                 resume_timeout: float = RESUME_TIMEOUT):
        self.backend = backend
        self.scheduler = scheduler
        self.poll_interval = poll_interval
        self.resume_timeout = resume_timeout

        self._context: Optional[AudioContext] = None
        self._initializing = False
        self.contexts_created = 0

    @property
    def context(self) -> Optional[AudioContext]:
        """Context saat ini tanpa membuat yang baru"""
        return self._context

    @property
    def initializing(self) -> bool:
        return self._initializing

    def is_supported(self) -> bool:
        """Capability probe, tidak pernah membuat context"""
        try:
            return bool(self.backend.is_available())
        except Exception as e:
            logger.warning("[Audio] Capability probe failed: %s", e)
            return False

    async def acquire_context(self) -> Optional[AudioContext]:
        """
        Return shared context, buat baru jika belum ada atau sudah closed.

        Returns:
            AudioContext, atau None jika audio tidak tersedia
        """
        if not self.is_supported():
            return None

        # Jangan buat dua context sekaligus: tunggu yang sedang dibuat
        if self._initializing:
            while self._initializing:
                await self.scheduler.sleep(self.poll_interval)
            return self._context

        if self._context is None or self._context.state == ContextState.CLOSED:
            self._initializing = True
            try:
                try:
                    self._context = self.backend.create_context(self.scheduler)
                    self.contexts_created += 1
                except Exception as e:
                    logger.error("[Audio] Failed to create audio context: %s", e)
                    self._context = None

                if self._context is not None:
                    await self.ensure_running(self._context)
            finally:
                self._initializing = False

        return self._context

    async def ensure_running(self, ctx: AudioContext):
        """
        Resume context jika suspended. Gagal atau timeout hanya di-log;
        caller tetap lanjut menjadwalkan suara.
        """
        if ctx.state != ContextState.SUSPENDED:
            return
        try:
            await asyncio.wait_for(ctx.resume(), timeout=self.resume_timeout)
        except asyncio.TimeoutError:
            logger.warning("[Audio] Resume timed out after %.1fs", self.resume_timeout)
        except Exception as e:
            logger.warning("[Audio] Failed to resume audio context: %s", e)

    async def resume(self) -> Optional[AudioContext]:
        """Explicit resume, misalnya setelah user gesture pertama"""
        ctx = await self.acquire_context()
        if ctx is not None:
            await self.ensure_running(ctx)
        return ctx

    def close(self):
        """Tutup context (hanya saat shutdown)"""
        ctx, self._context = self._context, None
        if ctx is None or ctx.state == ContextState.CLOSED:
            return
        try:
            ctx.close()
        except Exception as e:
            logger.warning("[Audio] Failed to close audio context: %s", e)
