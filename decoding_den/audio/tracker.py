"""
Node Tracker
============
Safety net untuk synthesis nodes: setiap node yang di-track akan
di-stop dan di-disconnect setelah durasinya plus grace period,
apapun yang terjadi dengan playback.
"""

import logging
from typing import Dict

from ..config import CLEANUP_GRACE_MS, DEFAULT_TRACK_DURATION_MS
from .nodes import AudioNode
from .timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class NodeTracker:
    """Registry node aktif dengan forced cleanup terjadwal"""

    def __init__(self, scheduler: Scheduler, grace_ms: float = CLEANUP_GRACE_MS):
        self.scheduler = scheduler
        self.grace_ms = grace_ms
        self._active: Dict[AudioNode, TimerHandle] = {}

    @property
    def active_count(self) -> int:
        return len(self._active)

    def is_tracked(self, node: AudioNode) -> bool:
        return node in self._active

    def track(self, node: AudioNode,
              expected_duration_ms: float = DEFAULT_TRACK_DURATION_MS) -> AudioNode:
        """
        Register node dan jadwalkan cleanup pada
        expected_duration_ms + grace_ms.

        Returns:
            Node yang sama, supaya bisa dipakai inline
        """
        previous = self._active.pop(node, None)
        if previous is not None:
            previous.cancel()

        delay = (expected_duration_ms + self.grace_ms) / 1000.0
        self._active[node] = self.scheduler.call_later(delay, self.cleanup, node)
        return node

    def cleanup(self, node: AudioNode):
        """
        Stop lalu disconnect node. Idempotent: error dari node yang
        sudah berhenti atau belum pernah tersambung diabaikan.
        """
        handle = self._active.pop(node, None)
        if handle is not None:
            handle.cancel()

        stop = getattr(node, "stop", None)
        if callable(stop):
            try:
                stop()
            except Exception as e:
                logger.debug("[Audio] Ignoring stop error on %r: %s", node, e)

        disconnect = getattr(node, "disconnect", None)
        if callable(disconnect):
            try:
                disconnect()
            except Exception as e:
                logger.debug("[Audio] Ignoring disconnect error on %r: %s", node, e)

    def release_all(self) -> int:
        """
        Cleanup semua node aktif sekarang juga, return jumlahnya.
        Satu-satunya jalan melepas node jika scheduler-nya sudah berhenti.
        """
        nodes = list(self._active)
        for node in nodes:
            self.cleanup(node)
        return len(nodes)
