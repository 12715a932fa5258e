"""
Timers
======
Scheduler abstraction untuk deferred callbacks (cleanup, delayed sounds).

AsyncioScheduler dipakai saat runtime. ManualScheduler punya virtual
clock yang hanya maju lewat advance(), untuk tests dan offline render.
"""

import asyncio
import heapq
import itertools
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Tuple


class TimerHandle(ABC):
    """Handle untuk callback yang sudah dijadwalkan"""

    @abstractmethod
    def cancel(self):
        pass

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        pass

    @property
    @abstractmethod
    def pending(self) -> bool:
        """True selama callback masih akan jalan"""
        pass


class Scheduler(ABC):
    """Base class untuk semua scheduler"""

    @abstractmethod
    def time(self) -> float:
        """Waktu sekarang dalam seconds"""
        pass

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[..., Any],
                   *args: Any) -> TimerHandle:
        """Jadwalkan callback setelah delay seconds"""
        pass

    @abstractmethod
    async def sleep(self, delay: float):
        """Tunggu (cooperative) selama delay seconds"""
        pass


class _AsyncioHandle(TimerHandle):

    def __init__(self, loop: asyncio.AbstractEventLoop, delay: float,
                 callback: Callable[..., Any], args: tuple):
        self._loop = loop
        self._fired = False
        self._handle = loop.call_later(max(0.0, delay), self._run, callback, args)

    def _run(self, callback: Callable[..., Any], args: tuple):
        self._fired = True
        callback(*args)

    def cancel(self):
        self._handle.cancel()

    @property
    def cancelled(self) -> bool:
        return self._handle.cancelled()

    @property
    def pending(self) -> bool:
        # Loop yang sudah closed (misalnya setelah asyncio.run) tidak akan
        # pernah menjalankan callback ini
        return not (self._fired or self.cancelled or self._loop.is_closed())


class AsyncioScheduler(Scheduler):
    """Scheduler di atas running asyncio event loop"""

    def time(self) -> float:
        try:
            return asyncio.get_running_loop().time()
        except RuntimeError:
            return time.monotonic()

    def call_later(self, delay: float, callback: Callable[..., Any],
                   *args: Any) -> TimerHandle:
        return _AsyncioHandle(asyncio.get_running_loop(), delay, callback, args)

    async def sleep(self, delay: float):
        await asyncio.sleep(delay)


class _ManualHandle(TimerHandle):

    def __init__(self, due: float):
        self.due = due
        self._cancelled = False
        self.fired = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def pending(self) -> bool:
        return not (self.fired or self._cancelled)


class ManualScheduler(Scheduler):
    """
    Virtual clock. Callback hanya jalan saat advance() dipanggil,
    urut berdasarkan due time lalu urutan penjadwalan.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List[Tuple[float, int, _ManualHandle, Callable, tuple]] = []
        self._counter = itertools.count()
        self.sleeps: List[float] = []

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any],
                   *args: Any) -> TimerHandle:
        due = self._now + max(0.0, delay)
        handle = _ManualHandle(due)
        heapq.heappush(self._queue, (due, next(self._counter), handle, callback, args))
        return handle

    async def sleep(self, delay: float):
        # Hanya yield ke event loop, waktu tidak maju
        self.sleeps.append(delay)
        await asyncio.sleep(0)

    @property
    def pending(self) -> int:
        return sum(1 for entry in self._queue if not entry[2].cancelled)

    def advance(self, seconds: float) -> int:
        """
        Majukan clock dan jalankan semua callback yang jatuh tempo,
        termasuk yang dijadwalkan selama advance berjalan.

        Returns:
            Jumlah callback yang dijalankan
        """
        target = self._now + max(0.0, seconds)
        # Toleransi float supaya 0.1 + 0.15 tetap jatuh tempo di 0.25
        limit = target + 1e-9
        ran = 0

        while self._queue and self._queue[0][0] <= limit:
            due, _, handle, callback, args = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            handle.fired = True
            callback(*args)
            ran += 1

        self._now = max(self._now, target)
        return ran

    def run_all(self) -> int:
        """Jalankan semua callback yang tersisa"""
        ran = 0
        while self._queue:
            due = self._queue[0][0]
            ran += self.advance(max(0.0, due - self._now))
        return ran
