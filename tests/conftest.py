"""
Shared fixtures: recording backend di atas OfflineContext dan virtual clock.
"""

import asyncio

import numpy as np
import pytest

from decoding_den.audio.backend import AudioBackend, ContextState, OfflineContext
from decoding_den.audio.effects import EffectSynthesizer
from decoding_den.audio.settings import AudioSettings
from decoding_den.audio.sound_manager import SoundManager, set_sound_manager
from decoding_den.audio.timers import ManualScheduler
from decoding_den.audio.tracker import NodeTracker


class RecordingContext(OfflineContext):
    """OfflineContext yang mencatat setiap node yang dibuat"""

    def __init__(self, scheduler, initial_state=ContextState.RUNNING, resume_mode="ok"):
        super().__init__(scheduler)
        self._state = initial_state
        self.resume_mode = resume_mode
        self.resume_calls = 0
        self.created = []

    def _adopt(self, node):
        node = super()._adopt(node)
        self.created.append(node)
        return node

    async def resume(self):
        self.resume_calls += 1
        if self.resume_mode == "fail":
            raise RuntimeError("resume rejected by platform")
        if self.resume_mode == "hang":
            await asyncio.Event().wait()
        # Yield supaya caller lain sempat jalan selama resume
        await asyncio.sleep(0)
        await super().resume()

    def nodes(self, kind):
        return [node for node in self.created if isinstance(node, kind)]


class FakeBackend(AudioBackend):

    def __init__(self, available=True, initial_state=ContextState.RUNNING,
                 resume_mode="ok", fail_create=False, probe_error=False):
        self.available = available
        self.initial_state = initial_state
        self.resume_mode = resume_mode
        self.fail_create = fail_create
        self.probe_error = probe_error
        self.create_count = 0
        self.contexts = []

    def is_available(self):
        if self.probe_error:
            raise RuntimeError("probe exploded")
        return self.available

    def create_context(self, scheduler):
        self.create_count += 1
        if self.fail_create:
            raise RuntimeError("no audio device")
        context = RecordingContext(scheduler, self.initial_state, self.resume_mode)
        self.contexts.append(context)
        return context


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def ctx(scheduler):
    return RecordingContext(scheduler)


@pytest.fixture
def tracker(scheduler):
    return NodeTracker(scheduler)


@pytest.fixture
def synth(tracker, scheduler):
    return EffectSynthesizer(tracker, scheduler, np.random.default_rng(7))


@pytest.fixture
def make_manager(tmp_path, scheduler):
    def factory(backend=None, settings=None):
        return SoundManager(
            backend=backend if backend is not None else FakeBackend(),
            scheduler=scheduler,
            settings=settings if settings is not None else AudioSettings(master_volume=1.0),
            rng=np.random.default_rng(1234),
            settings_path=tmp_path / "audio_settings.json",
        )
    return factory


@pytest.fixture(autouse=True)
def reset_global_manager():
    yield
    set_sound_manager(None)
