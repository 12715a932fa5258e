#!/usr/bin/env python3
"""
DECODING DEN - Audio Test Panel
===============================
Mainkan atau export sound effects tanpa menjalankan aplikasi.

Jalankan: python -m decoding_den.main [effect ...]
"""

import argparse
import asyncio
import logging
import sys
import wave
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from .audio.backend import OfflineBackend
from .audio.best_effort import PlayResult
from .audio.effects import Effect
from .audio.registry import SOUND_REGISTRY, SoundCategory, get_sound
from .audio.settings import AudioSettings
from .audio.sound_manager import SoundManager
from .audio.timers import ManualScheduler
from .config import EXPORT_TAIL, PANEL_PAUSE

Sound = Union[Effect, str]


def resolve_sound(name: str) -> Sound:
    """Nama effect atau id/alias registry"""
    try:
        return Effect(name)
    except ValueError:
        pass
    definition = get_sound(name)
    if definition is None:
        raise ValueError(f"unknown sound: {name}")
    return definition.id


def sound_name(sound: Sound) -> str:
    return sound.value if isinstance(sound, Effect) else sound


async def trigger(manager: SoundManager, sound: Sound) -> PlayResult:
    if isinstance(sound, Effect):
        return await manager.play(sound)
    return await manager.play_sound(sound)


async def play_panel(sounds: List[Sound]) -> int:
    """Mainkan sounds lewat speaker dengan jeda di antaranya"""
    print(f"\n{'='*40}")
    print("  DECODING DEN - Audio Test Panel")
    print(f"{'='*40}\n")

    manager = SoundManager()
    if not manager.is_supported():
        print("Audio: Disabled (no device)")
        return 1

    await manager.resume()
    try:
        for sound in sounds:
            result = await trigger(manager, sound)
            print(f"  {sound_name(sound):<20} {result.value}")
            await asyncio.sleep(PANEL_PAUSE)
    finally:
        manager.cleanup()
    return 0


def export_settings() -> AudioSettings:
    """Semua kategori aktif, volume penuh"""
    return AudioSettings(master_volume=1.0).merged(
        categories={category: True for category in SoundCategory}
    )


def render_offline(sound: Sound, seed: Optional[int] = None) -> np.ndarray:
    """
    Render satu sound ke numpy buffer dengan virtual clock.

    Returns:
        Mono float32 samples, termasuk tail hening
    """
    scheduler = ManualScheduler()
    backend = OfflineBackend()
    manager = SoundManager(
        backend=backend,
        scheduler=scheduler,
        settings=export_settings(),
        rng=np.random.default_rng(seed),
    )

    result = asyncio.run(trigger(manager, sound))
    if result != PlayResult.PLAYED:
        raise RuntimeError(f"{sound_name(sound)} did not play ({result.value})")

    # Jalankan semua timer: flush render, delayed notes, cleanup
    scheduler.run_all()

    samples = backend.contexts[-1].render()
    tail = np.zeros(int(EXPORT_TAIL * backend.sample_rate), dtype=np.float32)
    return np.concatenate((samples, tail))


def write_wav(path: Path, samples: np.ndarray, sample_rate: int):
    """Tulis 16-bit stereo WAV"""
    int16 = (np.clip(samples, -1, 1) * 32767).astype(np.int16)
    stereo = np.column_stack((int16, int16))
    with wave.open(str(path), 'wb') as wf:
        wf.setnchannels(2)
        wf.setsampwidth(2)
        wf.setframerate(sample_rate)
        wf.writeframes(stereo.tobytes())


def export_sounds(sounds: List[Sound], directory: Path, seed: Optional[int] = None) -> List[Path]:
    directory.mkdir(parents=True, exist_ok=True)
    written = []
    sample_rate = OfflineBackend().sample_rate
    for sound in sounds:
        path = directory / f"{sound_name(sound)}.wav"
        write_wav(path, render_offline(sound, seed), sample_rate)
        print(f"  {sound_name(sound):<20} -> {path}")
        written.append(path)
    return written


def print_sounds():
    print("Effects:")
    for effect in Effect:
        print(f"  {effect.value}")
    print("\nRegistry sounds:")
    for definition in SOUND_REGISTRY.values():
        status = "" if definition.enabled else " (disabled)"
        print(f"  {definition.id:<22} {definition.category.value:<12} "
              f"{definition.description}{status}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Decoding Den audio test panel",
    )
    parser.add_argument(
        "sounds", nargs="*",
        help="Effects or registry sound ids, default all effects",
    )
    parser.add_argument(
        "--list", action="store_true",
        help="List effects and registry sounds",
    )
    parser.add_argument(
        "--export", metavar="DIR", type=Path,
        help="Render to DIR/<name>.wav instead of playing",
    )
    parser.add_argument(
        "--seed", type=int, default=None,
        help="Noise seed for reproducible exports",
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point utama"""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list:
        print_sounds()
        return 0

    try:
        sounds = [resolve_sound(name) for name in args.sounds] or list(Effect)
    except ValueError as e:
        print(f"Error: {e}")
        return 2

    if args.export is not None:
        try:
            export_sounds(sounds, args.export, args.seed)
        except (OSError, RuntimeError) as e:
            print(f"Error: {e}")
            return 1
        return 0

    try:
        return asyncio.run(play_panel(sounds))
    except KeyboardInterrupt:
        print("\nDihentikan oleh user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
