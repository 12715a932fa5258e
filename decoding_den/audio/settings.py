"""
Audio Settings
==============
Preferensi audio user: master volume, global on/off, dan toggle
per kategori. Disimpan sebagai JSON file.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config import MASTER_VOLUME, SETTINGS_PATH
from .registry import SoundCategory

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES: Dict[SoundCategory, bool] = {
    SoundCategory.UI_FEEDBACK: True,
    SoundCategory.EDUCATIONAL: True,
    SoundCategory.AMBIENT: False,
    SoundCategory.NOTIFICATIONS: True,
}


def _clamp_volume(volume: float) -> float:
    return max(0.0, min(1.0, float(volume)))


@dataclass
class AudioSettings:
    """Settings audio untuk satu user / device"""
    master_volume: float = MASTER_VOLUME
    sounds_enabled: bool = True
    categories: Dict[SoundCategory, bool] = field(
        default_factory=lambda: dict(DEFAULT_CATEGORIES)
    )

    def __post_init__(self):
        self.master_volume = _clamp_volume(self.master_volume)

    def is_category_enabled(self, category: SoundCategory) -> bool:
        return self.categories.get(category, DEFAULT_CATEGORIES.get(category, False))

    def volume_for(self, category: SoundCategory) -> float:
        """Volume efektif untuk kategori, 0 jika dimatikan"""
        if not self.sounds_enabled or not self.is_category_enabled(category):
            return 0.0
        return self.master_volume

    def merged(self, **changes: Any) -> "AudioSettings":
        """
        Copy dengan perubahan. `categories` boleh partial dan boleh
        pakai nama string kategori.
        """
        categories = dict(self.categories)
        for key, enabled in dict(changes.pop('categories', None) or {}).items():
            categories[SoundCategory(key)] = bool(enabled)
        return replace(self, categories=categories, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'master_volume': self.master_volume,
            'sounds_enabled': self.sounds_enabled,
            'categories': {c.value: enabled for c, enabled in self.categories.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AudioSettings":
        """Build dari dict tersimpan, key yang tidak dikenal diabaikan"""
        settings = cls()
        categories = {}
        for key, enabled in dict(data.get('categories') or {}).items():
            try:
                categories[SoundCategory(key)] = bool(enabled)
            except ValueError:
                logger.warning("[Audio] Unknown sound category in settings: %s", key)

        changes: Dict[str, Any] = {'categories': {c.value: v for c, v in categories.items()}}
        if 'master_volume' in data:
            changes['master_volume'] = _clamp_volume(data['master_volume'])
        if 'sounds_enabled' in data:
            changes['sounds_enabled'] = bool(data['sounds_enabled'])
        return settings.merged(**changes)


PathLike = Union[str, Path]


def load_settings(path: Optional[PathLike] = None) -> AudioSettings:
    """Load settings, fallback ke default jika file tidak ada atau rusak"""
    path = Path(path) if path is not None else SETTINGS_PATH
    if not path.exists():
        return AudioSettings()
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError("settings file must contain a JSON object")
        return AudioSettings.from_dict(data)
    except (OSError, ValueError, TypeError) as e:
        logger.error("[Audio] Failed to load audio settings from %s: %s", path, e)
        return AudioSettings()


def save_settings(settings: AudioSettings, path: Optional[PathLike] = None) -> Path:
    """Simpan settings sebagai JSON, return path yang ditulis"""
    path = Path(path) if path is not None else SETTINGS_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(settings.to_dict(), f, indent=2)
    return path
