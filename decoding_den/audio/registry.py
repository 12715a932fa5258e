"""
Sound Registry
==============
Definisi sound ber-nama untuk UI feedback dan educational cues.
Waktu di registry dalam milliseconds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .generator import NoiseColor, WaveType
from .nodes import FilterType


class SoundCategory(Enum):
    """Kategori sound, bisa di-toggle per kategori di settings"""
    UI_FEEDBACK = "ui_feedback"
    EDUCATIONAL = "educational"
    AMBIENT = "ambient"
    NOTIFICATIONS = "notifications"


class SoundKind(Enum):
    """Cara sound dihasilkan"""
    PROCEDURAL = "procedural"
    SEQUENCE = "sequence"
    FILE = "file"


@dataclass(frozen=True)
class Envelope:
    """ADSR: attack/decay/release dalam ms, sustain sebagai fraksi peak"""
    attack: float
    decay: float
    sustain: float
    release: float


@dataclass(frozen=True)
class OscillatorSpec:
    wave_type: WaveType
    frequency: float
    duration: float


@dataclass(frozen=True)
class FilterSpec:
    filter_type: FilterType
    frequency: float
    q: Optional[float] = None


@dataclass(frozen=True)
class NoiseSpec:
    color: NoiseColor
    duration: float
    filter: Optional[FilterSpec] = None


@dataclass(frozen=True)
class SequenceNote:
    frequency: float
    start: float
    duration: float
    volume: float = 1.0


@dataclass(frozen=True)
class FileSpec:
    url: str
    format: str


@dataclass(frozen=True)
class SoundParameters:
    kind: SoundKind
    oscillator: Optional[OscillatorSpec] = None
    noise: Optional[NoiseSpec] = None
    sequence: Tuple[SequenceNote, ...] = ()
    envelope: Optional[Envelope] = None
    file: Optional[FileSpec] = None


@dataclass(frozen=True)
class SoundDefinition:
    """Satu sound yang bisa dimainkan lewat id"""
    id: str
    name: str
    category: SoundCategory
    description: str
    volume: float
    duration: float     # ms, -1 untuk continuous
    parameters: SoundParameters
    enabled: bool = True


_DEFINITIONS = (
    # UI feedback sounds
    SoundDefinition(
        id="ui_clear",
        name="Clear Action",
        category=SoundCategory.UI_FEEDBACK,
        description="Bubble pop sound for clearing content",
        volume=0.3,
        duration=200,
        parameters=SoundParameters(
            kind=SoundKind.PROCEDURAL,
            noise=NoiseSpec(
                color=NoiseColor.WHITE,
                duration=100,
                filter=FilterSpec(FilterType.BANDPASS, 1000, q=10),
            ),
            sequence=(
                SequenceNote(1000, 0, 50, volume=0.3),
                SequenceNote(2000, 50, 50, volume=0.1),
                SequenceNote(200, 100, 100, volume=0.1),   # plop
            ),
            envelope=Envelope(attack=0, decay=50, sustain=0.1, release=100),
        ),
    ),
    SoundDefinition(
        id="ui_success",
        name="Success Action",
        category=SoundCategory.UI_FEEDBACK,
        description="Success chime for completed actions (C-E-G chord)",
        volume=0.15,
        duration=500,
        parameters=SoundParameters(
            kind=SoundKind.SEQUENCE,
            sequence=(
                SequenceNote(523, 0, 150, volume=0.1),     # C5
                SequenceNote(659, 100, 150, volume=0.1),   # E5
                SequenceNote(784, 200, 200, volume=0.1),   # G5
            ),
            envelope=Envelope(attack=10, decay=100, sustain=0.8, release=200),
        ),
    ),
    SoundDefinition(
        id="ui_button_press",
        name="Button Press",
        category=SoundCategory.UI_FEEDBACK,
        description="Simple confirmation sound for button presses",
        volume=0.1,
        duration=100,
        parameters=SoundParameters(
            kind=SoundKind.PROCEDURAL,
            oscillator=OscillatorSpec(WaveType.TRIANGLE, 600, 100),
            envelope=Envelope(attack=0, decay=50, sustain=0.5, release=50),
        ),
    ),

    # Educational sounds
    SoundDefinition(
        id="edu_phoneme_correct",
        name="Phoneme Correct",
        category=SoundCategory.EDUCATIONAL,
        description="Positive feedback for correct phoneme identification",
        volume=0.2,
        duration=300,
        parameters=SoundParameters(
            kind=SoundKind.SEQUENCE,
            sequence=(
                SequenceNote(440, 0, 100, volume=0.15),    # A4
                SequenceNote(554, 100, 100, volume=0.15),  # C#5
                SequenceNote(659, 200, 100, volume=0.2),   # E5
            ),
            envelope=Envelope(attack=5, decay=50, sustain=0.7, release=100),
        ),
    ),
    SoundDefinition(
        id="edu_word_built",
        name="Word Built Successfully",
        category=SoundCategory.EDUCATIONAL,
        description="Celebration sound when a word is successfully built",
        volume=0.2,
        duration=600,
        parameters=SoundParameters(
            kind=SoundKind.SEQUENCE,
            sequence=(
                SequenceNote(523, 0, 150, volume=0.15),    # C5
                SequenceNote(659, 150, 150, volume=0.15),  # E5
                SequenceNote(784, 300, 150, volume=0.2),   # G5
                SequenceNote(1047, 450, 150, volume=0.15), # C6
            ),
            envelope=Envelope(attack=10, decay=50, sustain=0.8, release=200),
        ),
    ),

    # Ambient (belum dipakai)
    SoundDefinition(
        id="ambient_forest",
        name="Forest Ambience",
        category=SoundCategory.AMBIENT,
        description="Subtle forest sounds for background atmosphere",
        volume=0.05,
        duration=-1,
        parameters=SoundParameters(
            kind=SoundKind.FILE,
            file=FileSpec(url="/audio/forest_ambient.ogg", format="ogg"),
        ),
        enabled=False,
    ),
)

SOUND_REGISTRY: Dict[str, SoundDefinition] = {d.id: d for d in _DEFINITIONS}

COMMON_SOUNDS = {
    'clear': 'ui_clear',
    'success': 'ui_success',
    'button_press': 'ui_button_press',
    'word_built': 'edu_word_built',
    'phoneme_correct': 'edu_phoneme_correct',
}


def get_sound(sound_id: str) -> Optional[SoundDefinition]:
    """Get definition by id atau alias di COMMON_SOUNDS"""
    sound_id = COMMON_SOUNDS.get(sound_id, sound_id)
    return SOUND_REGISTRY.get(sound_id)


def get_sounds_by_category(category: SoundCategory) -> List[SoundDefinition]:
    return [d for d in SOUND_REGISTRY.values() if d.category == category]


def get_enabled_sounds() -> List[SoundDefinition]:
    return [d for d in SOUND_REGISTRY.values() if d.enabled]
