"""
Decoding Den Audio - Configuration & Constants
===============================================
All audio settings, timing constants and paths in one place.
"""

import os
from pathlib import Path

# =============================================================================
# AUDIO SETTINGS
# =============================================================================

# Set DECODING_DEN_AUDIO=0 to run without any sound output
AUDIO_ENABLED = os.environ.get("DECODING_DEN_AUDIO", "1").strip() != "0"
AUDIO_SAMPLE_RATE = 44100
AUDIO_CHANNELS = 2
AUDIO_BUFFER_SIZE = 512
MIXER_CHANNELS = 16

# Volume levels (0.0 - 1.0)
MASTER_VOLUME = 0.8

# =============================================================================
# TIMING
# =============================================================================

CLEANUP_GRACE_MS = 100          # Extra time before a tracked node is forced down
DEFAULT_TRACK_DURATION_MS = 1000
CONTEXT_POLL_INTERVAL = 0.010   # seconds between checks while a context is built
RESUME_TIMEOUT = 1.0            # seconds
RENDER_QUANTUM = 128            # frames per k-rate parameter update
MAX_SOURCE_SECONDS = 5.0        # render limit for sources that are never stopped

# =============================================================================
# SETTINGS STORAGE
# =============================================================================

SETTINGS_PATH = Path(
    os.environ.get(
        "DECODING_DEN_SETTINGS",
        str(Path.home() / ".decoding_den" / "audio_settings.json"),
    )
)

# =============================================================================
# CLI
# =============================================================================

PANEL_PAUSE = 0.6   # seconds between effects in the test panel
EXPORT_TAIL = 0.2   # silence kept after the last sample on export
