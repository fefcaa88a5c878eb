"""Public exports for the completion chime."""

from .errors import ChimeError
from .output import SoundDeviceAudioOutput
from .player import ChimePlayer
from .tone import render_chime

__all__ = [
    "ChimeError",
    "ChimePlayer",
    "SoundDeviceAudioOutput",
    "render_chime",
]
