"""Completion chime service combining tone synthesis and playback."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import numpy as np

from .tone import DEFAULT_SAMPLE_RATE_HZ, render_chime


class AudioOutputLike(Protocol):
    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = True) -> None:
        ...


class ChimePlayer:
    """Plays the bell at the requested volume; silent at volume zero."""
    def __init__(
        self,
        output: AudioOutputLike,
        *,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        logger: Optional[logging.Logger] = None,
    ):
        self._output = output
        self._sample_rate_hz = sample_rate_hz
        self._logger = logger or logging.getLogger("chime")

    def play(self, volume: int) -> bool:
        if volume <= 0:
            self._logger.debug("Chime skipped at volume 0")
            return False
        wav = render_chime(volume, self._sample_rate_hz)
        self._logger.debug(
            "Playing chime: %d samples at %d Hz (volume=%d)",
            len(wav),
            self._sample_rate_hz,
            volume,
        )
        self._output.play(wav, self._sample_rate_hz)
        return True
