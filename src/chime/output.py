"""Sounddevice playback for the completion chime."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .errors import ChimeError


class SoundDeviceAudioOutput:
    def __init__(
        self,
        output_device_index: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._device = output_device_index
        self._logger = logger or logging.getLogger(__name__)

    @property
    def device(self) -> Optional[int]:
        return self._device

    def play(self, wav: np.ndarray, sample_rate_hz: int, blocking: bool = True) -> None:
        """Play a mono float buffer, waiting for the tail when ``blocking`` is set."""
        if wav.ndim != 1:
            raise ChimeError("Expected mono PCM array for playback")
        if wav.size == 0:
            raise ChimeError("Cannot play empty audio buffer")
        if sample_rate_hz <= 0:
            raise ChimeError(f"Invalid sample rate: {sample_rate_hz}")

        self._logger.debug(
            "Playing %.2fs chime on device %s",
            wav.size / sample_rate_hz,
            "default" if self._device is None else self._device,
        )
        try:
            sd.play(wav.astype(np.float32, copy=False), samplerate=sample_rate_hz, device=self._device)
            if blocking:
                sd.wait()
        except Exception as error:
            raise ChimeError(f"Chime playback failed: {error}") from error

    def stop(self) -> None:
        try:
            sd.stop()
        except Exception as error:
            self._logger.warning("Failed to stop chime playback: %s", error)
