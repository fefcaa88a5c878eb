"""Synthesis of the short bell used to announce a finished phase."""

from __future__ import annotations

import numpy as np

DEFAULT_SAMPLE_RATE_HZ = 22050

# (frequency Hz, start offset s, length s)
_BELL_NOTES: tuple[tuple[float, float, float], ...] = (
    (880.0, 0.0, 0.45),
    (1318.5, 0.18, 0.6),
)
_DECAY_PER_SECOND = 6.0
_FADE_IN_SECONDS = 0.005


def chime_length_seconds() -> float:
    return max(start + length for _, start, length in _BELL_NOTES)


def render_chime(volume: int, sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ) -> np.ndarray:
    """Render a mono float32 two-note bell scaled by ``volume`` (0-100)."""
    if sample_rate_hz <= 0:
        raise ValueError("sample_rate_hz must be greater than zero")
    gain = max(0, min(100, int(volume))) / 100.0

    total = int(round(chime_length_seconds() * sample_rate_hz))
    wav = np.zeros(total, dtype=np.float32)
    fade_samples = max(1, int(_FADE_IN_SECONDS * sample_rate_hz))

    for frequency, start, length in _BELL_NOTES:
        count = int(round(length * sample_rate_hz))
        offset = int(round(start * sample_rate_hz))
        t = np.arange(count, dtype=np.float32) / sample_rate_hz
        envelope = np.exp(-_DECAY_PER_SECOND * t)
        envelope[:fade_samples] *= np.linspace(0.0, 1.0, fade_samples, dtype=np.float32)
        note = np.sin(2.0 * np.pi * frequency * t) * envelope
        end = min(total, offset + count)
        wav[offset:end] += note[: end - offset].astype(np.float32)

    peak = float(np.max(np.abs(wav)))
    if peak > 0.0:
        wav *= 0.8 / peak
    return (wav * gain).astype(np.float32)
