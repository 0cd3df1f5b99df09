"""
Offline oscillator bank.

Renders extracted frequencies and gesture blips to sample buffers so the
sonification can be auditioned or written to disk. Mirrors the live
engine's gain law, audible band and change threshold.
"""

from pathlib import Path
from typing import List, Sequence, Union

import librosa
import numpy as np
import soundfile as sf
from scipy.signal import windows

MIN_FREQUENCY = 80.0
MAX_FREQUENCY = 2000.0

# Frequencies closer than this (Hz) do not restart the oscillators.
CHANGE_THRESHOLD = 5.0

GESTURE_FREQUENCIES = {
    "swipe": (440.0, 200.0),
    "pinch": (880.0, -400.0),
    "tilt": (330.0, 100.0),
    "smile": (550.0, 300.0),
}

GESTURE_ATTACK = 0.05
GESTURE_DURATION = 0.3


def clamp_frequency(frequency: float) -> float:
    """Clamp into the audible band the oscillators accept."""
    return min(max(float(frequency), MIN_FREQUENCY), MAX_FREQUENCY)


def oscillator_gain(frequency: float) -> float:
    """Per-oscillator gain; lower frequencies play louder."""
    return (1.0 / (1.0 + frequency / 400.0)) * 0.1


def frequencies_changed(
    current: Sequence[float],
    new: Sequence[float],
    threshold: float = CHANGE_THRESHOLD,
) -> bool:
    """True when the bank needs restarting for ``new``."""
    if len(current) != len(new):
        return True
    return any(abs(old - f) > threshold for old, f in zip(current, new))


def gesture_frequency(gesture: str, intensity: float) -> float:
    base, slope = GESTURE_FREQUENCIES.get(gesture, (440.0, 0.0))
    return base + intensity * slope


def render_chord(
    frequencies: Sequence[float],
    duration: float = 2.0,
    sr: int = 22050,
    master_volume: float = 1.0,
    fade: float = 0.1,
) -> np.ndarray:
    """
    Sum one sine oscillator per frequency.

    Args:
        frequencies: Target frequencies in Hz (clamped to the audible band).
        duration: Length in seconds.
        sr: Sample rate.
        master_volume: Output gain, clipped into [0, 1].
        fade: Tukey taper fraction to avoid clicks at the edges.

    Returns:
        Mono float32 buffer of ``int(duration * sr)`` samples.
    """
    length = max(int(duration * sr), 0)
    out = np.zeros(length, dtype=np.float32)
    if length == 0:
        return out

    for frequency in frequencies:
        f = clamp_frequency(frequency)
        tone = librosa.tone(f, sr=sr, length=length)
        # Gain follows the requested frequency, not the clamped one.
        out += (tone * oscillator_gain(frequency)).astype(np.float32)

    out *= windows.tukey(length, alpha=fade).astype(np.float32)
    volume = min(max(master_volume, 0.0), 1.0)
    return np.clip(out * volume, -1.0, 1.0)


def render_gesture(gesture: str, intensity: float, sr: int = 22050) -> np.ndarray:
    """Short blip: linear attack to ``0.2 * intensity`` then release to 0."""
    length = int(GESTURE_DURATION * sr)
    t = np.arange(length) / sr
    envelope = np.interp(
        t,
        [0.0, GESTURE_ATTACK, GESTURE_DURATION],
        [0.0, intensity * 0.2, 0.0],
    )
    tone = librosa.tone(gesture_frequency(gesture, intensity), sr=sr, length=length)
    return np.clip(tone * envelope, -1.0, 1.0).astype(np.float32)


def note_names(frequencies: Sequence[float]) -> List[str]:
    """Nearest note name for each frequency, e.g. ``'A3'``."""
    if len(frequencies) == 0:
        return []
    return [str(n) for n in librosa.hz_to_note(np.asarray(frequencies, dtype=float))]


def write_wav(path: Union[str, Path], samples: np.ndarray, sr: int = 22050) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sf.write(path, samples, sr)
    return path
