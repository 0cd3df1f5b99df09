"""
Frequency extraction from fractal geometry.

Samples a field at a handful of 4D points and maps distance and color
to pitch around A3.
"""

import math
from typing import List

import numpy as np

from resonant.fractals import FAR_DISTANCE, FractalField, as_points, color_field, distance_field
from resonant.fractals.base import PointsLike

BASE_FREQUENCY = 220.0  # A3

# Fixed iteration count fed to the color rule, independent of the field's cap.
REFERENCE_ITERATIONS = 8


def extract_frequencies(field: FractalField, sample_points: PointsLike) -> List[float]:
    """
    One frequency per sample point, in input order.

    ``220 * (1 + d * 0.5) * (1 + red * 0.3)``, with ``d`` clamped to
    ``[-1, FAR_DISTANCE]`` so every frequency is at least 110 Hz.

    Args:
        field: Fractal field for the current frame.
        sample_points: Points of shape ``(N, 4)``; may be empty.

    Returns:
        List of N finite frequencies in Hz.
    """
    points = np.asarray(sample_points, dtype=np.float32)
    if points.size == 0:
        return []
    points = as_points(points)

    distances = distance_field(field, points)
    colors = color_field(field, REFERENCE_ITERATIONS, distances, points)

    d = np.clip(distances, -1.0, FAR_DISTANCE)
    red = colors[:, 0]
    frequencies = BASE_FREQUENCY * (1.0 + d * 0.5) * (1.0 + red * 0.3)
    return [max(float(f), 0.0) for f in frequencies]


def create_harmonic_series(fundamental: float, harmonics: int) -> List[float]:
    """``[fundamental * 1, ..., fundamental * harmonics]``."""
    return [fundamental * h for h in range(1, harmonics + 1)]


def frame_sample_points(time: float) -> np.ndarray:
    """The four probe points sampled for audio on each frame."""
    return np.array(
        [
            [1.0, 0.0, 0.0, time * 0.1],
            [0.0, 1.0, 0.0, time * 0.13],
            [0.0, 0.0, 1.0, time * 0.17],
            [math.sin(time * 0.1), math.cos(time * 0.1), 0.0, 0.5],
        ],
        dtype=np.float32,
    )
