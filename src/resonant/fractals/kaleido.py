"""
Kaleidoscopic IFS distance estimator.

Mandelbox-style folding over the 3D projection of the sample: a rotating
mirror plane, a box fold, a spherical fold, then a breathing rescale.
Every fold runs for every point, so the pass count is always
``fold_count``.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from resonant.core.color import hsv_to_rgb_array
from resonant.fractals.base import (
    PointsLike,
    as_points,
    check_iterations,
    color_inputs,
    finite_distance,
)

# Lower bound on |s| for the per-fold dynamic scale.
MIN_FOLD_SCALE = 1.0e-3


@dataclass(frozen=True)
class KaleidoIFS:
    """Kaleidoscopic IFS parameters; ``scale`` is the base fold scale."""

    fold_count: int
    scale: float
    time: float = 0.0

    def __post_init__(self):
        check_iterations("fold_count", self.fold_count)
        if not math.isfinite(self.scale) or not math.isfinite(self.time):
            raise ValueError("scale and time must be finite")

    @property
    def iterations(self) -> int:
        return self.fold_count

    def fold_normal(self, index: int) -> np.ndarray:
        angle = self.time * 0.1 + index * 0.5
        return np.array(
            [math.cos(angle), math.sin(angle), math.sin(angle * 1.3)],
            dtype=np.float32,
        )

    def fold_scale(self, index: int) -> float:
        s = self.scale + math.sin(self.time * 0.05 + index * 0.1) * 0.5
        if abs(s) < MIN_FOLD_SCALE:
            s = math.copysign(MIN_FOLD_SCALE, s)
        return s


def box_fold(p: np.ndarray) -> np.ndarray:
    """Reflect components beyond +-1 back into the box."""
    return np.where(p > 1.0, 2.0 - p, np.where(p < -1.0, -2.0 - p, p))


def evaluate(ifs: KaleidoIFS, points: PointsLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Fold a batch of points ``fold_count`` times.

    Returns:
        Tuple of (distance estimates, passes performed).
    """
    points = as_points(points)
    n = points.shape[0]

    p = points[:, :3].copy()
    scale = np.ones(n, dtype=np.float32)
    t = ifs.time
    translation = np.zeros((n, 3), dtype=np.float32)
    translation[:, 0] = math.sin(t * 0.07) * 0.1
    translation[:, 1] = math.cos(t * 0.11) * 0.1
    translation[:, 2] = points[:, 3] * 0.2

    with np.errstate(all="ignore"):
        for i in range(ifs.fold_count):
            normal = ifs.fold_normal(i)
            dot = p @ normal
            mirrored = dot < 0.0
            p[mirrored] -= 2.0 * dot[mirrored, np.newaxis] * normal

            p = box_fold(p)

            r2 = np.einsum("ij,ij->i", p, p)
            inner = r2 < 0.25
            shell = ~inner & (r2 < 1.0)
            p[inner] *= 4.0
            scale[inner] *= 4.0
            p[shell] /= r2[shell, np.newaxis]
            scale[shell] /= r2[shell]

            s = np.float32(ifs.fold_scale(i))
            p = p * s + translation
            scale *= s

        distance = (np.linalg.norm(p, axis=1) - 0.5) / np.abs(scale)

    passes = np.full(n, ifs.fold_count, dtype=np.int32)
    return finite_distance(distance), passes


def color(
    ifs: KaleidoIFS,
    iterations,
    distances,
    points: PointsLike,
) -> np.ndarray:
    """Complexity-driven hue and value, saturation fading with distance."""
    iterations, d, points = color_inputs(iterations, distances, points)
    w = points[:, 3]
    t = np.float32(ifs.time)

    complexity = (iterations + d * 10.0) * 0.1
    hue = np.mod(complexity + t * 0.3 + w, 1.0)
    saturation = np.maximum(1.0 - d * 0.3, 0.4)
    value = np.maximum(0.8 + np.sin(complexity * 3.0) * 0.2, 0.1)

    return hsv_to_rgb_array(hue, saturation, value)
