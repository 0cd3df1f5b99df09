"""
4D Julia set distance estimator.

Escape-time on a full 4D iterate with a running derivative ``dz`` to
estimate local stretching. The "square" is quaternion-like but keeps
only the ``x`` cross terms, which is what the shader does.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from resonant.core.color import hsv_to_rgb_array
from resonant.fractals.base import (
    EPSILON,
    FAR_DISTANCE,
    Point4,
    PointsLike,
    as_points,
    check_iterations,
    color_inputs,
    finite_distance,
    iteration_fraction,
)

ESCAPE_RADIUS = 4.0

# Per-axis (frequency, amplitude) of the time perturbation of c.
C_DRIFT = (
    (0.1, 0.3),
    (0.13, 0.2),
    (0.07, 0.25),
    (0.11, 0.15),
)


@dataclass(frozen=True)
class Julia4D:
    """4D Julia parameters. ``c`` is the static escape constant."""

    c: Point4
    iterations: int
    time: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "c", Point4(*(float(v) for v in self.c)))
        check_iterations("iterations", self.iterations)
        if not all(math.isfinite(v) for v in self.c) or not math.isfinite(self.time):
            raise ValueError("c and time must be finite")

    @property
    def dynamic_c(self) -> Point4:
        """Escape constant after the per-axis time drift."""
        t = self.time
        (fx, ax), (fy, ay), (fz, az), (fw, aw) = C_DRIFT
        return Point4(
            self.c.x + math.sin(t * fx) * ax,
            self.c.y + math.cos(t * fy) * ay,
            self.c.z + math.sin(t * fz) * az,
            self.c.w + math.cos(t * fw) * aw,
        )


def quat_square(q: np.ndarray) -> np.ndarray:
    """(x² - y² - z² - w², 2xy, 2xz, 2xw) over a ``(N, 4)`` batch."""
    x, y, z, w = q.T
    return np.stack(
        [x * x - y * y - z * z - w * w, 2.0 * x * y, 2.0 * x * z, 2.0 * x * w],
        axis=1,
    )


def quat_square_derivative(q: np.ndarray, dq: np.ndarray) -> np.ndarray:
    """Derivative of :func:`quat_square` at ``q`` applied to ``dq``."""
    x, y, z, w = q.T
    dx, dy, dz, dw = dq.T
    return 2.0 * np.stack(
        [
            x * dx - y * dy - z * dz - w * dw,
            x * dy + y * dx,
            x * dz + z * dx,
            x * dw + w * dx,
        ],
        axis=1,
    )


def evaluate(julia: Julia4D, points: PointsLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run the escape-time loop over a batch of points.

    Returns:
        Tuple of (distance estimates, passes consumed before escape).
    """
    points = as_points(points)
    n = points.shape[0]

    z = points.copy()
    dz = np.zeros((n, 4), dtype=np.float32)
    dz[:, 0] = 1.0
    unit = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float32)
    c = np.array(julia.dynamic_c, dtype=np.float32)

    passes = np.zeros(n, dtype=np.int32)
    active = np.ones(n, dtype=bool)

    with np.errstate(all="ignore"):
        for _ in range(julia.iterations):
            active &= ~(np.linalg.norm(z, axis=1) > ESCAPE_RADIUS)
            if not active.any():
                break

            za = z[active]
            dz[active] = quat_square_derivative(za, dz[active]) + unit
            z[active] = quat_square(za) + c
            passes[active] += 1

        r = np.linalg.norm(z, axis=1)
        dr = np.linalg.norm(dz, axis=1)
        nonzero = r > EPSILON
        stretched = dr > EPSILON
        safe_r = np.where(nonzero, r, 1.0)
        safe_dr = np.where(stretched, dr, 1.0)
        distance = np.where(nonzero, 0.5 * np.log(safe_r) * r / safe_dr, 0.0)
        # A vanishing derivative means no local stretching: the point is far.
        distance = np.where(stretched, distance, FAR_DISTANCE)

    return finite_distance(distance), passes


def color(
    julia: Julia4D,
    iterations,
    distances,
    points: PointsLike,
) -> np.ndarray:
    """Planar-angle hue, distance-faded saturation, escape-biased value."""
    iterations, d, points = color_inputs(iterations, distances, points)
    x, y, z, w = points.T
    t = np.float32(julia.time)

    angle = (np.arctan2(x, y) + t * 0.1) / (2.0 * np.pi)
    depth = (z + w) * 0.1 + t * 0.05
    hue = np.mod(angle + depth, 1.0)

    saturation = np.maximum(1.0 - d * 0.5, 0.2)
    value = iteration_fraction(iterations, julia.iterations) ** 0.7

    return hsv_to_rgb_array(hue, saturation, value)
