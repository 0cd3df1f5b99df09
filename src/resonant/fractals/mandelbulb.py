"""
Mandelbulb distance estimator with 4D coupling.

Power-iteration escape-time estimator; ``w`` tilts the polar angle and
``time`` slowly rotates both angles and breathes the power.
"""

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from resonant.core.color import hsv_to_rgb_array
from resonant.fractals.base import (
    EPSILON,
    PointsLike,
    as_points,
    check_iterations,
    color_inputs,
    finite_distance,
    iteration_fraction,
)

ESCAPE_RADIUS = 2.0


@dataclass(frozen=True)
class Mandelbulb:
    """Mandelbulb parameters. Immutable for the lifetime of a frame."""

    power: float
    iterations: int
    time: float = 0.0

    def __post_init__(self):
        check_iterations("iterations", self.iterations)
        if not math.isfinite(self.power) or not math.isfinite(self.time):
            raise ValueError("power and time must be finite")

    @property
    def dynamic_power(self) -> float:
        """Power after time modulation, fixed for the whole field."""
        return self.power + math.sin(self.time * 0.1) * 2.0


def evaluate(bulb: Mandelbulb, points: PointsLike) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run the escape-time loop over a batch of points.

    Returns:
        Tuple of (distance estimates, passes consumed before escape).
    """
    points = as_points(points)
    n = points.shape[0]
    origin = points[:, :3]
    w = points[:, 3]

    z = origin.copy()
    dr = np.ones(n, dtype=np.float32)
    r = np.zeros(n, dtype=np.float32)
    passes = np.zeros(n, dtype=np.int32)
    active = np.ones(n, dtype=bool)

    t = np.float32(bulb.time)
    power = np.float32(bulb.dynamic_power)

    with np.errstate(all="ignore"):
        for _ in range(bulb.iterations):
            r[active] = np.linalg.norm(z[active], axis=1)
            active &= ~(r > ESCAPE_RADIUS)
            if not active.any():
                break

            za = z[active]
            ra = r[active]
            nonzero = ra > EPSILON
            safe_r = np.where(nonzero, ra, 1.0)

            # theta is 0 at the origin, where acos(z/r) is undefined
            polar = np.where(nonzero, np.arccos(np.clip(za[:, 2] / safe_r, -1.0, 1.0)), 0.0)
            theta = polar + w[active] * 0.1 + t * 0.05
            phi = np.arctan2(za[:, 1], za[:, 0]) + t * 0.03

            dr[active] = ra ** (power - 1.0) * power * dr[active] + 1.0

            zr = ra ** power
            sin_theta = np.sin(theta)
            z[active] = np.stack(
                [
                    zr * sin_theta * np.cos(phi),
                    zr * sin_theta * np.sin(phi),
                    zr * np.cos(theta),
                ],
                axis=1,
            ) + origin[active]
            passes[active] += 1

        nonzero = r > EPSILON
        safe_r = np.where(nonzero, r, 1.0)
        distance = np.where(nonzero, 0.5 * np.log(safe_r) * r / dr, 0.0)

    return finite_distance(distance), passes


def color(
    bulb: Mandelbulb,
    iterations,
    distances,
    points: PointsLike,
) -> np.ndarray:
    """Multi-layered hue with distance-driven saturation and a pulsing value."""
    iterations, d, points = color_inputs(iterations, distances, points)
    x, y, z, w = points.T
    t = np.float32(bulb.time)

    fraction = iteration_fraction(iterations, bulb.iterations)
    base_hue = np.sin(fraction * 6.0 + t * 0.5) * 0.5 + 0.5
    depth_hue = np.cos(w * 3.0 + t * 0.3) * 0.3
    position_hue = np.sin((x + y + z) * 0.1 + t * 0.1) * 0.2
    hue = np.mod(base_hue + depth_hue + position_hue, 1.0)

    saturation = 0.8 + (1.0 - np.minimum(d, 1.0)) * 0.2

    pulse = np.sin(t * 2.0 + x * 0.5) * 0.3 + 0.7
    value = (1.0 - np.minimum(d * 4.0, 0.9)) * pulse

    return hsv_to_rgb_array(hue, saturation, value)
