"""
Shared types and numeric guards for the fractal field generators.

All generators evaluate batches of 4D points as ``(N, 4)`` float32 arrays;
a single :class:`Point4` is a batch of one.
"""

from typing import NamedTuple, Sequence, Union

import numpy as np

# Iteration caps above this are rejected to keep per-sample cost bounded.
MAX_ITERATIONS = 16

# Distances are clipped into [-FAR_DISTANCE, FAR_DISTANCE].
FAR_DISTANCE = 1.0e4

# Magnitudes below this are treated as zero.
EPSILON = 1.0e-12


class Point4(NamedTuple):
    """A 4D sample position. ``w`` couples position with time."""

    x: float
    y: float
    z: float
    w: float = 0.0


PointsLike = Union[Point4, Sequence[float], Sequence[Sequence[float]], np.ndarray]


def as_points(points: PointsLike) -> np.ndarray:
    """
    Coerce one point or a batch of points into a ``(N, 4)`` float32 array.

    A 3-component input gets ``w = 0``.
    """
    arr = np.asarray(points, dtype=np.float32)
    if arr.ndim == 1:
        arr = arr[np.newaxis, :]
    if arr.ndim != 2 or arr.shape[1] not in (3, 4):
        raise ValueError(f"Expected points of shape (N, 4), got {arr.shape}")
    if arr.shape[1] == 3:
        arr = np.concatenate([arr, np.zeros((arr.shape[0], 1), np.float32)], axis=1)
    return arr


def finite_distance(distance: np.ndarray) -> np.ndarray:
    """Replace NaN/Inf with finite boundary values and clip the range."""
    distance = np.nan_to_num(
        distance, nan=0.0, posinf=FAR_DISTANCE, neginf=-FAR_DISTANCE
    )
    return np.clip(distance, -FAR_DISTANCE, FAR_DISTANCE).astype(np.float32)


def iteration_fraction(iterations: np.ndarray, cap: int) -> np.ndarray:
    """Fraction of the iteration cap consumed, clipped into [0, 1]."""
    fraction = np.asarray(iterations, dtype=np.float32) / float(max(cap, 1))
    return np.clip(fraction, 0.0, 1.0)


def check_iterations(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise TypeError(f"{name} must be an integer, got {type(value).__name__}")
    if not 1 <= value <= MAX_ITERATIONS:
        raise ValueError(f"{name} must be in [1, {MAX_ITERATIONS}], got {value}")


def color_inputs(iterations, distances, points: PointsLike):
    """Broadcast per-sample color inputs against a batch of points."""
    points = as_points(points)
    n = points.shape[0]
    iterations = np.broadcast_to(np.asarray(iterations, dtype=np.float32), (n,))
    distances = finite_distance(
        np.broadcast_to(np.asarray(distances, dtype=np.float32), (n,))
    )
    return iterations, distances, points
