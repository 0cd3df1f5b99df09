"""
The fractal field capability.

``FractalField`` is a closed union over the three built-in families.
Each operation is a single function dispatching through ``_FAMILIES``;
the name and GPU id of each family are a contract shared with the
shader and must not change.
"""

from typing import Callable, Dict, NamedTuple, Tuple, Type, Union

import numpy as np

from resonant.core.color import Color3
from resonant.fractals import julia, kaleido, mandelbulb
from resonant.fractals.base import PointsLike
from resonant.fractals.julia import Julia4D
from resonant.fractals.kaleido import KaleidoIFS
from resonant.fractals.mandelbulb import Mandelbulb

FractalField = Union[Mandelbulb, Julia4D, KaleidoIFS]


class _Family(NamedTuple):
    name: str
    gpu_id: int
    evaluate: Callable[..., Tuple[np.ndarray, np.ndarray]]
    color: Callable[..., np.ndarray]


_FAMILIES: Dict[Type, _Family] = {
    Mandelbulb: _Family("Mandelbulb", 0, mandelbulb.evaluate, mandelbulb.color),
    Julia4D: _Family("Julia4D", 1, julia.evaluate, julia.color),
    KaleidoIFS: _Family("KaleidoIFS", 2, kaleido.evaluate, kaleido.color),
}

FAMILY_NAMES: Tuple[str, ...] = tuple(f.name for f in _FAMILIES.values())


def _family(field: FractalField) -> _Family:
    try:
        return _FAMILIES[type(field)]
    except KeyError:
        raise TypeError(f"Not a fractal field: {type(field).__name__}") from None


def evaluate(field: FractalField, points: PointsLike) -> Tuple[np.ndarray, np.ndarray]:
    """Distance estimates and escape pass counts for a batch of points."""
    return _family(field).evaluate(field, points)


def distance_field(field: FractalField, points: PointsLike) -> np.ndarray:
    """Distance estimates, shape ``(N,)`` float32."""
    return evaluate(field, points)[0]


def escape_iterations(field: FractalField, points: PointsLike) -> np.ndarray:
    """Loop passes each point consumed before escaping, shape ``(N,)``."""
    return evaluate(field, points)[1]


def distance_estimator(field: FractalField, pos: PointsLike) -> float:
    """Distance from a single 4D point to the field's surface."""
    return float(distance_field(field, pos)[0])


def color_field(
    field: FractalField,
    iterations,
    distances,
    points: PointsLike,
) -> np.ndarray:
    """Per-sample colors, shape ``(N, 3)`` with channels in [0, 1]."""
    return _family(field).color(field, iterations, distances, points)


def get_color(
    field: FractalField,
    iterations_reached: int,
    distance: float,
    pos: PointsLike,
) -> Color3:
    """Color for one sample from its iteration count and distance."""
    rgb = color_field(field, iterations_reached, distance, pos)[0]
    return Color3(float(rgb[0]), float(rgb[1]), float(rgb[2]))


def get_name(field: FractalField) -> str:
    return _family(field).name


def family_id(field_or_name: Union[FractalField, str]) -> int:
    """GPU-side id: Mandelbulb=0, Julia4D=1, KaleidoIFS=2."""
    if isinstance(field_or_name, str):
        for family in _FAMILIES.values():
            if family.name == field_or_name:
                return family.gpu_id
        raise ValueError(f"Unknown fractal family: {field_or_name!r}")
    return _family(field_or_name).gpu_id


def family_name(gpu_id: int) -> str:
    for family in _FAMILIES.values():
        if family.gpu_id == gpu_id:
            return family.name
    raise ValueError(f"Unknown fractal family id: {gpu_id!r}")
