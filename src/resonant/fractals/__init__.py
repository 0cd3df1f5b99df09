"""
Distance-estimator fractal fields.

Three built-in families evaluated over batches of 4D points.
"""

from resonant.fractals.base import FAR_DISTANCE, Point4, as_points
from resonant.fractals.factory import create_fractal
from resonant.fractals.field import (
    FAMILY_NAMES,
    FractalField,
    color_field,
    distance_estimator,
    distance_field,
    escape_iterations,
    evaluate,
    family_id,
    family_name,
    get_color,
    get_name,
)
from resonant.fractals.julia import Julia4D
from resonant.fractals.kaleido import KaleidoIFS
from resonant.fractals.mandelbulb import Mandelbulb
