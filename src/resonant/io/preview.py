"""
Planar slice preview of a fractal field.

Not the ray marcher: evaluates the field on a flat grid through 4D space
and colors each sample with the family's own color rule, so the host
math can be eyeballed against the rendered image.
"""

from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from resonant.fractals import FractalField, color_field, evaluate


def slice_points(
    width: int,
    height: int,
    z: float = 0.0,
    w: float = 0.0,
    extent: float = 3.0,
) -> np.ndarray:
    """Grid of ``(height * width, 4)`` points spanning the x/y plane."""
    aspect = width / height
    x_span = extent
    y_span = extent / aspect

    xs = np.linspace(-x_span / 2, x_span / 2, width, dtype=np.float32)
    ys = np.linspace(y_span / 2, -y_span / 2, height, dtype=np.float32)
    xg, yg = np.meshgrid(xs, ys)

    points = np.empty((height * width, 4), dtype=np.float32)
    points[:, 0] = xg.ravel()
    points[:, 1] = yg.ravel()
    points[:, 2] = z
    points[:, 3] = w
    return points


def render_slice(
    field: FractalField,
    width: int = 320,
    height: int = 240,
    z: float = 0.0,
    w: float = 0.0,
    extent: float = 3.0,
    falloff: float = 8.0,
) -> np.ndarray:
    """
    Render a slice of ``field`` as an RGB image.

    Samples near the surface keep their full color; brightness falls off
    exponentially with distance.

    Returns:
        (H, W, 3) uint8 RGB array.
    """
    points = slice_points(width, height, z=z, w=w, extent=extent)
    distances, iterations = evaluate(field, points)
    rgb = color_field(field, iterations, distances, points)

    shade = np.exp(-np.abs(distances) * falloff)[:, np.newaxis]
    frame = np.clip(rgb * shade, 0.0, 1.0).reshape(height, width, 3)
    return (frame * 255).astype(np.uint8)


def save_image(frame: np.ndarray, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.fromarray(frame).save(path)
    return path
