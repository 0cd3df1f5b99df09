"""
Color model.

HSV to RGB conversion shared by every fractal family. The host copy
must select sextants exactly like the shader does, so the boundaries
are spelled out rather than delegated to ``colorsys``.
"""

from typing import NamedTuple

import numpy as np


class Color3(NamedTuple):
    """Linear RGB color, each channel in [0, 1]."""

    r: float
    g: float
    b: float


def hsv_to_rgb_array(
    h: np.ndarray,
    s: np.ndarray,
    v: np.ndarray,
) -> np.ndarray:
    """
    Vectorized HSV to RGB conversion.

    Hue is wrapped into [0, 1) before conversion; saturation and value
    are clipped into [0, 1].

    Args:
        h, s, v: Arrays (or scalars) broadcastable to a common shape.

    Returns:
        float32 array of shape ``h.shape + (3,)`` with channels in [0, 1].
    """
    h, s, v = np.broadcast_arrays(
        np.asarray(h, dtype=np.float32),
        np.asarray(s, dtype=np.float32),
        np.asarray(v, dtype=np.float32),
    )
    h = np.mod(h, 1.0)
    s = np.clip(s, 0.0, 1.0)
    v = np.clip(v, 0.0, 1.0)

    c = v * s
    h_prime = np.mod(h * 6.0, 6.0)
    x = c * (1.0 - np.abs(np.mod(h_prime, 2.0) - 1.0))
    m = v - c
    zero = np.zeros_like(c)

    sextants = [
        h_prime < 1.0,
        h_prime < 2.0,
        h_prime < 3.0,
        h_prime < 4.0,
        h_prime < 5.0,
    ]
    r = np.select(sextants, [c, x, zero, zero, x], default=c)
    g = np.select(sextants, [x, c, c, x, zero], default=zero)
    b = np.select(sextants, [zero, zero, x, c, c], default=x)

    rgb = np.stack([r + m, g + m, b + m], axis=-1)
    return np.clip(rgb, 0.0, 1.0).astype(np.float32)


def hsv_to_rgb(h: float, s: float, v: float) -> Color3:
    """Convert a single HSV triple to a :class:`Color3`."""
    rgb = hsv_to_rgb_array(h, s, v)
    return Color3(float(rgb[0]), float(rgb[1]), float(rgb[2]))
