"""Pytest configuration and shared fixtures."""

import datetime

import numpy as np
import pytest

from resonant.fractals import Julia4D, KaleidoIFS, Mandelbulb, Point4


@pytest.fixture
def mandelbulb() -> Mandelbulb:
    return Mandelbulb(power=8.0, iterations=10, time=1.5)


@pytest.fixture
def julia() -> Julia4D:
    return Julia4D(c=Point4(-0.2, 0.6, 0.2, -0.1), iterations=10, time=1.5)


@pytest.fixture
def kaleido() -> KaleidoIFS:
    return KaleidoIFS(fold_count=6, scale=2.0, time=1.5)


@pytest.fixture(params=["mandelbulb", "julia", "kaleido"])
def field(request):
    """Each built-in family in turn."""
    return request.getfixturevalue(request.param)


@pytest.fixture
def sample_points() -> np.ndarray:
    """
    A reproducible cloud of 4D points, including the origin and a few
    far-away samples.

    Returns:
        (N, 4) float32 array.
    """
    rng = np.random.default_rng(42)
    cloud = rng.uniform(-2.5, 2.5, size=(200, 4)).astype(np.float32)
    special = np.array(
        [
            [0.0, 0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0, 0.0],
            [0.0, 0.0, 1.0, 0.5],
            [1e3, -1e3, 1e3, 0.0],
            [1e6, 1e6, -1e6, 1e6],
        ],
        dtype=np.float32,
    )
    return np.concatenate([cloud, special])


@pytest.fixture
def today() -> datetime.date:
    return datetime.date(2026, 10, 19)
