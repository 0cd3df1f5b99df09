"""
Resonant: seeded 4D fractal fields and their sonification.
"""

__version__ = "0.1.0"

from resonant.audio.extractor import create_harmonic_series, extract_frequencies
from resonant.fractals import (
    FractalField,
    Julia4D,
    KaleidoIFS,
    Mandelbulb,
    Point4,
    create_fractal,
)
from resonant.user.seed import generate_daily_seed
