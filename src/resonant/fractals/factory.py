"""
Seed to fractal mapping.

Pure integer arithmetic on sub-fields of the seed, so the same seed
reproduces the same fractal across sessions and on the GPU side.
"""

from resonant.fractals.base import Point4
from resonant.fractals.field import FractalField
from resonant.fractals.julia import Julia4D
from resonant.fractals.kaleido import KaleidoIFS
from resonant.fractals.mandelbulb import Mandelbulb

U32_MASK = 0xFFFFFFFF


def normalize_seed(seed: int) -> int:
    """Validate a seed and reduce it to 32 bits."""
    if isinstance(seed, bool) or not isinstance(seed, int):
        raise TypeError(f"seed must be an integer, got {type(seed).__name__}")
    if seed < 0:
        raise ValueError(f"seed must be non-negative, got {seed}")
    return seed & U32_MASK


def _unit_component(value: int) -> float:
    # 0..999 -> [-1.0, 0.998]
    return ((value % 1000) / 1000.0 - 0.5) * 2.0


def julia_constant(seed: int) -> Point4:
    """Static Julia constant from successive base-1000 digits of ``seed / 100``."""
    c_seed = seed // 100
    return Point4(
        _unit_component(c_seed),
        _unit_component(c_seed // 1_000),
        _unit_component(c_seed // 1_000_000),
        _unit_component(c_seed // 1_000_000_000),
    )


def create_fractal(seed: int, time: float = 0.0) -> FractalField:
    """
    Build the fractal field for ``seed`` at ``time``.

    ``seed % 3`` picks the family: 0 Mandelbulb, 1 Julia4D, 2 KaleidoIFS.
    """
    seed = normalize_seed(seed)
    time = float(time)
    family = seed % 3

    if family == 0:
        return Mandelbulb(
            power=6.0 + (seed // 3) % 8,
            iterations=8 + (seed // 24) % 4,
            time=time,
        )
    if family == 1:
        return Julia4D(
            c=julia_constant(seed),
            iterations=8 + (seed // 13) % 6,
            time=time,
        )
    return KaleidoIFS(
        fold_count=4 + (seed // 7) % 8,
        scale=1.5 + ((seed // 17) % 10) * 0.3,
        time=time,
    )
