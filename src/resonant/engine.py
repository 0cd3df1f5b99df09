"""
Per-frame driver.

Advances time, rebuilds the field for ``(seed, time)`` every frame and
hands out what the renderer and the audio engine consume. The field is
never mutated between frames.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, List

from resonant.audio.extractor import extract_frequencies, frame_sample_points
from resonant.audio.synth import frequencies_changed
from resonant.fractals import FractalField, family_id, get_name
from resonant.user.state import UserState


@dataclass(frozen=True)
class FrameState:
    """Everything produced for one frame."""

    time: float
    field: FractalField
    uniforms: Dict[str, Any]
    frequencies: List[float]
    audio_restart: bool


class FrameDriver:
    """Drives one user's session frame by frame."""

    def __init__(self, user: UserState, time: float = 0.0):
        self.user = user
        self.time = time
        self.frequencies: List[float] = []

    def uniforms(self, field: FractalField) -> Dict[str, Any]:
        """Shader uniforms; ``u_transform`` is the row-major 4x4 transform."""
        return {
            "u_time": self.time,
            "u_seed": self.user.seed,
            "u_fractal_type": family_id(field),
            "u_transform": [float(v) for v in self.user.transform.reshape(-1)],
        }

    def step(self, delta_ms: float) -> FrameState:
        """Advance by ``delta_ms`` milliseconds and evaluate the new frame."""
        self.time += delta_ms * 0.001
        field = self.user.current_fractal(self.time)

        frequencies = extract_frequencies(field, frame_sample_points(self.time))
        restart = frequencies_changed(self.frequencies, frequencies)
        if restart:
            self.frequencies = frequencies

        return FrameState(
            time=self.time,
            field=field,
            uniforms=self.uniforms(field),
            frequencies=list(self.frequencies),
            audio_restart=restart,
        )

    def fractal_info(self) -> str:
        """JSON summary of today's fractal for display."""
        field = self.user.current_fractal(self.time)
        return json.dumps(
            {
                "type": get_name(field),
                "seed": self.user.seed,
                "complexity": self.user.complexity_score(),
                "interactions_today": self.user.interactions,
                "audio_frequencies": self.frequencies,
            }
        )
