"""
Runtime configuration.

Defaults live on the dataclass; a JSON file may override any of them.
The fractal constants are not configurable.
"""

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Union


@dataclass
class ResonantConfig:
    # Audio
    sample_rate: int = 22050
    tone_duration: float = 2.0
    master_volume: float = 1.0
    harmonics: int = 4

    # Slice preview
    preview_width: int = 320
    preview_height: int = 240
    preview_extent: float = 3.0

    # Persistence and sharing
    state_path: str = str(Path.home() / ".cache" / "resonant" / "state.json")
    share_domain: str = "https://resonant.app"
    share_token_hours: float = 24.0
    message_max_age_hours: float = 24.0


def load_config(path: Union[str, Path, None] = None) -> ResonantConfig:
    """
    Load a config, overriding defaults with keys from a JSON file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file has unknown keys or is not a JSON object.
    """
    if path is None:
        return ResonantConfig()

    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Config must be a JSON object: {path}")

    known = {f.name for f in fields(ResonantConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
    return ResonantConfig(**data)
