"""
User state and frozen-fractal snapshots.

Tracks the accumulated gesture transform for today's seed, the daily
interaction count and the best frozen snapshots, and scores snapshots
against each other. Clock values (``date``, ``now_ms``) are injected.
"""

import datetime
import json
import math
import os
import tempfile
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

import numpy as np

from resonant.fractals import create_fractal, get_name
from resonant.fractals.field import FractalField
from resonant.user.seed import date_string, generate_daily_seed

MAX_FROZEN = 10


@dataclass(frozen=True)
class FrozenFractal:
    """Immutable snapshot of a user's fractal at a moment in time."""

    seed: int
    fractal_type: str
    transform_matrix: tuple  # 16 floats, row-major 4x4
    complexity_score: float
    timestamp: int  # epoch millis
    interaction_count: int

    def __post_init__(self):
        matrix = tuple(float(v) for v in self.transform_matrix)
        if len(matrix) != 16:
            raise ValueError(f"transform_matrix needs 16 values, got {len(matrix)}")
        object.__setattr__(self, "transform_matrix", matrix)

    @property
    def matrix(self) -> np.ndarray:
        return np.array(self.transform_matrix, dtype=np.float32).reshape(4, 4)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["transform_matrix"] = list(self.transform_matrix)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FrozenFractal":
        try:
            return cls(
                seed=int(data["seed"]),
                fractal_type=str(data["fractal_type"]),
                transform_matrix=tuple(data["transform_matrix"]),
                complexity_score=float(data["complexity_score"]),
                timestamp=int(data["timestamp"]),
                interaction_count=int(data["interaction_count"]),
            )
        except (KeyError, TypeError, OverflowError) as e:
            raise ValueError(f"Invalid fractal snapshot: {e}") from e

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "FrozenFractal":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid fractal snapshot: {e}") from e
        if not isinstance(data, dict):
            raise ValueError("Invalid fractal snapshot: expected an object")
        return cls.from_dict(data)


@dataclass(frozen=True)
class BattleResult:
    winner: FrozenFractal
    score_self: float
    score_opponent: float
    resonance_factor: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "winner": self.winner.to_dict(),
            "score_self": self.score_self,
            "score_opponent": self.score_opponent,
            "resonance_factor": self.resonance_factor,
        }


def complexity_score(transform: np.ndarray, interactions: int) -> float:
    """``max(ln|det T|, 0) + sqrt(interactions) * 0.1``."""
    det = abs(float(np.linalg.det(np.asarray(transform, dtype=np.float64))))
    matrix_complexity = max(math.log(det), 0.0) if det > 0.0 else 0.0
    return matrix_complexity + math.sqrt(max(interactions, 0)) * 0.1


def calculate_resonance(a: FrozenFractal, b: FrozenFractal) -> float:
    """
    Mean of trace similarity and seed harmony, each in (0, 1].

    Symmetric in its arguments.
    """
    trace_a = float(np.trace(a.matrix))
    trace_b = float(np.trace(b.matrix))
    trace_similarity = 1.0 / (1.0 + abs(trace_a - trace_b))

    seed_diff = abs(a.seed - b.seed)
    seed_harmony = 1.0 / (1.0 + seed_diff / 1000.0)

    return (trace_similarity + seed_harmony) * 0.5


def battle(current: FrozenFractal, opponent: FrozenFractal) -> BattleResult:
    """Complexity plus resonance; the opponent wins ties."""
    resonance = calculate_resonance(current, opponent)
    score_self = current.complexity_score + resonance
    score_opponent = opponent.complexity_score + resonance
    winner = current if score_self > score_opponent else opponent
    return BattleResult(
        winner=winner,
        score_self=score_self,
        score_opponent=score_opponent,
        resonance_factor=resonance,
    )


def _rotation(axis: int, angle: float) -> np.ndarray:
    m = np.eye(4, dtype=np.float32)
    c, s = math.cos(angle), math.sin(angle)
    i, j = [(1, 2), (2, 0), (0, 1)][axis]
    m[i, i], m[i, j] = c, -s
    m[j, i], m[j, j] = s, c
    return m


def gesture_transform(
    gesture: str, intensity: float, direction: float = 0.0
) -> Optional[np.ndarray]:
    """
    4x4 homogeneous transform for a gesture, or None if unrecognized.

    swipe rotates about z, pinch scales, tilt rotates about x and smile
    pushes along z.
    """
    if gesture == "swipe":
        return _rotation(2, direction * intensity * 0.1)
    if gesture == "pinch":
        s = 1.0 + intensity * 0.2
        return np.diag([s, s, s, 1.0]).astype(np.float32)
    if gesture == "tilt":
        return _rotation(0, direction * intensity * 0.05)
    if gesture == "smile":
        m = np.eye(4, dtype=np.float32)
        m[2, 3] = intensity * 0.1
        return m
    return None


class JsonStateStore:
    """Key/value state persisted as a single JSON file."""

    def __init__(self, path: Union[str, Path, None] = None):
        if path is None:
            path = Path.home() / ".cache" / "resonant" / "state.json"
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            print(f"Failed to load state: {e}. Starting fresh.")
            return {}
        if not isinstance(data, dict):
            print(f"Failed to load state: expected an object in {self.path}. Starting fresh.")
            return {}
        return data

    def save(self, data: dict[str, Any]):
        """Write ``data`` to a sibling temp file, then swap it into place."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


@dataclass(eq=False)
class UserState:
    """Per-user state for one calendar day."""

    user_id: str
    date: datetime.date
    transform: np.ndarray = field(default_factory=lambda: np.eye(4, dtype=np.float32))
    interactions: int = 0
    frozen: List[FrozenFractal] = field(default_factory=list)
    store: Optional[JsonStateStore] = None

    @property
    def seed(self) -> int:
        return generate_daily_seed(self.user_id, self.date)

    @classmethod
    def load(
        cls,
        store: JsonStateStore,
        date: datetime.date,
        user_id: Optional[str] = None,
    ) -> "UserState":
        """Restore state from ``store``, creating a user id if none is saved."""
        data = store.load()
        saved_id = data.get("user_id")
        if not isinstance(saved_id, str):
            saved_id = None
        user_id = user_id or saved_id or f"user_{uuid.uuid4().hex[:12]}"
        state = cls(user_id=user_id, date=date, store=store)

        key = f"transform_{state.seed}"
        matrix = data.get(key)
        if matrix is not None:
            try:
                state.transform = np.array(matrix, dtype=np.float32).reshape(4, 4)
            except (TypeError, ValueError) as e:
                print(f"Invalid {key}: {e}. Starting fresh.")

        key = f"interactions_{date_string(date)}"
        try:
            state.interactions = max(int(data.get(key, 0)), 0)
        except (TypeError, ValueError, OverflowError) as e:
            print(f"Invalid {key}: {e}. Starting fresh.")

        frozen = data.get("frozen_fractals", [])
        if not isinstance(frozen, list):
            print("Invalid frozen_fractals: expected a list. Starting fresh.")
            frozen = []
        for item in frozen:
            try:
                state.frozen.append(FrozenFractal.from_dict(item))
            except ValueError as e:
                print(f"Skipping invalid frozen fractal: {e}")
        return state

    def save(self):
        if self.store is None:
            return
        data = self.store.load()
        data["user_id"] = self.user_id
        data[f"transform_{self.seed}"] = [float(v) for v in self.transform.reshape(-1)]
        data[f"interactions_{date_string(self.date)}"] = self.interactions
        data["frozen_fractals"] = [f.to_dict() for f in self.frozen]
        self.store.save(data)

    def current_fractal(self, time: float) -> FractalField:
        return create_fractal(self.seed, time)

    def complexity_score(self) -> float:
        return complexity_score(self.transform, self.interactions)

    def apply_transform(self, transform: np.ndarray):
        self.transform = (self.transform @ transform).astype(np.float32)
        self.interactions += 1
        self.save()

    def apply_gesture(self, gesture: str, intensity: float, direction: float = 0.0) -> bool:
        """Accumulate a gesture's transform; False for unknown gestures."""
        transform = gesture_transform(gesture, intensity, direction)
        if transform is None:
            return False
        self.apply_transform(transform)
        return True

    def snapshot(self, now_ms: int, fractal_type: Optional[str] = None) -> FrozenFractal:
        return FrozenFractal(
            seed=self.seed,
            fractal_type=fractal_type or get_name(self.current_fractal(0.0)),
            transform_matrix=tuple(self.transform.reshape(-1)),
            complexity_score=self.complexity_score(),
            timestamp=int(now_ms),
            interaction_count=self.interactions,
        )

    def freeze(self, now_ms: int, fractal_type: Optional[str] = None) -> FrozenFractal:
        """Snapshot the current fractal, keeping only the best ten."""
        frozen = self.snapshot(now_ms, fractal_type)
        self.frozen.append(frozen)
        self.frozen.sort(key=lambda f: f.complexity_score, reverse=True)
        del self.frozen[MAX_FROZEN:]
        self.save()
        return frozen

    def battle_against(
        self, opponent: Union[FrozenFractal, str], now_ms: int
    ) -> BattleResult:
        if isinstance(opponent, str):
            opponent = FrozenFractal.from_json(opponent)
        return battle(self.snapshot(now_ms), opponent)

    def best_frozen(self) -> Optional[FrozenFractal]:
        return self.frozen[0] if self.frozen else None

    def reset_daily_state(self, date: datetime.date):
        """Move to a new day: fresh seed, identity transform, zero interactions."""
        self.date = date
        self.transform = np.eye(4, dtype=np.float32)
        self.interactions = 0
        self.save()
