"""
Local bookkeeping for fractal messages exchanged between friends.

Nothing is sent anywhere: outgoing and received messages are queued on
a :class:`MessageBoard`, which answers whether several people are active
at once and drops stale entries. Clock values are injected as epoch
milliseconds.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from resonant.user.state import FrozenFractal

# Senders active within this window count toward a resonance moment.
RESONANCE_WINDOW_MS = 5 * 60 * 1000
RESONANCE_MIN_SENDERS = 2

MS_PER_HOUR = 3600 * 1000


class MessageType(Enum):
    MORNING = "morning"  # daily fractal share
    ECHO = "echo"  # reply carrying the responder's transform
    BATTLE = "battle"
    RESONANCE = "resonance"


@dataclass(frozen=True)
class FractalMessage:
    sender_id: str
    fractal: FrozenFractal
    timestamp: int
    message_type: MessageType
    transform_echo: Optional[tuple] = None  # 16 floats, row-major

    def __post_init__(self):
        if self.transform_echo is not None:
            echo = tuple(float(v) for v in self.transform_echo)
            if len(echo) != 16:
                raise ValueError(f"transform_echo needs 16 values, got {len(echo)}")
            object.__setattr__(self, "transform_echo", echo)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender_id": self.sender_id,
            "fractal": self.fractal.to_dict(),
            "timestamp": self.timestamp,
            "message_type": self.message_type.value,
            "transform_echo": list(self.transform_echo) if self.transform_echo else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FractalMessage":
        try:
            return cls(
                sender_id=str(data["sender_id"]),
                fractal=FrozenFractal.from_dict(data["fractal"]),
                timestamp=int(data["timestamp"]),
                message_type=MessageType(data["message_type"]),
                transform_echo=data.get("transform_echo"),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid fractal message: {e}") from e


class MessageBoard:
    """Pending messages for one user, oldest first."""

    def __init__(self, user_id: str, messages: Sequence[FractalMessage] = ()):
        self.user_id = user_id
        self.messages: List[FractalMessage] = list(messages)

    def post(
        self,
        fractal: FrozenFractal,
        message_type: MessageType,
        now_ms: int,
        transform_echo: Optional[Sequence[float]] = None,
    ) -> FractalMessage:
        """Queue a message from this user."""
        message = FractalMessage(
            sender_id=self.user_id,
            fractal=fractal,
            timestamp=int(now_ms),
            message_type=message_type,
            transform_echo=None if transform_echo is None else tuple(transform_echo),
        )
        self.messages.append(message)
        return message

    def broadcast_morning(self, fractal: FrozenFractal, now_ms: int) -> FractalMessage:
        print(f"Broadcasting morning fractal: seed={fractal.seed}")
        return self.post(fractal, MessageType.MORNING, now_ms)

    def send_echo(
        self,
        fractal: FrozenFractal,
        transform: Sequence[float],
        now_ms: int,
    ) -> FractalMessage:
        """Answer someone's fractal with our own transform."""
        print(f"Sending echo response to fractal: seed={fractal.seed}")
        return self.post(fractal, MessageType.ECHO, now_ms, transform_echo=transform)

    def challenge(self, fractal: FrozenFractal, now_ms: int) -> FractalMessage:
        return self.post(fractal, MessageType.BATTLE, now_ms)

    def receive(self, message: FractalMessage):
        self.messages.append(message)

    def check_resonance_window(
        self,
        now_ms: int,
        window_ms: int = RESONANCE_WINDOW_MS,
    ) -> bool:
        """
        True when at least two distinct senders posted within the window.

        Messages stamped in the future do not count.
        """
        recent = {
            m.sender_id
            for m in self.messages
            if 0 <= now_ms - m.timestamp < window_ms
        }
        return len(recent) >= RESONANCE_MIN_SENDERS

    def clear_old_messages(self, max_age_hours: float, now_ms: int) -> int:
        """Drop messages at or before the cutoff; returns how many were removed."""
        cutoff = now_ms - max_age_hours * MS_PER_HOUR
        kept = [m for m in self.messages if m.timestamp > cutoff]
        removed = len(self.messages) - len(kept)
        self.messages = kept
        return removed

    def to_list(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self.messages]

    @classmethod
    def from_list(cls, user_id: str, items: Sequence[Dict[str, Any]]) -> "MessageBoard":
        return cls(user_id, [FractalMessage.from_dict(item) for item in items])
