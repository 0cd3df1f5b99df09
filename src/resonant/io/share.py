"""
Compact share codec for frozen fractals.

Snapshots travel as URL-safe base64 of a small JSON object; the
transform is not shared and decodes as the identity. Time-limited tokens
carry only the seed, an expiry and the creator.
"""

import base64
import binascii
import json
from typing import Any, Dict, Tuple
from urllib.parse import parse_qs, urlencode, urlparse

import numpy as np

from resonant.fractals import family_id, family_name
from resonant.user.state import FrozenFractal

IDENTITY = tuple(float(v) for v in np.eye(4).reshape(-1))

MS_PER_HOUR = 3600 * 1000


class ShareDecodeError(ValueError):
    """Raised for malformed share tokens or URLs."""


class ShareTokenExpired(ShareDecodeError):
    """Raised when a time-limited token is used after its expiry."""


def _encode_json(payload: Dict[str, Any]) -> str:
    raw = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _decode_json(token: str, kind: str) -> Dict[str, Any]:
    padded = token + "=" * (-len(token) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise ShareDecodeError(f"Invalid {kind} data: {e}") from e
    if not isinstance(payload, dict):
        raise ShareDecodeError(f"Invalid {kind} format")
    return payload


def encode_snapshot(snapshot: FrozenFractal) -> str:
    try:
        fractal_type = family_id(snapshot.fractal_type)
    except ValueError:
        fractal_type = 0
    return _encode_json(
        {
            "seed": snapshot.seed,
            "fractal_type": fractal_type,
            "complexity": min(max(int(snapshot.complexity_score * 100.0), 0), 0xFFFF),
            "interactions": min(max(snapshot.interaction_count, 0), 255),
        }
    )


def decode_snapshot(token: str, now_ms: int) -> FrozenFractal:
    """
    Decode a share token back into a snapshot stamped at ``now_ms``.

    Raises:
        ShareDecodeError: If the token is not valid base64 JSON of the
            expected shape.
    """
    compact = _decode_json(token, "fractal")
    try:
        seed = int(compact["seed"])
        type_id = int(compact["fractal_type"])
        complexity = int(compact["complexity"])
        interactions = int(compact["interactions"])
    except (KeyError, TypeError, ValueError) as e:
        raise ShareDecodeError(f"Invalid fractal format: {e}") from e

    try:
        fractal_type = family_name(type_id)
    except ValueError:
        fractal_type = family_name(0)

    return FrozenFractal(
        seed=seed,
        fractal_type=fractal_type,
        transform_matrix=IDENTITY,
        complexity_score=complexity / 100.0,
        timestamp=int(now_ms),
        interaction_count=interactions,
    )


def create_temporary_share_token(
    snapshot: FrozenFractal,
    creator: str,
    duration_hours: float,
    now_ms: int,
) -> str:
    """Token for ``snapshot.seed`` that stops validating after ``duration_hours``."""
    return _encode_json(
        {
            "fractal_seed": snapshot.seed,
            "expires": int(now_ms + duration_hours * MS_PER_HOUR),
            "creator": creator,
        }
    )


def validate_share_token(token: str, now_ms: int) -> int:
    """
    Check a time-limited token and return the seed it grants.

    A token is still valid at exactly its expiry time.

    Raises:
        ShareTokenExpired: If ``now_ms`` is past the expiry.
        ShareDecodeError: If the token is malformed.
    """
    data = _decode_json(token, "token")
    try:
        seed = int(data["fractal_seed"])
        expires = int(data["expires"])
    except (KeyError, TypeError, ValueError) as e:
        raise ShareDecodeError(f"Invalid token format: {e}") from e
    if not isinstance(data.get("creator"), str):
        raise ShareDecodeError("Invalid token format: missing creator")

    if now_ms > expires:
        raise ShareTokenExpired(f"Token expired at {expires}")
    return seed


def create_share_url(snapshot: FrozenFractal, user_id: str, domain: str) -> str:
    query = urlencode({"f": encode_snapshot(snapshot), "from": user_id})
    return f"{domain}?{query}"


def parse_share_url(url: str, now_ms: int) -> Tuple[FrozenFractal, str]:
    """Return the shared snapshot and the sender's user id."""
    params = parse_qs(urlparse(url).query)
    if "f" not in params:
        raise ShareDecodeError(f"No fractal in share URL: {url}")
    sender = params.get("from", [""])[0]
    return decode_snapshot(params["f"][0], now_ms), sender
