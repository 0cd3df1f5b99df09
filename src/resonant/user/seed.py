"""
Daily seed derivation.

The seed is stable for one calendar day per user. The date is always
passed in, never read from the clock here.
"""

import datetime

U32_MASK = 0xFFFFFFFF


def day_code(date: datetime.date) -> int:
    """``year * 10000 + month * 100 + day`` with a 1-based month."""
    return date.year * 10000 + date.month * 100 + date.day


def date_string(date: datetime.date) -> str:
    return f"{date.year}-{date.month:02d}-{date.day:02d}"


def rolling_hash(data: bytes, start: int = 0) -> int:
    """Multiplicative rolling hash ``h = h * 31 + byte`` modulo 2**32."""
    h = start
    for byte in data:
        h = (h * 31 + byte) & U32_MASK
    return h


def generate_daily_seed(user_id: str, date: datetime.date) -> int:
    """
    Hash the user id followed by the decimal day code.

    Args:
        user_id: Stable user identifier.
        date: Calendar day the seed is for.

    Returns:
        Unsigned 32-bit seed.
    """
    data = user_id.encode("utf-8") + str(day_code(date)).encode("ascii")
    return rolling_hash(data)
