"""
Canonical clock arithmetic.

Every clock value inside the engine is an ``int`` holding minutes since
midnight. Text (``"8"``, ``"8:00"``, ``"08:35"``) and ``datetime.time``
values are converted here, at the boundary, and nowhere else.
"""

from datetime import time
from typing import Union

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * MINUTES_PER_HOUR

ClockLike = Union[int, str, time]


def to_minutes(value: ClockLike) -> int:
    """
    Convert a clock-like value to minutes since midnight.

    Args:
        value: Minutes as int, ``"H"``/``"H:MM"`` text or a ``datetime.time``

    Returns:
        Minutes since midnight

    Raises:
        ValueError: If the value cannot be read as a clock
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a clock value: {value!r}")
    if isinstance(value, int):
        minutes = value
    elif isinstance(value, time):
        minutes = value.hour * MINUTES_PER_HOUR + value.minute
    elif isinstance(value, str):
        minutes = _parse_clock(value)
    else:
        raise ValueError(f"Not a clock value: {value!r}")

    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Clock must be between 00:00 and 24:00, got {value!r}")
    return minutes


def _parse_clock(text: str) -> int:
    parts = text.strip().split(":")
    if len(parts) > 2 or not all(part.strip().isdigit() for part in parts):
        raise ValueError(f"Invalid clock text: '{text}'")

    hours = int(parts[0])
    minutes = int(parts[1]) if len(parts) == 2 else 0
    if minutes >= MINUTES_PER_HOUR:
        raise ValueError(f"Invalid minutes in clock text: '{text}'")
    return hours * MINUTES_PER_HOUR + minutes


def parse_duration(value: Union[int, str]) -> int:
    """Read a duration given as minutes or as ``"H:MM"`` text."""
    if isinstance(value, int) and not isinstance(value, bool):
        minutes = value
    elif isinstance(value, str) and value.strip().isdigit():
        minutes = int(value.strip())
    elif isinstance(value, str):
        minutes = _parse_clock(value)
    else:
        raise ValueError(f"Not a duration: {value!r}")

    if minutes <= 0:
        raise ValueError(f"Duration must be positive, got {value!r}")
    return minutes


def add_duration(start: ClockLike, duration: Union[int, str]) -> int:
    """
    Add a duration to a clock.

    Raises:
        ValueError: If the result runs past midnight
    """
    result = to_minutes(start) + parse_duration(duration)
    if result > MINUTES_PER_DAY:
        raise ValueError(
            f"{format_clock(to_minutes(start))} plus {duration} runs past midnight"
        )
    return result


def format_clock(minutes: int) -> str:
    """Render minutes since midnight as ``HH:MM``."""
    hours, rest = divmod(minutes, MINUTES_PER_HOUR)
    return f"{hours:02d}:{rest:02d}"
