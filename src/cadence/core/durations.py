"""
Duration rendering and clock helpers (stdlib-only).

Workers report how long a previous run has been holding the slot while a new
attempt waits behind it. Those figures are raw millisecond counts, which are
hard to scan in a log stream, so this module renders them as fixed-width
clock strings.

Features:
    - **format_ms():** milliseconds -> ``HH:MM:SS.mmmm``
    - **utc_now():** timezone-aware UTC datetime for run start stamps

Examples:
    >>> format_ms(3723004)
    '01:02:03.0004'
    >>> format_ms(90_000_000)
    '25:00:00.0000'

Tags:
    durations, formatting, diagnostics, cadence, stdlib-only
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


def _lpad(value: int, digits: int = 2) -> str:
    return str(value).zfill(digits)


def format_ms(ms: float = 0) -> str:
    """
    Render a millisecond duration as ``HH:MM:SS.mmmm``.

    Hours are not wrapped at 24 and grow past two digits when needed.
    Fractional milliseconds are floored; negative input renders as zero.
    """
    total = max(int(ms), 0)
    millis = total % 1000
    seconds = (total // 1000) % 60
    minutes = (total // 60_000) % 60
    hours = total // 3_600_000
    return f"{_lpad(hours)}:{_lpad(minutes)}:{_lpad(seconds)}.{_lpad(millis, 4)}"
