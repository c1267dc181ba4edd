"""
Utility functions for the Sideline Lineup application.

This module contains the time helpers shared by the clock, the session
ledger and the user interfaces.
"""
import time


def fmt_mmss(ms: int) -> str:
    """
    Format milliseconds as MM:SS string.

    Partial seconds are dropped, so 59_999 ms renders as ``00:59``.

    Args:
        ms: Number of milliseconds to format

    Returns:
        Formatted time string in MM:SS format

    Example:
        >>> fmt_mmss(90_000)
        '01:30'
        >>> fmt_mmss(3_661_000)
        '61:01'
    """
    total = max(0, int(ms)) // 1000
    m = total // 60
    s = total % 60
    return f"{m:02d}:{s:02d}"


def now_ms() -> int:
    """
    Get current timestamp in epoch milliseconds.

    Returns:
        Current time as integer epoch milliseconds
    """
    return int(time.time() * 1000)
