"""
Common utility functions and helpers.
"""
from typing import Iterable, List
import math


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, with .5 always rounding up.

    Args:
        value: Number to round

    Returns:
        Rounded integer
    """
    return int(math.floor(value + 0.5))


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """
    Clamp a number to the closed interval [lo, hi].

    Args:
        value: Number to clamp
        lo: Lower bound
        hi: Upper bound

    Returns:
        Clamped value
    """
    return max(lo, min(hi, value))


def safe_divide(numerator: float, denominator: float, default: float = 0.0) -> float:
    """
    Safely divide two numbers, returning default if denominator is zero.

    Args:
        numerator: Numerator
        denominator: Denominator
        default: Default value if division fails

    Returns:
        Result of division or default
    """
    return numerator / denominator if denominator != 0 else default


def excerpt(text: str, limit: int, marker: str = "...") -> str:
    """
    Return the first *limit* characters of *text*, followed by *marker*
    when anything was cut off.

    Args:
        text: Source text
        limit: Number of characters to keep
        marker: Suffix appended only when the text was truncated

    Returns:
        The excerpt
    """
    if len(text) <= limit:
        return text
    return text[:limit] + marker


def truncate_text(text: str, max_length: int) -> str:
    """Hard-cut *text* to at most *max_length* characters (no suffix)."""
    return text[:max_length]


def capitalize_first(text: str) -> str:
    """Upper-case the first character only, leaving the rest untouched."""
    return text[:1].upper() + text[1:]


def contains_any(text: str, needles: Iterable[str]) -> bool:
    """Return True if any of *needles* occurs in *text* (case-sensitive)."""
    return any(needle in text for needle in needles)


def found_in(text: str, needles: Iterable[str]) -> List[str]:
    """Return the *needles* that occur in *text*, preserving their order."""
    return [needle for needle in needles if needle in text]
