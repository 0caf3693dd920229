from __future__ import annotations


def round_half_up(numerator: int, denominator: int) -> int:
    """Round ``numerator / denominator`` to the nearest integer, halves toward +inf.

    Integer arithmetic only: 100 * 29 / 200 rounds to 15, never to 14.
    """
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    return (2 * numerator + denominator) // (2 * denominator)


def percentage(part: int, whole: int) -> int:
    """Integer percentage of ``part`` in ``whole``, clamped to [0, 100]; 0 when whole is 0."""
    if whole == 0:
        return 0
    return max(0, min(100, round_half_up(100 * part, whole)))
