import math


def round_percentage(part: float, whole: float) -> int:
    """Half-up rounded percentage; 0 when there is nothing to measure against."""
    if whole <= 0:
        return 0
    return int(math.floor(part / whole * 100 + 0.5))
