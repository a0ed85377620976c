"""
Percentage math shared by every aggregate.

All rates are 0 (never NaN) over an empty population.
"""
import logging
import math

from workin_analytics import config
from workin_analytics.errors import InvariantViolation

logger = logging.getLogger('analytics.rates')


def round_half_up(value: float) -> int:
    """Round .5 away from zero on the positive side, like the dashboard did."""
    return math.floor(value + 0.5)


def percentage(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return (part / whole) * 100


def rounded_percentage(part: float, whole: float) -> int:
    return round_half_up(percentage(part, whole))


def clamp_percentage(value: float) -> float:
    return min(max(value, 0.0), 100.0)


def mean(values) -> float:
    values = list(values)
    return sum(values) / len(values) if values else 0.0


def check_invariant(condition: bool, message: str, *args) -> bool:
    """Report a broken invariant. Raises only when STRICT_INVARIANTS is on.

    Returns the condition so callers can branch into their clamping path.
    """
    if condition:
        return True
    if config.STRICT_INVARIANTS:
        raise InvariantViolation(message % args if args else message)
    logger.error("Invariant violated: " + message, *args)
    return False
