"""
Risk Model - Turns three academic metrics into a dropout probability and tier.

Implements the weighted deficit formula:
1. normalized_cgpa = cgpa / 10 * 100
2. weighted = (100 - attendance) * 0.4
            + (100 - normalized_cgpa) * 0.4
            + (100 - assignment_completion) * 0.2
3. probability = round(clamp(weighted, 0, 100))   (round half up)
4. probability >= 70 → High, >= 30 → Medium, otherwise Low

This is the only place the formula exists. The record store calls it when a
student is created and the preview endpoint calls it for live form input,
so the persisted value and the previewed value cannot drift apart.
"""

import enum
import math
from typing import NamedTuple

# ──────────────────────────────────────────────────────────────
# Formula constants
# ──────────────────────────────────────────────────────────────
ATTENDANCE_WEIGHT = 0.4
CGPA_WEIGHT = 0.4
ASSIGNMENT_WEIGHT = 0.2

CGPA_SCALE = 10.0

HIGH_THRESHOLD = 70     # probability >= 70 is High
MEDIUM_THRESHOLD = 30   # probability >= 30 is Medium

# Weighted sums are snapped to this many decimals before rounding so that
# float noise (e.g. 0.49999999999999994) does not flip a .5 boundary.
_SNAP_DECIMALS = 9


class RiskTier(str, enum.Enum):
    """Discrete risk category derived from the dropout probability."""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @property
    def ordinal(self) -> int:
        """Sort rank: Low=1, Medium=2, High=3."""
        return _TIER_ORDINALS[self]

    @classmethod
    def parse(cls, value) -> "RiskTier":
        """Accept a RiskTier or its label in any letter case."""
        if isinstance(value, cls):
            return value
        for tier in cls:
            if str(value).strip().lower() == tier.value.lower():
                return tier
        raise ValueError(f"Unknown risk tier: {value!r}")


_TIER_ORDINALS = {RiskTier.LOW: 1, RiskTier.MEDIUM: 2, RiskTier.HIGH: 3}


class RiskScore(NamedTuple):
    probability: int
    tier: RiskTier


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round a non-negative number to the nearest integer, .5 going up."""
    return int(math.floor(round(value, _SNAP_DECIMALS) + 0.5))


def weighted_deficit(attendance: float, cgpa: float, assignment_completion: float) -> float:
    """
    Weighted shortfall of the three metrics from a perfect 100.

    Inputs are clamped to their declared ranges first, so an out-of-range
    value can never push the sum below 0 or above 100.
    """
    attendance = _clamp(attendance, 0, 100)
    normalized_cgpa = _clamp(cgpa, 0, CGPA_SCALE) / CGPA_SCALE * 100
    assignment_completion = _clamp(assignment_completion, 0, 100)

    return ((100 - attendance) * ATTENDANCE_WEIGHT
            + (100 - normalized_cgpa) * CGPA_WEIGHT
            + (100 - assignment_completion) * ASSIGNMENT_WEIGHT)


def classify(probability: int) -> RiskTier:
    """Map a probability to its tier. First match wins, cutoffs inclusive."""
    if probability >= HIGH_THRESHOLD:
        return RiskTier.HIGH
    if probability >= MEDIUM_THRESHOLD:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def score(attendance: float, cgpa: float, assignment_completion: float) -> RiskScore:
    """
    Compute the dropout probability (0-100) and risk tier for one student.

    Args:
        attendance: Attendance percentage (0-100)
        cgpa: CGPA on a 10-point scale (0-10)
        assignment_completion: Assignment completion percentage (0-100)

    Returns:
        RiskScore(probability, tier)
    """
    weighted = weighted_deficit(attendance, cgpa, assignment_completion)
    probability = round_half_up(_clamp(weighted, 0, 100))
    return RiskScore(probability, classify(probability))
