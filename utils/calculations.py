"""
Calculation utilities for Plate Calculator App
Includes unit conversion, 1RM and working weight calculations
"""

import math

# 1 kg = 2.20462262185 lb
KG_TO_LB = 2.20462262185

SUPPORTED_UNITS = ('kg', 'lb')


def normalize_unit(unit) -> str:
    """
    Normalize a unit value to its plain string form

    Accepts 'kg' / 'lb' strings (any case, surrounding whitespace ignored)
    or WeightUnit enum members.

    Raises:
        ValueError: If the unit is empty or unknown
    """
    value = getattr(unit, 'value', unit)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Invalid unit: {unit!r} (expected 'kg' or 'lb')")

    value = value.strip().lower()
    if value not in SUPPORTED_UNITS:
        raise ValueError(f"Invalid unit: {unit!r} (expected 'kg' or 'lb')")
    return value


def convert_weight(value: float, from_unit, to_unit) -> float:
    """
    Convert weight between kilograms and pounds

    Full float precision is kept; no rounding happens here.

    Args:
        value: Weight to convert
        from_unit: Source unit ('kg' or 'lb')
        to_unit: Target unit ('kg' or 'lb')

    Returns:
        Converted value (the input itself when both units match)
    """
    from_unit = normalize_unit(from_unit)
    to_unit = normalize_unit(to_unit)

    if from_unit == to_unit:
        return value

    if from_unit == 'kg':
        return value * KG_TO_LB
    return value / KG_TO_LB


def is_valid_weight(weight) -> bool:
    """True for a real, finite, non-negative number"""
    if isinstance(weight, bool) or not isinstance(weight, (int, float)):
        return False
    return math.isfinite(weight) and weight >= 0


def calculate_1rm(weight: float, reps: int) -> float:
    """
    Calculate estimated 1RM using Epley formula

    Formula: Weight × (1 + Reps/30)

    Args:
        weight: Weight lifted
        reps: Number of repetitions

    Returns:
        Estimated 1RM (0 when no reps were performed)
    """
    if reps <= 0:
        return 0.0
    if reps == 1:
        return weight

    return weight * (1 + reps / 30)


def calculate_working_weight(one_rm: float, percentage: float) -> float:
    """
    Calculate working weight as a percentage of 1RM

    Args:
        one_rm: One-rep max
        percentage: Percentage of 1RM (e.g. 75 for 75%)

    Returns:
        Working weight
    """
    return one_rm * percentage / 100


def get_percentage_table(one_rm: float, percentages=None) -> list:
    """
    Build a list of (percentage, working weight) pairs for a 1RM

    Args:
        one_rm: One-rep max
        percentages: Percentages to include (defaults to 50-100% in 5% steps)

    Returns:
        List of dictionaries with 'percentage' and 'weight' keys
    """
    if percentages is None:
        percentages = range(50, 101, 5)

    return [
        {'percentage': pct, 'weight': calculate_working_weight(one_rm, pct)}
        for pct in percentages
    ]
