"""
Helper utilities for Plate Calculator App
Includes display formatting and input validation helpers
"""

import math
from typing import List, Tuple

from utils.calculations import normalize_unit, is_valid_weight
from utils.gym_configs import BarType, parse_bar_type


def get_bar_types() -> List[str]:
    """
    Get list of bar types

    Returns:
        List of bar type names
    """
    return [bar_type.value for bar_type in BarType]


def get_bar_type_label(bar_type: str) -> str:
    """Human readable label for a bar type"""
    labels = {
        'olympic': 'Olympic Bar',
        'standard': 'Standard Bar',
        'ez': 'EZ Curl Bar',
        'hex': 'Hex / Trap Bar'
    }
    return labels.get(getattr(bar_type, 'value', bar_type), str(bar_type))


def get_units() -> List[str]:
    """
    Get list of weight units

    Returns:
        List of unit names
    """
    return ['kg', 'lb']


def format_weight(weight: float, unit, decimals: int = 1) -> str:
    """
    Format weight with unit for display

    Whole numbers are shown without decimals ("100 kg"); other values are
    rounded to `decimals` places with trailing zeros dropped ("22.5 kg").

    Args:
        weight: Weight value
        unit: Weight unit
        decimals: Maximum number of decimal places

    Returns:
        Formatted weight string
    """
    unit = normalize_unit(unit)
    if isinstance(weight, bool) or not isinstance(weight, (int, float)) or not math.isfinite(weight):
        raise ValueError(f"Invalid weight: {weight!r}")

    rounded = round(weight, decimals)
    if abs(rounded - round(rounded)) < 1e-9:
        return f"{int(round(rounded))} {unit}"

    text = f"{rounded:.{decimals}f}".rstrip('0').rstrip('.')
    return f"{text} {unit}"


def format_plate_list(plates_per_side, unit) -> str:
    """
    Format a per-side plate list for display

    Args:
        plates_per_side: Iterable of objects with weight and count attributes
        unit: Weight unit

    Returns:
        String like "2 × 20 kg + 1 × 1.25 kg", or "No plates" when empty
    """
    parts = [
        f"{load.count} × {format_weight(load.weight, unit, decimals=2)}"
        for load in plates_per_side
    ]
    return " + ".join(parts) if parts else "No plates"


def validate_input(weight: float, bar_type: str, unit: str) -> Tuple[bool, str]:
    """
    Validate plate calculator input data

    Args:
        weight: Target total weight
        bar_type: Bar type name
        unit: Weight unit

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not is_valid_weight(weight):
        return False, f"Invalid weight: {weight!r} (must be a non-negative number)"

    if parse_bar_type(bar_type) is None:
        return False, f"Unknown bar type: {bar_type!r}"

    try:
        normalize_unit(unit)
    except ValueError as e:
        return False, str(e)

    return True, ""
