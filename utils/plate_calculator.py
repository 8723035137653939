"""
Plate calculator for barbell loading
Works out which plates go on each side of the bar for a target weight,
suggests nearby achievable weights and generates training progressions
"""

import math
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from utils.calculations import normalize_unit, is_valid_weight
from utils.gym_configs import (
    BAR_WEIGHTS, DEFAULT_PLATE_COLOR, DEFAULT_PLATE_SIZE, GymConfiguration, Plate,
    PlateConfigurationError, get_standard_plates, parse_bar_type, validate_plates
)
from utils.helpers import format_weight, validate_input

# Tolerance for floating point drift when comparing weights
EPSILON = 1e-6

# Alternative weight search: at most this many suggestions, looking this many
# plate increments below and above the target
MAX_ALTERNATIVES = 3
ALTERNATIVE_SEARCH_STEPS = 10

# Below smallest plate / this ratio the plate increment is treated as noise
MIN_INCREMENT_RATIO = 100

# Exact search gives up on per-side targets larger than this many plate increments
EXACT_SEARCH_MAX_UNITS = 10000

PROGRESSION_INCREMENTS = {'kg': 2.5, 'lb': 5}
PROGRESSION_STEPS_DOWN = 3
PROGRESSION_STEPS_UP = 5


class ErrorKind(str, Enum):
    INVALID_INPUT = 'invalid_input'
    UNACHIEVABLE = 'unachievable'
    CONFIGURATION_EMPTY = 'configuration_empty'


@dataclass(frozen=True)
class PlateLoad:
    """How many plates of one weight go on a single side of the bar"""
    weight: float
    count: int
    color: str = DEFAULT_PLATE_COLOR
    size: str = DEFAULT_PLATE_SIZE

    @property
    def total(self) -> float:
        return self.weight * self.count


@dataclass(frozen=True)
class PlateCalculationResult:
    """
    Outcome of one plate calculation

    total_weight echoes the requested weight. plates_per_side holds the
    best packing found even when is_valid is False, so callers can show
    the closest loading next to the alternative weights.
    """
    total_weight: float
    bar_weight: float
    total_plates_per_side: float
    unit: str
    plates_per_side: Tuple[PlateLoad, ...] = ()
    is_valid: bool = False
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    alternative_weights: Tuple[float, ...] = ()

    @property
    def plates(self) -> Tuple[PlateLoad, ...]:
        """Plates for both sides of the bar"""
        return tuple(
            PlateLoad(load.weight, load.count * 2, load.color, load.size)
            for load in self.plates_per_side
        )

    @property
    def loaded_per_side(self) -> float:
        return sum(load.total for load in self.plates_per_side)

    @property
    def loaded_weight(self) -> float:
        """Bar plus the plates actually packed on both sides"""
        return self.bar_weight + 2 * self.loaded_per_side

    def to_dict(self) -> Dict:
        return {
            'total_weight': self.total_weight,
            'bar_weight': self.bar_weight,
            'total_plates_per_side': self.total_plates_per_side,
            'unit': self.unit,
            'plates_per_side': [
                {'weight': load.weight, 'count': load.count, 'color': load.color, 'size': load.size}
                for load in self.plates_per_side
            ],
            'is_valid': self.is_valid,
            'error': self.error,
            'error_kind': self.error_kind.value if self.error_kind else None,
            'alternative_weights': list(self.alternative_weights)
        }


def _round_weight(weight: float) -> float:
    return round(weight, 6)


def _prepare_plates(plates: Optional[Sequence[Plate]], unit: str) -> Tuple[Plate, ...]:
    """Default to the standard set, check structure and sort heaviest first"""
    if plates is None:
        return get_standard_plates(unit)

    plates = tuple(plates)
    if not all(isinstance(p, Plate) for p in plates):
        raise PlateConfigurationError("Plates must be Plate instances")

    errors = validate_plates(plates)
    if errors:
        raise PlateConfigurationError("; ".join(errors))

    return tuple(sorted(plates, key=lambda p: p.weight, reverse=True))


def _plate_increment(plates: Sequence[Plate]) -> Fraction:
    """Largest weight that every plate in the set is a whole multiple of"""
    fractions = [Fraction(p.weight).limit_denominator(1000) for p in plates]
    denominator = 1
    for f in fractions:
        denominator = denominator * f.denominator // math.gcd(denominator, f.denominator)

    divisor = 0
    for f in fractions:
        divisor = math.gcd(divisor, int(f * denominator))
    return Fraction(divisor, denominator)


def _greedy_pack(per_side: float, plates: Sequence[Plate]) -> Tuple[List[PlateLoad], float]:
    """
    Heaviest-first fill of one side

    Returns the loads used and the weight still missing. Optimal for the
    standard plate sets, but can miss an exact packing for arbitrary sets.
    """
    remaining = per_side
    loads = []

    for plate in plates:
        if plate.count == 0:
            continue
        fit = int(math.floor((remaining + EPSILON) / plate.weight))
        if plate.count is not None:
            fit = min(fit, plate.count)
        if fit > 0:
            loads.append(PlateLoad(plate.weight, fit, plate.color, plate.size))
            remaining -= plate.weight * fit

    return loads, remaining


def _exact_pack(per_side: float, plates: Sequence[Plate]) -> Optional[List[PlateLoad]]:
    """
    Bounded search for an exact packing with the fewest plates

    Works on the plate increment grid as a 0/1 knapsack (plate counts split
    into power-of-two bundles). Returns None when no exact packing exists
    or the target is beyond the search bound.
    """
    usable = [p for p in plates if p.count != 0]
    if not usable:
        return None

    increment = _plate_increment(usable)
    units_float = per_side / float(increment)
    target = int(round(units_float))
    if abs(units_float - target) > EPSILON or target > EXACT_SEARCH_MAX_UNITS:
        return None

    items = []
    for index, plate in enumerate(usable):
        size = int(Fraction(plate.weight).limit_denominator(1000) / increment)
        available = target // size
        if plate.count is not None:
            available = min(available, plate.count)
        bundle = 1
        while available > 0:
            take = min(bundle, available)
            items.append((index, take, take * size))
            available -= take
            bundle *= 2

    best = [0] + [math.inf] * target
    taken = []
    for _, count, units in items:
        row = bytearray(target + 1)
        for amount in range(target, units - 1, -1):
            candidate = best[amount - units] + count
            if candidate < best[amount]:
                best[amount] = candidate
                row[amount] = 1
        taken.append(row)

    if best[target] == math.inf:
        return None

    counts = [0] * len(usable)
    amount = target
    for item_no in range(len(items) - 1, -1, -1):
        if taken[item_no][amount]:
            index, count, units = items[item_no]
            counts[index] += count
            amount -= units

    return [
        PlateLoad(plate.weight, count, plate.color, plate.size)
        for plate, count in zip(usable, counts)
        if count > 0
    ]


def _invalid_input(total_weight, bar_type, unit, message: str) -> PlateCalculationResult:
    try:
        bar_weight = BAR_WEIGHTS[normalize_unit(unit)][parse_bar_type(bar_type)]
    except (ValueError, KeyError):
        bar_weight = 0
    return PlateCalculationResult(
        total_weight=total_weight,
        bar_weight=bar_weight,
        total_plates_per_side=0.0,
        unit=str(getattr(unit, 'value', unit)),
        is_valid=False,
        error=message,
        error_kind=ErrorKind.INVALID_INPUT
    )


def _calculate(total_weight: float, bar_name: str, unit: str, plates: Tuple[Plate, ...],
               with_alternatives: bool = True) -> PlateCalculationResult:
    bar_weight = BAR_WEIGHTS[unit][bar_name]

    if total_weight < bar_weight - EPSILON:
        return PlateCalculationResult(
            total_weight=total_weight,
            bar_weight=bar_weight,
            total_plates_per_side=0.0,
            unit=unit,
            is_valid=False,
            error=(f"Total weight ({format_weight(total_weight, unit, 2)}) is less than "
                   f"bar weight ({format_weight(bar_weight, unit, 2)})"),
            error_kind=ErrorKind.INVALID_INPUT
        )

    per_side = max((total_weight - bar_weight) / 2, 0.0)
    loads, remaining = _greedy_pack(per_side, plates)

    if abs(remaining) > EPSILON:
        exact = _exact_pack(per_side, plates)
        if exact is not None:
            loads, remaining = exact, 0.0

    if abs(remaining) <= EPSILON:
        return PlateCalculationResult(
            total_weight=total_weight,
            bar_weight=bar_weight,
            total_plates_per_side=per_side,
            unit=unit,
            plates_per_side=tuple(loads),
            is_valid=True
        )

    if not any(p.count != 0 for p in plates):
        return PlateCalculationResult(
            total_weight=total_weight,
            bar_weight=bar_weight,
            total_plates_per_side=per_side,
            unit=unit,
            is_valid=False,
            error=(f"No plates available to load {format_weight(per_side, unit, 2)} per side; "
                   f"only the bar ({format_weight(bar_weight, unit, 2)}) can be lifted"),
            error_kind=ErrorKind.CONFIGURATION_EMPTY,
            alternative_weights=(bar_weight,) if with_alternatives else ()
        )

    alternatives = ()
    if with_alternatives:
        alternatives = _search_alternatives(total_weight, bar_name, unit, plates, MAX_ALTERNATIVES)

    return PlateCalculationResult(
        total_weight=total_weight,
        bar_weight=bar_weight,
        total_plates_per_side=per_side,
        unit=unit,
        plates_per_side=tuple(loads),
        is_valid=False,
        error=(f"Cannot make exact weight with available plates. "
               f"Need {format_weight(remaining, unit, 2)} more per side."),
        error_kind=ErrorKind.UNACHIEVABLE,
        alternative_weights=alternatives
    )


def calculate_plates(total_weight: float, bar_type='olympic', unit='kg',
                     plates: Optional[Sequence[Plate]] = None) -> PlateCalculationResult:
    """
    Calculate the plates needed on each side of the bar for a total weight

    Expected failures (bad weight, unknown bar type or unit, weight below
    the bar, weight not buildable from the plates) come back as a result
    with is_valid False and an error message.

    Args:
        total_weight: Target weight including the bar
        bar_type: 'olympic', 'standard', 'ez' or 'hex'
        unit: 'kg' or 'lb'
        plates: Available plates (defaults to the standard set for the unit)

    Returns:
        PlateCalculationResult

    Raises:
        PlateConfigurationError: If the plate list is malformed
    """
    is_valid, message = validate_input(total_weight, bar_type, unit)
    if not is_valid:
        return _invalid_input(total_weight, bar_type, unit, message)

    unit = normalize_unit(unit)
    return _calculate(total_weight, parse_bar_type(bar_type), unit, _prepare_plates(plates, unit))


def calculate_for_configuration(total_weight: float, config: GymConfiguration,
                                bar_type='olympic') -> PlateCalculationResult:
    """Calculate plates using a gym configuration's plates and unit"""
    return calculate_plates(total_weight, bar_type, config.unit, config.plates)


def _max_loadable(bar_weight: float, plates: Sequence[Plate]) -> float:
    """Heaviest total the plates allow, or inf when any plate is unlimited"""
    if any(p.count is None for p in plates):
        return math.inf
    return bar_weight + 2 * sum(p.weight * p.count for p in plates)


def _search_alternatives(target: float, bar_name: str, unit: str, plates: Tuple[Plate, ...],
                         max_results: int) -> Tuple[float, ...]:
    bar_weight = BAR_WEIGHTS[unit][bar_name]
    usable = [p for p in plates if p.count != 0]
    if not usable:
        return (bar_weight,) if abs(bar_weight - target) > EPSILON else ()

    increment = float(_plate_increment(usable))
    smallest = min(p.weight for p in usable)
    if increment < smallest / MIN_INCREMENT_RATIO:
        # Weights without a short decimal form; step by the smallest plate
        increment = smallest

    # Symmetric loading moves the total in steps of two plate increments
    step = 2 * increment
    center = min(target, _max_loadable(bar_weight, usable))
    lower = max(int(math.floor((center - bar_weight) / step + EPSILON)), 0)
    upper = lower + 1

    candidates = set()
    for i in range(ALTERNATIVE_SEARCH_STEPS):
        for k in (lower - i, upper + i):
            if k >= 0:
                candidates.add(_round_weight(bar_weight + k * step))

    # The greedy fill below the target is always loadable
    loads, _ = _greedy_pack(max((target - bar_weight) / 2, 0.0), usable)
    candidates.add(_round_weight(bar_weight + 2 * sum(load.total for load in loads)))

    alternatives = []
    for weight in sorted(candidates, key=lambda w: (abs(w - target), w)):
        if abs(weight - target) <= EPSILON:
            continue
        if _calculate(weight, bar_name, unit, plates, with_alternatives=False).is_valid:
            alternatives.append(weight)
            if len(alternatives) >= max_results:
                break

    return tuple(alternatives)


def find_alternative_weights(target_weight: float, bar_type='olympic', unit='kg',
                             plates: Optional[Sequence[Plate]] = None,
                             max_results: int = MAX_ALTERNATIVES) -> Tuple[float, ...]:
    """
    Find achievable total weights close to a target

    Each suggestion is re-checked with the same calculation used by
    calculate_plates(). Results are sorted by distance from the target
    (lighter first on ties) and never include the target itself.

    Raises:
        ValueError: If the weight, bar type or unit is invalid
        PlateConfigurationError: If the plate list is malformed
    """
    is_valid, message = validate_input(target_weight, bar_type, unit)
    if not is_valid:
        raise ValueError(message)

    unit = normalize_unit(unit)
    return _search_alternatives(target_weight, parse_bar_type(bar_type), unit,
                                _prepare_plates(plates, unit), max_results)


def iter_weight_progressions(current_weight: float, unit, increment: Optional[float] = None,
                             steps_down: int = PROGRESSION_STEPS_DOWN,
                             steps_up: int = PROGRESSION_STEPS_UP) -> Iterator[float]:
    """
    Lazily yield training weights around the current weight

    Yields up to steps_down lighter weights (only those above zero), the
    current weight, then steps_up heavier weights. Plate achievability is
    not checked. Each call starts a fresh sequence.

    Raises:
        ValueError: If the weight or unit is invalid
    """
    if not is_valid_weight(current_weight):
        raise ValueError(f"Invalid weight: {current_weight!r} (must be a non-negative number)")
    unit = normalize_unit(unit)
    if increment is None:
        increment = PROGRESSION_INCREMENTS[unit]
    if not increment > 0:
        raise ValueError(f"Invalid increment: {increment!r}")

    def progression():
        for i in range(steps_down, 0, -1):
            weight = _round_weight(current_weight - increment * i)
            if weight > 0:
                yield weight
        yield current_weight
        for i in range(1, steps_up + 1):
            yield _round_weight(current_weight + increment * i)

    return progression()


def get_weight_progressions(current_weight: float, unit) -> List[float]:
    """
    Get common weight progressions (2.5 kg / 5 lb steps) around a weight

    Returns:
        List of weights, lightest first
    """
    return list(iter_weight_progressions(current_weight, unit))


def get_achievable_progressions(current_weight: float, bar_type='olympic', unit='kg',
                                plates: Optional[Sequence[Plate]] = None) -> List[float]:
    """Weight progressions filtered to those the plates can actually build"""
    return [
        weight for weight in iter_weight_progressions(current_weight, unit)
        if calculate_plates(weight, bar_type, unit, plates).is_valid
    ]


def get_plate_visualization(result: PlateCalculationResult) -> Dict:
    """
    Get plate stacks for drawing the loaded bar

    Returns:
        Dictionary with 'left_side' and 'right_side' lists of PlateLoad
        (innermost plate first) and 'bar' with the bar weight and unit
    """
    return {
        'left_side': list(result.plates_per_side),
        'right_side': list(result.plates_per_side),
        'bar': {'weight': result.bar_weight, 'unit': result.unit}
    }
