"""
Gym equipment catalog for Plate Calculator App
Defines plates, bar weights and the built-in gym configurations
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple

from utils.calculations import normalize_unit


class WeightUnit(str, Enum):
    KG = 'kg'
    LB = 'lb'


class BarType(str, Enum):
    OLYMPIC = 'olympic'
    STANDARD = 'standard'
    EZ = 'ez'
    HEX = 'hex'


class PlateConfigurationError(ValueError):
    """Raised when a plate list or gym configuration is malformed"""


@dataclass(frozen=True)
class Plate:
    """
    One plate denomination

    count is the maximum number of this plate that can be loaded on one
    side of the bar; None means unlimited.
    """
    weight: float
    color: str = '#6B7280'
    size: str = 'small'
    count: Optional[int] = None


@dataclass(frozen=True)
class GymConfiguration:
    name: str
    plates: Tuple[Plate, ...]
    bar_weight: float
    unit: str
    description: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'name': self.name,
            'plates': [
                {'weight': p.weight, 'color': p.color, 'size': p.size, 'count': p.count}
                for p in self.plates
            ],
            'bar_weight': self.bar_weight,
            'unit': self.unit,
            'description': self.description
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'GymConfiguration':
        plates = tuple(
            Plate(
                weight=p['weight'],
                color=p.get('color', '#6B7280'),
                size=p.get('size', 'small'),
                count=p.get('count')
            )
            for p in data.get('plates', [])
        )
        config = cls(
            name=data['name'],
            plates=plates,
            bar_weight=data['bar_weight'],
            unit=normalize_unit(data['unit']),
            description=data.get('description')
        )
        is_valid, errors = validate_configuration(config)
        if not is_valid:
            raise PlateConfigurationError("; ".join(errors))
        return config


# Bar weight per (unit, bar type). Added once to the total, not per side.
BAR_WEIGHTS = MappingProxyType({
    'kg': MappingProxyType({'olympic': 20, 'standard': 15, 'ez': 10, 'hex': 15}),
    'lb': MappingProxyType({'olympic': 45, 'standard': 35, 'ez': 20, 'hex': 35}),
})

STANDARD_PLATES_KG: Tuple[Plate, ...] = (
    Plate(25, '#FF0000', 'large'),
    Plate(20, '#0000FF', 'large'),
    Plate(15, '#FFFF00', 'medium'),
    Plate(10, '#00FF00', 'medium'),
    Plate(5, '#FF00FF', 'small'),
    Plate(2.5, '#00FFFF', 'small'),
    Plate(1.25, '#FFA500', 'small'),
    Plate(0.5, '#800080', 'small'),
)

STANDARD_PLATES_LB: Tuple[Plate, ...] = (
    Plate(45, '#FF0000', 'large'),
    Plate(35, '#0000FF', 'large'),
    Plate(25, '#FFFF00', 'medium'),
    Plate(10, '#00FF00', 'medium'),
    Plate(5, '#FF00FF', 'small'),
    Plate(2.5, '#00FFFF', 'small'),
    Plate(1.25, '#FFA500', 'small'),
    Plate(0.5, '#800080', 'small'),
)

DEFAULT_PLATE_COLOR = '#6B7280'
DEFAULT_PLATE_SIZE = 'small'


def parse_bar_type(bar_type) -> Optional[str]:
    """Return the bar type name, or None if it is not a known bar type"""
    value = getattr(bar_type, 'value', bar_type)
    if not isinstance(value, str):
        return None
    value = value.strip().lower()
    return value if value in BAR_WEIGHTS['kg'] else None


def get_bar_weight(bar_type, unit) -> float:
    """
    Get the nominal weight of a bar

    Raises:
        ValueError: If the bar type or unit is unknown
    """
    name = parse_bar_type(bar_type)
    if name is None:
        raise ValueError(f"Unknown bar type: {bar_type!r}")
    return BAR_WEIGHTS[normalize_unit(unit)][name]


def get_standard_plates(unit) -> Tuple[Plate, ...]:
    """Standard plate set for a unit, heaviest first, unlimited counts"""
    return STANDARD_PLATES_KG if normalize_unit(unit) == 'kg' else STANDARD_PLATES_LB


def _with_count(plates, count: int) -> Tuple[Plate, ...]:
    return tuple(replace(p, count=count) for p in plates)


def _build_standard_configurations() -> 'MappingProxyType':
    configs = [
        GymConfiguration(
            name='Olympic Gym (KG)',
            plates=_with_count(STANDARD_PLATES_KG, 10),
            bar_weight=BAR_WEIGHTS['kg']['olympic'],
            unit='kg',
            description='Standard Olympic gym with metric plates'
        ),
        GymConfiguration(
            name='Olympic Gym (LB)',
            plates=_with_count(STANDARD_PLATES_LB, 10),
            bar_weight=BAR_WEIGHTS['lb']['olympic'],
            unit='lb',
            description='Standard Olympic gym with imperial plates'
        ),
        GymConfiguration(
            name='Home Gym (KG)',
            plates=_with_count(STANDARD_PLATES_KG[:6], 4),
            bar_weight=BAR_WEIGHTS['kg']['olympic'],
            unit='kg',
            description='Smaller home gym setup'
        ),
        GymConfiguration(
            name='Home Gym (LB)',
            plates=_with_count(STANDARD_PLATES_LB[:6], 4),
            bar_weight=BAR_WEIGHTS['lb']['olympic'],
            unit='lb',
            description='Smaller home gym setup'
        ),
    ]
    return MappingProxyType({config.name: config for config in configs})


# Built once at import time; read-only
STANDARD_CONFIGURATIONS = _build_standard_configurations()


def get_standard_configurations() -> List[GymConfiguration]:
    """
    Get the built-in gym configurations

    Returns:
        List of GymConfiguration, in catalog order
    """
    return list(STANDARD_CONFIGURATIONS.values())


def get_configuration(name: str) -> Optional[GymConfiguration]:
    """Look up a built-in configuration by name"""
    return STANDARD_CONFIGURATIONS.get(name)


def create_custom_configuration(name: str, plates, bar_weight: float, unit,
                                description: Optional[str] = None) -> GymConfiguration:
    """
    Create a custom gym configuration

    Plates may be Plate objects or dictionaries with a 'weight' key.
    They are stored heaviest first. The result is not validated; use
    validate_configuration() before relying on it.

    Args:
        name: Configuration name
        plates: Available plates
        bar_weight: Weight of the gym's bar
        unit: Unit the plates and bar are denominated in
        description: Optional description

    Returns:
        GymConfiguration
    """
    converted = []
    for plate in plates:
        if isinstance(plate, dict):
            plate = Plate(
                weight=plate['weight'],
                color=plate.get('color', DEFAULT_PLATE_COLOR),
                size=plate.get('size', DEFAULT_PLATE_SIZE),
                count=plate.get('count')
            )
        converted.append(plate)

    converted.sort(key=lambda p: p.weight, reverse=True)
    return GymConfiguration(
        name=name,
        plates=tuple(converted),
        bar_weight=bar_weight,
        unit=normalize_unit(unit),
        description=description
    )


def validate_plates(plates) -> List[str]:
    """
    Check a plate list for structural problems

    Returns:
        List of error messages (empty when the plate list is well formed)
    """
    errors = []

    weights = [p.weight for p in plates]
    if len(weights) != len(set(weights)):
        errors.append('Duplicate plate weights found')

    if any(isinstance(w, bool) or not isinstance(w, (int, float)) or not math.isfinite(w) or w <= 0
           for w in weights):
        errors.append('All plate weights must be greater than 0')

    counts = [p.count for p in plates if p.count is not None]
    if any(isinstance(c, bool) or not isinstance(c, int) for c in counts):
        errors.append('Plate counts must be whole numbers')
    elif any(c < 0 for c in counts):
        errors.append('Plate counts cannot be negative')

    return errors


def validate_configuration(config: GymConfiguration) -> Tuple[bool, List[str]]:
    """
    Validate a gym configuration

    Args:
        config: Configuration to check

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    if not isinstance(config.name, str) or not config.name.strip():
        errors.append('Configuration name is required')

    bar_weight = config.bar_weight
    if (isinstance(bar_weight, bool) or not isinstance(bar_weight, (int, float))
            or not math.isfinite(bar_weight) or bar_weight <= 0):
        errors.append('Bar weight must be greater than 0')

    if len(config.plates) == 0:
        errors.append('At least one plate type is required')

    errors.extend(validate_plates(config.plates))

    return len(errors) == 0, errors


def get_plate_color(weight: float, unit) -> str:
    """Standard display color for a plate weight"""
    for plate in get_standard_plates(unit):
        if plate.weight == weight:
            return plate.color
    return DEFAULT_PLATE_COLOR


def get_plate_size(weight: float, unit) -> str:
    """Standard display size for a plate weight ('small', 'medium' or 'large')"""
    for plate in get_standard_plates(unit):
        if plate.weight == weight:
            return plate.size
    return DEFAULT_PLATE_SIZE
