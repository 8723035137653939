"""
Plate calculator preferences and calculation history
All functions return new objects; nothing is modified in place
"""

from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from typing import Dict, List, Optional

from utils.calculations import normalize_unit
from utils.gym_configs import GymConfiguration, get_standard_configurations, parse_bar_type

MAX_HISTORY = 50
MAX_RECENT_WEIGHTS = 10


@dataclass(frozen=True)
class PlateCalculatorPreferences:
    default_unit: str = 'kg'
    default_bar_type: str = 'olympic'
    default_gym_config: str = 'Olympic Gym (KG)'
    show_visualization: bool = True
    show_progressions: bool = True
    auto_calculate: bool = True

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'PlateCalculatorPreferences':
        """Build preferences from stored data, ignoring unknown keys"""
        if not data:
            return cls()
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        prefs = cls(**known)
        # Fall back to defaults for values that no longer parse
        try:
            normalize_unit(prefs.default_unit)
        except ValueError:
            prefs = replace(prefs, default_unit=cls.default_unit)
        if parse_bar_type(prefs.default_bar_type) is None:
            prefs = replace(prefs, default_bar_type=cls.default_bar_type)
        return prefs

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass(frozen=True)
class CalculationRecord:
    weight: float
    unit: str
    bar_type: str
    timestamp: str
    plates: List[Dict] = field(default_factory=list)


@dataclass(frozen=True)
class PlateCalculatorHistory:
    calculations: List[CalculationRecord] = field(default_factory=list)
    favorite_weights: List[float] = field(default_factory=list)
    recent_weights: List[float] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'PlateCalculatorHistory':
        if not data:
            return cls()
        return cls(
            calculations=[CalculationRecord(**c) for c in data.get('calculations', [])],
            favorite_weights=list(data.get('favorite_weights', [])),
            recent_weights=list(data.get('recent_weights', []))
        )

    def to_dict(self) -> Dict:
        return asdict(self)


def update_preferences(preferences: PlateCalculatorPreferences, **changes) -> PlateCalculatorPreferences:
    """
    Return preferences with some values changed

    Raises:
        ValueError: If a changed unit or bar type is unknown, or a key is not a preference
    """
    unknown = set(changes) - set(PlateCalculatorPreferences.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown preference(s): {', '.join(sorted(unknown))}")
    if 'default_unit' in changes:
        changes['default_unit'] = normalize_unit(changes['default_unit'])
    if 'default_bar_type' in changes:
        bar_type = parse_bar_type(changes['default_bar_type'])
        if bar_type is None:
            raise ValueError(f"Unknown bar type: {changes['default_bar_type']!r}")
        changes['default_bar_type'] = bar_type
    return replace(preferences, **changes)


def get_default_configuration(preferences: PlateCalculatorPreferences) -> GymConfiguration:
    """Configuration named in the preferences, or the first built-in one"""
    configs = get_standard_configurations()
    for config in configs:
        if config.name == preferences.default_gym_config:
            return config
    return configs[0]


def add_calculation_to_history(history: PlateCalculatorHistory, weight: float, unit: str,
                               bar_type: str, plates: List[Dict],
                               timestamp: Optional[datetime] = None) -> PlateCalculatorHistory:
    """
    Record a calculation

    Keeps the latest 50 calculations and the latest 10 distinct weights,
    newest first.
    """
    timestamp = timestamp or datetime.now()
    record = CalculationRecord(
        weight=weight,
        unit=unit,
        bar_type=bar_type,
        timestamp=timestamp.isoformat(),
        plates=list(plates)
    )
    recent = [weight] + [w for w in history.recent_weights if w != weight]
    return replace(
        history,
        calculations=([record] + list(history.calculations))[:MAX_HISTORY],
        recent_weights=recent[:MAX_RECENT_WEIGHTS]
    )


def add_to_favorites(history: PlateCalculatorHistory, weight: float) -> PlateCalculatorHistory:
    """Add a favorite weight (kept sorted, no duplicates)"""
    if weight in history.favorite_weights:
        return history
    return replace(history, favorite_weights=sorted(history.favorite_weights + [weight]))


def remove_from_favorites(history: PlateCalculatorHistory, weight: float) -> PlateCalculatorHistory:
    return replace(history, favorite_weights=[w for w in history.favorite_weights if w != weight])


def clear_history(history: PlateCalculatorHistory) -> PlateCalculatorHistory:
    """Clear calculations and recent weights, keeping favorites"""
    return PlateCalculatorHistory(favorite_weights=list(history.favorite_weights))


def export_data(preferences: PlateCalculatorPreferences, history: PlateCalculatorHistory,
                current_config: GymConfiguration, export_date: Optional[datetime] = None) -> Dict:
    """
    Export preferences, history and configuration as a plain dictionary
    """
    export_date = export_date or datetime.now()
    return {
        'preferences': preferences.to_dict(),
        'history': history.to_dict(),
        'current_config': current_config.to_dict(),
        'export_date': export_date.isoformat()
    }


def import_data(data: Dict, preferences: PlateCalculatorPreferences, history: PlateCalculatorHistory,
                current_config: GymConfiguration):
    """
    Merge exported data over the current state

    Sections missing from the data keep their current value.

    Returns:
        Tuple of (preferences, history, current_config)

    Raises:
        PlateConfigurationError: If the imported gym configuration is malformed
    """
    if data.get('preferences'):
        preferences = PlateCalculatorPreferences.from_dict(data['preferences'])
    if data.get('history'):
        history = PlateCalculatorHistory.from_dict(data['history'])
    if data.get('current_config'):
        current_config = GymConfiguration.from_dict(data['current_config'])
    return preferences, history, current_config
