"""
Script to calculate barbell plate loading from the command line

Usage: python calculate_plates.py <weight> [bar_type] [unit] [gym configuration name]
Example: python calculate_plates.py 102.5 olympic kg "Home Gym (KG)"
"""

import sys

from utils.gym_configs import get_standard_configurations, get_configuration
from utils.helpers import format_weight, format_plate_list, get_bar_types
from utils.plate_calculator import calculate_plates, get_achievable_progressions


def print_result(total_weight: float, bar_type: str, unit: str, plates=None, config_name: str = None):
    """
    Print plate loading for a weight

    Returns:
        True if the weight can be loaded exactly
    """
    result = calculate_plates(total_weight, bar_type, unit, plates)

    print(f"\n🏋️ Plate loading for: {total_weight} {unit} ({bar_type} bar)")
    if config_name:
        print(f"   Gym: {config_name}")
    print("=" * 70)

    if result.is_valid:
        print(f"✅ Bar: {format_weight(result.bar_weight, unit)}")
        print(f"   Per side ({format_weight(result.total_plates_per_side, unit, 2)}): "
              f"{format_plate_list(result.plates_per_side, unit)}")
        progressions = get_achievable_progressions(total_weight, bar_type, unit, plates)
        if progressions:
            print("\n📈 Loadable progressions:")
            print("   " + ", ".join(format_weight(w, unit, 2) for w in progressions))
    else:
        print(f"❌ {result.error}")
        if result.plates_per_side:
            print(f"   Closest per side: {format_plate_list(result.plates_per_side, unit)}")
        if result.alternative_weights:
            print("\n💡 Achievable weights nearby:")
            for weight in result.alternative_weights:
                alternative = calculate_plates(weight, bar_type, unit, plates)
                print(f"   {format_weight(weight, unit, 2)}: "
                      f"{format_plate_list(alternative.plates_per_side, unit)} per side")

    print("=" * 70)
    return result.is_valid


def main():
    """Main function to run the plate calculator"""
    if len(sys.argv) < 2:
        print("Usage: python calculate_plates.py <weight> [bar_type] [unit] [gym configuration name]")
        print(f"Bar types: {', '.join(get_bar_types())}")
        print("Gym configurations:")
        for config in get_standard_configurations():
            print(f"  - {config.name}: {config.description}")
        sys.exit(1)

    try:
        total_weight = float(sys.argv[1])
    except ValueError:
        print(f"❌ Invalid weight: {sys.argv[1]}")
        sys.exit(1)

    bar_type = sys.argv[2] if len(sys.argv) > 2 else 'olympic'
    unit = sys.argv[3] if len(sys.argv) > 3 else 'kg'

    plates = None
    config_name = None
    if len(sys.argv) > 4:
        config = get_configuration(sys.argv[4])
        if config is None:
            print(f"❌ Unknown gym configuration: {sys.argv[4]}")
            sys.exit(1)
        plates, unit, config_name = config.plates, config.unit, config.name

    ok = print_result(total_weight, bar_type, unit, plates, config_name)
    sys.exit(0 if ok else 2)


if __name__ == "__main__":
    main()
