"""
Tests for barbell plate loading, alternative weights and progressions
"""

import pytest

from utils.gym_configs import (
    BarType, Plate, PlateConfigurationError, WeightUnit, get_configuration
)
from utils.plate_calculator import (
    ErrorKind, PlateLoad, calculate_for_configuration, calculate_plates,
    find_alternative_weights, get_achievable_progressions, get_plate_visualization,
    get_weight_progressions, iter_weight_progressions
)

KG_PLATES = [Plate(w) for w in (20, 15, 10, 5, 2.5, 1.25)]


def _loads(result):
    return [(load.weight, load.count) for load in result.plates_per_side]


def _loaded_total(result):
    return result.bar_weight + 2 * sum(load.weight * load.count for load in result.plates_per_side)


# ---------------------------------------------------------------------------
# Plate decomposition
# ---------------------------------------------------------------------------

def test_hundred_kg_on_olympic_bar():
    result = calculate_plates(100, 'olympic', 'kg', KG_PLATES)

    assert result.is_valid
    assert result.error is None
    assert result.error_kind is None
    assert result.bar_weight == 20
    assert result.total_plates_per_side == 40
    assert _loads(result) == [(20, 2)]
    assert _loaded_total(result) == pytest.approx(100, abs=1e-6)


def test_weight_equal_to_bar_needs_no_plates():
    result = calculate_plates(20, 'olympic', 'kg', KG_PLATES)

    assert result.is_valid
    assert result.plates_per_side == ()
    assert result.total_plates_per_side == 0


def test_unachievable_weight_suggests_nearby_weights():
    result = calculate_plates(21, 'olympic', 'kg', KG_PLATES)

    assert not result.is_valid
    assert result.error_kind == ErrorKind.UNACHIEVABLE
    assert "Cannot make exact weight" in result.error
    assert result.total_plates_per_side == 0.5
    assert result.plates_per_side == ()
    assert result.alternative_weights == (20, 22.5, 25)


def test_missing_small_plates_leaves_remainder():
    plates = [Plate(20), Plate(10), Plate(5)]
    result = calculate_plates(62.5, 'olympic', 'kg', plates)

    assert not result.is_valid
    assert _loads(result) == [(20, 1)]
    assert result.alternative_weights == (60, 70, 50)
    for weight in result.alternative_weights:
        assert calculate_plates(weight, 'olympic', 'kg', plates).is_valid


def test_below_bar_weight_is_rejected():
    result = calculate_plates(19, 'olympic', 'kg', KG_PLATES)

    assert not result.is_valid
    assert result.error_kind == ErrorKind.INVALID_INPUT
    assert "less than bar weight" in result.error
    assert result.total_plates_per_side == 0
    assert result.plates_per_side == ()
    assert result.alternative_weights == ()


@pytest.mark.parametrize("bar_type,unit", [
    ('olympic', 'kg'), ('standard', 'kg'), ('ez', 'lb'), ('hex', 'lb')
])
def test_one_below_bar_is_always_invalid(bar_type, unit):
    bar_weight = calculate_plates(100, bar_type, unit).bar_weight
    result = calculate_plates(bar_weight - 1, bar_type, unit)

    assert not result.is_valid
    assert result.error


@pytest.mark.parametrize("weight", [-5, float('nan'), float('inf'), None, "100"])
def test_malformed_weight_is_invalid_input(weight):
    result = calculate_plates(weight, 'olympic', 'kg')

    assert not result.is_valid
    assert result.error_kind == ErrorKind.INVALID_INPUT
    assert "Invalid weight" in result.error


def test_unknown_bar_type_is_invalid_input():
    result = calculate_plates(100, 'trap', 'kg')

    assert not result.is_valid
    assert result.error_kind == ErrorKind.INVALID_INPUT
    assert "Unknown bar type" in result.error


@pytest.mark.parametrize("unit", ['', 'stone', None])
def test_unknown_unit_is_invalid_input(unit):
    result = calculate_plates(100, 'olympic', unit)

    assert not result.is_valid
    assert result.error_kind == ErrorKind.INVALID_INPUT
    assert "Invalid unit" in result.error


def test_enum_and_mixed_case_inputs_are_accepted():
    by_enum = calculate_plates(100, BarType.OLYMPIC, WeightUnit.KG, KG_PLATES)
    by_text = calculate_plates(100, 'Olympic', 'KG', KG_PLATES)

    assert by_enum.is_valid
    assert by_enum == by_text


def test_pound_plates_on_olympic_bar():
    result = calculate_plates(135, 'olympic', 'lb')

    assert result.is_valid
    assert result.bar_weight == 45
    assert _loads(result) == [(45, 1)]


def test_default_plates_follow_the_unit():
    result = calculate_plates(71, 'olympic', 'kg')

    # 25.5 per side needs the 0.5 kg plate from the standard set
    assert result.is_valid
    assert _loads(result) == [(25, 1), (0.5, 1)]


def test_empty_plate_list():
    assert calculate_plates(20, 'olympic', 'kg', []).is_valid

    result = calculate_plates(30, 'olympic', 'kg', [])
    assert not result.is_valid
    assert result.error_kind == ErrorKind.CONFIGURATION_EMPTY
    assert result.alternative_weights == (20,)


def test_plates_with_zero_count_are_not_used():
    result = calculate_plates(60, 'olympic', 'kg', [Plate(20, count=0)])

    assert not result.is_valid
    assert result.error_kind == ErrorKind.CONFIGURATION_EMPTY


def test_per_side_cap_is_respected():
    plates = [Plate(20, count=1), Plate(10)]
    result = calculate_plates(100, 'olympic', 'kg', plates)

    assert result.is_valid
    assert _loads(result) == [(20, 1), (10, 2)]


def test_cap_makes_weight_unachievable():
    result = calculate_plates(100, 'olympic', 'kg', [Plate(20, count=1)])

    assert not result.is_valid
    assert _loads(result) == [(20, 1)]
    assert result.alternative_weights == (60, 20)


def test_exact_search_finds_packing_greedy_misses():
    # Greedy takes a 6 and is left with 2; two 4s make 8 exactly
    plates = [Plate(6), Plate(4)]
    result = calculate_plates(36, 'olympic', 'kg', plates)

    assert result.is_valid
    assert _loads(result) == [(4, 2)]


def test_unsorted_plates_are_used_heaviest_first():
    plates = [Plate(1.25), Plate(10), Plate(20), Plate(5)]
    result = calculate_plates(92.5, 'olympic', 'kg', plates)

    assert result.is_valid
    assert _loads(result) == [(20, 1), (10, 1), (5, 1), (1.25, 1)]


def test_plates_are_doubled_for_both_sides():
    result = calculate_plates(100, 'olympic', 'kg', [Plate(20, '#0000FF', 'large')])

    assert result.plates == (PlateLoad(20, 4, '#0000FF', 'large'),)
    assert result.loaded_weight == 100


def test_exactness_over_a_range_of_weights():
    for i in range(400):
        weight = 20 + 0.25 * i
        result = calculate_plates(weight, 'olympic', 'kg')
        assert all(load.count > 0 for load in result.plates_per_side)
        if result.is_valid:
            assert _loaded_total(result) == pytest.approx(weight, abs=1e-6)
            assert result.total_plates_per_side >= 0


def test_alternatives_always_revalidate():
    for weight in (20.3, 21, 57.1, 101, 143.2):
        result = calculate_plates(weight, 'olympic', 'kg')
        for alternative in result.alternative_weights:
            assert calculate_plates(alternative, 'olympic', 'kg').is_valid


def test_calculation_is_repeatable():
    first = calculate_plates(87.5, 'olympic', 'kg', KG_PLATES)
    second = calculate_plates(87.5, 'olympic', 'kg', KG_PLATES)

    assert first == second


def test_malformed_plates_raise():
    with pytest.raises(PlateConfigurationError):
        calculate_plates(100, 'olympic', 'kg', [Plate(0)])
    with pytest.raises(PlateConfigurationError):
        calculate_plates(100, 'olympic', 'kg', [Plate(20), Plate(20)])
    with pytest.raises(PlateConfigurationError):
        calculate_plates(100, 'olympic', 'kg', [Plate(20, count=-1)])
    with pytest.raises(PlateConfigurationError):
        calculate_plates(100, 'olympic', 'kg', [20, 10])


def test_calculate_for_configuration_uses_its_plates():
    home_gym = get_configuration('Home Gym (KG)')
    result = calculate_for_configuration(100, home_gym)

    assert result.is_valid
    assert result.unit == 'kg'
    assert _loads(result) == [(25, 1), (15, 1)]

    # 4 plates per side of each size is not enough for 700 kg
    assert not calculate_for_configuration(700, home_gym).is_valid


def test_capacity_limit_suggests_heaviest_loadable_weights():
    home_gym = get_configuration('Home Gym (KG)')
    result = calculate_for_configuration(700, home_gym)

    # Every plate loaded: 20 + 2 * 4 * (25 + 20 + 15 + 10 + 5 + 2.5)
    assert result.error_kind == ErrorKind.UNACHIEVABLE
    assert result.alternative_weights == (640, 635, 630)


def test_converted_plate_weights_still_get_alternatives():
    # kg plates entered in pounds
    plates = [Plate(w) for w in (44.0924524, 22.0462262, 11.0231131, 5.51155655, 2.75577828)]
    result = calculate_plates(100, 'olympic', 'lb', plates)

    assert not result.is_valid
    assert result.error_kind == ErrorKind.UNACHIEVABLE
    assert len(result.alternative_weights) == 3
    assert result.alternative_weights[0] == pytest.approx(45 + 2 * 27.5577828, abs=1e-3)
    for weight in result.alternative_weights:
        assert calculate_plates(weight, 'olympic', 'lb', plates).is_valid


def test_to_dict():
    data = calculate_plates(21, 'olympic', 'kg', KG_PLATES).to_dict()

    assert data['is_valid'] is False
    assert data['error_kind'] == 'unachievable'
    assert data['alternative_weights'] == [20, 22.5, 25]


# ---------------------------------------------------------------------------
# Alternative weights
# ---------------------------------------------------------------------------

def test_find_alternative_weights():
    assert find_alternative_weights(21, 'olympic', 'kg', KG_PLATES) == (20, 22.5, 25)
    assert find_alternative_weights(21, 'olympic', 'kg', KG_PLATES, max_results=1) == (20,)


def test_find_alternative_weights_skips_the_target():
    alternatives = find_alternative_weights(100, 'olympic', 'kg', KG_PLATES)

    assert 100 not in alternatives
    assert alternatives == (97.5, 102.5, 95)


def test_find_alternative_weights_rejects_bad_input():
    with pytest.raises(ValueError):
        find_alternative_weights(-1, 'olympic', 'kg')
    with pytest.raises(ValueError):
        find_alternative_weights(100, 'trap', 'kg')


# ---------------------------------------------------------------------------
# Progressions
# ---------------------------------------------------------------------------

def test_kg_progressions_bracket_current_weight():
    assert get_weight_progressions(100, 'kg') == [
        92.5, 95, 97.5, 100, 102.5, 105, 107.5, 110, 112.5
    ]


def test_lb_progressions_use_five_pound_steps():
    assert get_weight_progressions(45, 'lb') == [30, 35, 40, 45, 50, 55, 60, 65, 70]


def test_progressions_drop_non_positive_weights():
    assert get_weight_progressions(5, 'kg') == [2.5, 5, 7.5, 10, 12.5, 15, 17.5]


def test_progressions_restart_on_each_call():
    assert list(iter_weight_progressions(60, 'kg')) == list(iter_weight_progressions(60, 'kg'))
    assert list(iter_weight_progressions(60, 'kg', increment=1, steps_down=1, steps_up=1)) == [59, 60, 61]


@pytest.mark.parametrize("weight,unit", [(float('nan'), 'kg'), (-10, 'kg'), (100, 'stone')])
def test_progressions_reject_bad_input(weight, unit):
    with pytest.raises(ValueError):
        iter_weight_progressions(weight, unit)


def test_achievable_progressions_are_loadable():
    weights = get_achievable_progressions(60, 'olympic', 'kg', [Plate(20), Plate(10), Plate(5)])

    assert weights == [60, 70]


def test_plate_visualization_mirrors_sides():
    result = calculate_plates(100, 'olympic', 'kg', KG_PLATES)
    visualization = get_plate_visualization(result)

    assert visualization['left_side'] == visualization['right_side'] == list(result.plates_per_side)
    assert visualization['bar'] == {'weight': 20, 'unit': 'kg'}
