"""
Tests for plate calculator settings storage, with the Supabase client mocked out
"""

from unittest.mock import MagicMock

import pytest

from database import db_manager
from utils.gym_configs import get_configuration
from utils.preferences import (
    PlateCalculatorHistory, PlateCalculatorPreferences, add_calculation_to_history
)


@pytest.fixture
def supabase(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(db_manager, "get_supabase", lambda: client)
    return client


def _select_returns(client, rows):
    client.table.return_value.select.return_value.eq.return_value.limit.return_value.execute.return_value.data = rows


def test_load_user_settings_defaults_when_no_row(supabase):
    _select_returns(supabase, [])

    preferences, history, config = db_manager.load_user_settings("user-1")

    assert preferences == PlateCalculatorPreferences()
    assert history == PlateCalculatorHistory()
    assert config.name == 'Olympic Gym (KG)'
    supabase.table.assert_called_with(db_manager.SETTINGS_TABLE)


def test_load_user_settings_reads_stored_row(supabase):
    stored_config = get_configuration('Home Gym (LB)')
    _select_returns(supabase, [{
        'preferences': {'default_unit': 'lb', 'default_bar_type': 'hex'},
        'history': {'calculations': [], 'favorite_weights': [135], 'recent_weights': [225]},
        'current_config': stored_config.to_dict()
    }])

    preferences, history, config = db_manager.load_user_settings("user-1")

    assert preferences.default_unit == 'lb'
    assert preferences.default_bar_type == 'hex'
    assert history.favorite_weights == [135]
    assert config == stored_config


def test_load_user_settings_ignores_broken_config(supabase):
    _select_returns(supabase, [{
        'preferences': {'default_gym_config': 'Home Gym (KG)'},
        'history': None,
        'current_config': {'plates': []}
    }])

    _, _, config = db_manager.load_user_settings("user-1")

    assert config.name == 'Home Gym (KG)'


def test_load_user_settings_ignores_malformed_plates(supabase):
    _select_returns(supabase, [{
        'preferences': None,
        'history': None,
        'current_config': {
            'name': 'My Gym',
            'plates': [{'weight': 20}, {'weight': 20}, {'weight': -5}],
            'bar_weight': 20,
            'unit': 'kg'
        }
    }])

    _, _, config = db_manager.load_user_settings("user-1")

    assert config == get_configuration('Olympic Gym (KG)')


def test_load_user_settings_survives_client_errors(supabase):
    supabase.table.side_effect = Exception("connection refused")

    preferences, history, config = db_manager.load_user_settings("user-1")

    assert preferences == PlateCalculatorPreferences()
    assert config.name == 'Olympic Gym (KG)'


def test_save_preferences_upserts_by_user(supabase):
    preferences = PlateCalculatorPreferences(default_unit='lb')

    assert db_manager.save_preferences("user-1", preferences) is True

    upsert = supabase.table.return_value.upsert
    upsert.assert_called_once()
    row = upsert.call_args.args[0]
    assert row['user_id'] == "user-1"
    assert row['preferences'] == preferences.to_dict()
    assert 'history' not in row
    assert upsert.call_args.kwargs == {'on_conflict': 'user_id'}


def test_save_all_settings(supabase):
    history = add_calculation_to_history(PlateCalculatorHistory(), 100, 'kg', 'olympic', [])
    config = get_configuration('Olympic Gym (KG)')

    assert db_manager.save_all_settings("user-1", PlateCalculatorPreferences(), history, config)

    row = supabase.table.return_value.upsert.call_args.args[0]
    assert row['history'] == history.to_dict()
    assert row['current_config'] == config.to_dict()


def test_save_returns_false_on_error(supabase):
    supabase.table.return_value.upsert.return_value.execute.side_effect = Exception("boom")

    assert db_manager.save_history("user-1", PlateCalculatorHistory()) is False


def test_clear_user_settings(supabase):
    assert db_manager.clear_user_settings("user-1") is True
    supabase.table.return_value.delete.return_value.eq.assert_called_once_with("user_id", "user-1")


def test_init_database_reports_missing_table(supabase):
    supabase.table.side_effect = Exception("relation does not exist")

    assert db_manager.init_database() is False


def test_history_dataframe():
    assert list(db_manager.get_history_dataframe(PlateCalculatorHistory()).columns) == [
        'timestamp', 'weight', 'unit', 'bar_type', 'plates'
    ]

    history = add_calculation_to_history(
        PlateCalculatorHistory(), 100, 'kg', 'olympic', [{'weight': 20, 'count': 2}]
    )
    df = db_manager.get_history_dataframe(history)

    assert len(df) == 1
    assert df.iloc[0]['plates'] == "2 × 20"
    assert df.iloc[0]['weight'] == 100
