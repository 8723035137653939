"""
Database management module for Plate Calculator App
Stores each user's plate calculator preferences, history and gym configuration in Supabase
"""

from datetime import datetime
from typing import Dict, Optional, Tuple

import pandas as pd
from supabase import Client

from src.auth import get_supabase_client
from utils.gym_configs import GymConfiguration, PlateConfigurationError
from utils.preferences import (
    PlateCalculatorPreferences, PlateCalculatorHistory, get_default_configuration
)

# One row per user; see database/schema.sql
SETTINGS_TABLE = "plate_calculator_settings"


def get_supabase() -> Client:
    """Get Supabase client"""
    return get_supabase_client()


def init_database() -> bool:
    """
    Verify the settings table exists
    Tables are created by running database/schema.sql in the Supabase SQL editor
    """
    try:
        supabase = get_supabase()
        supabase.table(SETTINGS_TABLE).select("user_id").limit(1).execute()
        return True
    except Exception as e:
        print(f"Warning: Could not verify database tables: {e}")
        print("Please run the SQL from database/schema.sql in Supabase SQL editor")
        return False


def _get_settings_row(user_id: str) -> Optional[Dict]:
    supabase = get_supabase()

    result = supabase.table(SETTINGS_TABLE)\
        .select("preferences, history, current_config")\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()

    if result.data:
        return result.data[0]
    return None


def load_user_settings(user_id: str) -> Tuple[PlateCalculatorPreferences, PlateCalculatorHistory, GymConfiguration]:
    """
    Load a user's plate calculator settings

    Missing or unreadable settings fall back to defaults.

    Returns:
        Tuple of (preferences, history, current_config)
    """
    try:
        row = _get_settings_row(user_id) or {}
    except Exception as e:
        print(f"❌ Error loading plate calculator settings: {e}")
        row = {}

    preferences = PlateCalculatorPreferences.from_dict(row.get('preferences'))
    history = PlateCalculatorHistory.from_dict(row.get('history'))

    current_config = None
    if row.get('current_config'):
        try:
            current_config = GymConfiguration.from_dict(row['current_config'])
        except (KeyError, TypeError, PlateConfigurationError, ValueError) as e:
            print(f"⚠️ Ignoring stored gym configuration: {e}")
    if current_config is None:
        current_config = get_default_configuration(preferences)

    return preferences, history, current_config


def _upsert_settings(user_id: str, data: Dict) -> bool:
    supabase = get_supabase()

    row = {"user_id": user_id, "updated_at": datetime.now().isoformat()}
    row.update(data)

    try:
        supabase.table(SETTINGS_TABLE).upsert(row, on_conflict="user_id").execute()
        return True
    except Exception as e:
        print(f"❌ Error saving plate calculator settings: {e}")
        return False


def save_preferences(user_id: str, preferences: PlateCalculatorPreferences) -> bool:
    """Save preferences, returns True on success"""
    return _upsert_settings(user_id, {"preferences": preferences.to_dict()})


def save_history(user_id: str, history: PlateCalculatorHistory) -> bool:
    """Save calculation history and favorites, returns True on success"""
    return _upsert_settings(user_id, {"history": history.to_dict()})


def save_config(user_id: str, config: GymConfiguration) -> bool:
    """Save the current gym configuration, returns True on success"""
    return _upsert_settings(user_id, {"current_config": config.to_dict()})


def save_all_settings(user_id: str, preferences: PlateCalculatorPreferences,
                      history: PlateCalculatorHistory, config: GymConfiguration) -> bool:
    """Save everything in one upsert (used after an import)"""
    return _upsert_settings(user_id, {
        "preferences": preferences.to_dict(),
        "history": history.to_dict(),
        "current_config": config.to_dict()
    })


def clear_user_settings(user_id: str) -> bool:
    """
    Delete a user's stored settings

    Returns:
        True if the delete request succeeded
    """
    supabase = get_supabase()

    try:
        supabase.table(SETTINGS_TABLE).delete().eq("user_id", user_id).execute()
        return True
    except Exception as e:
        print(f"❌ Error clearing plate calculator settings: {e}")
        return False


def get_history_dataframe(history: PlateCalculatorHistory) -> pd.DataFrame:
    """
    Convert calculation history to a DataFrame for display

    Returns:
        DataFrame with columns: timestamp, weight, unit, bar_type, plates
    """
    columns = ['timestamp', 'weight', 'unit', 'bar_type', 'plates']
    if not history.calculations:
        return pd.DataFrame(columns=columns)

    rows = []
    for record in history.calculations:
        plates = " + ".join(f"{p['count']} × {p['weight']}" for p in record.plates)
        rows.append({
            'timestamp': pd.to_datetime(record.timestamp),
            'weight': record.weight,
            'unit': record.unit,
            'bar_type': record.bar_type,
            'plates': plates or '-'
        })

    return pd.DataFrame(rows, columns=columns)
