"""
Authentication module for Plate Calculator App using Supabase
Handles Email/Password authentication with the session kept in Streamlit session state
"""

import os
from typing import Optional, Dict

import streamlit as st
from supabase import create_client, Client
from supabase.client import ClientOptions
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def is_supabase_configured() -> bool:
    """True when SUPABASE_URL and SUPABASE_KEY are set"""
    return bool(os.getenv("SUPABASE_URL") and os.getenv("SUPABASE_KEY"))


def get_supabase_client() -> Client:
    """Initialize and return Supabase client, signed in as the current user if any"""
    supabase_url = os.getenv("SUPABASE_URL")
    supabase_key = os.getenv("SUPABASE_KEY")

    if not supabase_url or not supabase_key:
        raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set in environment variables")

    options = ClientOptions(schema="public")
    client = create_client(supabase_url, supabase_key, options=options)

    access_token = st.session_state.get("access_token")
    refresh_token = st.session_state.get("refresh_token")
    if access_token and refresh_token:
        client.auth.set_session(access_token, refresh_token)

    return client


def set_session_state(user, session):
    """Store the signed in user and tokens in session state"""
    st.session_state.user = {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {}
    }
    st.session_state.access_token = session.access_token
    st.session_state.refresh_token = session.refresh_token


def login_with_email(email: str, password: str) -> bool:
    """Sign in with email and password"""
    supabase = get_supabase_client()

    try:
        response = supabase.auth.sign_in_with_password({
            "email": email,
            "password": password
        })

        if response.user and response.session:
            set_session_state(response.user, response.session)
            return True
        return False
    except Exception as e:
        error_msg = str(e)
        if "email not confirmed" in error_msg.lower():
            st.error("⚠️ Email not confirmed. Please check your email.")
        elif "Invalid login credentials" in error_msg:
            st.error("Invalid email or password.")
        else:
            st.error(f"Login failed: {error_msg}")
        return False


def signup_with_email(email: str, password: str) -> bool:
    """Sign up with email and password"""
    supabase = get_supabase_client()

    try:
        response = supabase.auth.sign_up({
            "email": email,
            "password": password
        })

        if response.user:
            if response.session:
                # Email confirmation disabled: signed in straight away
                set_session_state(response.user, response.session)
                return True
            st.info("Account created! Please check your email to confirm your account.")
        return False
    except Exception as e:
        st.error(f"Sign up failed: {str(e)}")
        return False


def logout():
    """Log out and clear session"""
    for key in ("user", "access_token", "refresh_token", "plate_settings_loaded"):
        if key in st.session_state:
            del st.session_state[key]


def get_current_user() -> Optional[Dict]:
    """Get authenticated user from session state"""
    return st.session_state.get("user")


def is_authenticated() -> bool:
    """Check if user is authenticated"""
    return bool(st.session_state.get("user"))
