"""
GetWay session console: Streamlit UI entry point.

Run with `streamlit run app.py`.
"""

import streamlit as st

# Load .env first so GETWAY_* settings are visible to the config accessors
from getway_client.utils.config import debug_mode, load_config, log_file, log_level
load_config()

from getway_client.container import build_services
from getway_client.domains.errors import ApiError, AuthServiceError
from getway_client.utils.logger import setup_logger, get_logger

setup_logger(level=log_level(), log_file=log_file(), debug=debug_mode())
log = get_logger()

st.set_page_config(page_title="GetWay Session Console", layout="centered")
st.title("GetWay Session Console")


# One service container per process; it is not serializable, so keep it out of session_state
@st.cache_resource
def get_services():
    return build_services()


services = get_services()
auth = services.auth

with st.sidebar:
    st.header("Backend")
    st.caption(f"API: `{services.config.api_base_url}`")
    st.caption(f"Timeout: {services.config.api_timeout_ms} ms")
    if st.button("Health check"):
        if services.api.health_check():
            st.success("Backend reachable")
        else:
            st.error("Backend unreachable")


def _show_error(err: Exception) -> None:
    message = getattr(err, "message", None) or str(err)
    log.warning("Console action failed: %s", message)
    st.error(message)


if not auth.is_authenticated():
    with st.form("login"):
        st.subheader("Sign in")
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")
    if submitted:
        try:
            session = auth.login(email.strip(), password)
            st.success(f"Welcome, {session.user.name if session.user else email}")
            st.rerun()
        except AuthServiceError as e:
            _show_error(e)
else:
    user = auth.get_current_user()
    st.subheader("Signed in")
    if user:
        st.write(f"**{user.name}** · {user.email}")
        st.write(f"Role: `{user.role.value}` · Approved: {'yes' if user.is_approved else 'no'}")
        if not user.can_access_data:
            st.info("Your scientist account is awaiting owner approval.")

    col1, col2, col3 = st.columns(3)
    with col1:
        if st.button("Refresh profile"):
            try:
                auth.get_profile()
                st.rerun()
            except AuthServiceError as e:
                _show_error(e)
    with col2:
        if st.button("Verify token"):
            try:
                if auth.verify_token():
                    st.success("Token is valid")
                else:
                    st.warning("Session expired. Please sign in again.")
                    st.rerun()
            except ApiError as e:
                _show_error(e)
    with col3:
        if st.button("Sign out"):
            auth.logout()
            st.rerun()

    if user and user.can_access_data and user.role.value in ("scientist", "owner"):
        st.subheader("Journey dataset")
        refresh = st.button("Reload from server")
        try:
            dataset = services.dashboard.get_scientist_data(force_refresh=refresh)
            st.metric("Journeys", len(dataset.get("data") or []))
            stats = services.cache.get_stats()
            st.caption(f"Cache: {stats['active_entries']} active entries, {stats['total_size']} bytes")
        except ApiError as e:
            _show_error(e)
