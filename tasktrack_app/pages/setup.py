"""Connection setup page: collect Redmine credentials and initialize TaskService."""

from __future__ import annotations

import streamlit as st

from tasktrack_app.app import register_page
from tasktrack_app.core.registry import ServiceRegistry
from tasktrack_app.core.service import TaskService


def get_registry() -> ServiceRegistry:
    """Session-scoped registry so identical credentials share one client cache."""
    if "service_registry" not in st.session_state:
        st.session_state["service_registry"] = ServiceRegistry()
    return st.session_state["service_registry"]


def connect(server: str, api_key: str) -> TaskService:
    api = get_registry().get_service(server, api_key)
    service = TaskService(api)
    st.session_state["redmine_server"] = server
    st.session_state["redmine_api_key"] = api_key
    st.session_state["task_service"] = service
    return service


@register_page("Setup / Connection")
def setup_page():
    st.title("Redmine Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    redmine_secrets = st.secrets.get("redmine", {})
    secret_server = redmine_secrets.get("REDMINE_URL") or st.secrets.get("REDMINE_URL")
    secret_key = redmine_secrets.get("REDMINE_API_KEY") or st.secrets.get("REDMINE_API_KEY")

    server = st.text_input(
        "Redmine URL",
        value=st.session_state.get("redmine_server") or secret_server or "",
    )
    api_key = st.text_input("API Key", type="password", value=secret_key or "")
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (server and api_key):
            st.error("Both fields required.")
            return
        try:
            service = connect(server, api_key)
            user = service.api.get_current_user()
            if user:
                st.success(f"Connected as {user.get('login') or user.get('firstname') or user.get('id')}.")
            else:
                st.warning("Connection initialized, but the current user could not be loaded.")
        except Exception as e:  # pragma: no cover
            st.error(f"Failed to initialize Redmine client: {e}")

    if "task_service" in st.session_state:
        registry = get_registry()
        st.info(f"TaskService ready ({registry.service_count()} client(s) in this session).")
        if st.button("Clear cached responses"):
            registry.clear_all_caches()
            st.success("Request cache cleared.")
