"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Imports every module in ``tasktrack_app/pages`` so each page decorated with
``@register_page`` registers itself.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from tasktrack_app.app import main

st.set_page_config(layout="wide", page_title="Daily Task Tracker")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _auto_init_task_service():
    """Initialize the Redmine-backed TaskService from Streamlit secrets if available."""
    if "task_service" in st.session_state:
        return

    redmine_secrets = st.secrets.get("redmine", {})
    server = redmine_secrets.get("REDMINE_URL") or st.secrets.get("REDMINE_URL")
    api_key = redmine_secrets.get("REDMINE_API_KEY") or st.secrets.get("REDMINE_API_KEY")

    if server and api_key:
        try:
            from tasktrack_app.pages.setup import connect

            connect(server, api_key)
            st.sidebar.success("Redmine connection initialized from secrets.")
        except Exception as e:
            st.sidebar.error(f"Redmine connection failed: {e}")
            st.session_state.pop("task_service", None)
    else:
        st.sidebar.warning("Redmine secrets not found. Please use the Setup page.")


PAGES_DIR = Path(__file__).parent / "tasktrack_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"tasktrack_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception:  # pragma: no cover
        logger.exception("Failed importing page %s", mod_name)

_auto_init_task_service()

if __name__ == "__main__":
    main()
