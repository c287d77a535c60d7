"""Application entry point: page registry and router."""

from __future__ import annotations

import streamlit as st

PAGES = {}

PREFERRED_ORDER = [
    "Auto Fetch Tasks",  # tracker-driven task list
    "Analytics",  # dashboards over the fetched tasks
    "Setup / Connection",  # configuration
]


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def ordered_pages(registered) -> list[str]:
    ordered = [name for name in PREFERRED_ORDER if name in registered]
    trailing = sorted(name for name in registered if name not in PREFERRED_ORDER)
    return ordered + trailing


def main():
    st.sidebar.title("Daily Task Tracker")
    pages = ordered_pages(PAGES)
    if not pages:
        st.write("No pages registered yet.")
        return
    # Until a TaskService exists the only useful page is setup
    if "Setup / Connection" in pages and "task_service" not in st.session_state:
        default = pages.index("Setup / Connection")
    else:
        default = 0
    page = st.sidebar.selectbox("Page", pages, index=default)
    PAGES[page]()


if __name__ == "__main__":
    main()
