"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``jira_timeline/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from jira_timeline.app import main
from jira_timeline.core.config import DEFAULT_LOG_LEVEL, ConfigurationError, load_settings

st.set_page_config(layout="wide")

logger = logging.getLogger("jira_timeline")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _auto_init_issue_service():
    """Initialize Jira service from Streamlit secrets if available."""
    if "issue_service" in st.session_state:
        return

    try:
        settings = load_settings(st.secrets)
    except (ConfigurationError, FileNotFoundError):
        _configure_logging(DEFAULT_LOG_LEVEL)
        st.sidebar.warning("Jira secrets not found. Please use the Setup page.")
        return

    _configure_logging(settings.log_level)
    st.sidebar.info("Secrets found, attempting to connect to Jira...")
    try:
        from jira_timeline.core.jira_client import JiraAPI
        from jira_timeline.core.service import IssueService

        st.session_state["jira_server"] = settings.server
        st.session_state["issue_service"] = IssueService(JiraAPI.from_settings(settings))
        st.sidebar.success("Jira connection successful!")
    except Exception as e:
        logger.error("Jira connection failed: %s", e)
        st.sidebar.error(f"Jira connection failed: {e}")
        # Clear any partial state to ensure user is directed to setup
        st.session_state.pop("issue_service", None)


_auto_init_issue_service()

PAGES_DIR = Path(__file__).parent / "jira_timeline" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"jira_timeline.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover - defensive
        logger.error("Failed importing page %s: %s", mod_name, e)

if __name__ == "__main__":
    main()
