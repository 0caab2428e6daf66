"""Connection setup page: collect Jira credentials and initialize IssueService."""

from __future__ import annotations

import logging

import pytz
import streamlit as st

from jira_timeline.app import register_page
from jira_timeline.core.config import TIMEZONE, ConfigurationError, JiraSettings, load_settings
from jira_timeline.core.errors import JiraClientError
from jira_timeline.core.jira_client import JiraAPI
from jira_timeline.core.service import IssueService

logger = logging.getLogger(__name__)


def _secret_defaults() -> JiraSettings | None:
    try:
        return load_settings(st.secrets)
    except (ConfigurationError, FileNotFoundError):
        return None


@register_page("Setup / Connection")
def setup_page():
    st.title("Jira Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    defaults = _secret_defaults()
    server = st.text_input(
        "Jira Server URL",
        value=st.session_state.get("jira_server") or (defaults.server if defaults else ""),
    )
    email = st.text_input(
        "Email / Username",
        value=st.session_state.get("jira_email") or (defaults.email if defaults else ""),
    )
    token = st.text_input(
        "API Token",
        type="password",
        value=defaults.token if defaults else "",
    )
    timezone = st.text_input(
        "Timezone for weekend detection",
        value=defaults.timezone if defaults else TIMEZONE,
    )
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        try:
            settings = JiraSettings(server=server, email=email, token=token, timezone=timezone)
        except ConfigurationError as exc:
            st.error(str(exc))
            return
        try:
            service = IssueService(JiraAPI.from_settings(settings))
        except (JiraClientError, pytz.UnknownTimeZoneError) as exc:
            logger.error("Failed to initialize Jira client: %s", exc)
            st.error(f"Failed to initialize Jira client: {exc}")
            return
        st.session_state["jira_server"] = settings.server
        st.session_state["jira_email"] = settings.email
        st.session_state["issue_service"] = service
        st.success("Connection initialized.")

    if "issue_service" in st.session_state:
        st.info("IssueService ready.")
