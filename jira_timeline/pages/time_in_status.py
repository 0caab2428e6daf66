"""Time-in-status page: per-issue status durations and interval breakdown."""

from __future__ import annotations

import logging

import streamlit as st

from jira_timeline.analytics.durations import aggregate_durations, status_intervals
from jira_timeline.app import register_page
from jira_timeline.core.config import DISPLAY_UNITS
from jira_timeline.core.errors import JiraClientError, TimelineError
from jira_timeline.core.mappers import durations_to_dataframe, intervals_to_dataframe
from jira_timeline.visual.charts import status_duration_chart, status_timeline_chart

logger = logging.getLogger(__name__)


@register_page("Time in Status")
def render():
    st.title("Time in Status")

    issue_service = st.session_state.get("issue_service")
    if issue_service is None:
        st.warning("Initialize the Jira connection on the Setup page first.")
        return

    col_key, col_unit, col_weekend = st.columns([2, 1, 1])
    issue_key = col_key.text_input("Issue key", value=st.session_state.get("tis_issue_key", ""))
    unit = col_unit.selectbox("Unit", DISPLAY_UNITS, index=DISPLAY_UNITS.index("days"))
    include_weekends = col_weekend.checkbox("Include weekends", value=False)

    if not st.button("Compute", type="primary"):
        return
    issue_key = issue_key.strip().upper()
    if not issue_key:
        st.error("Enter an issue key.")
        return
    st.session_state["tis_issue_key"] = issue_key

    now = issue_service.now()
    try:
        with st.spinner(f"Fetching history for {issue_key}"):
            transitions = issue_service.get_transition_history(issue_key)
        durations = aggregate_durations(transitions, unit, include_weekends, now)
        intervals = intervals_to_dataframe(
            status_intervals(transitions, now, include_weekends=include_weekends)
        )
    except JiraClientError as exc:
        logger.error("Jira API error for %s: %s", issue_key, exc)
        st.error(f"Jira request failed: {exc}")
        return
    except TimelineError as exc:
        logger.error("Unusable change history for %s: %s", issue_key, exc)
        st.error(f"Could not build the status timeline: {exc}")
        return

    if not durations:
        st.info(f"{issue_key} has no status transitions yet.")
        return

    df = durations_to_dataframe(durations, key=issue_key)
    chart = status_duration_chart(df, unit)
    if chart is not None:
        st.altair_chart(chart, use_container_width=True)
    st.dataframe(df[["status", "duration"]], hide_index=True, use_container_width=True)

    st.markdown("### Status intervals")
    timeline = status_timeline_chart(intervals)
    if timeline is not None:
        st.altair_chart(timeline, use_container_width=True)
    st.dataframe(intervals, hide_index=True, use_container_width=True)
    if not include_weekends and (intervals["seconds_in_status"] < 0).any():
        st.caption(
            "Negative values appear when an interval starts and ends on the same weekend day; "
            "whole weekend days are subtracted."
        )
