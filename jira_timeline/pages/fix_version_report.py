"""Fix version report: status durations for every issue in a release."""

from __future__ import annotations

import logging

import streamlit as st

from jira_timeline.app import register_page
from jira_timeline.core.config import DISPLAY_UNITS
from jira_timeline.core.errors import JiraClientError
from jira_timeline.visual.charts import fix_version_chart, pivot_durations
from jira_timeline.visual.progress import ProgressReporter

logger = logging.getLogger(__name__)


@register_page("Fix Version Report")
def render():
    st.title("Fix Version Report")

    issue_service = st.session_state.get("issue_service")
    if issue_service is None:
        st.warning("Initialize the Jira connection on the Setup page first.")
        return

    col_project, col_version = st.columns(2)
    project = col_project.text_input("Project key").strip().upper()
    fix_version = col_version.text_input("Fix version").strip()
    col_unit, col_weekend = st.columns(2)
    unit = col_unit.selectbox("Unit", DISPLAY_UNITS, index=DISPLAY_UNITS.index("days"))
    include_weekends = col_weekend.checkbox("Include weekends", value=False)

    if not st.button("Build report", type="primary"):
        return
    if not (project and fix_version):
        st.error("Project key and fix version are required.")
        return

    reporter = ProgressReporter(f"Loading {project} {fix_version}")
    try:
        df = issue_service.fix_version_durations(
            project,
            fix_version,
            unit,
            include_weekends,
            progress=reporter.callback,
        )
    except JiraClientError as exc:
        logger.error("Jira API error building fix version report: %s", exc)
        reporter.error(f"Jira request failed: {exc}")
        return
    reporter.complete(f"Loaded {df['key'].nunique()} issues")

    if df.empty:
        st.info("No status transitions found for issues in this fix version.")
        return
    chart = fix_version_chart(df, unit)
    if chart is not None:
        st.altair_chart(chart, use_container_width=True)
    st.dataframe(pivot_durations(df).round(2), use_container_width=True)
    st.download_button(
        "Download CSV",
        df.to_csv(index=False).encode("utf-8"),
        file_name=f"{project}-{fix_version}-status-durations.csv",
        mime="text/csv",
    )
