"""Chart builders (Altair) for time-in-status views."""

from __future__ import annotations

import altair as alt
import pandas as pd


def status_duration_chart(df: pd.DataFrame, unit: str):
    """Horizontal bar chart of one issue's durations (``status``, ``duration``)."""
    if df.empty:
        return None
    return (
        alt.Chart(df)
        .mark_bar(color="#1f77b4")
        .encode(
            x=alt.X("duration:Q", title=f"Time in status ({unit})"),
            y=alt.Y("status:N", title="Status", sort="-x"),
            tooltip=[
                alt.Tooltip("status:N", title="Status"),
                alt.Tooltip("duration:Q", title=unit.capitalize(), format=".2f"),
            ],
        )
        .properties(height=max(120, 32 * len(df)))
    )


def status_timeline_chart(intervals: pd.DataFrame):
    """Gantt-style chart of status intervals (``start``, ``end``, ``status``)."""
    if intervals.empty:
        return None
    tmp = intervals.copy()
    tmp["start"] = pd.to_datetime(tmp["start"], utc=True)
    tmp["end"] = pd.to_datetime(tmp["end"], utc=True)
    tmp["state"] = tmp["is_open"].map({True: "Current", False: "Closed"})
    return (
        alt.Chart(tmp)
        .mark_bar()
        .encode(
            x=alt.X("start:T", title="Date"),
            x2="end:T",
            y=alt.Y("status:N", title="Status"),
            color=alt.Color("state:N", title="Interval"),
            tooltip=[
                alt.Tooltip("status:N", title="Status"),
                alt.Tooltip("start:T", title="From"),
                alt.Tooltip("end:T", title="To"),
                alt.Tooltip("working_days:Q", title="Working days"),
                alt.Tooltip("weekend_days:Q", title="Weekend days"),
            ],
        )
    )


def fix_version_chart(df: pd.DataFrame, unit: str):
    """Stacked bars of status durations per issue (``key``, ``status``, ``duration``)."""
    if df.empty:
        return None
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("sum(duration):Q", title=f"Time in status ({unit})"),
            y=alt.Y("key:N", title="Issue", sort="-x"),
            color=alt.Color("status:N", title="Status"),
            tooltip=[
                alt.Tooltip("key:N", title="Issue"),
                alt.Tooltip("status:N", title="Status"),
                alt.Tooltip("duration:Q", title=unit.capitalize(), format=".2f"),
            ],
        )
    )


def pivot_durations(df: pd.DataFrame) -> pd.DataFrame:
    """Issue x status table of durations; missing combinations become 0."""
    if df.empty:
        return pd.DataFrame()
    table = df.pivot_table(index="key", columns="status", values="duration", aggfunc="sum", fill_value=0.0)
    table["Total"] = table.sum(axis=1)
    return table.sort_values(by="Total", ascending=False)
