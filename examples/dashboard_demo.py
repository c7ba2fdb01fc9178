"""
Dashboard demo: feeds sample data-source results through dashformats.transform()
and renders the resulting view models with NiceGUI.

Demonstrates:
- timespan selector -> queryTimespan/granularity
- scorecard thresholds
- retention table
- filter choices that keep the user's selection across refreshes
- timeline chart built from "timeline-graphData" / "timeline-lines"

Run:
    pip install -e ".[demo]"
    python examples/dashboard_demo.py
"""

import random
from datetime import datetime, timedelta, timezone

import plotly.graph_objects as go
from nicegui import ui

from dashformats import StaticPlugin, configure_logging, transform

configure_logging(level="DEBUG")

CHANNELS = ["web", "sms", "email"]

SCORECARD_FORMAT = {
    "type": "scorecard",
    "args": {
        "prefix": "errors",
        "thresholds": [
            {"value": 0, "color": "#2e7d32", "icon": "done"},
            {"value": 10, "color": "#f9a825", "icon": "warning"},
            {"value": 100, "color": "#c62828", "icon": "error"},
        ],
    },
}
FILTER_FORMAT = {"type": "filter", "args": {"prefix": "channels", "field": "channel"}}
TIMELINE_FORMAT = {
    "type": "timeline",
    "args": {"timeField": "timestamp", "lineField": "channel", "valueField": "count"},
}


def sample_timeline_rows(days: int) -> list[dict]:
    """Random message counts per channel per day."""
    start = datetime(2017, 1, 1, tzinfo=timezone.utc)
    rows = []
    for day in range(days):
        for channel in CHANNELS:
            if random.random() < 0.2:
                continue  # leave holes so densification shows up as zeros
            rows.append({
                "timestamp": (start + timedelta(days=day)).isoformat(),
                "channel": channel,
                "count": random.randint(0, 50),
            })
    return rows


def sample_retention_row() -> dict:
    return {
        "totalUnique": 1000,
        "totalUniqueUsersIn24hr": 120,
        "totalUniqueUsersIn7d": 400,
        "totalUniqueUsersIn30d": 900,
        "returning24hr": 30,
        "returning7d": 150,
        "returning30d": 500,
    }


def timeline_figure(view: dict) -> dict:
    fig = go.Figure()
    points = view.get("timeline-graphData", [])
    for line in view.get("timeline-lines", []):
        fig.add_trace(go.Scatter(
            x=[p["time"] for p in points],
            y=[p[line] for p in points],
            name=line,
            mode="lines+markers",
        ))
    fig.update_layout(margin=dict(l=20, r=20, t=20, b=20), height=320)
    return fig.to_dict()


@ui.page("/")
def index():
    ui.label("dashformats demo").classes("text-3xl font-bold mb-6")

    plugin = StaticPlugin(id="messages")
    output_state: dict = {}

    selector = ui.select(["24 hours", "1 week", "1 month"], value="1 week", label="Timespan")
    query_label = ui.label().classes("text-sm text-gray-500")

    with ui.row().classes("w-full gap-6"):
        with ui.column().classes("flex-1"):
            ui.label("Errors").classes("text-xl font-bold")
            with ui.row().classes("items-center"):
                score_icon = ui.icon("done").classes("text-3xl")
                score_label = ui.label().classes("text-3xl")
        with ui.column().classes("flex-1"):
            ui.label("Retention").classes("text-xl font-bold")
            retention_table = ui.table(
                columns=[
                    {"name": "timespan", "label": "Timespan", "field": "timespan"},
                    {"name": "retention", "label": "Retention", "field": "retention"},
                    {"name": "returning", "label": "Returning", "field": "returning"},
                    {"name": "unique", "label": "Unique", "field": "unique"},
                ],
                rows=[],
            )

    channel_select = ui.select([], multiple=True, label="Channels").classes("w-64")
    plot = ui.plotly({}).classes("w-full")

    def refresh() -> None:
        label = selector.value
        span = transform("timespan", "timespan", {"selectedValue": label})
        query_label.set_text(f"query: {span['queryTimespan']} / {span['granularity']}")

        days = {"24 hours": 1, "1 week": 7, "1 month": 30}.get(label, 90)
        rows = sample_timeline_rows(days)

        score = transform(
            "scorecard", SCORECARD_FORMAT, {"values": [{"count": random.randint(0, 150)}]}, {}, plugin
        )
        score_label.set_text(str(score["errors_value"]))
        score_icon.props(f'name={score["errors_icon"]} color={score["errors_color"]}')

        retention_view = transform(
            "retention", "retention", {"values": [sample_retention_row()]},
            {"selectedTimespan": span["queryTimespan"]}, plugin,
        )
        retention_table.rows = retention_view["values"]
        retention_table.update()

        filter_view = transform(
            "filter", FILTER_FORMAT, {"values": [{"channel": c} for c in CHANNELS]}, {}, plugin, output_state
        )
        output_state.update(filter_view)
        channel_select.set_options(filter_view["channels-filters"])

        selected = set(channel_select.value or CHANNELS)
        timeline_view = transform(
            "timeline", TIMELINE_FORMAT,
            {"values": [r for r in rows if r["channel"] in selected]},
            {"timespan": label}, plugin,
        )
        plot.update_figure(timeline_figure(timeline_view))

    def on_channels(e) -> None:
        output_state["channels-selected"] = list(e.value or [])
        refresh()

    selector.on_value_change(lambda e: refresh())
    channel_select.on_value_change(on_channels)
    refresh()


if __name__ in {"__main__", "__mp_main__"}:
    ui.run(reload=False)
