"""Unit tests for the timespan, flags, scorecard and filter mappers."""

import pytest

from dashformats.formats.format_spec import DEFAULT_THRESHOLD, StaticPlugin, Threshold
from dashformats.formats.mappers import (
    FilterArgs,
    ScorecardArgs,
    filter,
    flags,
    scorecard,
    select_threshold,
    timespan,
)

THRESHOLDS = [
    {"value": 10, "color": "#3b3", "icon": "done"},
    {"value": 100, "color": "#f90", "icon": "warning"},
]


# ---------------------------------------------------------------- timespan

@pytest.mark.parametrize(
    "selected, expected",
    [
        ("24 hours", {"queryTimespan": "PT24H", "granularity": "5m"}),
        ("1 week", {"queryTimespan": "P7D", "granularity": "1d"}),
        ("1 month", {"queryTimespan": "P30D", "granularity": "1d"}),
        ("3 months", {"queryTimespan": "P90D", "granularity": "1d"}),
        (None, {"queryTimespan": "P90D", "granularity": "1d"}),
    ],
)
def test_timespan_table(selected, expected):
    assert timespan("timespan", {"selectedValue": selected}, {}, None) == expected


def test_timespan_missing_state_is_none():
    assert timespan("timespan", None, {}, None) is None


# ---------------------------------------------------------------- flags

def test_flags_marks_selected_param(plugin):
    result = flags("flags", {"selectedValue": "sms"}, {}, plugin)
    assert result == {"web": False, "sms": True, "email": False}


def test_flags_no_selection_all_false(plugin):
    assert flags("flags", {}, {}, plugin) == {"web": False, "sms": False, "email": False}


@pytest.mark.parametrize("params", [None, {}, {"values": "web"}, ["web"]])
def test_flags_malformed_params_is_none(params):
    plugin = StaticPlugin(id="p", params=params)
    assert flags("flags", {"selectedValue": "web"}, {}, plugin) is None


def test_flags_missing_state_or_plugin_is_none(plugin):
    assert flags("flags", None, {}, plugin) is None
    assert flags("flags", {"selectedValue": "web"}, {}, None) is None


# ---------------------------------------------------------------- scorecard

def _scorecard_format(**args):
    return {"type": "scorecard", "args": dict({"prefix": "errors", "thresholds": THRESHOLDS}, **args)}


def test_scorecard_count_below_first_threshold():
    result = scorecard(_scorecard_format(), {"values": [{"count": 5}]}, {}, None)
    assert result == {"errors_value": 5, "errors_color": "#3b3", "errors_icon": "done"}


def test_scorecard_selects_first_threshold_not_exceeded():
    result = scorecard(_scorecard_format(), {"values": [{"count": 50}]}, {}, None)
    assert result == {"errors_value": 50, "errors_color": "#f90", "errors_icon": "warning"}


def test_scorecard_count_above_all_uses_last_threshold():
    result = scorecard(_scorecard_format(), {"values": [{"count": 150}]}, {}, None)
    assert result["errors_value"] == 150
    assert result["errors_color"] == "#f90"


def test_scorecard_count_equal_to_threshold_stays():
    result = scorecard(_scorecard_format(), {"values": [{"count": 10}]}, {}, None)
    assert result["errors_color"] == "#3b3"


def test_scorecard_no_rows_uses_first_threshold():
    result = scorecard(_scorecard_format(), {"values": []}, {}, None)
    assert result == {"errors_value": 10, "errors_color": "#3b3", "errors_icon": "done"}


@pytest.mark.parametrize("values", [{"count": 50}, "abc", 5])
def test_scorecard_malformed_values_uses_first_threshold(values):
    result = scorecard(_scorecard_format(), {"values": values}, {}, None)
    assert result == {"errors_value": 10, "errors_color": "#3b3", "errors_icon": "done"}


def test_scorecard_no_thresholds_uses_builtin_default():
    fmt = {"type": "scorecard", "args": {"prefix": "errors"}}
    assert scorecard(fmt, {"values": []}, {}, None) == {
        "errors_value": 0,
        "errors_color": "#000",
        "errors_icon": "done",
    }
    result = scorecard(fmt, {"values": [{"count": 3}]}, {}, None)
    assert result == {"errors_value": 3, "errors_color": "#000", "errors_icon": "done"}


def test_scorecard_prefix_defaults_to_plugin_id(plugin):
    fmt = {"type": "scorecard", "args": {"thresholds": THRESHOLDS}}
    result = scorecard(fmt, {"values": [{"count": 1}]}, {}, plugin)
    assert set(result) == {"errors_value", "errors_color", "errors_icon"}


def test_scorecard_bare_format_and_no_plugin():
    result = scorecard("scorecard", None, {}, None)
    assert result == {"scorecard_value": 0, "scorecard_color": "#000", "scorecard_icon": "done"}


def test_scorecard_custom_count_field():
    fmt = _scorecard_format(countField="failures")
    result = scorecard(fmt, {"values": [{"failures": 60, "count": 1}]}, {}, None)
    assert result["errors_value"] == 60
    assert result["errors_icon"] == "warning"


def test_scorecard_missing_count_uses_first_threshold():
    result = scorecard(_scorecard_format(), {"values": [{"other": 1}]}, {}, None)
    assert result == {"errors_value": None, "errors_color": "#3b3", "errors_icon": "done"}


def test_scorecard_args_sorts_thresholds():
    args = ScorecardArgs.from_dict({"thresholds": list(reversed(THRESHOLDS))})
    assert [t.value for t in args.thresholds] == [10, 100]
    assert args.count_field == "count"


def test_select_threshold_walk():
    thresholds = [Threshold(10, "g", "a"), Threshold(100, "o", "b"), Threshold(1000, "r", "c")]
    assert select_threshold(0, thresholds).color == "g"
    assert select_threshold(11, thresholds).color == "o"
    assert select_threshold(999, thresholds).color == "r"
    assert select_threshold(5000, thresholds).color == "r"
    assert select_threshold("nope", thresholds).color == "g"
    assert select_threshold(5, [DEFAULT_THRESHOLD]) is DEFAULT_THRESHOLD


# ---------------------------------------------------------------- filter

def _filter_format(**args):
    return {"type": "filter", "args": dict({"prefix": "p", "field": "channel"}, **args)}


def test_filter_projects_field_with_unknown_token():
    rows = [{"channel": "web"}, {"channel": None}, {}, {"channel": 0}]
    result = filter(_filter_format(), {"values": rows}, {}, None, {})
    assert result == {"p-filters": ["web", "unknown", "unknown", 0], "p-selected": []}


def test_filter_custom_unknown_token():
    result = filter(_filter_format(unknown="n/a"), {"values": [{}]}, {}, None, {})
    assert result["p-filters"] == ["n/a"]


def test_filter_keeps_previous_selection_across_new_rows():
    first = filter(_filter_format(), {"values": [{"channel": "x"}, {"channel": "y"}]}, {}, None, {})
    assert first["p-selected"] == []

    prev = {"p-filters": first["p-filters"], "p-selected": ["x"]}
    second = filter(_filter_format(), {"values": [{"channel": "z"}]}, {}, None, prev)
    assert second["p-selected"] == ["x"]
    assert second["p-filters"] == ["z"]


def test_filter_does_not_share_selection_list_with_prev_state():
    prev = {"p-selected": ["x"]}
    result = filter(_filter_format(), {"values": []}, {}, None, prev)
    result["p-selected"].append("y")
    assert prev["p-selected"] == ["x"]


@pytest.mark.parametrize(
    "fmt, state",
    [
        ("filter", {"values": [{"channel": "x"}]}),
        ({"type": "filter", "args": {"field": "channel"}}, {"values": [{"channel": "x"}]}),
        ({"type": "filter"}, {"values": []}),
        (_filter_format(), None),
        (_filter_format(), {"values": None}),
    ],
)
def test_filter_degrades_to_empty(fmt, state):
    assert filter(fmt, state, {}, None, {}) == {}


def test_filter_empty_rows_still_outputs_keys():
    assert filter(_filter_format(), {"values": []}, {}, None, None) == {"p-filters": [], "p-selected": []}


def test_filter_args_from_dict():
    assert FilterArgs.from_dict({"field": "a"}) is None
    args = FilterArgs.from_dict({"prefix": "c", "field": "a"})
    assert args == FilterArgs(prefix="c", field="a", unknown="unknown")


@pytest.mark.parametrize("values", [{"channel": "web"}, "abc", 5])
def test_filter_malformed_values_gives_no_filters(values):
    result = filter(_filter_format(), {"values": values}, {}, None, {"p-selected": ["web"]})
    assert result == {"p-filters": [], "p-selected": ["web"]}
