#!/usr/bin/env python3
"""Tests for alert ranking."""

import sys
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from wx_alerts.models import Alert, Severity
from wx_alerts.ranking import rank_alerts


def make_alert(severity, hour=None, event="EVENT"):
    updated = datetime(2024, 1, 15, hour, tzinfo=timezone.utc) if hour is not None else None
    return Alert(
        event_type=event,
        alert_kind="WARNING",
        region_label="Ottawa",
        severity=severity,
        updated_at=updated,
    )


def test_severity_descending():
    alerts = [
        make_alert(Severity.YELLOW, 9),
        make_alert(Severity.RED, 3),
        make_alert(Severity.NONE, 12),
        make_alert(Severity.ORANGE, 1),
    ]
    ranked = rank_alerts(alerts)
    assert [a.severity for a in ranked] == [
        Severity.RED,
        Severity.ORANGE,
        Severity.YELLOW,
        Severity.NONE,
    ]


def test_recency_within_tier():
    ranked = rank_alerts([
        make_alert(Severity.RED, 8, "A"),
        make_alert(Severity.RED, 14, "B"),
        make_alert(Severity.RED, 11, "C"),
    ])
    assert [a.event_type for a in ranked] == ["B", "C", "A"]


def test_missing_timestamps_last_in_tier_and_stable():
    ranked = rank_alerts([
        make_alert(Severity.YELLOW, None, "A"),
        make_alert(Severity.YELLOW, 10, "B"),
        make_alert(Severity.YELLOW, None, "C"),
        make_alert(Severity.ORANGE, None, "D"),
    ])
    assert [a.event_type for a in ranked] == ["D", "B", "A", "C"]


def test_full_ties_keep_input_order():
    ranked = rank_alerts([
        make_alert(Severity.RED, 10, "first"),
        make_alert(Severity.RED, 10, "second"),
    ])
    assert [a.event_type for a in ranked] == ["first", "second"]


def test_input_not_mutated():
    alerts = [make_alert(Severity.NONE, 1), make_alert(Severity.RED, 2)]
    original = list(alerts)
    rank_alerts(alerts)
    assert alerts == original


def test_empty():
    assert rank_alerts([]) == []
