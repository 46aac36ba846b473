#!/usr/bin/env python3
"""Tests for the rotation controller."""

import logging
import sys
import threading
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from wx_alerts.models import Alert, Severity
from wx_alerts.rotation import RepeatingTimer, RotationController


class FakeTimer:
    """Timer that only fires when the test says so."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function()


class Recorder:
    def __init__(self):
        self.timers = []
        self.shown = []
        self.cleared = 0

    def timer(self, interval, function):
        timer = FakeTimer(interval, function)
        self.timers.append(timer)
        return timer

    def show(self, alert, transition):
        self.shown.append((alert.event_type, transition))

    def clear(self):
        self.cleared += 1


def make_alerts(*events):
    return [
        Alert(event_type=e, alert_kind="WARNING", region_label="Ottawa", severity=Severity.RED)
        for e in events
    ]


def make_controller(recorder):
    return RotationController(
        display_interval=5000,
        animation_speed=1000,
        on_display=recorder.show,
        on_clear=recorder.clear,
        timer_factory=recorder.timer,
    )


def test_single_alert_disables_transition():
    recorder = Recorder()
    controller = make_controller(recorder)

    controller.update(make_alerts("FLOOD"))

    assert controller.state.transition_enabled is False
    assert controller.state.index == 0
    assert recorder.shown == [("FLOOD", 0)]
    assert recorder.timers[0].interval == 5.0


def test_cycles_through_list_and_wraps():
    recorder = Recorder()
    controller = make_controller(recorder)

    controller.update(make_alerts("A", "B", "C"))
    timer = recorder.timers[0]
    assert timer.started
    assert timer.interval == 6.0

    timer.fire()
    timer.fire()
    timer.fire()

    assert [event for event, _ in recorder.shown] == ["A", "B", "C", "A"]
    assert all(transition == 1000 for _, transition in recorder.shown)
    assert controller.state.index == 0


def test_empty_list_clears_and_cancels_timer():
    recorder = Recorder()
    controller = make_controller(recorder)

    controller.update(make_alerts("A", "B", "C"))
    assert controller.is_cycling
    controller.update([])

    assert not controller.is_cycling
    assert controller.state.alerts == ()
    assert controller.state.index == 0
    assert recorder.timers[0].cancelled
    assert recorder.cleared == 1


def test_new_list_resets_index_and_replaces_timer():
    recorder = Recorder()
    controller = make_controller(recorder)

    controller.update(make_alerts("A", "B", "C"))
    recorder.timers[0].fire()
    assert controller.state.index == 1

    controller.update(make_alerts("X", "Y"))

    assert recorder.timers[0].cancelled
    assert len(recorder.timers) == 2
    assert controller.state.index == 0
    assert recorder.shown[-1] == ("X", 1000)


def test_stale_timer_tick_ignored():
    recorder = Recorder()
    controller = make_controller(recorder)

    controller.update(make_alerts("A", "B"))
    old_timer = recorder.timers[0]
    controller.update(make_alerts("X", "Y"))

    old_timer.fire()

    assert controller.state.index == 0
    assert recorder.shown[-1] == ("X", 1000)


def test_state_replaced_not_mutated():
    recorder = Recorder()
    controller = make_controller(recorder)

    controller.update(make_alerts("A", "B"))
    before = controller.state
    recorder.timers[0].fire()

    assert before.index == 0
    assert controller.state is not before
    assert controller.state.index == 1


def test_repeating_timer_fires_until_cancelled():
    fired = threading.Event()
    count = [0]

    def tick():
        count[0] += 1
        fired.set()

    timer = RepeatingTimer(0.01, tick)
    timer.start()
    assert fired.wait(2)
    timer.cancel()
    timer.join(2)

    assert not timer.is_alive()
    assert count[0] >= 1


def test_empty_list_logs_no_alerts(caplog):
    recorder = Recorder()
    controller = make_controller(recorder)

    with caplog.at_level(logging.INFO, logger="wx_alerts.rotation"):
        controller.update([])

    assert "No alerts in effect for configured regions" in caplog.text
    assert recorder.cleared == 1
    assert recorder.timers == []
