"""Timed rotation through the ranked alert list."""

import logging
import threading
from typing import Callable, Optional, Sequence

from .models import Alert, RotationState

logger = logging.getLogger(__name__)


class RepeatingTimer(threading.Thread):
    """Calls a function every interval seconds until cancelled."""

    def __init__(self, interval: float, function: Callable[[], None]):
        super().__init__(name="alert-rotation", daemon=True)
        self.interval = interval
        self.function = function
        self._finished = threading.Event()

    def run(self):
        while not self._finished.wait(self.interval):
            self.function()

    def cancel(self):
        self._finished.set()


class RotationController:
    """
    Owns the RotationState and cycles the display through it.

    States are EMPTY (no alerts, no timer) and CYCLING (at least one alert,
    one recurring timer). Every change replaces the state object as a whole.
    """

    def __init__(
        self,
        display_interval: int,
        animation_speed: int,
        on_display: Callable[[Alert, int], None],
        on_clear: Callable[[], None],
        timer_factory: Callable[[float, Callable[[], None]], RepeatingTimer] = RepeatingTimer,
    ):
        """
        Args:
            display_interval: Milliseconds each alert stays on screen
            animation_speed: Transition duration in milliseconds
            on_display: Called with the alert to show and the transition time
            on_clear: Called when there is nothing to show
            timer_factory: Builds a startable, cancellable recurring timer
        """
        self.display_interval = display_interval
        self.animation_speed = animation_speed
        self.on_display = on_display
        self.on_clear = on_clear
        self.timer_factory = timer_factory

        self._lock = threading.RLock()
        self._state = RotationState()
        self._timer: Optional[RepeatingTimer] = None
        self._generation = 0

    @property
    def state(self) -> RotationState:
        return self._state

    @property
    def is_cycling(self) -> bool:
        return bool(self._state.alerts)

    @property
    def period(self) -> int:
        """Timer period in milliseconds for the current state."""
        extra = self.animation_speed if self._state.transition_enabled else 0
        return self.display_interval + extra

    def update(self, alerts: Sequence[Alert]):
        """Replace the list being rotated, restarting from the first alert."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1

            if not alerts:
                self._state = RotationState()
                logger.info("No alerts in effect for configured regions")
                self.on_clear()
                return

            self._state = RotationState(
                alerts=tuple(alerts),
                index=0,
                transition_enabled=len(alerts) > 1,
            )
            self._show()

            generation = self._generation
            self._timer = self.timer_factory(self.period / 1000.0, lambda: self._tick(generation))
            self._timer.start()
            logger.debug(f"Rotating {len(alerts)} alerts every {self.period} ms")

    def stop(self):
        """Cancel the rotation timer without touching the display."""
        with self._lock:
            self._cancel_timer()
            self._generation += 1

    def _tick(self, generation: int):
        with self._lock:
            # a timer cancelled mid-callback may still fire once
            if generation != self._generation or not self._state.alerts:
                return
            state = self._state
            self._state = RotationState(
                alerts=state.alerts,
                index=(state.index + 1) % len(state.alerts),
                transition_enabled=state.transition_enabled,
            )
            self._show()

    def _show(self):
        transition = self.animation_speed if self._state.transition_enabled else 0
        self.on_display(self._state.current, transition)

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
