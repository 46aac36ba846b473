"""Console presentation of the alert currently in rotation."""

import sys
from datetime import datetime, timezone
from typing import Callable, Optional

from .models import Alert


RELATIVE_TIME = {
    "en": {
        "past": "{} ago",
        "s": "a few seconds",
        "m": "a minute",
        "mm": "{} minutes",
        "h": "an hour",
        "hh": "{} hours",
        "d": "a day",
        "dd": "{} days",
    },
    "fr": {
        "past": "il y a {}",
        "s": "quelques secondes",
        "m": "une minute",
        "mm": "{} minutes",
        "h": "une heure",
        "hh": "{} heures",
        "d": "un jour",
        "dd": "{} jours",
    },
}


def _bucket(seconds: float):
    if seconds < 45:
        return "s", None
    minutes = round(seconds / 60)
    if minutes < 2:
        return "m", None
    if minutes < 45:
        return "mm", minutes
    hours = round(minutes / 60)
    if hours < 2:
        return "h", None
    if hours < 22:
        return "hh", hours
    days = round(hours / 24)
    if days < 2:
        return "d", None
    return "dd", days


def time_ago(when: datetime, now: Optional[datetime] = None, lang: str = "en") -> str:
    """Coarse relative time, e.g. "5 minutes ago" or "il y a 5 minutes"."""
    now = now or datetime.now(timezone.utc)
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)

    words = RELATIVE_TIME.get((lang or "en")[:2].lower(), RELATIVE_TIME["en"])
    key, count = _bucket((now - when).total_seconds())
    return words["past"].format(words[key].format(count))


class ConsoleRenderer:
    """Writes one alert at a time to a text stream."""

    def __init__(self, lang: str = "en", stream=None, clock: Optional[Callable[[], datetime]] = None):
        self.lang = lang
        self.stream = stream or sys.stdout
        self.clock = clock

    def render(self, alert: Alert) -> str:
        """Format an alert as title, region and issue time lines."""
        prefix = "Publié" if self.lang == "fr" else "Issued"
        lines = [alert.headline]
        if alert.region_label:
            lines.append(alert.region_label)
        if alert.updated_at is not None:
            now = self.clock() if self.clock else None
            lines.append(f"{prefix} {time_ago(alert.updated_at, now, self.lang)}")
        return "\n".join(lines)

    def show(self, alert: Alert, transition: int = 0):
        self.stream.write(self.render(alert) + "\n\n")
        self.stream.flush()

    def clear(self):
        self.stream.write("\n")
        self.stream.flush()
