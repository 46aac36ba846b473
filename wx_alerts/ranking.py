"""Ordering of classified alerts for presentation."""

from typing import Iterable, List

from .models import Alert


def _sort_key(alert: Alert):
    # dated alerts first within a tier, newest first
    if alert.updated_at is None:
        return (-int(alert.severity), 1, 0.0)
    return (-int(alert.severity), 0, -alert.updated_at.timestamp())


def rank_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    """
    Sort alerts by severity, then by update time, both descending.

    The sort is stable: alerts that tie on both keys, including those with no
    timestamp, keep their input order.
    """
    return sorted(alerts, key=_sort_key)
