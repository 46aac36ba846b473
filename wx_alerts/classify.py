"""Title decomposition, severity classification and placeholder filtering."""

import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple

from dateutil import parser as date_parser

from .models import Alert, RawAlertRecord, Severity

logger = logging.getLogger(__name__)

COLOR_TOKENS = {
    "YELLOW": Severity.YELLOW,
    "ORANGE": Severity.ORANGE,
    "RED": Severity.RED,
}

NO_ALERT_PHRASES = (
    "No alerts in effect",
    "Aucune alerte en vigueur",
)

_SEVERITY_RE = re.compile(r"^(YELLOW|ORANGE|RED)\b")


def split_title(title: str) -> Tuple[str, str, str]:
    """
    Split a feed title into its parts.

    Titles look like "YELLOW WARNING - SNOWFALL, Toronto Ontario". The region
    is everything after the first comma, the kind and event come from the
    " - " split of what precedes it, and a leading colour token is dropped
    from the kind.

    Returns:
        Tuple of (alert_kind, event_type, region_label)
    """
    parts = title.split(", ")
    title_main = parts[0]
    region_label = ", ".join(parts[1:])

    segments = title_main.split(" - ")
    if len(segments) < 2:
        return "", title_main, region_label

    left = segments[0]
    event_type = " - ".join(segments[1:])

    tokens = left.split()
    if tokens and tokens[0].upper() in COLOR_TOKENS:
        alert_kind = " ".join(tokens[1:])
    else:
        alert_kind = left

    return alert_kind, event_type, region_label


def classify_severity(title: str) -> Severity:
    """Severity from a colour token at the very start of the raw title."""
    match = _SEVERITY_RE.match(title.upper())
    if not match:
        return Severity.NONE
    return COLOR_TOKENS[match.group(1)]


def is_placeholder(record: RawAlertRecord) -> bool:
    """Check whether a record only says that no alert is in effect."""
    text = record.summary_raw or ""
    return any(phrase in text for phrase in NO_ALERT_PHRASES)


def parse_updated(value: Optional[str]) -> Optional[datetime]:
    """Parse an entry timestamp; naive values are taken as UTC."""
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, TypeError, OverflowError) as e:
        logger.debug(f"Failed to parse date '{value}': {e}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def classify_record(record: RawAlertRecord, keep_placeholders: bool = False) -> Optional[Alert]:
    """
    Turn one raw record into an Alert.

    Returns None for placeholder records unless keep_placeholders is set, in
    which case they pass through with severity NONE.
    """
    placeholder = is_placeholder(record)
    if placeholder and not keep_placeholders:
        return None

    title = record.title_raw or ""
    alert_kind, event_type, region_label = split_title(title)
    severity = Severity.NONE if placeholder else classify_severity(title)

    return Alert(
        event_type=event_type,
        alert_kind=alert_kind,
        region_label=region_label,
        severity=severity,
        updated_at=parse_updated(record.updated_raw),
        title_raw=title,
    )


def classify_records(records: Iterable[RawAlertRecord], keep_placeholders: bool = False) -> List[Alert]:
    """Classify a batch of records, dropping filtered ones."""
    alerts = []
    skipped = 0
    for record in records:
        alert = classify_record(record, keep_placeholders)
        if alert is None:
            skipped += 1
            continue
        alerts.append(alert)

    if skipped:
        logger.debug(f"Filtered {skipped} placeholder entries")
    return alerts
