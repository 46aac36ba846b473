"""Data models for weather alerts."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Optional, Tuple


class Severity(IntEnum):
    """Alert urgency derived from the leading colour token of a title."""

    NONE = 0
    YELLOW = 1
    ORANGE = 2
    RED = 3


@dataclass(frozen=True)
class RegionSpec:
    """One configured feed region."""

    code: str = ""


@dataclass(frozen=True)
class RawAlertRecord:
    """A feed entry before classification."""

    title_raw: str
    updated_raw: Optional[str] = None
    summary_raw: str = ""
    locator: str = ""


@dataclass(frozen=True)
class Alert:
    """Represents a classified weather alert."""

    event_type: str
    alert_kind: str
    region_label: str
    severity: Severity
    updated_at: Optional[datetime] = None
    title_raw: str = ""

    @property
    def headline(self) -> str:
        """Title text before the region, as shown on screen."""
        return self.title_raw.split(", ")[0] or self.title_raw


@dataclass(frozen=True)
class RotationState:
    """Snapshot owned by the rotation controller; replaced, never mutated."""

    alerts: Tuple[Alert, ...] = field(default_factory=tuple)
    index: int = 0
    transition_enabled: bool = False

    @property
    def current(self) -> Optional[Alert]:
        if not self.alerts:
            return None
        return self.alerts[self.index]
