from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ..common.validators import require_event_schedule
from ..core.enums import WindowDecision
from ..events.model import Event


@dataclass(frozen=True)
class ScanWindow:
    """Interval during which scans for an event are accepted (both ends inclusive)."""

    opens_at: datetime
    closes_at: datetime

    def classify(self, now: datetime) -> WindowDecision:
        if now < self.opens_at:
            return WindowDecision.TOO_EARLY
        if now > self.closes_at:
            return WindowDecision.TOO_LATE
        return WindowDecision.ADMISSIBLE


def scan_window(event: Event) -> ScanWindow:
    """Window anchored to the event start, shared by both sessions."""

    require_event_schedule(event)
    start = event.starts_at
    return ScanWindow(
        opens_at=start - timedelta(minutes=int(event.scan_window_minutes_before)),
        closes_at=start + timedelta(minutes=int(event.grace_minutes_after)),
    )


def classify(now: datetime, event: Event) -> WindowDecision:
    return scan_window(event).classify(now)
