from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time

from ..core.constants import DEFAULT_GRACE_MINUTES_AFTER, DEFAULT_SCAN_WINDOW_MINUTES_BEFORE


@dataclass(frozen=True)
class Event:
    """Domain entity: a time-boxed event with a morning and an afternoon session.

    Both sessions share the one start/end pair.
    """

    event_id: int
    organization_id: int
    title: str
    event_date: date
    start_time: time
    end_time: time
    scan_window_minutes_before: int = DEFAULT_SCAN_WINDOW_MINUTES_BEFORE
    grace_minutes_after: int = DEFAULT_GRACE_MINUTES_AFTER

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.event_date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.event_date, self.end_time)
