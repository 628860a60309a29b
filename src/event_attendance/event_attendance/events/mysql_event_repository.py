from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_GRACE_MINUTES_AFTER, DEFAULT_SCAN_WINDOW_MINUTES_BEFORE
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, normalize_mysql_time
from .model import Event
from .repository import EventRepository


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT event_id, organization_id, title, event_date, start_time, end_time,
                       scan_window_minutes_before, grace_minutes_after
                FROM events
                WHERE event_id=%s
                """,
                (int(event_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            before = r.get("scan_window_minutes_before")
            after = r.get("grace_minutes_after")
            return Event(
                event_id=int(r["event_id"]),
                organization_id=int(r["organization_id"]),
                title=r["title"],
                event_date=r["event_date"],
                start_time=normalize_mysql_time(r["start_time"]),
                end_time=normalize_mysql_time(r["end_time"]),
                scan_window_minutes_before=DEFAULT_SCAN_WINDOW_MINUTES_BEFORE if before is None else int(before),
                grace_minutes_after=DEFAULT_GRACE_MINUTES_AFTER if after is None else int(after),
            )
