from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus, Session
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from . import ledger
from .ledger import SIGN_IN_FIELDS, SIGN_OUT_FIELDS
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, student_id, event_id, status,
    sign_in_morning, sign_out_morning, sign_in_afternoon, sign_out_afternoon
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        event_id=int(r["event_id"]),
        status=AttendanceStatus(r["status"]),
        sign_in_morning=r.get("sign_in_morning"),
        sign_out_morning=r.get("sign_out_morning"),
        sign_in_afternoon=r.get("sign_in_afternoon"),
        sign_out_afternoon=r.get("sign_out_afternoon"),
    )


def _select_pair(cur, student_id: int, event_id: int) -> Optional[AttendanceRecord]:
    cur.execute(
        f"""
        SELECT {_COLUMNS}
        FROM attendance_records
        WHERE student_id=%s AND event_id=%s
        """,
        (int(student_id), int(event_id)),
    )
    r = fetchone(cur)
    return _to_record(r) if r else None


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student_and_event(self, student_id: int, event_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _select_pair(cur, student_id, event_id)

    def create_with_sign_in(
        self,
        *,
        student_id: int,
        event_id: int,
        session: Session,
        at: datetime,
    ) -> Optional[AttendanceRecord]:
        column = SIGN_IN_FIELDS[session]
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendance_records(student_id, event_id, status, {column})
                    VALUES(%s,%s,%s,%s)
                    """,
                    (int(student_id), int(event_id), AttendanceStatus.PRESENT.value, at),
                )
                attendance_id = int(cur.lastrowid)
        except IntegrityError as exc:
            # UNIQUE(student_id, event_id): another request created the row first.
            if is_duplicate_key(exc):
                return None
            raise

        blank = AttendanceRecord(
            attendance_id=attendance_id,
            student_id=int(student_id),
            event_id=int(event_id),
            status=AttendanceStatus.PENDING,
        )
        return ledger.apply_sign_in(blank, session, at)

    def mark_sign_in(
        self, *, student_id: int, event_id: int, session: Session, at: datetime
    ) -> Optional[AttendanceRecord]:
        column = SIGN_IN_FIELDS[session]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {column}=%s, status=%s
                WHERE student_id=%s AND event_id=%s AND {column} IS NULL
                """,
                (at, AttendanceStatus.PRESENT.value, int(student_id), int(event_id)),
            )
            if cur.rowcount <= 0:
                return None
            return _select_pair(cur, student_id, event_id)

    def mark_sign_out(
        self, *, student_id: int, event_id: int, session: Session, at: datetime
    ) -> Optional[AttendanceRecord]:
        sign_in = SIGN_IN_FIELDS[session]
        sign_out = SIGN_OUT_FIELDS[session]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendance_records
                SET {sign_out}=%s
                WHERE student_id=%s AND event_id=%s
                  AND {sign_in} IS NOT NULL AND {sign_out} IS NULL
                """,
                (at, int(student_id), int(event_id)),
            )
            if cur.rowcount <= 0:
                return None
            return _select_pair(cur, student_id, event_id)

    def list_for_event(self, event_id: int, *, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE event_id=%s
                ORDER BY attendance_id
                LIMIT %s
                """,
                (int(event_id), int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]
