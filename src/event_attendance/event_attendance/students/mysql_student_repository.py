from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, escape_like, fetchall, fetchone
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, external_student_id, display_name, organization_id, qr_code_data"


def _to_student(r: Dict[str, Any]) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        external_student_id=r["external_student_id"],
        display_name=r["display_name"],
        organization_id=int(r["organization_id"]),
        qr_code_data=r.get("qr_code_data"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, params: tuple) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE {where}", params)
            r = fetchone(cur)
            return _to_student(r) if r else None

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self._get_one("student_id=%s", (int(student_id),))

    def get_by_external_id(self, external_student_id: str) -> Optional[Student]:
        return self._get_one("external_student_id=%s", (external_student_id,))

    def get_by_token(self, qr_code_data: str) -> Optional[Student]:
        return self._get_one("qr_code_data=%s", (qr_code_data,))

    def get_by_token_prefix(self, prefix: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE qr_code_data LIKE %s ESCAPE '\\\\' LIMIT 2",
                (escape_like(prefix) + "%",),
            )
            rows = fetchall(cur)
            if len(rows) != 1:
                return None
            return _to_student(rows[0])

    def list_for_organization(self, organization_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM students WHERE organization_id=%s ORDER BY student_id",
                (int(organization_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def update_token_data(self, student_id: int, qr_code_data: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET qr_code_data=%s WHERE student_id=%s",
                (qr_code_data, int(student_id)),
            )
            return cur.rowcount > 0
