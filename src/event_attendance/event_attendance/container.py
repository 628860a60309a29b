from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AdmissionService
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .organizations.mysql_organization_repository import MySQLOrganizationRepository
from .qr.service import QRService
from .students.mysql_student_repository import MySQLStudentRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    students_repo: MySQLStudentRepository
    organizations_repo: MySQLOrganizationRepository
    events_repo: MySQLEventRepository
    attendance_repo: MySQLAttendanceRepository

    admission_service: AdmissionService
    qr_service: QRService


def build_container(*, db_config: dict, qr_secret: Optional[str] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    organizations_repo = MySQLOrganizationRepository(conn)
    events_repo = MySQLEventRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    admission_service = AdmissionService(
        attendance_repo,
        students_repo,
        organizations_repo,
        events_repo,
        system_secret=qr_secret,
    )
    qr_service = QRService(students_repo, organizations_repo, system_secret=qr_secret)

    return Container(
        conn=conn,
        students_repo=students_repo,
        organizations_repo=organizations_repo,
        events_repo=events_repo,
        attendance_repo=attendance_repo,
        admission_service=admission_service,
        qr_service=qr_service,
    )
