from datetime import time, timedelta

import pytest
from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from src.event_attendance.event_attendance.database.mysql_base import escape_like, is_duplicate_key, normalize_mysql_time


def test_duplicate_key_detection():
    assert is_duplicate_key(IntegrityError(msg="dup", errno=errorcode.ER_DUP_ENTRY))
    assert not is_duplicate_key(IntegrityError(msg="fk", errno=errorcode.ER_NO_REFERENCED_ROW_2))
    assert not is_duplicate_key(ValueError("x"))


def test_escape_like():
    assert escape_like("S1_a%") == "S1\\_a\\%"
    assert escape_like("a\\b") == "a\\\\b"


@pytest.mark.parametrize(
    "value, expected",
    [
        (time(9, 0), time(9, 0)),
        (timedelta(hours=9, minutes=30), time(9, 30)),
        ("08:15", time(8, 15)),
        ("08:15:30", time(8, 15, 30)),
        (None, None),
    ],
)
def test_normalize_mysql_time(value, expected):
    assert normalize_mysql_time(value) == expected


def test_db_config_from_settings_mapping():
    from src.event_attendance.event_attendance.database.connection import DBConfig

    cfg = DBConfig.from_dict({"host": "db", "port": "3307", "user": "app", "password": "pw", "database": "ea"})

    assert (cfg.host, cfg.port, cfg.database, cfg.connect_timeout) == ("db", 3307, "ea", 10)
