from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One transaction on a fresh connection.

    Every statement run inside the block commits together when it exits
    normally; any exception rolls all of them back.
    """
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def is_duplicate_key(exc: Exception) -> bool:
    return isinstance(exc, IntegrityError) and getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so a value is matched literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def normalize_mysql_time(value: Any) -> Optional[time]:
    """Event start/end columns as ``time``.

    The connector hands TIME back as ``timedelta`` (pure-Python driver),
    ``time`` or a ``HH:MM[:SS]`` string depending on version and settings.
    """

    if value is None or isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        seconds = int(value.total_seconds()) % 86400
        return time(seconds // 3600, (seconds % 3600) // 60, seconds % 60)

    if isinstance(value, str):
        fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            raise ValueError(f"Invalid time string: {value!r}") from None

    raise TypeError(f"Unsupported MySQL TIME value type: {type(value)!r}")
