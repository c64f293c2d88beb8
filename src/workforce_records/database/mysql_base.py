from __future__ import annotations

import logging
from contextlib import contextmanager
from decimal import Decimal
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import StorageConflictError, ValidationError
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Errors that mean "a concurrent writer got there first"; re-issuing the operation resolves them.
CONFLICT_ERRNOS = frozenset({errorcode.ER_DUP_ENTRY, errorcode.ER_LOCK_DEADLOCK, errorcode.ER_LOCK_WAIT_TIMEOUT})
# Values that do not fit their column.
DATA_ERRNOS = frozenset({errorcode.ER_DATA_TOO_LONG, errorcode.ER_WARN_DATA_OUT_OF_RANGE})


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except mysql.connector.Error as e:
        conn.rollback()
        if e.errno in CONFLICT_ERRNOS:
            logger.warning("storage conflict (errno=%s): %s", e.errno, e.msg)
            raise StorageConflictError("Concurrent write conflict, retry the operation") from e
        if e.errno in DATA_ERRNOS:
            logger.warning("rejected value (errno=%s): %s", e.errno, e.msg)
            raise ValidationError("A value is too long or out of range") from e
        raise
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


# MySQL has no OFFSET without LIMIT; this is its documented "all remaining rows" value.
_NO_LIMIT = 18446744073709551615


def paging_clause(limit: Optional[int], offset: int = 0) -> tuple[str, list]:
    if limit is None and not offset:
        return "", []
    return " LIMIT %s OFFSET %s", [_NO_LIMIT if limit is None else int(limit), int(offset)]


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def as_decimal(value: Any) -> Decimal:
    """DECIMAL columns come back as Decimal, but tolerate floats/strings/NULL from other drivers."""

    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
