from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone, paging_clause
from .model import DEDUCTION_FIELDS, EARNING_FIELDS, PayrollComponents, PayrollRecord, PayrollTotals
from .repository import PayrollRepository

_AMOUNT_FIELDS = EARNING_FIELDS + DEDUCTION_FIELDS

_COLUMNS = ", ".join(
    ("payroll_id", "user_id", "month", "year")
    + _AMOUNT_FIELDS
    + ("gross_salary", "net_salary", "remarks", "updated_at", "version")
)


def _to_record(r: dict) -> PayrollRecord:
    return PayrollRecord(
        payroll_id=int(r["payroll_id"]),
        user_id=int(r["user_id"]),
        month=int(r["month"]),
        year=int(r["year"]),
        components=PayrollComponents(**{name: as_decimal(r.get(name)) for name in _AMOUNT_FIELDS}),
        gross_salary=as_decimal(r.get("gross_salary")),
        net_salary=as_decimal(r.get("net_salary")),
        remarks=r.get("remarks") or "",
        updated_at=r.get("updated_at"),
        version=int(r.get("version") or 0),
    )


def _amounts(components: PayrollComponents) -> list[object]:
    return [getattr(components, name) for name in _AMOUNT_FIELDS]


class MySQLPayrollRepository(PayrollRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert_payroll(
        self,
        *,
        user_id: int,
        month: int,
        year: int,
        components: PayrollComponents,
        totals: PayrollTotals,
        remarks: str,
    ) -> int:
        columns = ("user_id", "month", "year") + _AMOUNT_FIELDS + ("gross_salary", "net_salary", "remarks")
        placeholders = ",".join(["%s"] * len(columns))
        updates = ", ".join(f"{c}=VALUES({c})" for c in columns[3:])

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO payroll_records({", ".join(columns)})
                VALUES({placeholders})
                ON DUPLICATE KEY UPDATE payroll_id=LAST_INSERT_ID(payroll_id), {updates}, version=version+1
                """,
                tuple(
                    [int(user_id), int(month), int(year)]
                    + _amounts(components)
                    + [totals.gross_salary, totals.net_salary, remarks]
                ),
            )
            return int(cur.lastrowid)

    def get_by_id(self, payroll_id: int) -> Optional[PayrollRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM payroll_records WHERE payroll_id=%s", (int(payroll_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_payroll(
        self,
        *,
        user_id: Optional[int] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[PayrollRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if user_id is not None:
            clauses.append("user_id=%s")
            params.append(int(user_id))
        if month is not None:
            clauses.append("month=%s")
            params.append(int(month))
        if year is not None:
            clauses.append("year=%s")
            params.append(int(year))

        where = " AND ".join(clauses)
        page, page_params = paging_clause(limit, offset)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM payroll_records
                WHERE {where}
                ORDER BY year DESC, month DESC, user_id ASC{page}
                """,
                tuple(params + page_params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def update_payroll(
        self,
        *,
        payroll_id: int,
        components: PayrollComponents,
        totals: PayrollTotals,
        remarks: str,
        expected_version: int,
    ) -> bool:
        assignments = ", ".join(f"{name}=%s" for name in _AMOUNT_FIELDS)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE payroll_records
                SET {assignments}, gross_salary=%s, net_salary=%s, remarks=%s, version=version+1
                WHERE payroll_id=%s AND version=%s
                """,
                tuple(
                    _amounts(components)
                    + [totals.gross_salary, totals.net_salary, remarks, int(payroll_id), int(expected_version)]
                ),
            )
            return cur.rowcount > 0
