"""
Data-Access Gateway
===================

The single entry point the session store and the views use to read and write
application tables. A gateway is bound to a caller (a user id, or None for an
anonymous client) and exposes a small fluent request builder:

.. code-block:: python

    gateway = DataGateway(user_id)
    res = (
        gateway.table("conversations")
        .select("*")
        .eq("user_id", user_id)
        .order("updated_at", ascending=False)
        .execute()
    )
    if res.error:
        ...

Behavior
--------
- Every ``execute()`` runs in one `@transactional` unit; nothing is retried
  or cached.
- Row policies from :mod:`lexadvisor.database.policies` are applied beneath
  the builder: reads, updates and deletes only see permitted rows, inserts
  and update post-images must pass the table's check or the whole request
  fails with ``42501``.
- Failures are returned as values (`GatewayResponse.error`), never raised.
- Rows are plain JSON-compatible dicts: UUIDs as strings, timestamps as
  ISO-8601 strings.

Error codes
-----------
==========  ==============================================================
42501       row policy violation on insert / update
42P01       unknown table
42703       unknown column
22P02       malformed value (bad UUID, unknown enum member, bad timestamp)
23505       unique violation
23503       foreign-key violation
23514       check violation
23502       not-null violation
PGRST116    ``.single()`` matched zero or several rows
XX000       anything else
==========  ==============================================================
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import Enum as SAEnum
from sqlalchemy import Table, Uuid, and_, delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.types import DateTime

from lexadvisor.database.config.connection_engine import metadata
from lexadvisor.database.helpers.transactionManagement import transactional
from lexadvisor.database.policies import DELETE, INSERT, SELECT, UPDATE, PolicyEvaluator

logger = logging.getLogger(__name__)

RLS_VIOLATION = "42501"
UNDEFINED_TABLE = "42P01"
UNDEFINED_COLUMN = "42703"
INVALID_TEXT = "22P02"
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"
NOT_NULL_VIOLATION = "23502"
SINGLE_ROW_EXPECTED = "PGRST116"
INTERNAL_ERROR = "XX000"

_SQLITE_INTEGRITY_CODES = (
    ("UNIQUE constraint failed", UNIQUE_VIOLATION),
    ("FOREIGN KEY constraint failed", FOREIGN_KEY_VIOLATION),
    ("CHECK constraint failed", CHECK_VIOLATION),
    ("NOT NULL constraint failed", NOT_NULL_VIOLATION),
)


@dataclass
class GatewayError:
    """Failure description carried by a `GatewayResponse`."""

    message: str
    code: str
    details: str | None = None


@dataclass
class GatewayResponse:
    """
    Result of `TableRequest.execute()`.

    Attributes
    ----------
    data : list[dict] | dict | None
        Rows, a single row after ``.single()``, or None on error.
    error : GatewayError | None
        Set when the request failed; ``data`` is then None.
    count : int | None
        Total number of matching rows when ``select(count="exact")`` was used.
    """

    data: Any = None
    error: GatewayError | None = None
    count: int | None = None


class GatewayFailure(Exception):
    """Raised inside a request to abort its transaction with a `GatewayError`."""

    def __init__(self, message: str, code: str, details: str | None = None):
        super().__init__(message)
        self.error = GatewayError(message=message, code=code, details=details)


def _serialize(value):
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _integrity_code(exc: IntegrityError) -> str:
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code:
        return code
    text = str(orig)
    for marker, mapped in _SQLITE_INTEGRITY_CODES:
        if marker in text:
            return mapped
    return INTERNAL_ERROR


class DataGateway:
    """
    Policy-scoped access to the application tables.

    Parameters
    ----------
    user_id : str | UUID | None
        Caller identity; None means anonymous.
    evaluator : PolicyEvaluator, optional
        Policy evaluator, a default one is created when omitted.
    """

    def __init__(self, user_id=None, evaluator: PolicyEvaluator | None = None):
        self.user_id = user_id
        self.evaluator = evaluator or PolicyEvaluator()

    def table(self, name: str) -> "TableRequest":
        """Start a request against table ``name``."""
        return TableRequest(self, name)


class TableRequest:
    """
    Fluent request builder returned by `DataGateway.table`.

    Exactly one of ``select`` / ``insert`` / ``update`` / ``delete`` picks the
    command; ``eq`` / ``order`` / ``limit`` / ``single`` refine it, and
    ``execute`` runs it.
    """

    def __init__(self, gateway: DataGateway, name: str):
        self._gateway = gateway
        self._name = name
        self._operation = SELECT
        self._columns: list[str] | None = None
        self._count: str | None = None
        self._rows: list[dict] = []
        self._values: dict = {}
        self._filters: list[tuple[str, Any]] = []
        self._ordering: list[tuple[str, bool]] = []
        self._limit: int | None = None
        self._single = False

    # ------------------------------------------------------------------
    # builder
    # ------------------------------------------------------------------
    def select(self, columns: str = "*", count: str | None = None) -> "TableRequest":
        self._operation = SELECT
        self._columns = None if columns.strip() == "*" else [c.strip() for c in columns.split(",") if c.strip()]
        self._count = count
        return self

    def insert(self, rows) -> "TableRequest":
        self._operation = INSERT
        self._rows = [rows] if isinstance(rows, dict) else list(rows)
        return self

    def update(self, values: dict) -> "TableRequest":
        self._operation = UPDATE
        self._values = dict(values)
        return self

    def delete(self) -> "TableRequest":
        self._operation = DELETE
        return self

    def eq(self, column: str, value) -> "TableRequest":
        self._filters.append((column, value))
        return self

    def order(self, column: str, ascending: bool = True) -> "TableRequest":
        self._ordering.append((column, ascending))
        return self

    def limit(self, count: int) -> "TableRequest":
        self._limit = count
        return self

    def single(self) -> "TableRequest":
        self._single = True
        return self

    # ------------------------------------------------------------------
    # execution
    # ------------------------------------------------------------------
    def execute(self) -> GatewayResponse:
        """
        Run the request in its own transaction.

        Returns
        -------
        GatewayResponse
            ``data`` on success, ``error`` otherwise.
        """
        try:
            data, count = self._run()
            return GatewayResponse(data=data, count=count)
        except GatewayFailure as e:
            return GatewayResponse(error=e.error)
        except IntegrityError as e:
            logger.info(f"Integrity error on {self._operation} {self._name}: {e.orig}")
            return GatewayResponse(error=GatewayError(message=str(e.orig), code=_integrity_code(e)))
        except SQLAlchemyError as e:
            logger.error(f"Error in TableRequest.execute ({self._operation} {self._name}). Error: {e}")
            return GatewayResponse(error=GatewayError(message=str(e), code=INTERNAL_ERROR))

    @transactional
    def _run(self, session: Session = None):
        table = self._table()
        caller = self._gateway.evaluator.caller(self._gateway.user_id)

        if self._operation == SELECT:
            rows, count = self._select(session, table, caller)
        elif self._operation == INSERT:
            rows, count = self._insert(session, table, caller), None
        elif self._operation == UPDATE:
            rows, count = self._update(session, table, caller), None
        else:
            rows, count = self._delete(session, table, caller), None

        if self._single:
            if len(rows) != 1:
                raise GatewayFailure(
                    "JSON object requested, multiple (or no) rows returned",
                    SINGLE_ROW_EXPECTED,
                    f"The result contains {len(rows)} rows",
                )
            return rows[0], count
        return rows, count

    def _table(self) -> Table:
        table = metadata.tables.get(self._name)
        if table is None:
            raise GatewayFailure(f'relation "public.{self._name}" does not exist', UNDEFINED_TABLE)
        return table

    def _column(self, table: Table, name: str):
        if name not in table.c:
            raise GatewayFailure(f"column {table.name}.{name} does not exist", UNDEFINED_COLUMN)
        return table.c[name]

    def _coerce(self, table: Table, name: str, value):
        column = self._column(table, name)
        if value is None:
            return None
        if isinstance(column.type, Uuid) and not isinstance(value, uuid.UUID):
            try:
                return uuid.UUID(str(value))
            except ValueError:
                raise GatewayFailure(f'invalid input syntax for type uuid: "{value}"', INVALID_TEXT)
        if isinstance(column.type, SAEnum) and value not in column.type.enums:
            raise GatewayFailure(
                f'invalid input value for enum {column.type.name}: "{value}"', INVALID_TEXT
            )
        if isinstance(column.type, DateTime) and isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                raise GatewayFailure(f'invalid input syntax for type timestamp: "{value}"', INVALID_TEXT)
        return value

    def _where(self, table: Table, caller, operation: str):
        clauses = [self._gateway.evaluator.using(caller, table, operation)]
        for name, value in self._filters:
            clauses.append(self._column(table, name) == self._coerce(table, name, value))
        return and_(*clauses)

    def _rows_by_id(self, session: Session, table: Table, ids: list) -> list[dict]:
        if not ids:
            return []
        result = session.execute(select(table).where(table.c.id.in_(ids))).mappings().all()
        by_id = {row["id"]: row for row in result}
        return [self._to_dict(by_id[i]) for i in ids if i in by_id]

    def _to_dict(self, row, columns: list[str] | None = None) -> dict:
        names = columns or list(row.keys())
        return {name: _serialize(row[name]) for name in names}

    def _violation(self, table: Table) -> GatewayFailure:
        return GatewayFailure(
            f'new row violates row-level security policy for table "{table.name}"', RLS_VIOLATION
        )

    def _select(self, session: Session, table: Table, caller):
        columns = self._columns
        if columns:
            for name in columns:
                self._column(table, name)
        where = self._where(table, caller, SELECT)
        stmt = select(table).where(where)
        for name, ascending in self._ordering:
            column = self._column(table, name)
            stmt = stmt.order_by(column.asc() if ascending else column.desc())
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        rows = [self._to_dict(row, columns) for row in session.execute(stmt).mappings().all()]

        count = None
        if self._count:
            count = session.execute(select(func.count()).select_from(table).where(where)).scalar_one()
        return rows, count

    def _insert(self, session: Session, table: Table, caller) -> list[dict]:
        ids = []
        for raw in self._rows:
            row = {name: self._coerce(table, name, value) for name, value in raw.items()}
            row.setdefault("id", uuid.uuid4())
            if not self._gateway.evaluator.check(caller, table, row, session, INSERT):
                raise self._violation(table)
            session.execute(insert(table).values(row))
            ids.append(row["id"])
        return self._rows_by_id(session, table, ids)

    def _update(self, session: Session, table: Table, caller) -> list[dict]:
        values = {name: self._coerce(table, name, value) for name, value in self._values.items()}
        targets = session.execute(select(table).where(self._where(table, caller, UPDATE))).mappings().all()
        ids = []
        for current in targets:
            post_image = {**dict(current), **values}
            if not self._gateway.evaluator.check(caller, table, post_image, session, UPDATE):
                raise self._violation(table)
            ids.append(current["id"])
        if ids and values:
            session.execute(update(table).where(table.c.id.in_(ids)).values(values))
        return self._rows_by_id(session, table, ids)

    def _delete(self, session: Session, table: Table, caller) -> list[dict]:
        targets = session.execute(select(table).where(self._where(table, caller, DELETE))).mappings().all()
        rows = [self._to_dict(row) for row in targets]
        ids = [row["id"] for row in targets]
        if ids:
            session.execute(delete(table).where(table.c.id.in_(ids)))
        return rows
