"""
Abstract single-node database connector.

Every connector implements the same surface:

    connect()        → bool            open the connection, never raises
    run(sql)         → CursorResult    buffered result, raises StatementError
    last_error()     → str             message from the last failure
    close()                            drop the connection
    ping()           → bool            connectivity check

plus field-level helpers (get_field, get_fields, get_records, add_record,
update_record) built on run().

Connectors handle connection, execution, and dialect.
They know nothing about other nodes — that stays in multinode/.
"""

import logging
from abc import ABC, abstractmethod

from .errors import SchemaError, StatementError

log = logging.getLogger(__name__)


class CursorResult:
    """
    Buffered result of one statement.

    Rows are fetched as soon as the statement runs (the way mysql_query
    buffers), so row_count() is known up front and does not depend on how
    many rows have been read.
    """

    def __init__(self, cursor):
        self.columns = [d[0] for d in cursor.description] if cursor.description else []
        self.affected = cursor.rowcount
        self.last_id = getattr(cursor, "lastrowid", None)
        if self.columns:
            self._rows = [dict(zip(self.columns, r)) for r in cursor.fetchall()]
        else:
            self._rows = []
        self._count = len(self._rows)
        self._pos = 0
        self.released = False
        cursor.close()

    def next_row(self) -> dict | None:
        """Return the next row, or None at end of results."""
        if self.released or self._pos >= self._count:
            return None
        row = self._rows[self._pos]
        self._pos += 1
        return row

    def row_count(self) -> int:
        return self._count

    def release(self):
        """Drop the buffered rows. Safe to call more than once."""
        if self.released:
            return
        self._rows = []
        self.released = True

    def __iter__(self):
        while True:
            row = self.next_row()
            if row is None:
                return
            yield row

    def __repr__(self):
        return f"<CursorResult rows={self._count} pos={self._pos}>"


class Connector(ABC):
    """
    Minimal DB-API backed connector.

    Subclasses implement two methods:
      _driver — import and return the DB-API module
      _open   — open a connection with that module

    Everything else (running statements, buffering, the field helpers)
    lives here.
    """

    placeholder = "%s"

    def __init__(self, *, timeout=10):
        self.timeout = timeout
        self.conn = None
        self.connected = False
        self._dbapi = None
        self._error = ""
        self._last = None
        self._columns = {}

    # ── Required ──────────────────────────────────────────────

    @abstractmethod
    def _driver(self):
        """Import and return the DB-API 2.0 module for this backend."""
        ...

    @abstractmethod
    def _open(self, dbapi):
        """Open and return a DB-API connection in autocommit mode."""
        ...

    # ── Connection ────────────────────────────────────────────

    def connect(self) -> bool:
        """
        Open the connection. Returns True if the node is reachable.

        Must not raise — a missing driver, refused connection or bad
        credentials all leave connected=False and set last_error().
        """
        if self.connected:
            return True
        try:
            self._dbapi = self._driver()
            self.conn = self._open(self._dbapi)
        except Exception as e:
            self._error = str(e)
            self.connected = False
            log.warning("connect failed for %r: %s", self, e)
        else:
            self._error = ""
            self.connected = True
        return self.connected

    def close(self):
        if self.conn is not None:
            try:
                self.conn.close()
            except self._dbapi.Error as e:
                log.debug("close failed for %r: %s", self, e)
        self.conn = None
        self.connected = False

    def last_error(self) -> str:
        return self._error

    def ping(self) -> bool:
        """Run SELECT 1. Must not raise — returns False on any failure."""
        if not self.connected:
            return False
        try:
            return self.run("SELECT 1").next_row() is not None
        except StatementError:
            return False

    # ── Execution ─────────────────────────────────────────────

    def run(self, sql, params=None) -> CursorResult:
        """
        Execute one statement and return its buffered result.

        Raises StatementError if the node rejects it. params are bound by
        the driver using this connector's placeholder style.
        """
        if not self.connected:
            raise StatementError(f"not connected: {self!r}", statement=sql)
        try:
            cur = self.conn.cursor()
        except self._dbapi.Error as e:
            # no cursor means the connection itself is gone
            self._lost(e)
            raise StatementError(str(e), statement=sql) from e
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, tuple(params))
            result = CursorResult(cur)
        except self._dbapi.Error as e:
            if isinstance(e, self._dbapi.InterfaceError):
                self._lost(e)
            else:
                self._error = str(e)
            try:
                cur.close()
            except self._dbapi.Error:
                pass
            raise StatementError(str(e), statement=sql) from e
        self._last = result
        return result

    def _lost(self, e):
        self._error = str(e)
        self.connected = False
        log.warning("connection lost for %r: %s", self, e)

    def rows_affected(self) -> int:
        """Rows touched by the last INSERT/UPDATE/DELETE."""
        return self._last.affected if self._last else 0

    def last_id(self):
        """Last auto-increment id generated on this connection."""
        return self._last.last_id if self._last else None

    def describe(self, table) -> list[str]:
        """Column names of a table. Cached per connector."""
        if table not in self._columns:
            self._columns[table] = self.run(f"SELECT * FROM {table} WHERE 1=0").columns
        return self._columns[table]

    # ── Dialect helpers ───────────────────────────────────────

    def select_sql(self, fields, table, where="", limit=0) -> str:
        sql = f"SELECT {fields} FROM {table}"
        if where:
            sql += f" WHERE {where}"
        if limit and limit > 0:
            sql += f" LIMIT {int(limit)}"
        return sql

    # ── Field helpers ─────────────────────────────────────────

    def get_field(self, field, table, where="", params=None):
        """Value of one field from the first matching record, or None."""
        row = self.run(self.select_sql(field, table, where, 1), params).next_row()
        if row is None:
            return None
        return next(iter(row.values()))

    def get_fields(self, fields, table, where="", params=None) -> dict | None:
        """First matching record as {field: value}, or None."""
        return self.run(self.select_sql(fields, table, where, 1), params).next_row()

    def get_records(self, fields, table, where="", params=None, key_field="",
                    limit=0, callback=None):
        """
        Matching records as a list, or a dict keyed by key_field.

        callback, if given, is applied to each row before it is stored.
        Returns None when nothing matches.
        """
        q = self.run(self.select_sql(fields, table, where, limit), params)
        if q.row_count() == 0:
            return None
        results = {} if key_field else []
        for row in q:
            value = callback(row) if callback else row
            if key_field:
                results[row[key_field]] = value
            else:
                results.append(value)
        q.release()
        return results

    def add_record(self, record, table):
        """
        Insert the keys of record that are real columns of table.

        Returns last_id().
        """
        cols = [c for c in self.describe(table) if c in record]
        if not cols:
            raise SchemaError(f"no columns of {table} in record")
        marks = ", ".join(self.placeholder for _ in cols)
        self.run(
            f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({marks})",
            [record[c] for c in cols],
        )
        return self.last_id()

    def update_record(self, record, table, where, params=None) -> bool:
        """Update the keys of record that are real columns of table."""
        cols = [c for c in self.describe(table) if c in record]
        if not cols:
            raise SchemaError(f"no columns of {table} in record")
        assignments = ", ".join(f"{c} = {self.placeholder}" for c in cols)
        values = [record[c] for c in cols] + list(params or ())
        self.run(f"UPDATE {table} SET {assignments} WHERE {where}", values)
        return True

    # ── Repr ──────────────────────────────────────────────────

    def __repr__(self):
        return f"<{self.__class__.__name__}>"
