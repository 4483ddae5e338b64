"""
SQLite connector — stdlib sqlite3.

The database is a file path. Can be anywhere reachable by the OS:
local disk, NFS mount, cloud drive, USB stick.

The file is opened read-write but never created: a missing file means
the node is down, not that it should start out empty.
"""

import os
import sqlite3

from .base import Connector


class SQLiteConnector(Connector):
    """SQLite via the sqlite3 module."""

    placeholder = "?"

    def __init__(self, *, db_path, timeout=10):
        super().__init__(timeout=timeout)
        if not db_path:
            raise ValueError("SQLiteConnector requires 'db_path'")
        self.db_path = db_path if db_path == ":memory:" else os.path.expanduser(db_path)

    def _driver(self):
        return sqlite3

    def _open(self, dbapi):
        if self.db_path == ":memory:":
            return dbapi.connect(":memory:", timeout=self.timeout, isolation_level=None)
        return dbapi.connect(
            f"file:{self.db_path}?mode=rw", uri=True,
            timeout=self.timeout, isolation_level=None,
        )

    def __repr__(self):
        return f"<SQLiteConnector {self.db_path}>"
