import json
import sqlite3
import time

import pytest

from connectors import StatementError
from multinode import MultiNodeDB, NodeRegistry, NodeSpec


class FakeResult:
    def __init__(self, rows):
        self._rows = list(rows)
        self.pos = 0
        self.release_calls = 0

    def next_row(self):
        if self.pos >= len(self._rows):
            return None
        row = self._rows[self.pos]
        self.pos += 1
        return row

    def row_count(self):
        return len(self._rows)

    def release(self):
        self.release_calls += 1


class FakeConnector:
    def __init__(self, up=True, rows=(), fail=False, delay=0):
        self.up = up
        self.rows = rows
        self.fail = fail
        self.delay = delay
        self.connected = False
        self.closed = False
        self.connect_calls = 0
        self.statements = []
        self.results = []

    def connect(self):
        self.connect_calls += 1
        time.sleep(self.delay)
        self.connected = self.up
        return self.connected

    def run(self, sql, params=None):
        self.statements.append(sql)
        if self.fail:
            raise StatementError("table 'items' doesn't exist", statement=sql)
        result = FakeResult(self.rows)
        self.results.append(result)
        return result

    def last_error(self):
        return "" if self.up else "connection refused"

    def close(self):
        self.connected = False
        self.closed = True


class FakeCluster:
    """
    Nodes described by dicts:
    {"id": ..., "up": bool, "rows": [...], "fail": bool, "delay": seconds}.

    Every connector the registry creates is kept in .created[index].
    """

    def __init__(self, *nodes):
        self.behavior = [{"up": True, "rows": [], "fail": False, "delay": 0, **n} for n in nodes]
        self.specs = [NodeSpec(database=f"db{i}", id=n.get("id")) for i, n in enumerate(nodes)]
        self.created = {}

    def factory(self, spec):
        i = int(spec.database[2:])
        b = self.behavior[i]
        conn = FakeConnector(up=b["up"], rows=b["rows"], fail=b["fail"], delay=b["delay"])
        self.created.setdefault(i, []).append(conn)
        return conn

    def conn(self, i):
        return self.created[i][-1]

    def registry(self):
        return NodeRegistry(self.specs, connector_factory=self.factory)

    def db(self):
        return MultiNodeDB(self.specs, connector_factory=self.factory)


@pytest.fixture
def cluster():
    return FakeCluster


@pytest.fixture
def sqlite_node(tmp_path):
    """Create a SQLite node file with an items table; returns its path."""

    def make(name, rows=()):
        path = tmp_path / f"{name}.db"
        conn = sqlite3.connect(path)
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT, qty INTEGER)")
        conn.executemany("INSERT INTO items (id, name, qty) VALUES (?, ?, ?)", rows)
        conn.commit()
        conn.close()
        return str(path)

    return make


@pytest.fixture
def node_config(tmp_path):
    """Write a ~/.multinode.json style file; returns its path."""

    def write(cfg):
        path = tmp_path / "multinode.json"
        path.write_text(json.dumps(cfg))
        return str(path)

    return write
