"""
MultiNodeDB — database access over a set of nodes.

Useful when an application is spread over several nodes, each with its
own local database.

A multi operation runs on every reachable node and returns one outcome
per node. A plain operation runs on the first reachable node only,
walking the nodes in the order they were added, and also returns that
node's id.

    db = MultiNodeDB([
        {"id": "east", "host": "east.db", "user": "app", "database": "shop"},
        {"id": "west", "host": "west.db", "user": "app", "database": "shop"},
    ])

    with db.multi_query("SELECT id, name FROM items") as q:
        print(q.total_row_count())
        for merged in q:
            ...

    order_id, node_id = db.add_record({"sku": "A-1", "qty": 2}, "orders")
"""

import logging
from typing import Any, Callable, Iterable, Optional

from connectors import Connector

from . import executor
from .cursor import FanOutResult, NodeOutcome
from .errors import NoNodeAvailable
from .registry import NodeEntry, NodeRegistry, NodeSpec, default_connector

log = logging.getLogger(__name__)


class MultiNodeDB:

    def __init__(self, nodes: Optional[Iterable] = None,
                 connector_factory: Callable[[NodeSpec], Connector] = default_connector):
        self.registry = NodeRegistry(nodes, connector_factory=connector_factory)

    # ── Nodes ─────────────────────────────────────────────────

    def add_nodes(self, nodes: Iterable):
        self.registry.register(nodes)

    def nodes(self) -> list[NodeEntry]:
        return self.registry.nodes()

    def node_by_id(self, node_id) -> Optional[NodeEntry]:
        return self.registry.find_by_id(node_id)

    def node_by_index(self, i: int) -> Optional[NodeEntry]:
        return self.registry.find_by_index(i)

    def connect_node(self, i: int) -> bool:
        return self.registry.ensure_connected(i)

    def reset_node(self, i: int):
        self.registry.reset(i)

    # ── Multi (every reachable node) ──────────────────────────

    def _multi(self, op) -> list[NodeOutcome]:
        outcomes = executor.fan_out_call(self.registry, op)
        if not any(o.reachable for o in outcomes):
            raise NoNodeAvailable(f"none of {len(self.registry)} nodes is reachable")
        return outcomes

    def multi_query(self, sql: str, params=None) -> FanOutResult:
        """Run sql on every reachable node. Raises NoNodeAvailable."""
        q = executor.fan_out(self.registry, sql, params)
        if not q.executed:
            raise NoNodeAvailable(f"none of {len(self.registry)} nodes is reachable")
        return q

    def multi_get_field(self, field, table, where="", params=None) -> list[NodeOutcome]:
        return self._multi(lambda c: c.get_field(field, table, where, params))

    def multi_get_fields(self, fields, table, where="", params=None) -> list[NodeOutcome]:
        return self._multi(lambda c: c.get_fields(fields, table, where, params))

    def multi_get_records(self, fields, table, where="", params=None, key_field="",
                          limit=0, callback=None) -> list[NodeOutcome]:
        return self._multi(lambda c: c.get_records(
            fields, table, where, params, key_field=key_field, limit=limit, callback=callback))

    def multi_add_record(self, record: dict, table) -> list[NodeOutcome]:
        return self._multi(lambda c: c.add_record(record, table))

    def multi_update_record(self, record: dict, table, where, params=None) -> list[NodeOutcome]:
        return self._multi(lambda c: c.update_record(record, table, where, params))

    # ── Single (first reachable node) ─────────────────────────

    def query(self, sql: str, params=None) -> tuple[Any, Any]:
        """Run sql on the first reachable node. Returns (result, node_id)."""
        return executor.dispatch(self.registry, lambda c: c.run(sql, params))

    def get_field(self, field, table, where="", params=None) -> tuple[Any, Any]:
        return executor.dispatch(self.registry, lambda c: c.get_field(field, table, where, params))

    def get_fields(self, fields, table, where="", params=None) -> tuple[Any, Any]:
        return executor.dispatch(self.registry, lambda c: c.get_fields(fields, table, where, params))

    def get_records(self, fields, table, where="", params=None, key_field="",
                    limit=0, callback=None) -> tuple[Any, Any]:
        return executor.dispatch(self.registry, lambda c: c.get_records(
            fields, table, where, params, key_field=key_field, limit=limit, callback=callback))

    def add_record(self, record: dict, table) -> tuple[Any, Any]:
        return executor.dispatch(self.registry, lambda c: c.add_record(record, table))

    def update_record(self, record: dict, table, where, params=None) -> tuple[Any, Any]:
        return executor.dispatch(self.registry, lambda c: c.update_record(record, table, where, params))

    # ── Lifecycle ─────────────────────────────────────────────

    def close(self):
        self.registry.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self):
        return f"<MultiNodeDB nodes={len(self.registry)}>"
