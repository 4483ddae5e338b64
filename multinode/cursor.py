"""
Fan-out results and the merged cursor over them.

A FanOutResult holds one NodeOutcome per registered node, in registry
order. advance() walks every node's result in lockstep and returns one
merged row per call: each node's next row, until all are exhausted.

    with db.multi_query("SELECT id, name FROM items") as q:
        for merged in q:
            for slot in merged:
                print(slot.id, slot.row)
"""

import logging
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional

log = logging.getLogger(__name__)


@dataclass
class NodeOutcome:
    """
    What one node did for one fan-out operation.

    reachable=False              node down, error is NodeUnreachable
    reachable=True, error set    node up, statement failed
    reachable=True, error None   result holds the handle (or helper value)
    """

    id: Any
    index: int
    reachable: bool
    result: Any = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.reachable and self.error is None


class NodeSlot(NamedTuple):
    """One node's place in a merged row."""

    id: Any
    reachable: bool
    row: Optional[dict]


class FanOutResult:
    """Per-node result handles of one fan-out query, iterated in lockstep."""

    def __init__(self, outcomes: list[NodeOutcome]):
        self.outcomes = outcomes
        self.executed = any(o.reachable for o in outcomes)
        self._exhausted = False
        self._released = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def _handles(self):
        for o in self.outcomes:
            yield o, (o.result if o.ok else None)

    def advance(self, expanded: bool = False) -> Optional[list[NodeSlot]]:
        """
        Next merged row, or None once every node is exhausted.

        Compact mode (default) only includes nodes that produced a row on
        this call; expanded mode includes every node. Exhaustion is terminal.
        """
        if self._exhausted:
            return None
        produced = False
        merged = []
        for o, handle in self._handles():
            row = handle.next_row() if handle is not None else None
            if row is not None:
                produced = True
            if row is not None or expanded:
                merged.append(NodeSlot(o.id, o.reachable, row))
        if not produced:
            self._exhausted = True
            return None
        return merged

    def rows(self, expanded: bool = False):
        """Yield merged rows until exhaustion."""
        while True:
            merged = self.advance(expanded)
            if merged is None:
                return
            yield merged

    def __iter__(self):
        return self.rows()

    def total_row_count(self, by_node: Optional[list] = None) -> int:
        """
        Sum of every node's own row count. Does not consume rows.

        If by_node is a list, (id, count) is appended for each node;
        nodes without a result count 0.
        """
        total = 0
        for o, handle in self._handles():
            n = handle.row_count() if handle is not None else 0
            total += n
            if by_node is not None:
                by_node.append((o.id, n))
        return total

    def release(self):
        """Release every node's result handle. Safe to call more than once."""
        if self._released:
            return
        for o, handle in self._handles():
            if handle is not None:
                handle.release()
        self._released = True
        log.debug("released fan-out result over %d nodes", len(self.outcomes))

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.release()

    def __repr__(self):
        up = sum(1 for o in self.outcomes if o.reachable)
        return f"<FanOutResult nodes={len(self.outcomes)} reachable={up} exhausted={self._exhausted}>"
