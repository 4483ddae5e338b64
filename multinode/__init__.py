"""
multinode — run one query on many database nodes, read the results as one.

Usage:

    from multinode import MultiNodeDB, load_nodes

    db = MultiNodeDB(load_nodes())            # nodes from ~/.multinode.json

    q = db.multi_query("SELECT * FROM items") # every reachable node
    q.total_row_count()                        # → 42
    q.advance()                                # → [NodeSlot(id, reachable, row), ...]
    q.release()

    result, node_id = db.query("UPDATE ...")   # first reachable node only

Nodes that are down are skipped. Per-node failures land on that node's
outcome. Only "no node reachable" raises (NoNodeAvailable).
"""

from .config import load_nodes
from .cursor import FanOutResult, NodeOutcome, NodeSlot
from .db import MultiNodeDB
from .errors import MultiNodeError, NoNodeAvailable, NodeUnreachable
from .executor import dispatch, fan_out, fan_out_call, first_reachable
from .registry import NodeEntry, NodeRegistry, NodeSpec

__all__ = [
    "MultiNodeDB",
    "NodeRegistry",
    "NodeSpec",
    "NodeEntry",
    "FanOutResult",
    "NodeOutcome",
    "NodeSlot",
    "fan_out",
    "fan_out_call",
    "first_reachable",
    "dispatch",
    "load_nodes",
    "MultiNodeError",
    "NoNodeAvailable",
    "NodeUnreachable",
]
