"""
Fan-out and single-target execution over a NodeRegistry.

fan_out       run a statement on every reachable node, keep every outcome
fan_out_call  same loop for any per-connection operation
dispatch      run an operation on the first reachable node only

A node that is down is skipped; a node whose statement fails keeps its
error on its outcome. Neither aborts the loop. Only "no node reachable"
is an operation-level failure.
"""

import logging
from typing import Any, Callable

from connectors import Connector

from .cursor import FanOutResult, NodeOutcome
from .errors import NoNodeAvailable, NodeUnreachable
from .registry import NodeEntry, NodeRegistry

log = logging.getLogger(__name__)


def _unreachable(entry: NodeEntry) -> NodeOutcome:
    reason = entry.connection.last_error() if entry.connection is not None else entry.error
    return NodeOutcome(entry.id, entry.index, False, error=NodeUnreachable(entry.id, reason))


def fan_out_call(registry: NodeRegistry, op: Callable[[Connector], Any]) -> list[NodeOutcome]:
    """
    Call op(connection) on every reachable node, in registry order.

    Returns exactly one outcome per registered node. Any exception raised
    by op (a rejected statement, a schema mismatch, a failing row callback)
    is recorded on that node's outcome and the loop moves on.
    """
    outcomes = []
    for entry in registry.nodes():
        if not registry.ensure_connected(entry.index):
            outcomes.append(_unreachable(entry))
            continue
        try:
            result = op(entry.connection)
        except Exception as e:
            log.warning("node %r: %s: %s", entry.id, type(e).__name__, e)
            outcomes.append(NodeOutcome(entry.id, entry.index, True, error=e))
        else:
            outcomes.append(NodeOutcome(entry.id, entry.index, True, result=result))
    return outcomes


def fan_out(registry: NodeRegistry, statement: str, params=None) -> FanOutResult:
    """Run statement on every reachable node and wrap the handles."""
    log.debug("fan-out over %d nodes: %s", len(registry), statement[:300])
    result = FanOutResult(fan_out_call(registry, lambda conn: conn.run(statement, params)))
    if not result.executed:
        log.warning("fan-out found no reachable node")
    return result


def first_reachable(registry: NodeRegistry) -> NodeEntry:
    """Lowest-index reachable node. Raises NoNodeAvailable."""
    for entry in registry.nodes():
        if registry.ensure_connected(entry.index):
            return entry
    raise NoNodeAvailable(f"none of {len(registry)} nodes is reachable")


def dispatch(registry: NodeRegistry, op: Callable[[Connector], Any]) -> tuple[Any, Any]:
    """
    Call op on the first reachable node and return (result, node_id).

    Errors from op propagate: the operation is never retried on a later
    node, so writes keep their affinity to the first node.
    """
    entry = first_reachable(registry)
    log.debug("dispatching to node %r", entry.id)
    return op(entry.connection), entry.id
