"""Multi-node exceptions."""


class MultiNodeError(Exception):
    """Base class for multi-node failures."""


class NodeUnreachable(MultiNodeError):
    """
    A node could not be connected.

    Recorded on that node's outcome, never raised by a fan-out: a down node
    is skipped, not fatal.
    """

    def __init__(self, node_id, reason=""):
        super().__init__(f"node {node_id!r} unreachable" + (f": {reason}" if reason else ""))
        self.node_id = node_id
        self.reason = reason


class NoNodeAvailable(MultiNodeError):
    """No registered node was reachable for an operation that needs one."""
