"""Connector exceptions."""


class ConnectorError(Exception):
    """Base class for single-node connector failures."""


class StatementError(ConnectorError):
    """The node is up but rejected the statement."""

    def __init__(self, message, statement=None):
        super().__init__(message)
        self.statement = statement


class SchemaError(ConnectorError, ValueError):
    """The node's table has none of the columns a record supplies."""
