"""Exceptions raised by graphscan.

All errors are fatal and deterministic: the same input raises the same error
on every call, so nothing here is meant to be retried.
"""

from __future__ import annotations

from typing import Any


class ScanError(Exception):
    """Base class for every graphscan error."""


class UnknownNodeError(ScanError, KeyError):
    """An edge or a query references a node id absent from the node list."""

    def __init__(self, node_id: Any, context: str | None = None) -> None:
        self.node_id = node_id
        self.context = context
        message = f"Unknown node: {node_id!r}"
        if context:
            message = f"{message} ({context})"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class InvalidParameterError(ScanError, ValueError):
    """epsilon or mu is outside its valid range."""


class DoubleClassificationError(ScanError, RuntimeError):
    """A node was classified twice (cluster member, hub or outlier).

    Never raised by a correct clustering run; seeing it means the caller
    drove a ClusterAssignments store by hand and broke its invariant.
    """

    def __init__(self, node_id: Any, current: str, attempted: str) -> None:
        self.node_id = node_id
        self.current = current
        self.attempted = attempted
        super().__init__(
            f"Node {node_id!r} is already classified as {current}, cannot mark it as {attempted}"
        )
