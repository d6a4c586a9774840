"""
Error types raised by the graph view.

- DataLoadError: the relation data could not be read or parsed
- MalformedRecord: a relation record lacks one of its four fields
- InvalidPinTarget: a position lookup referenced an unknown node id
"""

from __future__ import annotations

from typing import Sequence


class ArchGraphError(Exception):
    """Base class for all errors raised by archgraph_core."""


class DataLoadError(ArchGraphError):
    """Relation data could not be fetched or parsed. Terminal for the session."""


class MalformedRecord(ArchGraphError):
    """
    A relation record is missing required fields.

    Attributes:
        index: Position of the offending record in the input sequence
        missing: Names of the fields that were absent or None
    """

    def __init__(self, index: int, missing: Sequence[str]):
        self.index = index
        self.missing = tuple(missing)
        super().__init__(
            f"record {index} is missing required field(s): {', '.join(self.missing)}"
        )


class InvalidPinTarget(ArchGraphError, KeyError):
    """A node id unknown to the layout engine was used as a pin target."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"unknown node id: {node_id!r}")

    def __str__(self) -> str:
        return self.args[0]
