"""
Graph builder for architect/building relation records.

This module turns a flat sequence of relation records into a `Graph` of
`Node` and `Edge` objects. It also reads the SPARQL JSON results format the
data is published in:

{
  "head": {"vars": ["node", "nodeLabel", "linkedNode", "linkedNodeLabel"]},
  "results": {
    "bindings": [
      {
        "node": {"type": "uri", "value": "http://www.wikidata.org/entity/Q1"},
        "nodeLabel": {"type": "literal", "value": "Arkitekt A"},
        "linkedNode": {"type": "uri", "value": "http://www.wikidata.org/entity/Q2"},
        "linkedNodeLabel": {"type": "literal", "value": "Hus 1"}
      }
    ]
  }
}

Notes:
- `node` is the architect (subject), `linkedNode` the building (object).
- The build is all-or-nothing: one malformed record aborts it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Dict, Iterable, List

from .enums import Category
from .errors import DataLoadError, MalformedRecord
from .graph import Edge, Graph, Node, RelationRecord

logger = logging.getLogger(__name__)

RECORD_FIELDS = ("subject", "subject_label", "object", "object_label")

# SPARQL variable name -> RelationRecord field
BINDING_FIELDS = {
    "node": "subject",
    "nodeLabel": "subject_label",
    "linkedNode": "object",
    "linkedNodeLabel": "object_label",
}


def _coerce_record(raw: Any, index: int) -> RelationRecord:
    if isinstance(raw, Mapping):
        values = {name: raw.get(name) for name in RECORD_FIELDS}
    elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes, RelationRecord)):
        # positional (subject, subject_label, object, object_label)
        if len(raw) != len(RECORD_FIELDS):
            missing = list(RECORD_FIELDS[len(raw):]) or list(RECORD_FIELDS)
            raise MalformedRecord(index, missing)
        values = dict(zip(RECORD_FIELDS, raw))
    else:
        values = {name: getattr(raw, name, None) for name in RECORD_FIELDS}
    missing = [name for name, value in values.items() if value is None]
    if missing:
        raise MalformedRecord(index, missing)
    if isinstance(raw, RelationRecord):
        return raw
    return RelationRecord(**{name: str(value) for name, value in values.items()})


def _ensure_node(g: Graph, node_id: str, name: str, category: Category) -> Node:
    if node_id in g.nodes:
        return g.nodes[node_id]
    return g.add_node(Node(node_id, name, category))


def build(records: Iterable[Any]) -> Graph:
    """
    Build the architect/building graph from relation records.

    For each record, in order: resolve or create the subject (architect) and
    object (building) nodes, append one edge, then record each side's name in
    the other's `neighbor_labels`.

    Args:
        records: `RelationRecord` objects, mappings with the keys
            subject, subject_label, object, object_label, or 4-tuples in
            that order

    Returns:
        Graph: nodes in first-appearance order, one edge per record

    Raises:
        MalformedRecord: If any record lacks a field; no graph is returned
    """
    g = Graph()
    count = 0
    for index, raw in enumerate(records):
        try:
            rec = _coerce_record(raw, index)
        except MalformedRecord:
            logger.error("Aborting graph build: malformed record at index %d", index)
            raise

        architect = _ensure_node(g, rec.subject, rec.subject_label, Category.ARCHITECT)
        building = _ensure_node(g, rec.object, rec.object_label, Category.BUILDING)
        g.add_edge(Edge(architect.id, building.id))

        architect.neighbor_labels.append(rec.object_label)
        building.neighbor_labels.append(rec.subject_label)
        count += 1

    logger.info("Built graph: %d nodes, %d edges from %d records", len(g.nodes), len(g.edges), count)
    return g


def records_from_bindings(payload: Dict[str, Any]) -> List[RelationRecord]:
    """
    Convert a SPARQL JSON results document into relation records.

    Args:
        payload: Parsed JSON document

    Returns:
        List of RelationRecord in binding order

    Raises:
        DataLoadError: If the document has no results.bindings list
        MalformedRecord: If a binding lacks one of the four variables
    """
    try:
        bindings = payload["results"]["bindings"]
    except (KeyError, TypeError) as exc:
        raise DataLoadError("document has no results.bindings") from exc
    if not isinstance(bindings, list):
        raise DataLoadError("results.bindings is not a list")

    records: List[RelationRecord] = []
    for index, binding in enumerate(bindings):
        values: Dict[str, str] = {}
        missing: List[str] = []
        for var, name in BINDING_FIELDS.items():
            cell = binding.get(var) if isinstance(binding, Mapping) else None
            value = cell.get("value") if isinstance(cell, Mapping) else None
            if value is None:
                missing.append(var)
            else:
                values[name] = str(value)
        if missing:
            logger.error("Binding %d lacks variable(s) %s", index, ", ".join(missing))
            raise MalformedRecord(index, missing)
        records.append(RelationRecord(**values))
    return records


def load_bindings(path: str) -> Dict[str, Any]:
    """
    Read a SPARQL JSON results file.

    Raises:
        DataLoadError: On any I/O or JSON decoding error
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.error("Failed to load relation data from %s: %s", path, exc)
        raise DataLoadError(f"could not load {path}: {exc}") from exc


def build_from_json(text: str) -> Graph:
    """Build from SPARQL JSON results text."""
    try:
        payload = json.loads(text)
    except ValueError as exc:
        raise DataLoadError(f"invalid JSON: {exc}") from exc
    return build(records_from_bindings(payload))


def build_from_file(path: str) -> Graph:
    """Build from a SPARQL JSON results file path."""
    return build(records_from_bindings(load_bindings(path)))
