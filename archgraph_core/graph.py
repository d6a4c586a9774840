"""
Graph data structures for the architect/building view.

This module defines the read-only graph model produced by the builder:
- RelationRecord: one input row linking a subject to an object
- Node: an architect or a building, with the names of its relation partners
- Edge: one relation between two nodes (parallel edges are kept)
- Graph: container for nodes and edges with incidence lookups
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List

from .enums import Category

try:
    import networkx as nx

    HAS_NETWORKX = True
except ImportError:
    HAS_NETWORKX = False


@dataclass(frozen=True)
class RelationRecord:
    """
    A single relation between an architect and a building.

    Attributes:
        subject: Identifier of the architect
        subject_label: Display name of the architect
        object: Identifier of the building
        object_label: Display name of the building
    """

    subject: str
    subject_label: str
    object: str
    object_label: str


@dataclass
class Node:
    """
    A vertex of the bipartite graph.

    Attributes:
        id: Unique, stable identifier (the source URI)
        name: Display name
        category: ARCHITECT or BUILDING
        neighbor_labels: Display names of every relation partner, in record order
    """

    id: str
    """Unique identifier, stable for the lifetime of the view."""

    name: str
    """Display name taken from the first record that mentioned this id."""

    category: Category
    """Side of the relation this node appeared on first."""

    neighbor_labels: List[str] = field(default_factory=list)
    """Partner names; duplicates are kept when a relation recurs."""


@dataclass(frozen=True)
class Edge:
    """
    One relation record as a graph edge.

    Edges are directed in the source data (architect -> building) but drawn
    undirected. The position of an edge in `Graph.edges` is its identity.
    """

    source_id: str
    """Id of the subject (architect) node."""

    target_id: str
    """Id of the object (building) node."""


class Graph:
    """
    Container for nodes and edges of the architect/building graph.

    Attributes:
        nodes: Dictionary mapping node ids to Node objects, in first-appearance order
        edges: List of edges; the list index identifies the edge
        incidence: Dictionary mapping node ids to indices of their incident edges
    """

    def __init__(self):
        """Initialize an empty graph with no nodes or edges."""
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []
        self.incidence: Dict[str, List[int]] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def add_node(self, node: Node) -> Node:
        """
        Add a node unless its id is already known.

        A second node with an existing id is ignored and the stored node is
        returned unchanged.

        Args:
            node: Node object to add

        Returns:
            The node stored under `node.id`
        """
        existing = self.nodes.get(node.id)
        if existing is not None:
            return existing
        self.nodes[node.id] = node
        self.incidence.setdefault(node.id, [])
        return node

    def add_edge(self, edge: Edge) -> int:
        """
        Append an edge between existing nodes.

        Args:
            edge: Edge object defining the relation

        Returns:
            Index of the new edge

        Raises:
            AssertionError: If either endpoint is not a known node
        """
        assert (
            edge.source_id in self.nodes and edge.target_id in self.nodes
        ), "Both source and target nodes must exist"
        index = len(self.edges)
        self.edges.append(edge)
        # A self-relation is incident twice, matching its two neighbor labels
        self.incidence[edge.source_id].append(index)
        self.incidence[edge.target_id].append(index)
        return index

    def node_list(self) -> List[Node]:
        """Nodes in first-appearance order."""
        return list(self.nodes.values())

    def iter_edges(self) -> Iterator[tuple[int, Edge]]:
        return enumerate(self.edges)

    def incident_edges(self, node_id: str) -> List[int]:
        """Indices of every edge touching `node_id`, in edge order."""
        return list(self.incidence.get(node_id, []))

    def opposite(self, edge_index: int, node_id: str) -> str:
        """Return the endpoint of an edge that is not `node_id`."""
        edge = self.edges[edge_index]
        return edge.target_id if edge.source_id == node_id else edge.source_id

    def neighbors(self, node_id: str) -> List[str]:
        """
        Ids at the other end of every incident edge.

        Parallel edges yield the same neighbor more than once.
        """
        return [self.opposite(i, node_id) for i in self.incidence.get(node_id, [])]

    def degree(self, node_id: str) -> int:
        return len(self.incidence.get(node_id, []))

    def by_category(self, category: Category) -> List[Node]:
        return [n for n in self.nodes.values() if n.category == category]

    def to_networkx(self) -> "nx.MultiGraph":
        """
        Convert the graph to a NetworkX MultiGraph for export and analysis.

        Returns:
            MultiGraph with one edge per relation record (key = edge index)

        Raises:
            ImportError: If NetworkX is not available
        """
        if not HAS_NETWORKX:
            raise ImportError(
                "NetworkX is required for graph conversion. Install with: pip install networkx"
            )

        G = nx.MultiGraph()
        for node_id, node in self.nodes.items():
            G.add_node(
                node_id,
                name=node.name,
                category=node.category.name,
                connections=len(node.neighbor_labels),
            )
        for index, edge in enumerate(self.edges):
            G.add_edge(edge.source_id, edge.target_id, key=index)
        return G

    def export_graphml(self, filepath: str) -> None:
        """
        Export the graph to GraphML for Gephi, yEd or NetworkX.

        Args:
            filepath: Path where to save the GraphML file
        """
        nx_graph = self.to_networkx()
        nx.write_graphml(nx_graph, filepath)

    def validate_integrity(self) -> Dict[str, List[str]]:
        """
        Check the structural invariants of a built graph.

        Checks:
        - Every edge references existing nodes
        - Every node has one neighbor label per incident edge
        - Every edge joins an architect to a building

        Returns:
            Dictionary of validation issues by category (empty when valid)
        """
        issues: Dict[str, List[str]] = {
            "invalid_edges": [],
            "degree_mismatches": [],
            "category_issues": [],
        }

        for index, edge in enumerate(self.edges):
            for endpoint in (edge.source_id, edge.target_id):
                if endpoint not in self.nodes:
                    issues["invalid_edges"].append(
                        f"Edge {index} references non-existent node: {endpoint}"
                    )
            src = self.nodes.get(edge.source_id)
            dst = self.nodes.get(edge.target_id)
            if src is not None and dst is not None and src.category == dst.category:
                issues["category_issues"].append(
                    f"Edge {index} joins two {src.category.name} nodes: "
                    f"'{edge.source_id}' and '{edge.target_id}'"
                )

        for node_id, node in self.nodes.items():
            degree = self.degree(node_id)
            if len(node.neighbor_labels) != degree:
                issues["degree_mismatches"].append(
                    f"Node '{node_id}' has {len(node.neighbor_labels)} neighbor labels "
                    f"but degree {degree}"
                )

        return {k: v for k, v in issues.items() if v}

    def _find_connected_components(self) -> List[List[str]]:
        """Connected components, ignoring edge direction."""
        visited = set()
        components = []
        for node_id in self.nodes:
            if node_id in visited:
                continue
            component = []
            stack = [node_id]
            visited.add(node_id)
            while stack:
                current = stack.pop()
                component.append(current)
                for neighbor in self.neighbors(current):
                    if neighbor not in visited:
                        visited.add(neighbor)
                        stack.append(neighbor)
            components.append(sorted(component))
        return components

    def get_graph_statistics(self, top_hubs: int = 5) -> Dict[str, Any]:
        """
        Summary statistics for reports and the CLI.

        Args:
            top_hubs: Number of highest-degree nodes to list

        Returns:
            dict with node/edge counts, per-category counts, degree summary,
            number of connected components and the top hubs
        """
        degrees = {node_id: self.degree(node_id) for node_id in self.nodes}
        values = list(degrees.values())
        hubs = sorted(degrees.items(), key=lambda kv: (-kv[1], kv[0]))[:top_hubs]
        return {
            "nodes": len(self.nodes),
            "edges": len(self.edges),
            "architects": len(self.by_category(Category.ARCHITECT)),
            "buildings": len(self.by_category(Category.BUILDING)),
            "degree": {
                "min": min(values) if values else 0,
                "max": max(values) if values else 0,
                "mean": (sum(values) / len(values)) if values else 0.0,
            },
            "components": len(self._find_connected_components()),
            "hubs": [
                {"id": node_id, "name": self.nodes[node_id].name, "degree": degree}
                for node_id, degree in hubs
            ],
        }
