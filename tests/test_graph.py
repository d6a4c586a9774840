"""
Unit tests for the Graph class and related data structures.

This module tests Node, Edge and Graph, focusing on idempotent node insertion,
incidence bookkeeping, NetworkX export, statistics and integrity validation.
"""

import pytest

from archgraph_core.enums import Category
from archgraph_core.graph import Edge, Graph, Node, RelationRecord


def build_small_graph() -> Graph:
    g = Graph()
    g.add_node(Node('A', 'Arkitekt A', Category.ARCHITECT, ['Hus 1', 'Hus 2']))
    g.add_node(Node('B1', 'Hus 1', Category.BUILDING, ['Arkitekt A']))
    g.add_node(Node('B2', 'Hus 2', Category.BUILDING, ['Arkitekt A']))
    g.add_edge(Edge('A', 'B1'))
    g.add_edge(Edge('A', 'B2'))
    return g


class TestNode:
    """Test Node data structure initialization."""

    def test_node_default_initialization(self):
        node = Node('q1', 'Name', Category.ARCHITECT)

        assert node.id == 'q1'
        assert node.name == 'Name'
        assert node.category == Category.ARCHITECT
        assert node.neighbor_labels == []

    def test_neighbor_labels_not_shared(self):
        """Each node gets its own label list."""
        a = Node('a', 'A', Category.ARCHITECT)
        b = Node('b', 'B', Category.BUILDING)
        a.neighbor_labels.append('x')
        assert b.neighbor_labels == []


class TestEdge:
    def test_edge_is_immutable(self):
        edge = Edge('A', 'B1')
        with pytest.raises(Exception):
            edge.source_id = 'other'  # type: ignore[misc]

    def test_parallel_edges_compare_equal(self):
        assert Edge('A', 'B1') == Edge('A', 'B1')


class TestRelationRecord:
    def test_fields(self):
        rec = RelationRecord('A', 'Arkitekt A', 'B1', 'Hus 1')
        assert rec.subject == 'A'
        assert rec.object_label == 'Hus 1'


class TestGraph:
    """Test Graph container operations."""

    def test_empty_graph(self):
        g = Graph()
        assert len(g) == 0
        assert g.edges == []
        assert g.node_list() == []

    def test_add_node_is_idempotent(self):
        """A second node with the same id is ignored, not an overwrite."""
        g = Graph()
        first = g.add_node(Node('A', 'First', Category.ARCHITECT))
        second = g.add_node(Node('A', 'Second', Category.BUILDING))

        assert second is first
        assert g.nodes['A'].name == 'First'
        assert g.nodes['A'].category == Category.ARCHITECT
        assert len(g) == 1

    def test_add_edge_requires_existing_nodes(self):
        g = Graph()
        g.add_node(Node('A', 'A', Category.ARCHITECT))
        with pytest.raises(AssertionError):
            g.add_edge(Edge('A', 'missing'))

    def test_add_edge_returns_index(self):
        g = build_small_graph()
        assert g.add_edge(Edge('A', 'B1')) == 2

    def test_incidence_and_degree(self):
        g = build_small_graph()
        assert g.incident_edges('A') == [0, 1]
        assert g.incident_edges('B1') == [0]
        assert g.degree('A') == 2
        assert g.degree('B2') == 1
        assert g.degree('unknown') == 0

    def test_neighbors_and_opposite(self):
        g = build_small_graph()
        assert g.neighbors('A') == ['B1', 'B2']
        assert g.neighbors('B2') == ['A']
        assert g.opposite(0, 'A') == 'B1'
        assert g.opposite(0, 'B1') == 'A'

    def test_parallel_edges_are_kept(self):
        g = build_small_graph()
        g.add_edge(Edge('A', 'B1'))
        assert len(g.edges) == 3
        assert g.neighbors('B1') == ['A', 'A']

    def test_self_relation_counts_twice(self):
        g = Graph()
        g.add_node(Node('X', 'X', Category.ARCHITECT))
        g.add_edge(Edge('X', 'X'))
        assert g.degree('X') == 2

    def test_node_order_is_insertion_order(self):
        g = build_small_graph()
        assert [n.id for n in g.node_list()] == ['A', 'B1', 'B2']

    def test_by_category(self):
        g = build_small_graph()
        assert [n.id for n in g.by_category(Category.BUILDING)] == ['B1', 'B2']


class TestGraphValidation:
    def test_valid_graph_has_no_issues(self):
        assert build_small_graph().validate_integrity() == {}

    def test_degree_mismatch_reported(self):
        g = build_small_graph()
        g.nodes['A'].neighbor_labels.append('extra')
        issues = g.validate_integrity()
        assert 'degree_mismatches' in issues
        assert any("'A'" in msg for msg in issues['degree_mismatches'])

    def test_same_category_edge_reported(self):
        g = build_small_graph()
        g.add_node(Node('A2', 'Other', Category.ARCHITECT))
        g.add_edge(Edge('A', 'A2'))
        issues = g.validate_integrity()
        assert 'category_issues' in issues

    def test_dangling_edge_reported(self):
        g = build_small_graph()
        g.edges.append(Edge('A', 'ghost'))
        issues = g.validate_integrity()
        assert any('ghost' in msg for msg in issues['invalid_edges'])


class TestGraphStatistics:
    def test_statistics(self):
        stats = build_small_graph().get_graph_statistics()
        assert stats['nodes'] == 3
        assert stats['edges'] == 2
        assert stats['architects'] == 1
        assert stats['buildings'] == 2
        assert stats['degree']['max'] == 2
        assert stats['degree']['min'] == 1
        assert stats['degree']['mean'] == pytest.approx(4 / 3)
        assert stats['components'] == 1
        assert stats['hubs'][0]['id'] == 'A'

    def test_components_counted(self):
        g = build_small_graph()
        g.add_node(Node('C', 'C', Category.ARCHITECT))
        g.add_node(Node('D', 'D', Category.BUILDING))
        g.add_edge(Edge('C', 'D'))
        assert g.get_graph_statistics()['components'] == 2

    def test_empty_statistics(self):
        stats = Graph().get_graph_statistics()
        assert stats['nodes'] == 0
        assert stats['degree']['mean'] == 0.0
        assert stats['hubs'] == []


class TestNetworkXExport:
    def test_to_networkx(self):
        pytest.importorskip('networkx')
        g = build_small_graph()
        g.add_edge(Edge('A', 'B1'))
        G = g.to_networkx()

        assert G.number_of_nodes() == 3
        assert G.number_of_edges() == 3  # parallel edge preserved
        assert G.nodes['A']['category'] == 'ARCHITECT'
        assert G.nodes['A']['connections'] == 2
        assert G.nodes['B1']['name'] == 'Hus 1'

    def test_export_graphml(self, tmp_path):
        nx = pytest.importorskip('networkx')
        path = tmp_path / 'graph.graphml'
        build_small_graph().export_graphml(str(path))

        loaded = nx.read_graphml(str(path))
        assert set(loaded.nodes) == {'A', 'B1', 'B2'}
        assert loaded.nodes['B2']['category'] == 'BUILDING'
