"""
Tests for the quadtree used by the charge and collision forces.
"""

from archgraph_core.quadtree import QuadTree


def test_empty_tree_has_no_root():
    tree = QuadTree([])
    assert tree.root is None
    assert tree.size == 0
    assert tree.leaves() == []

    visited = []
    tree.visit(lambda q: visited.append(q))
    tree.visit_after(lambda q: visited.append(q))
    assert visited == []


def test_single_point_is_root_leaf():
    tree = QuadTree([(3.0, 4.0, 'a')])
    assert tree.size == 1
    assert tree.root.is_leaf
    assert tree.root.items() == ['a']
    assert tree.root.width == 1.0  # degenerate extent is widened


def test_root_extent_is_square():
    tree = QuadTree([(0.0, 0.0, 'a'), (10.0, 2.0, 'b')])
    root = tree.root
    assert (root.x0, root.y0) == (0.0, 0.0)
    assert root.x1 - root.x0 == root.y1 - root.y0 == 10.0


def test_distinct_points_end_in_separate_leaves():
    pts = [(0.0, 0.0, 'a'), (10.0, 0.0, 'b'), (0.0, 10.0, 'c'), (10.0, 10.0, 'd')]
    tree = QuadTree(pts)
    leaves = tree.leaves()
    assert sorted(item for leaf in leaves for item in leaf.items()) == ['a', 'b', 'c', 'd']
    assert all(len(leaf.points) == 1 for leaf in leaves)


def test_coincident_points_share_a_bucket():
    tree = QuadTree([(1.0, 1.0, 'a'), (1.0, 1.0, 'b'), (5.0, 5.0, 'c')])
    buckets = sorted(sorted(leaf.items()) for leaf in tree.leaves())
    assert buckets == [['a', 'b'], ['c']]
    assert tree.size == 3


def test_visit_can_skip_children():
    tree = QuadTree([(0.0, 0.0, 'a'), (10.0, 0.0, 'b')])
    seen = []

    def stop_at_root(quad):
        seen.append(quad)
        return True

    tree.visit(stop_at_root)
    assert seen == [tree.root]


def test_visit_after_is_post_order():
    tree = QuadTree([(0.0, 0.0, 'a'), (10.0, 0.0, 'b'), (5.0, 9.0, 'c')])
    order = []
    tree.visit_after(order.append)
    assert order[-1] is tree.root
    position = {id(q): i for i, q in enumerate(order)}
    for quad in order:
        if not quad.is_leaf:
            for child in quad.children:
                if child is not None:
                    assert position[id(child)] < position[id(quad)]
