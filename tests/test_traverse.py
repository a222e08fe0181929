"""Tests for traverse.py."""

import pytest

from dependency_wheel.analysis import materialize, parse_raw_analysis
from dependency_wheel.layout.cluster import group_clusters
from dependency_wheel.layout.radial import compute_layout
from dependency_wheel.layout.traverse import Direction, find_focal_leaf, traverse
from dependency_wheel.selection import select_nodes

A, B, C, D = "/proj/A.js", "/proj/B.js", "/proj/C.js", "/proj/D.js"


def _layout(snapshot, nodes=None):
    analysis = materialize(parse_raw_analysis(snapshot))
    selected = analysis.all_nodes if nodes is None else nodes(analysis)
    return compute_layout(group_clusters(selected, analysis.chunks), (1200, 800))


def _pairs(result):
    return {(e.source.data.full_path, e.target.data.full_path, e.depth) for e in result.edges}


@pytest.fixture
def chain_layout(chain_snapshot):
    return _layout(chain_snapshot)


class TestTraverseScenarios:
    """Traversal over A -> B, B -> C, B -> D."""

    def test_forward_transitive(self, chain_layout):
        """Forward from A reaches B at depth 1 and C, D at depth 2."""
        result = traverse(chain_layout, A, Direction.FORWARD, transitive=True)

        assert _pairs(result) == {(A, B, 1), (B, C, 2), (B, D, 2)}
        assert result.max_depth == 2

    def test_forward_single_hop(self, chain_layout):
        """Without transitive mode only the focal node is expanded."""
        result = traverse(chain_layout, A, Direction.FORWARD, transitive=False)

        assert _pairs(result) == {(A, B, 1)}
        assert result.max_depth == 1

    def test_reverse_single_hop(self, chain_layout):
        """Reverse from C finds B."""
        result = traverse(chain_layout, C, Direction.REVERSE, transitive=False)

        assert _pairs(result) == {(C, B, 1)}

    def test_reverse_transitive(self, chain_layout):
        """Reverse from D walks back to A."""
        result = traverse(chain_layout, D, Direction.REVERSE, transitive=True)

        assert _pairs(result) == {(D, B, 1), (B, A, 2)}
        assert result.max_depth == 2

    def test_directional_symmetry(self, chain_layout):
        """A -> B is found at depth 1 going forward from A and backward from B."""
        forward = traverse(chain_layout, A, Direction.FORWARD)
        reverse = traverse(chain_layout, B, Direction.REVERSE)

        forward_edge = forward.edges[0]
        reverse_edge = reverse.edges[0]
        assert forward_edge.depth == reverse_edge.depth == 1
        # Both are drawn from A to B
        assert forward_edge.path[0].data.full_path == A
        assert forward_edge.path[-1].data.full_path == B
        assert reverse_edge.path[0].data.full_path == A
        assert reverse_edge.path[-1].data.full_path == B

    def test_non_transitive_edges_all_depth_one(self, make_snapshot):
        """Every single-hop edge has depth 1."""
        layout = _layout(make_snapshot(["/a", "/b", "/c", "/d"], [(0, 1), (0, 2), (0, 3)]))

        result = traverse(layout, "/a", Direction.FORWARD, transitive=False)

        assert len(result.edges) == 3
        assert {e.depth for e in result.edges} == {1}


class TestTraverseCycles:
    """Traversal terminates and deduplicates under cycles."""

    def test_two_cycle(self, cycle_snapshot):
        """A -> B -> A yields each edge once."""
        layout = _layout(cycle_snapshot)

        result = traverse(layout, "/proj/A.js", Direction.FORWARD, transitive=True)

        assert _pairs(result) == {("/proj/A.js", "/proj/B.js", 1), ("/proj/B.js", "/proj/A.js", 2)}

    def test_self_loop(self, make_snapshot):
        """A self-loop is emitted once as a single-point path."""
        layout = _layout(make_snapshot(["/a"], [(0, 0)]))

        result = traverse(layout, "/a", Direction.FORWARD, transitive=True)

        assert len(result.edges) == 1
        assert len(result.edges[0].path) == 1

    def test_no_duplicate_edges(self, make_snapshot):
        """Dense cyclic graphs never emit a (source, target) pair twice."""
        paths = [f"/m{i}" for i in range(6)]
        edges = [(i, j) for i in range(6) for j in range(6) if i != j]
        layout = _layout(make_snapshot(paths, edges))

        for direction in Direction:
            result = traverse(layout, "/m0", direction, transitive=True)
            keys = [edge.key for edge in result.edges]
            assert len(keys) == len(set(keys))
            assert len(keys) == 30

    def test_depth_first_order(self, make_snapshot):
        """The last discovered node is expanded first.

        A -> B, A -> C, C -> B, B -> D: C is expanded before B, so B is
        first reached through C at depth 2 and D ends up at depth 3.
        """
        layout = _layout(make_snapshot(["/A", "/B", "/C", "/D"], [(0, 1), (0, 2), (2, 1), (1, 3)]))

        result = traverse(layout, "/A", Direction.FORWARD, transitive=True)

        assert [
            (e.source.data.full_path, e.target.data.full_path, e.depth) for e in result.edges
        ] == [("/A", "/B", 1), ("/A", "/C", 1), ("/C", "/B", 2), ("/B", "/D", 3)]
        assert result.max_depth == 3

    def test_duplicate_links_emit_once(self, make_snapshot):
        """Repeated links to the same target produce one edge."""
        layout = _layout(make_snapshot(["/a", "/b"], [(0, 1), (0, 1)]))

        result = traverse(layout, "/a", Direction.FORWARD)

        assert len(result.edges) == 1


class TestTraverseResolution:
    """Focal and target resolution."""

    def test_unknown_focal_is_empty(self, chain_layout):
        """An unresolvable focal node gives an empty result."""
        result = traverse(chain_layout, "/nowhere.js", Direction.FORWARD, transitive=True)

        assert result.edges == []
        assert result.focal is None

    def test_leaf_without_links_is_empty(self, chain_layout):
        """A focal node with no outgoing links gives no edges."""
        result = traverse(chain_layout, C, Direction.FORWARD, transitive=True)

        assert result.edges == []
        assert result.focal.data.full_path == C

    def test_hidden_targets_skipped(self, chain_snapshot):
        """Links to nodes that are not laid out are ignored."""
        layout = _layout(chain_snapshot, lambda a: a.all_nodes[:2])

        result = traverse(layout, A, Direction.FORWARD, transitive=True)

        assert _pairs(result) == {(A, B, 1)}

    def test_unresolved_links_skipped(self, make_snapshot):
        """Unresolved indices in link lists are skipped."""
        snapshot = make_snapshot(["/a", "/b"], [(0, 1)])
        snapshot["all_nodes"][0]["outgoing"].insert(0, 42)
        layout = _layout(snapshot)

        result = traverse(layout, "/a", Direction.FORWARD)

        assert _pairs(result) == {("/a", "/b", 1)}

    def test_target_resolves_to_including_group(self, tree_snapshot):
        """A link into a collapsed folder lands on the folder's group leaf."""
        visible = {"/proj/src/index.js", "/proj/src/lib"}
        layout = _layout(tree_snapshot, lambda a: select_nodes(a, visible))

        result = traverse(layout, "/proj/src/index.js", Direction.FORWARD, transitive=True)

        assert _pairs(result) == {("/proj/src/index.js", "/proj/src/lib", 1)}

    def test_focal_resolves_through_immediate_children(self, tree_snapshot):
        """A hidden focal node resolves to the group listing it as a child."""
        visible = {"/proj/src/index.js", "/proj/src/lib"}
        layout = _layout(tree_snapshot, lambda a: select_nodes(a, visible))

        leaf = find_focal_leaf(layout.leaves, "/proj/src/lib/b.js")

        assert leaf.data.full_path == "/proj/src/lib"

    def test_focal_resolves_through_inclusions(self, tree_snapshot):
        """Without an immediate-children match, inclusions are used."""
        visible = {"/proj"}
        layout = _layout(tree_snapshot, lambda a: select_nodes(a, visible))

        leaf = find_focal_leaf(layout.leaves, "/proj/src/lib/a.js")

        assert leaf.data.full_path == "/proj"

    def test_exact_match_preferred(self, tree_snapshot):
        """A visible node wins over a group containing it."""
        visible = {"/proj", "/proj/src/index.js"}
        layout = _layout(tree_snapshot, lambda a: select_nodes(a, visible))

        leaf = find_focal_leaf(layout.leaves, "/proj/src/index.js")

        assert leaf.data.full_path == "/proj/src/index.js"
        assert not leaf.data.is_group


class TestTraverseReentrancy:
    """Repeated traversals do not share state."""

    def test_fresh_state_each_call(self, chain_layout):
        """Running twice gives identical results."""
        first = traverse(chain_layout, A, Direction.FORWARD, transitive=True)
        second = traverse(chain_layout, A, Direction.FORWARD, transitive=True)

        assert _pairs(first) == _pairs(second)

    def test_toggle_direction(self, chain_layout):
        """Switching direction and back restores the original edges."""
        before = traverse(chain_layout, B, Direction.FORWARD)
        traverse(chain_layout, B, Direction.REVERSE)
        after = traverse(chain_layout, B, Direction.FORWARD)

        assert _pairs(before) == _pairs(after) == {(B, C, 1), (B, D, 1)}

    def test_edge_points_follow_layout(self, chain_layout):
        """Edge points are the (angle, radius) of the path entries."""
        result = traverse(chain_layout, A, Direction.FORWARD)
        edge = result.edges[0]

        assert edge.points[0] == (edge.path[0].angle, edge.path[0].radius)
        assert edge.points[-1] == edge.target.point
