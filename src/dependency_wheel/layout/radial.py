"""Radial cluster layout: hierarchy construction, angle placement and leaf paths."""

import math
from dataclasses import dataclass

import networkx as nx

from ..analysis import AnalysisNode
from .cluster import ClusterGroup

# Minimum arc length reserved per leaf
LEAF_SPACING = 10
# Space kept free around the center for bundled edge curves
DEFAULT_INNER_MARGIN = 100


@dataclass(eq=False)
class LayoutNode:
    """A positioned entry in the layout hierarchy.

    ``data`` is the AnalysisNode for leaves, the ClusterGroup for cluster
    entries and None for the synthetic root. ``angle`` is in radians,
    clockwise from the top; ``radius`` is the distance from the center.
    """

    data: AnalysisNode | ClusterGroup | None
    depth: int
    angle: float = 0.0
    radius: float = 0.0

    @property
    def is_leaf(self) -> bool:
        return isinstance(self.data, AnalysisNode)

    @property
    def point(self) -> tuple[float, float]:
        return (self.angle, self.radius)


class LayoutTree:
    """Positioned hierarchy: root -> cluster groups -> leaves.

    The root-to-node lineage of every entry is stored when the tree is
    built, so a path between two leaves costs O(tree depth).
    """

    def __init__(self, graph: nx.DiGraph, root: LayoutNode, radius: float):
        self.graph = graph
        self.root = root
        self.radius = radius
        self._lineage: dict[LayoutNode, list[LayoutNode]] = {root: [root]}
        for parent, child in nx.bfs_edges(graph, root):
            self._lineage[child] = self._lineage[parent] + [child]

        ordered = list(nx.dfs_preorder_nodes(graph, root))
        self.leaves: list[LayoutNode] = [node for node in ordered if node.is_leaf]
        self.groups: list[LayoutNode] = [
            node for node in ordered if isinstance(node.data, ClusterGroup)
        ]

    def __len__(self) -> int:
        return len(self.leaves)

    def nodes(self) -> list[LayoutNode]:
        """All entries in pre-order, root first."""
        return list(nx.dfs_preorder_nodes(self.graph, self.root))

    def parent(self, node: LayoutNode) -> LayoutNode | None:
        lineage = self._lineage[node]
        return lineage[-2] if len(lineage) > 1 else None

    def path(self, source: LayoutNode, target: LayoutNode) -> list[LayoutNode]:
        """Shortest tree path from source up to the common ancestor and down to target."""
        up = self._lineage[source]
        down = self._lineage[target]
        shared = 0
        for a, b in zip(up, down):
            if a is not b:
                break
            shared += 1
        # up[shared - 1] is the lowest common ancestor
        return up[shared - 1 :][::-1] + down[shared:]


def build_layout_graph(groups: list[ClusterGroup]) -> tuple[nx.DiGraph, LayoutNode]:
    """Build the two-level hierarchy for the cluster layout.

    The implicit group (no chunks at all) is not given its own level: its
    members hang straight off the root. Leaves are ordered by full_path
    within each group; groups keep their given order.

    Args:
        groups: Output of group_clusters.

    Returns:
        Tuple of (tree graph, root entry).
    """
    G = nx.DiGraph()
    root = LayoutNode(data=None, depth=0)
    G.add_node(root)

    for group in groups:
        if group.is_implicit:
            parent = root
        else:
            parent = LayoutNode(data=group, depth=1)
            G.add_edge(root, parent)

        for member in sorted(group.members, key=lambda node: node.full_path):
            G.add_edge(parent, LayoutNode(data=member, depth=parent.depth + 1))

    return G, root


def parent_separation(graph: nx.DiGraph, a: LayoutNode, b: LayoutNode) -> float:
    """Gap between neighbouring leaves: wider across groups, narrower deeper down."""
    same_parent = next(iter(graph.predecessors(a)), None) is next(iter(graph.predecessors(b)), None)
    return (1 if same_parent else 2) / a.depth


def place_cluster(graph: nx.DiGraph, root: LayoutNode, size: tuple[float, float]) -> None:
    """Assign angle and radius to every entry with a cluster (dendrogram) layout.

    Leaves are laid out in order at accumulated separations, then every
    inner entry sits at the mean angle of its children. Angles are scaled to
    span ``size[0]`` and all leaves end on the outer ring at ``size[1]``.

    Args:
        graph: Tree built by build_layout_graph.
        root: Its root entry.
        size: (angular extent, outer radius).
    """
    span, outer = size
    x: dict[LayoutNode, float] = {}
    height: dict[LayoutNode, int] = {}

    previous = None
    offset = 0.0
    for node in nx.dfs_postorder_nodes(graph, root):
        children = list(graph.successors(node))
        if children:
            x[node] = sum(x[c] for c in children) / len(children)
            height[node] = 1 + max(height[c] for c in children)
        else:
            if previous is not None:
                offset += parent_separation(graph, node, previous)
            x[node] = offset
            height[node] = 0
            previous = node

    left = root
    while graph.out_degree(left):
        left = next(iter(graph.successors(left)))
    right = root
    while graph.out_degree(right):
        right = list(graph.successors(right))[-1]

    if left is root:
        # Nothing but the root
        root.angle, root.radius = 0.0, 0.0
        return

    x0 = x[left] - parent_separation(graph, left, right) / 2
    x1 = x[right] + parent_separation(graph, right, left) / 2
    root_height = height[root]

    for node in graph.nodes:
        node.angle = (x[node] - x0) / (x1 - x0) * span
        node.radius = (1 - (height[node] / root_height if root_height else 1)) * outer


def compute_layout(
    groups: list[ClusterGroup],
    viewport: tuple[float, float],
    inner_margin: float = DEFAULT_INNER_MARGIN,
) -> LayoutTree:
    """Lay the clustered nodes out around a circle.

    The layout radius is ``max(leaves * LEAF_SPACING, height / 2)`` so dense
    wheels grow while sparse ones fill the viewport. Leaves are placed on a
    ring ``inner_margin`` inside that radius. Only the viewport height
    matters; the width is accepted for symmetry with the caller's state.

    Args:
        groups: Output of group_clusters.
        viewport: (width, height) of the drawing area.
        inner_margin: Distance between the layout radius and the leaf ring.

    Returns:
        The positioned LayoutTree.
    """
    _, height = viewport
    graph, root = build_layout_graph(groups)
    leaf_count = sum(1 for node in graph.nodes if node.is_leaf)

    radius = max(leaf_count * LEAF_SPACING, height / 2)
    place_cluster(graph, root, (2 * math.pi, max(radius - inner_margin, 0.0)))

    return LayoutTree(graph, root, radius)
