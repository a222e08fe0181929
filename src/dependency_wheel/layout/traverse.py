"""Depth-tracked traversal from a focal node over the laid-out graph."""

from dataclasses import dataclass, field
from enum import Enum

from ..analysis import AnalysisNode, Unresolved
from .radial import LayoutNode, LayoutTree


class Direction(Enum):
    """Which links to follow from the focal node."""

    FORWARD = "forward"  # outgoing: what the node depends on
    REVERSE = "reverse"  # incoming: what depends on the node


@dataclass
class TraversalEdge:
    """One discovered link, with the tree path used to draw it.

    ``source`` is the leaf being expanded and ``target`` the leaf it points
    at in the traversal direction. ``path`` runs from the dependent to the
    dependency, so reverse edges are drawn target -> source.
    """

    source: LayoutNode
    target: LayoutNode
    path: list[LayoutNode]
    depth: int

    @property
    def points(self) -> list[tuple[float, float]]:
        """(angle, radius) of every entry on the path."""
        return [node.point for node in self.path]

    @property
    def key(self) -> tuple[str, str]:
        return (self.source.data.identifier, self.target.data.identifier)


@dataclass
class TraversalResult:
    """Edges found by one traversal and the deepest level they reached."""

    edges: list[TraversalEdge] = field(default_factory=list)
    max_depth: int = 1
    focal: LayoutNode | None = None


def _node_key(leaf: LayoutNode) -> tuple[str, int | None]:
    return (leaf.data.identifier, leaf.data.chunk)


def _linked(links: list[AnalysisNode | Unresolved]) -> list[AnalysisNode]:
    return [link for link in links if isinstance(link, AnalysisNode)]


def find_focal_leaf(leaves: list[LayoutNode], focal: str) -> LayoutNode | None:
    """Resolve a focal path to a leaf.

    Tries an exact full_path match, then a group leaf listing it among its
    immediate children, then a group leaf that includes it.
    """
    for leaf in leaves:
        if leaf.data.full_path == focal:
            return leaf
    for leaf in leaves:
        if any(child.full_path == focal for child in _linked(leaf.data.immediate_children)):
            return leaf
    for leaf in leaves:
        if any(node.full_path == focal for node in _linked(leaf.data.inclusions)):
            return leaf
    return None


class _LeafIndex:
    """First leaf per identifier, and first leaf including each identifier."""

    def __init__(self, leaves: list[LayoutNode]):
        self.by_identifier: dict[str, LayoutNode] = {}
        self.by_inclusion: dict[str, LayoutNode] = {}
        for leaf in leaves:
            self.by_identifier.setdefault(leaf.data.identifier, leaf)
            for included in _linked(leaf.data.inclusions):
                self.by_inclusion.setdefault(included.identifier, leaf)

    def find(self, node: AnalysisNode) -> LayoutNode | None:
        leaf = self.by_identifier.get(node.identifier)
        if leaf is None:
            leaf = self.by_inclusion.get(node.identifier)
        return leaf


def traverse(
    layout: LayoutTree,
    focal: str,
    direction: Direction = Direction.FORWARD,
    transitive: bool = False,
) -> TraversalResult:
    """Walk links from the focal node and collect drawable edges.

    Depth-first with an explicit stack seeded with (focal leaf, 1). Each
    node is expanded at most once and each (source, target) pair, keyed by
    identifier and chunk, is emitted at most once, so cycles terminate.
    Links pointing at nodes that are not on the wheel are skipped. Without
    ``transitive`` only the focal node is expanded.

    Every call starts from empty visited sets.

    Args:
        layout: Current layout tree.
        focal: full_path of the selected node.
        direction: FORWARD follows outgoing links, REVERSE incoming ones.
        transitive: Keep expanding discovered nodes.

    Returns:
        TraversalResult; empty when the focal node is not on the wheel or
        has no qualifying links.
    """
    focal_leaf = find_focal_leaf(layout.leaves, focal)
    if focal_leaf is None:
        return TraversalResult()

    index = _LeafIndex(layout.leaves)
    seen_nodes: set[tuple[str, int | None]] = set()
    seen_edges: set[tuple[tuple[str, int | None], tuple[str, int | None]]] = set()
    result = TraversalResult(focal=focal_leaf)

    stack: list[tuple[LayoutNode, int]] = [(focal_leaf, 1)]
    while stack:
        leaf, depth = stack.pop()
        source_key = _node_key(leaf)
        if source_key in seen_nodes:
            continue

        links = leaf.data.outgoing if direction is Direction.FORWARD else leaf.data.incoming
        for pointed in _linked(links):
            target = index.find(pointed)
            if target is None:
                continue

            edge_key = (source_key, _node_key(target))
            if edge_key in seen_edges:
                continue

            if direction is Direction.FORWARD:
                path = layout.path(leaf, target)
            else:
                path = layout.path(target, leaf)
            result.edges.append(TraversalEdge(leaf, target, path, depth))
            result.max_depth = max(result.max_depth, depth)
            seen_edges.add(edge_key)

            if transitive:
                stack.append((target, depth + 1))

        seen_nodes.add(source_key)

    return result
