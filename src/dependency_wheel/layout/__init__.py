"""Radial cluster layout and traversal for module dependency wheels.

Nodes are grouped by output chunk, placed around a circle with a cluster
layout, and traversed from a focal node to find the edges to draw.
"""

from .cluster import UNBUNDLED, ClusterGroup, group_clusters
from .radial import LayoutNode, LayoutTree, build_layout_graph, compute_layout, place_cluster
from .render import render_wheel
from .traverse import Direction, TraversalEdge, TraversalResult, find_focal_leaf, traverse

__all__ = [
    "UNBUNDLED",
    "ClusterGroup",
    "group_clusters",
    "LayoutNode",
    "LayoutTree",
    "build_layout_graph",
    "place_cluster",
    "compute_layout",
    "Direction",
    "TraversalEdge",
    "TraversalResult",
    "find_focal_leaf",
    "traverse",
    "render_wheel",
]
