"""Derive the visible node set from the navigation tree's expansion state."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .analysis import Analysis, AnalysisNode


@dataclass
class DisplayNode:
    """A folder or file in the navigation tree."""

    path: str
    full_path: str
    is_folder: bool = False
    valid_entrypoint: bool = False
    children: list[DisplayNode] = field(default_factory=list)


@dataclass
class DisplayTree:
    """Navigation tree rooted at the highest directory of an analysis."""

    root_path: str
    file_node: DisplayNode


def _parse_display_node(data: dict) -> DisplayNode:
    return DisplayNode(
        path=str(data.get("path", "")),
        full_path=str(data["full_path"]),
        is_folder=bool(data.get("is_folder", False)),
        valid_entrypoint=bool(data.get("valid_entrypoint", False)),
        children=[_parse_display_node(child) for child in data.get("children", [])],
    )


def parse_display_tree(data: dict) -> DisplayTree:
    """Build a DisplayTree from its JSON form ({root_path, file_node})."""
    return DisplayTree(
        root_path=str(data.get("root_path", "")),
        file_node=_parse_display_node(data["file_node"]),
    )


def top_level_nodes(tree: DisplayTree, extensions: list[str] | None = None) -> list[DisplayNode]:
    """Return the root's children that the navigation tree shows.

    A child is kept when it has children of its own or its file extension is
    one of ``extensions``. Without an extension list every child is kept.
    """
    if extensions is None:
        return list(tree.file_node.children)

    wanted = {ext.lstrip(".") for ext in extensions}
    return [
        child
        for child in tree.file_node.children
        if child.children or child.path.split(".")[-1] in wanted
    ]


def visible_leaves(
    tree: DisplayTree,
    expansion_state: set[str],
    extensions: list[str] | None = None,
) -> set[str]:
    """Collect the ids of nodes that are drawn on the wheel.

    An expanded node contributes each of its non-folder children and is
    descended into. A collapsed node contributes itself, standing in for its
    whole subtree.

    Args:
        tree: Navigation tree for the current analysis.
        expansion_state: full_path of every expanded node.
        extensions: Optional extension filter for the top level.

    Returns:
        Set of full_path values of visible nodes.
    """
    visible: set[str] = set()

    def walk(node: DisplayNode) -> None:
        if node.full_path in expansion_state:
            for child in node.children:
                if not child.is_folder:
                    visible.add(child.full_path)
                walk(child)
        else:
            visible.add(node.full_path)

    for node in top_level_nodes(tree, extensions):
        walk(node)

    return visible


def default_expansion(entrypoint_path: str) -> set[str]:
    """Expand every ancestor directory of the entrypoint, root included.

    "/a/b/c.js" gives {"/", "/a", "/a/b", "/a/b/c.js"}.
    """
    expanded = {"/"}
    current = PurePosixPath("/")
    for part in PurePosixPath(entrypoint_path).parts:
        if part == "/":
            continue
        current = current / part
        expanded.add(str(current))
    return expanded


def all_folders(tree: DisplayTree) -> set[str]:
    """full_path of every folder in the tree, for a fully expanded view."""
    folders: set[str] = set()
    stack = [tree.file_node]
    while stack:
        node = stack.pop()
        if node.children or node.is_folder:
            folders.add(node.full_path)
        stack.extend(node.children)
    return folders


def select_nodes(analysis: Analysis, visible: set[str]) -> list[AnalysisNode]:
    """Pick the analysis groups, then plain nodes, whose path is visible."""
    groups = [group for group in analysis.analysis_groups if group.full_path in visible]
    nodes = [node for node in analysis.all_nodes if node.full_path in visible]
    return groups + nodes
