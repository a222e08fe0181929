"""Load analyzer snapshots and link them into an in-memory dependency graph."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from .selection import DisplayTree, parse_display_tree


@dataclass(frozen=True)
class Unresolved:
    """An index from the snapshot that points at no known node."""

    index: int


@dataclass
class RawNode:
    """A node as delivered by the analyzer, with links as table indices."""

    full_path: str
    identifier: str
    stem: str | None = None
    chunk: int | None = None
    is_node_module: bool = False
    depth: int = 0
    tree_shaken: bool = False
    resolver_relative_path: str = ""
    incoming: list[int] = field(default_factory=list)
    outgoing: list[int] = field(default_factory=list)
    inclusions: list[int] = field(default_factory=list)  # Group nodes only
    immediate_children: list[int] = field(default_factory=list)  # Group nodes only


@dataclass
class Chunk:
    """An output bundle reported by the bundler."""

    id: int
    name: str = ""
    initial: bool = False
    parents: list[int] = field(default_factory=list)
    siblings: list[int] = field(default_factory=list)
    children: list[int] = field(default_factory=list)
    parsed_size: int = 0


@dataclass
class RawAnalysis:
    """One analyzer snapshot for a selected entrypoint."""

    all_nodes: list[RawNode] = field(default_factory=list)
    analysis_groups: list[RawNode] = field(default_factory=list)
    entrypoint: RawNode | None = None
    node_map: dict[str, int] = field(default_factory=dict)
    chunks: dict[int, Chunk] = field(default_factory=dict)
    file_tree: DisplayTree | None = None


@dataclass(eq=False, repr=False)
class AnalysisNode:
    """A materialized node whose link lists hold other nodes directly.

    Nodes compare by identity. Links may form cycles, so neither equality
    nor repr follows them.
    """

    identifier: str
    full_path: str
    stem: str | None = None
    chunk: int | None = None
    is_node_module: bool = False
    is_group: bool = False
    depth: int = 0
    tree_shaken: bool = False
    resolver_relative_path: str = ""
    incoming: list[AnalysisNode | Unresolved] = field(default_factory=list)
    outgoing: list[AnalysisNode | Unresolved] = field(default_factory=list)
    inclusions: list[AnalysisNode | Unresolved] = field(default_factory=list)
    immediate_children: list[AnalysisNode | Unresolved] = field(default_factory=list)

    @property
    def label(self) -> str:
        return self.resolver_relative_path or self.full_path

    def __repr__(self) -> str:
        return f"AnalysisNode({self.identifier!r}, chunk={self.chunk!r})"


@dataclass
class Analysis:
    """A fully linked snapshot. Replaced wholesale, never patched."""

    all_nodes: list[AnalysisNode] = field(default_factory=list)
    analysis_groups: list[AnalysisNode] = field(default_factory=list)
    entrypoint: AnalysisNode | None = None
    node_map: dict[str, int] = field(default_factory=dict)
    chunks: dict[int, Chunk] = field(default_factory=dict)
    file_tree: DisplayTree | None = None

    def node(self, identifier: str) -> AnalysisNode | None:
        """Look up a node in all_nodes by its node_map key."""
        index = self.node_map.get(identifier)
        if index is None or not 0 <= index < len(self.all_nodes):
            return None
        return self.all_nodes[index]

    def unresolved_count(self) -> int:
        """Count link entries that could not be resolved to a node."""
        count = 0
        for node in self.all_nodes + self.analysis_groups:
            for links in (node.incoming, node.outgoing, node.inclusions, node.immediate_children):
                count += sum(1 for link in links if isinstance(link, Unresolved))
        return count


def _parse_node(data: dict) -> RawNode:
    full_path = str(data["full_path"])
    chunk = data.get("chunk")
    return RawNode(
        full_path=full_path,
        identifier=str(data.get("identifier") or full_path),
        stem=data.get("stem"),
        chunk=int(chunk) if chunk is not None else None,
        is_node_module=bool(data.get("is_node_module", False)),
        depth=int(data.get("depth", 0)),
        tree_shaken=bool(data.get("tree_shaken", False)),
        resolver_relative_path=str(data.get("resolver_relative_path") or ""),
        incoming=list(data.get("incoming", [])),
        outgoing=list(data.get("outgoing", [])),
        inclusions=list(data.get("inclusions", [])),
        immediate_children=list(data.get("immediate_children", [])),
    )


def _parse_chunk(data: dict) -> Chunk:
    return Chunk(
        id=int(data["id"]),
        name=str(data.get("name") or ""),
        initial=bool(data.get("initial", False)),
        parents=list(data.get("parents", [])),
        siblings=list(data.get("siblings", [])),
        children=list(data.get("children", [])),
        parsed_size=int(data.get("parsed_size", 0)),
    )


def parse_raw_analysis(data: dict) -> RawAnalysis:
    """Build a RawAnalysis from the analyzer's JSON-shaped snapshot.

    Args:
        data: Decoded snapshot with all_nodes, analysis_groups, entrypoint,
            node_map and optionally chunks and file_tree.

    Returns:
        The parsed snapshot, links still expressed as indices.

    Raises:
        ValueError: If the snapshot has no all_nodes table or a node lacks
            its full_path.
    """
    if not isinstance(data, dict) or "all_nodes" not in data:
        raise ValueError("Analysis snapshot is missing 'all_nodes'")

    try:
        all_nodes = [_parse_node(node) for node in data["all_nodes"]]
        groups = [_parse_node(node) for node in data.get("analysis_groups", [])]
        entrypoint = _parse_node(data["entrypoint"]) if data.get("entrypoint") else None
    except KeyError as err:
        raise ValueError(f"Analysis node is missing {err}") from err
    except (TypeError, ValueError) as err:
        raise ValueError(f"Analysis node has a malformed field: {err}") from err

    try:
        # JSON object keys are always strings
        chunks = {int(key): _parse_chunk(value) for key, value in (data.get("chunks") or {}).items()}
        file_tree = parse_display_tree(data["file_tree"]) if data.get("file_tree") else None
        node_map = {str(k): int(v) for k, v in (data.get("node_map") or {}).items()}
    except (KeyError, TypeError, ValueError, AttributeError) as err:
        raise ValueError(f"Analysis snapshot has a malformed table: {err}") from err

    return RawAnalysis(
        all_nodes=all_nodes,
        analysis_groups=groups,
        entrypoint=entrypoint,
        node_map=node_map,
        chunks=chunks,
        file_tree=file_tree,
    )


def load_raw_analysis(path: Path) -> RawAnalysis:
    """Read an analyzer snapshot from a JSON file.

    Raises:
        ValueError: If the file is not valid JSON or not a snapshot.
    """
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as err:
            raise ValueError(f"{path} is not valid JSON: {err}") from err
    return parse_raw_analysis(data)


def _new_node(raw: RawNode, is_group: bool = False) -> AnalysisNode:
    return AnalysisNode(
        identifier=raw.identifier,
        full_path=raw.full_path,
        stem=raw.stem,
        chunk=raw.chunk,
        is_node_module=raw.is_node_module,
        is_group=is_group,
        depth=raw.depth,
        tree_shaken=raw.tree_shaken,
        resolver_relative_path=raw.resolver_relative_path,
    )


def materialize(raw: RawAnalysis | Analysis) -> Analysis:
    """Replace index links with direct node references.

    A single pass over the node table: every index in incoming/outgoing (and
    inclusions/immediate_children for groups) becomes the all_nodes entry at
    that position, or Unresolved when out of range. Nothing is followed, so
    cycles and self-loops cost nothing. The raw snapshot is not modified.

    Args:
        raw: Snapshot from the analyzer. An already materialized Analysis is
            returned unchanged.

    Returns:
        Linked Analysis with analysis_groups stably sorted by depth.
    """
    if isinstance(raw, Analysis):
        return raw

    nodes = [_new_node(node) for node in raw.all_nodes]

    def resolve(indices: list[int]) -> list[AnalysisNode | Unresolved]:
        return [
            nodes[idx] if isinstance(idx, int) and 0 <= idx < len(nodes) else Unresolved(idx)
            for idx in indices
        ]

    def link(node: AnalysisNode, source: RawNode) -> None:
        node.incoming = resolve(source.incoming)
        node.outgoing = resolve(source.outgoing)
        node.inclusions = resolve(source.inclusions)
        node.immediate_children = resolve(source.immediate_children)

    for node, source in zip(nodes, raw.all_nodes):
        link(node, source)

    groups = []
    for source in raw.analysis_groups:
        group = _new_node(source, is_group=True)
        link(group, source)
        groups.append(group)

    entrypoint = None
    if raw.entrypoint is not None:
        entrypoint = _new_node(raw.entrypoint)
        link(entrypoint, raw.entrypoint)

    return Analysis(
        all_nodes=nodes,
        analysis_groups=sorted(groups, key=lambda g: g.depth),  # sorted() is stable
        entrypoint=entrypoint,
        node_map=dict(raw.node_map),
        chunks=dict(raw.chunks),
        file_tree=raw.file_tree,
    )
