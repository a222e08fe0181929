"""Group nodes into clusters by the output chunk they were bundled into."""

from dataclasses import dataclass, field

from ..analysis import AnalysisNode, Chunk

# Chunk id for modules left out of every bundle
UNBUNDLED = -1
UNBUNDLED_LABEL = "unbundled"


@dataclass
class ClusterGroup:
    """Nodes sharing one chunk. ``key`` is None for the implicit flat group."""

    key: int | None
    members: list[AnalysisNode] = field(default_factory=list)
    label: str = ""

    @property
    def is_implicit(self) -> bool:
        return self.key is None

    @property
    def is_unbundled(self) -> bool:
        return self.key == UNBUNDLED


def chunk_label(key: int, chunks: dict[int, Chunk] | None = None) -> str:
    """Display label for a chunk id."""
    if key == UNBUNDLED:
        return UNBUNDLED_LABEL
    chunk = (chunks or {}).get(key)
    if chunk is None:
        return str(key)
    return chunk.name or str(chunk.id)


def group_clusters(
    nodes: list[AnalysisNode],
    chunks: dict[int, Chunk] | None = None,
) -> list[ClusterGroup]:
    """Partition nodes by chunk.

    When no node has a chunk, everything goes into one implicit group.
    Otherwise groups appear in the order their chunk is first seen, and
    nodes without a chunk join the unbundled group.

    Args:
        nodes: Visible nodes, in selection order.
        chunks: Chunk table from the analysis, used for labels.

    Returns:
        List of groups; every node is in exactly one.
    """
    if not any(node.chunk is not None for node in nodes):
        return [ClusterGroup(key=None, members=list(nodes))]

    groups: dict[int, ClusterGroup] = {}
    for node in nodes:
        key = UNBUNDLED if node.chunk is None else node.chunk
        if key not in groups:
            groups[key] = ClusterGroup(key=key, label=chunk_label(key, chunks))
        groups[key].members.append(node)

    return list(groups.values())
