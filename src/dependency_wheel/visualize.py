"""Generate visualization outputs from a wheel session."""

import json
from collections import Counter
from pathlib import Path

from .layout import Direction, render_wheel
from .layout.cluster import ClusterGroup
from .session import WheelSession


def generate_html(
    session: WheelSession,
    output_file: Path,
    depth_range: tuple[int, int] | None = None,
) -> int:
    """Generate an interactive HTML wheel using pyvis.

    Args:
        session: Session holding the analysis and viewer state.
        output_file: Path to write the HTML file.
        depth_range: Inclusive (min, max) traversal depths to draw.

    Returns:
        Number of edges drawn; 0 when nothing is visible.
    """
    layout = session.layout
    if layout is None:
        return 0

    traversal = session.traversal
    arrow = "->" if session.direction is Direction.FORWARD else "<-"
    title = f"{session.focal} {arrow}" if session.focal else None
    return render_wheel(layout, traversal, output_file, depth_range=depth_range, title=title)


def generate_json(session: WheelSession, output_file: Path) -> None:
    """Write layout positions and traversal edges as JSON.

    Positions are polar (angle in radians clockwise from the top, radius).

    Args:
        session: Session holding the analysis and viewer state.
        output_file: Path to write the JSON file.
    """
    layout = session.layout
    traversal = session.traversal

    leaves = []
    groups = []
    if layout is not None:
        for leaf in layout.leaves:
            leaves.append(
                {
                    "identifier": leaf.data.identifier,
                    "full_path": leaf.data.full_path,
                    "chunk": leaf.data.chunk,
                    "angle": leaf.angle,
                    "radius": leaf.radius,
                }
            )
        for group in layout.groups:
            cluster: ClusterGroup = group.data
            groups.append(
                {
                    "chunk": cluster.key,
                    "label": cluster.label,
                    "members": len(cluster.members),
                    "angle": group.angle,
                    "radius": group.radius,
                }
            )

    output = {
        "focal": session.focal,
        "direction": session.direction.value,
        "transitive": session.transitive,
        "radius": layout.radius if layout is not None else 0,
        "max_depth": traversal.max_depth,
        "groups": groups,
        "leaves": leaves,
        "edges": [
            {
                "source": edge.source.data.identifier,
                "target": edge.target.data.identifier,
                "depth": edge.depth,
                "points": edge.points,
            }
            for edge in traversal.edges
        ],
    }

    with open(output_file, "w") as f:
        json.dump(output, f, indent=2)


def generate_summary(session: WheelSession, output_file: Path | None = None) -> str:
    """Build a human-readable summary; also written to ``output_file`` if given."""
    layout = session.layout
    traversal = session.traversal

    lines = ["=" * 60, "Dependency Wheel Summary", "=" * 60, ""]
    lines.append(f"Focal node: {session.focal}")
    lines.append(f"Direction: {session.direction.value}")
    lines.append(f"Transitive: {'yes' if session.transitive else 'no'}")
    lines.append(f"Visible leaves: {len(layout) if layout is not None else 0}")

    if layout is not None and layout.groups:
        lines.append("")
        lines.append("Clusters:")
        lines.append("-" * 40)
        for group in layout.groups:
            lines.append(f"  {len(group.data.members):4d}  {group.data.label}")

    lines.append("")
    lines.append(f"Edges: {len(traversal.edges)} (max depth {traversal.max_depth})")
    lines.append("-" * 40)
    per_depth = Counter(edge.depth for edge in traversal.edges)
    for depth in sorted(per_depth):
        lines.append(f"  depth {depth}: {per_depth[depth]}")
    # Reverse edges point from the dependency back to its dependents
    arrow = "->" if session.direction is Direction.FORWARD else "<-"
    for edge in traversal.edges:
        lines.append(
            f"  [{edge.depth}] {edge.source.data.label} {arrow} {edge.target.data.label}"
        )

    text = "\n".join(lines) + "\n"
    if output_file is not None:
        with open(output_file, "w") as f:
            f.write(text)
    return text
