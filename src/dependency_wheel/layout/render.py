"""Pyvis rendering of the wheel and the traversal edges."""

import base64
import html
import math
from pathlib import Path

from .radial import LayoutNode, LayoutTree
from .traverse import TraversalResult

CHUNK_COLORS = [
    "#1f4b99",  # cobalt
    "#0e5a8a",  # blue
    "#5642a6",  # indigo
    "#728c23",  # lime
    "#a67908",  # gold
    "#9e2b0e",  # vermilion
    "#1d7324",  # forest
    "#63411e",  # sepia
]
DEFAULT_COLOR = "#333333"
NODE_MODULE_COLOR = "#c23030"
FOCAL_COLOR = "#0a6640"
EDGE_COLOR = "#0a6640"


def polar_to_cartesian(angle: float, radius: float) -> tuple[float, float]:
    """Convert a clockwise-from-top polar point to x/y (y grows downward)."""
    return radius * math.sin(angle), -radius * math.cos(angle)


def _label_rotation(angle: float) -> float:
    """Rotation in degrees that keeps a radial label readable."""
    angle_deg = math.degrees(angle) - 90
    # Flip text on the left half so it's never upside-down
    if angle > math.pi:
        angle_deg += 180
    return angle_deg


def _create_rotated_label_svg(
    label: str,
    angle: float,
    color: str,
    font_size: int = 10,
    bold: bool = False,
) -> str:
    """Create an SVG data URL with text rotated along the radius.

    Args:
        label: Text to display.
        angle: Leaf angle in radians, clockwise from the top.
        color: Text color.
        font_size: Font size in pixels.
        bold: Emphasize the label.

    Returns:
        Data URL for the SVG image.
    """
    angle_deg = _label_rotation(angle)

    # Estimate text dimensions (approximate)
    char_width = font_size * 0.6
    text_width = len(label) * char_width
    svg_size = text_width + font_size * 2
    center = svg_size / 2
    weight = "bold" if bold else "normal"

    svg = f'''<svg xmlns="http://www.w3.org/2000/svg" width="{svg_size}" height="{svg_size}">
  <g transform="translate({center}, {center}) rotate({angle_deg})">
    <text x="0" y="{font_size * 0.35}"
          text-anchor="middle" font-family="Helvetica" font-size="{font_size}"
          font-weight="{weight}" fill="{color}">{html.escape(label)}</text>
  </g>
</svg>'''

    encoded = base64.b64encode(svg.encode()).decode()
    return f"data:image/svg+xml;base64,{encoded}"


def leaf_color(leaf: LayoutNode, focal: LayoutNode | None = None) -> str:
    """Color for a leaf: focal, then node module, then chunk palette."""
    node = leaf.data
    if focal is not None and leaf is focal:
        return FOCAL_COLOR
    if node.is_node_module:
        return NODE_MODULE_COLOR
    if node.chunk is not None and node.chunk != -1:
        return CHUNK_COLORS[node.chunk % len(CHUNK_COLORS)]
    return DEFAULT_COLOR


def edge_opacity(depth: int, min_depth: int) -> float:
    """Fade edges the further they are from the first shown depth."""
    if depth <= min_depth:
        return 0.9
    return 0.9 / (depth - min_depth)


def render_wheel(
    layout: LayoutTree,
    traversal: TraversalResult,
    output_path: Path,
    depth_range: tuple[int, int] | None = None,
    title: str | None = None,
) -> int:
    """Render the wheel with pyvis.

    Leaves become fixed-position image nodes with radially rotated labels,
    cluster groups become faint labels, and traversal edges whose depth lies
    within ``depth_range`` become arrows from dependent to dependency.

    Args:
        layout: Positioned layout tree.
        traversal: Edges to draw.
        output_path: Path to write the HTML file.
        depth_range: Inclusive (min, max) depth filter. Defaults to every
            depth up to traversal.max_depth.
        title: Optional heading shown in the page.

    Returns:
        Number of edges drawn.
    """
    from pyvis.network import Network

    min_depth, max_depth = depth_range or (1, traversal.max_depth)

    net = Network(
        height="100vh",
        width="100%",
        bgcolor="#ffffff",
        directed=True,
        heading=title or "",
    )
    net.toggle_physics(False)

    node_ids: dict[LayoutNode, int] = {}
    for index, entry in enumerate(layout.nodes()):
        x, y = polar_to_cartesian(entry.angle, entry.radius)
        node_ids[entry] = index

        if entry.is_leaf:
            node = entry.data
            color = leaf_color(entry, traversal.focal)
            net.add_node(
                index,
                label=" ",  # Space to suppress default label
                title=node.full_path,
                x=x,
                y=y,
                fixed=True,
                shape="image",
                image=_create_rotated_label_svg(
                    node.label, entry.angle, color, bold=entry is traversal.focal
                ),
                size=20,
                font={"size": 0},
            )
        elif entry.data is not None:
            net.add_node(
                index,
                label=entry.data.label,
                x=x,
                y=y,
                fixed=True,
                shape="text",
                font={"size": 14, "color": "rgba(0,0,0,0.5)"},
            )
        else:
            # Invisible anchor at the center
            net.add_node(index, label=" ", x=x, y=y, fixed=True, hidden=True)

    drawn = 0
    for edge in traversal.edges:
        if not min_depth <= edge.depth <= max_depth:
            continue
        start, end = edge.path[0], edge.path[-1]
        net.add_edge(
            node_ids[start],
            node_ids[end],
            color={"color": EDGE_COLOR, "opacity": edge_opacity(edge.depth, min_depth)},
            title=f"depth {edge.depth}",
            width=1,
        )
        drawn += 1

    net.set_options("""
    {
        "physics": {"enabled": false},
        "interaction": {
            "navigationButtons": true,
            "zoomView": true,
            "dragView": true,
            "hover": true,
            "tooltipDelay": 100
        },
        "edges": {
            "arrows": {"to": {"enabled": true, "scaleFactor": 0.3}},
            "smooth": {"type": "curvedCW", "roundness": 0.2}
        }
    }
    """)

    net.save_graph(str(output_path))
    return drawn
