"""CLI for dependency-wheel."""

import argparse
import sys
from pathlib import Path

from .analysis import load_raw_analysis
from .layout import Direction
from .selection import all_folders
from .session import ANALYSIS_SYNC, WheelSession
from .visualize import generate_html, generate_json, generate_summary

DEFAULT_HEIGHT = 800.0
DEFAULT_WIDTH = 1200.0


def load_config(config_path: Path) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Dictionary of configuration values.
    """
    try:
        import yaml

        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    except ImportError as err:
        raise ImportError("PyYAML required for config files: pip install pyyaml") from err


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments shared between subcommands."""
    parser.add_argument("--analysis", type=Path, help="Analyzer snapshot (JSON)")
    parser.add_argument("--focal", type=str, help="Full path of the focal node (default: first node)")
    parser.add_argument(
        "--reverse",
        action="store_true",
        default=None,
        help="Follow incoming links (what depends on the focal node)",
    )
    parser.add_argument(
        "--transitive",
        action="store_true",
        default=None,
        help="Keep following links past the first hop",
    )
    parser.add_argument("--height", type=float, help=f"Viewport height (default: {DEFAULT_HEIGHT:g})")
    parser.add_argument("--width", type=float, help=f"Viewport width (default: {DEFAULT_WIDTH:g})")
    parser.add_argument(
        "--expand",
        type=str,
        action="append",
        help="Expand this folder in addition to the entrypoint's folders (can be repeated)",
    )
    parser.add_argument(
        "--expand-all",
        action="store_true",
        default=None,
        help="Expand every folder so each file is its own leaf",
    )
    parser.add_argument(
        "--extensions",
        type=str,
        action="append",
        help="Only show top-level files with this extension (can be repeated)",
    )
    parser.add_argument("--config", type=Path, help="Path to YAML config file")


def resolve_common_args(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Resolve common arguments: load config, validate, and apply defaults."""
    if args.config:
        config = load_config(args.config)
        if not args.analysis and "analysis" in config:
            args.analysis = Path(config["analysis"])
        if not args.focal and "focal" in config:
            args.focal = config["focal"]
        if args.reverse is None and "reverse" in config:
            args.reverse = bool(config["reverse"])
        if args.transitive is None and "transitive" in config:
            args.transitive = bool(config["transitive"])
        if args.height is None and "height" in config:
            args.height = float(config["height"])
        if args.width is None and "width" in config:
            args.width = float(config["width"])
        if args.expand_all is None and "expand-all" in config:
            args.expand_all = bool(config["expand-all"])
        for key, attr in (("expand", "expand"), ("extensions", "extensions")):
            if not getattr(args, attr) and key in config:
                val = config[key]
                setattr(args, attr, val if isinstance(val, list) else [val])
        for key in ("min-depth", "max-depth"):
            attr = key.replace("-", "_")
            if getattr(args, attr, None) is None and key in config:
                setattr(args, attr, int(config[key]))
        if getattr(args, "output", None) == Path("wheel") and "output" in config:
            args.output = Path(config["output"])

    if not args.analysis:
        parser.error("--analysis is required")

    args.analysis = args.analysis.resolve()
    args.reverse = bool(args.reverse)
    args.transitive = bool(args.transitive)
    args.expand_all = bool(args.expand_all)
    if args.height is None:
        args.height = DEFAULT_HEIGHT
    if args.width is None:
        args.width = DEFAULT_WIDTH


def build_session(args: argparse.Namespace, parser: argparse.ArgumentParser) -> WheelSession:
    """Load the snapshot into a session and apply the requested viewer state."""
    print(f"Loading {args.analysis}...")
    try:
        raw = load_raw_analysis(args.analysis)
    except (OSError, ValueError) as err:
        parser.error(str(err))

    session = WheelSession(viewport=(args.width, args.height), extensions=args.extensions)
    session.registry.emit(ANALYSIS_SYNC, raw)
    analysis = session.analysis
    print(
        f"Found {len(analysis.all_nodes)} nodes, {len(analysis.analysis_groups)} groups, "
        f"{len(analysis.chunks)} chunks"
    )

    unresolved = analysis.unresolved_count()
    if unresolved:
        print(f"Warning: {unresolved} links point at unknown nodes and were skipped", file=sys.stderr)

    if args.expand_all and analysis.file_tree is not None:
        session.expansion = session.expansion | all_folders(analysis.file_tree)
    elif args.expand:
        session.expansion = session.expansion | set(args.expand)

    if args.focal:
        session.focal = args.focal
    session.direction = Direction.REVERSE if args.reverse else Direction.FORWARD
    session.transitive = args.transitive
    return session


def report_traversal(session: WheelSession) -> None:
    """Print layout and traversal sizes, warning when the focal node is not shown."""
    layout = session.layout
    traversal = session.traversal
    leaves = len(layout) if layout is not None else 0
    print(f"Laid out {leaves} leaves (radius {layout.radius if layout else 0:.0f})")

    if session.focal and traversal.focal is None:
        print(f"Warning: focal node {session.focal} is not on the wheel", file=sys.stderr)
    print(f"Found {len(traversal.edges)} edges up to depth {traversal.max_depth}")


def cmd_render(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Write the HTML wheel, JSON layout and text summary."""
    resolve_common_args(args, parser)
    if args.min_depth is not None and args.max_depth is not None and args.min_depth > args.max_depth:
        parser.error("--min-depth must not exceed --max-depth")

    session = build_session(args, parser)
    report_traversal(session)

    args.output = args.output.resolve()
    args.output.mkdir(parents=True, exist_ok=True)

    generate_json(session, args.output / "wheel.json")
    print("Wrote wheel.json")

    generate_summary(session, args.output / "summary.txt")
    print("Wrote summary.txt")

    max_depth = session.traversal.max_depth
    depth_range = (
        args.min_depth if args.min_depth is not None else 1,
        args.max_depth if args.max_depth is not None else max_depth,
    )
    drawn = generate_html(session, args.output / "wheel.html", depth_range=depth_range)
    print(f"Wrote wheel.html ({drawn} edges, depths {depth_range[0]}-{depth_range[1]})")


def cmd_edges(args: argparse.Namespace, parser: argparse.ArgumentParser) -> None:
    """Print the traversal from the focal node."""
    resolve_common_args(args, parser)
    session = build_session(args, parser)
    report_traversal(session)
    print()
    print(generate_summary(session), end="")


def main() -> None:
    """Main entry point for dependency-wheel CLI."""
    parser = argparse.ArgumentParser(
        description="Visualize module dependency graphs as a radial wheel"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    render_parser = subparsers.add_parser(
        "render",
        help="Render the wheel and traversal edges to HTML and JSON",
    )
    add_common_args(render_parser)
    render_parser.add_argument(
        "--output",
        type=Path,
        default=Path("wheel"),
        help="Output directory (default: wheel)",
    )
    render_parser.add_argument("--min-depth", type=int, help="Lowest traversal depth to draw")
    render_parser.add_argument("--max-depth", type=int, help="Highest traversal depth to draw")

    edges_parser = subparsers.add_parser(
        "edges",
        help="List the edges reached from the focal node",
    )
    add_common_args(edges_parser)

    args = parser.parse_args()

    if args.command == "render":
        cmd_render(args, render_parser)
    elif args.command == "edges":
        cmd_edges(args, edges_parser)
    else:
        # No subcommand provided - show help
        parser.print_help()


if __name__ == "__main__":
    main()
