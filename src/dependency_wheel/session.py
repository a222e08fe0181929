"""Interactive state around the layout engine.

A WheelSession holds the inputs a viewer changes (analysis snapshot,
expanded folders, focal node, direction, transitive flag, viewport) and
recomputes the layout and traversal only when their own inputs change.
Paint requests are coalesced until ``flush()``.
"""

from collections import defaultdict
from collections.abc import Callable

from .analysis import Analysis, RawAnalysis, materialize, parse_raw_analysis
from .layout import (
    Direction,
    LayoutTree,
    TraversalResult,
    compute_layout,
    group_clusters,
    traverse,
)
from .selection import default_expansion, select_nodes, visible_leaves

ANALYSIS_SYNC = "entrypoint_analysis::sync"


class EventRegistry:
    """Named-event subscriptions owned by whoever creates the registry."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Callable]] = defaultdict(list)

    def subscribe(self, event: str, callback: Callable) -> Callable[[], None]:
        """Register a callback and return a function that removes it."""
        self._listeners[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        return unsubscribe

    def emit(self, event: str, payload=None) -> int:
        """Call every subscriber of ``event``; returns how many were called."""
        listeners = list(self._listeners.get(event, []))
        for callback in listeners:
            callback(payload)
        return len(listeners)


class WheelSession:
    """Current viewer state plus memoized layout and traversal.

    Layout depends on the analysis, the visible set and the viewport height.
    Traversal depends on the layout, focal node, direction and transitive
    flag. Changing the direction never recomputes the layout.
    """

    def __init__(
        self,
        registry: EventRegistry | None = None,
        viewport: tuple[float, float] = (0.0, 0.0),
        extensions: list[str] | None = None,
        on_paint: Callable[[LayoutTree | None, TraversalResult], None] | None = None,
    ):
        self.registry = registry or EventRegistry()
        self.extensions = extensions
        self.on_paint = on_paint

        self._analysis: Analysis | None = None
        self._generation = 0
        self._viewport = viewport
        self._expansion: set[str] = set()
        self._focal: str | None = None
        self._direction = Direction.FORWARD
        self._transitive = False

        self._layout_key = None
        self._layout: LayoutTree | None = None
        self._traversal_key = None
        self._traversal = TraversalResult()
        self._paint_pending = False

        self._unsubscribe = self.registry.subscribe(ANALYSIS_SYNC, self.load)

    def close(self) -> None:
        """Stop listening for new analyses."""
        self._unsubscribe()

    # Inputs

    def load(self, raw: RawAnalysis | Analysis | dict | None) -> None:
        """Replace the current analysis wholesale.

        ``None`` clears it. A new analysis resets the focal node to the
        first node and expands the folders leading to the entrypoint.
        """
        if isinstance(raw, dict):
            raw = parse_raw_analysis(raw)
        self._analysis = materialize(raw) if raw is not None else None
        self._generation += 1

        if self._analysis is None:
            self._focal = None
            self._expansion = set()
        else:
            nodes = self._analysis.all_nodes
            self._focal = nodes[0].full_path if nodes else None
            entry = self._analysis.entrypoint
            self._expansion = default_expansion(entry.full_path) if entry else set()
        self.request_paint()

    @property
    def analysis(self) -> Analysis | None:
        return self._analysis

    @property
    def focal(self) -> str | None:
        return self._focal

    @focal.setter
    def focal(self, value: str | None) -> None:
        self._focal = value
        self.request_paint()

    @property
    def direction(self) -> Direction:
        return self._direction

    @direction.setter
    def direction(self, value: Direction) -> None:
        self._direction = value
        self.request_paint()

    @property
    def transitive(self) -> bool:
        return self._transitive

    @transitive.setter
    def transitive(self, value: bool) -> None:
        self._transitive = bool(value)
        self.request_paint()

    @property
    def viewport(self) -> tuple[float, float]:
        return self._viewport

    @viewport.setter
    def viewport(self, value: tuple[float, float]) -> None:
        self._viewport = value
        self.request_paint()

    @property
    def expansion(self) -> frozenset[str]:
        return frozenset(self._expansion)

    @expansion.setter
    def expansion(self, value: set[str]) -> None:
        self._expansion = set(value)
        self.request_paint()

    def toggle(self, full_path: str) -> None:
        """Expand a collapsed navigation node or collapse an expanded one."""
        if full_path in self._expansion:
            self._expansion.discard(full_path)
        else:
            self._expansion.add(full_path)
        self.request_paint()

    # Derived state

    @property
    def visible(self) -> set[str]:
        if self._analysis is None:
            return set()
        if self._analysis.file_tree is None:
            # No navigation tree: every node is shown
            return {node.full_path for node in self._analysis.all_nodes}
        return visible_leaves(self._analysis.file_tree, self._expansion, self.extensions)

    @property
    def layout(self) -> LayoutTree | None:
        if self._analysis is None:
            return None

        visible = frozenset(self.visible)
        key = (self._generation, visible, self._viewport[1])
        if key != self._layout_key:
            if visible:
                nodes = select_nodes(self._analysis, set(visible))
                groups = group_clusters(nodes, self._analysis.chunks)
                self._layout = compute_layout(groups, self._viewport)
            else:
                self._layout = None
            self._layout_key = key
        return self._layout

    @property
    def traversal(self) -> TraversalResult:
        layout = self.layout
        if layout is None or self._focal is None:
            return TraversalResult()

        key = (self._layout_key, self._focal, self._direction, self._transitive)
        if key != self._traversal_key:
            self._traversal = traverse(layout, self._focal, self._direction, self._transitive)
            self._traversal_key = key
        return self._traversal

    # Painting

    def request_paint(self) -> None:
        self._paint_pending = True

    def flush(self) -> bool:
        """Run at most one paint for all changes since the last flush."""
        if not self._paint_pending:
            return False
        self._paint_pending = False
        if self.on_paint is not None:
            self.on_paint(self.layout, self.traversal)
        return True
