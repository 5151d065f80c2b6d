"""
Lane-based layout for SoundCue graphs.

Every node gets a vertical footprint measured in lanes. A parent's lanes are
the union of its children's lanes, taken in slot order, so slot 0 always sits
above slot 1 and so on. Columns are assigned by depth from the roots, with the
roots in the rightmost column, so the graph reads left to right towards its
output.
"""

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .graph import SoundGraph

# Layout constants (editor units)
X_STEP = 420
Y_STEP = 250
REGION_GAP = 800
MIN_GAP_RATIO = 0.7


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return int(math.floor(value + 0.5))


@dataclass
class LayoutInfo:
    """Layout state of a single node."""

    subtree_height: int = 0
    lanes: List[int] = field(default_factory=list)
    depth: int = 0
    pos_x: int = 0
    pos_y: int = 0

    @property
    def lane_start(self) -> int:
        return self.lanes[0] if self.lanes else 0

    @property
    def lane_end(self) -> int:
        return self.lanes[-1] if self.lanes else 0


class LayoutEngine:
    """Computes node positions for a ``SoundGraph``.

    Parameters
    ----------
    x_step : int
        Horizontal distance between depth columns (default: 420)
    y_step : int
        Vertical distance between lanes (default: 250)
    region_gap : int
        Vertical gap between the regions of separate roots (default: 800)
    min_gap_ratio : float
        Minimum vertical gap between nodes of one column, as a fraction of
        ``y_step`` (default: 0.7)

    Example
    -------
    >>> engine = LayoutEngine()
    >>> layout = engine.compute(graph)
    >>> layout[0].pos_x, layout[0].pos_y
    """

    def __init__(
        self,
        x_step: int = X_STEP,
        y_step: int = Y_STEP,
        region_gap: int = REGION_GAP,
        min_gap_ratio: float = MIN_GAP_RATIO,
    ) -> None:
        self.x_step = x_step
        self.y_step = y_step
        self.region_gap = region_gap
        self.min_gap_ratio = min_gap_ratio

    @property
    def min_vertical_gap(self) -> int:
        """Smallest whole gap not below ``y_step * min_gap_ratio``."""
        # round() first so float noise like 175.00000000000003 stays 175
        return math.ceil(round(self.y_step * self.min_gap_ratio, 6))

    @property
    def region_gap_lanes(self) -> int:
        return math.ceil(self.region_gap / self.y_step)

    def compute(self, graph: SoundGraph) -> Dict[int, LayoutInfo]:
        """Run every layout pass and return the per-node layout.

        Container records are not laid out and do not appear in the result.
        """
        layout = {i: LayoutInfo() for i in graph.live}
        roots = [r for r in graph.roots if r in layout]

        self.compute_heights(graph, layout, roots)
        self.assign_lanes(graph, layout, roots)
        self.compute_depths(graph, layout, roots)
        self.place(layout)
        self.resolve_collisions(layout)
        self.recenter(layout)
        return layout

    def compute_heights(
        self, graph: SoundGraph, layout: Dict[int, LayoutInfo], roots: List[int]
    ) -> None:
        """Compute subtree heights in lanes, memoized per node.

        A node reached again while its own height is still being computed
        returns its provisional height of 1, so cyclic input terminates.
        """
        done: Dict[int, bool] = {}

        # Post-order walk with an explicit stack of (index, children_done)
        stack = [(root, False) for root in reversed(roots)]
        while stack:
            index, children_done = stack.pop()
            info = layout[index]
            children = graph.children.get(index, [])
            if not children_done:
                if index in done:
                    continue
                done[index] = False
                info.subtree_height = 1
                stack.append((index, True))
                for child in reversed(children):
                    if child is not None and child not in done:
                        stack.append((child, False))
                continue
            total = 0
            for child in children:
                if child is None:
                    total += 1
                else:
                    total += max(1, layout[child].subtree_height)
            info.subtree_height = max(1, total)
            done[index] = True

    def assign_lanes(
        self, graph: SoundGraph, layout: Dict[int, LayoutInfo], roots: List[int]
    ) -> None:
        """Give each node a sorted list of lanes, children in slot order.

        Roots are stacked top to bottom, separated by ``region_gap_lanes``.
        A child shared by several parents ends up with the lanes of the
        last parent that visited it.
        """
        # Nodes on the current walk path, guards against cyclic input
        active = set()

        def assign(root: int, start: int) -> None:
            # Frames are (index, start, lanes); lanes is None on entry and
            # holds the parent's finished lanes on exit
            stack: List[Tuple[int, int, Optional[List[int]]]] = [(root, start, None)]
            while stack:
                index, start, lanes = stack.pop()
                info = layout[index]
                if lanes is not None:
                    active.discard(index)
                    info.lanes = lanes
                    continue
                children = graph.children.get(index, [])
                if not children or index in active:
                    info.lanes = [start]
                    continue
                active.add(index)
                cursor = start
                assigned = set()
                entries = []
                for child in children:
                    if child is None:
                        assigned.add(cursor)
                        cursor += 1
                        continue
                    span = max(1, layout[child].subtree_height or 1)
                    entries.append((child, cursor, None))
                    assigned.update(range(cursor, cursor + span))
                    cursor += span
                stack.append((index, start, sorted(assigned)))
                stack.extend(reversed(entries))

        cursor = 0
        for position, root in enumerate(roots):
            assign(root, cursor)
            cursor += layout[root].subtree_height
            if position < len(roots) - 1:
                cursor += self.region_gap_lanes

    def compute_depths(
        self, graph: SoundGraph, layout: Dict[int, LayoutInfo], roots: List[int]
    ) -> None:
        """Breadth-first depth from the roots, keeping the deepest level seen."""
        depth: Dict[int, Optional[int]] = {i: None for i in layout}
        queue: deque = deque()
        for root in roots:
            depth[root] = 0
            queue.append(root)

        limit = len(layout)
        while queue:
            current = queue.popleft()
            new_depth = (depth[current] or 0) + 1
            if new_depth > limit:
                continue
            for child in graph.children.get(current, []):
                if child is None or child not in depth:
                    continue
                known = depth[child]
                if known is None or new_depth > known:
                    depth[child] = new_depth
                    queue.append(child)

        for index, info in layout.items():
            info.depth = depth[index] or 0

    def place(self, layout: Dict[int, LayoutInfo]) -> None:
        """Convert depth and lanes into coordinates.

        X is inverted so depth 0 lands in the rightmost column. Y is the mean
        of the node's lane positions, centered on the global lane midpoint.
        """
        if not layout:
            return
        max_depth = max(info.depth for info in layout.values())

        laid = [info for info in layout.values() if info.lanes]
        if laid:
            min_lane = min(info.lane_start for info in laid)
            max_lane = max(info.lane_end for info in laid)
        else:
            min_lane = max_lane = 0
        center = (min_lane + max_lane) / 2

        def lane_to_y(lane: int) -> int:
            return round_half_up((lane - center) * self.y_step)

        for info in layout.values():
            info.pos_x = (max_depth - info.depth) * self.x_step
            if info.lanes:
                total = sum(lane_to_y(lane) for lane in info.lanes)
                info.pos_y = round_half_up(total / len(info.lanes))
            else:
                info.pos_y = 0

    def resolve_collisions(self, layout: Dict[int, LayoutInfo]) -> None:
        """Push nodes down within each column until neighbours are far enough apart.

        A single forward sweep per column, in ``pos_y`` order.
        """
        min_gap = self.min_vertical_gap
        columns: Dict[int, List[LayoutInfo]] = {}
        for info in layout.values():
            columns.setdefault(info.pos_x, []).append(info)

        for column in columns.values():
            column.sort(key=lambda info: info.pos_y)
            for prev, info in zip(column, column[1:]):
                if info.pos_y - prev.pos_y < min_gap:
                    info.pos_y = prev.pos_y + min_gap

    def recenter(self, layout: Dict[int, LayoutInfo]) -> None:
        """Shift all nodes vertically so the overall midpoint is 0."""
        if not layout:
            return
        ys = [info.pos_y for info in layout.values()]
        mid = (min(ys) + max(ys)) / 2
        for info in layout.values():
            info.pos_y = round_half_up(info.pos_y - mid)
