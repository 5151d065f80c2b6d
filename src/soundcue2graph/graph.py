"""Reference resolution: turns slot-indexed child references into a graph."""

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Set, Tuple

from .log import get_logger
from .records import InputError, SourceRecord

logger = get_logger(__name__)

_REF_INDEX_PATTERN = re.compile(r"\.([0-9]+)$")


class CycleError(InputError):
    """Raised when child references form a cycle."""

    pass


@dataclass(frozen=True)
class Edge:
    """A resolved parent slot pointing at a child record."""

    parent: int
    slot: int
    child: int


def parse_ref_index(ref: Any) -> Optional[int]:
    """Extract the record index named by a reference.

    A reference is either a string such as ``"SoundNodeWavePlayer'Cue:Node.3'"``
    or an object exposing ``ObjectPath`` or ``ObjectName``. The trailing
    ``.<digits>`` is the target index.

    Returns
    -------
    int or None
        The index, or None if the reference has no numeric suffix.
    """
    if ref is None:
        return None
    if isinstance(ref, Mapping):
        ref = ref.get("ObjectPath") or ref.get("ObjectName")
        if ref is None:
            return None
    match = _REF_INDEX_PATTERN.search(str(ref).strip().rstrip("'"))
    if match is None:
        return None
    return int(match.group(1))


class SoundGraph:
    """Explicit dependency graph over a record list.

    Attributes
    ----------
    records : list of SourceRecord
        The input records, indexed by their position.
    children : dict of int to list of (int or None)
        For every record, its child slots in declared order. None marks an
        unresolved slot.
    roots : list of int
        Records never referenced as a child, in index order.
    """

    records: List[SourceRecord]
    children: Dict[int, List[Optional[int]]]
    roots: List[int]

    def __init__(
        self,
        records: Sequence[SourceRecord],
        children: Dict[int, List[Optional[int]]],
        roots: List[int],
    ) -> None:
        self.records = list(records)
        self.children = children
        self.roots = roots

    def __len__(self) -> int:
        return len(self.records)

    def __repr__(self) -> str:
        return f"SoundGraph(nodes={len(self.records)}, roots={self.roots})"

    @property
    def live(self) -> List[int]:
        """Indices of records that take part in the graph (non-containers)."""
        return [i for i, r in enumerate(self.records) if not r.is_container]

    def is_dead(self, index: int) -> bool:
        return self.records[index].is_container

    def slot_count(self, index: int) -> int:
        return self.records[index].slot_count

    def edges(self) -> Iterator[Edge]:
        """Yield every resolved edge, parents in index order, slots in order."""
        for parent in range(len(self.records)):
            for slot, child in enumerate(self.children.get(parent, [])):
                if child is not None:
                    yield Edge(parent, slot, child)

    def parents_of(self, index: int) -> List[Edge]:
        return [e for e in self.edges() if e.child == index]

    def detect_cycles(self) -> List[List[int]]:
        """Find cycles in the child-reference graph.

        Returns
        -------
        list of list of int
            Each inner list is a path of indices that returns to its first
            element. Empty if the graph is acyclic.
        """
        cycles = []
        visited: Set[int] = set()
        rec_stack: Set[int] = set()
        path: List[int] = []

        def enter(node: int) -> Tuple[int, Iterator[Optional[int]]]:
            visited.add(node)
            rec_stack.add(node)
            path.append(node)
            return node, iter(self.children.get(node, []))

        # Explicit stack: chains may be deeper than the recursion limit
        for start in range(len(self.records)):
            if start in visited:
                continue
            stack = [enter(start)]
            while stack:
                node, pending = stack[-1]
                for child in pending:
                    if child is None:
                        continue
                    if child not in visited:
                        stack.append(enter(child))
                        break
                    if child in rec_stack:
                        cycle_start = path.index(child)
                        cycles.append(path[cycle_start:] + [child])
                else:
                    stack.pop()
                    path.pop()
                    rec_stack.remove(node)

        return cycles

    def check_acyclic(self) -> None:
        """Raise ``CycleError`` if any cycle exists."""
        cycles = self.detect_cycles()
        if cycles:
            names = [" -> ".join(str(i) for i in cycle) for cycle in cycles]
            raise CycleError(f"Cyclic child references: {'; '.join(names)}")


def resolve_references(records: Sequence[SourceRecord]) -> SoundGraph:
    """Build the explicit graph for a record list.

    References that have no numeric suffix, point outside the record list,
    or point at the container record become unresolved slots. If every
    record is referenced by some other record, the first non-container
    record becomes the sole root.

    Raises
    ------
    InputError
        If ``records`` is empty or holds only container records.
    """
    if not records:
        raise InputError("Input must be a non-empty array of records")

    count = len(records)
    children: Dict[int, List[Optional[int]]] = {}
    referenced: Set[int] = set()

    for parent, record in enumerate(records):
        slots: List[Optional[int]] = []
        if record.is_container:
            children[parent] = slots
            continue
        for slot, ref in enumerate(record.child_refs):
            index = parse_ref_index(ref)
            if index is not None and (index >= count or records[index].is_container):
                index = None
            if index is None:
                logger.debug("unresolved_reference", parent=parent, slot=slot, ref=ref)
            else:
                referenced.add(index)
            slots.append(index)
        children[parent] = slots

    live = [i for i, r in enumerate(records) if not r.is_container]
    if not live:
        raise InputError("Input has no graph nodes, only SoundCue container records")
    roots = [i for i in live if i not in referenced]
    if not roots:
        roots = [live[0]]
        logger.debug("no_unreferenced_record", fallback_root=roots[0])

    return SoundGraph(records, children, roots)
