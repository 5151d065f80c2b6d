"""
SoundCue graph text export.

Turns a record list into the clipboard text format the SoundCue editor pastes:
one ``SoundCueGraphNode`` block per node, with positions from the layout
engine and symmetric pin links for every resolved edge.

All identifiers (node GUIDs, pin ids) and all links are computed before any
text is produced, so every block is rendered exactly once.

Example usage:
    >>> from soundcue2graph import convert
    >>> text = convert(json.load(open('cue.json')), include_identity_tokens=False)
"""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .assets import normalize_asset_path
from .graph import SoundGraph, resolve_references
from .layout import LayoutEngine, LayoutInfo
from .log import get_logger
from .nodes import ASSET_NODE_TYPES, SoundNode, format_bool, node_from_record
from .records import CONTAINER_TYPE, SourceRecord, load_file, load_records

logger = get_logger(__name__)

GRAPH_NODE_CLASS = "/Script/AudioEditor.SoundCueGraphNode"
ENGINE_NAMESPACE = "/Script/Engine"
DEFAULT_EXPORT_BASE = "/Game/NewSoundCue.NewSoundCue"
ZERO_GUID = "0" * 32
ROOT_COMMENT = "Output"
INDENT = "   "


class ConversionContext:
    """Per-conversion state: identity token generator and name counters.

    Parameters
    ----------
    include_identity_tokens : bool
        If False, every ``NodeGuid`` is the all-zero placeholder. Pin ids are
        still generated since links depend on them.
    seed : int, optional
        Seed for the token generator. The same seed and input always give
        byte-identical output.
    """

    def __init__(self, include_identity_tokens: bool = True, seed: Optional[int] = None) -> None:
        self.include_identity_tokens = include_identity_tokens
        self.rng = random.Random(seed)
        self._counters: Dict[str, int] = {}

    def token(self) -> str:
        """A fresh 128-bit identifier as 32 uppercase hex digits."""
        return f"{self.rng.getrandbits(128):032X}"

    def node_guid(self) -> str:
        if not self.include_identity_tokens:
            return ZERO_GUID
        return self.token()

    def next_name(self, type_tag: str) -> str:
        """Rendered node name, ordinals counted per type: ``SoundNodeMixer_0``."""
        ordinal = self._counters.get(type_tag, 0)
        self._counters[type_tag] = ordinal + 1
        return f"{type_tag}_{ordinal}"


@dataclass
class GraphNode:
    """Identifiers of one node in the exported graph."""

    index: int
    type_tag: str
    name: str
    guid: str
    output_pin: str
    input_pins: List[str]
    node: SoundNode

    @property
    def graph_name(self) -> str:
        return f"SoundCueGraphNode_{self.index}"

    @property
    def is_dead(self) -> bool:
        return self.type_tag == CONTAINER_TYPE

    def input_pin_name(self, slot: int) -> str:
        return "Input" if slot == 0 else f"Input{slot + 1}"


def build_graph_nodes(graph: SoundGraph, context: ConversionContext) -> Dict[int, GraphNode]:
    """Assign names and identifiers to every record, in index order."""
    nodes: Dict[int, GraphNode] = {}
    for index, record in enumerate(graph.records):
        nodes[index] = GraphNode(
            index=index,
            type_tag=record.type_tag,
            name=context.next_name(record.type_tag),
            guid=context.node_guid(),
            output_pin=context.token(),
            input_pins=[context.token() for _ in range(record.slot_count)],
            node=node_from_record(record),
        )
    return nodes


@dataclass
class LinkTable:
    """``LinkedTo`` entries of every pin, derived from the graph's edges.

    Each edge ``(parent, slot, child)`` appears twice: the parent's slot-th
    input links to the child's output, and the child's output links back to
    that input. Outputs accumulate one entry per referencing parent slot.
    """

    inputs: Dict[Tuple[int, int], List[str]] = field(default_factory=dict)
    outputs: Dict[int, List[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, graph: SoundGraph, nodes: Dict[int, GraphNode]) -> "LinkTable":
        table = cls()
        for edge in graph.edges():
            parent = nodes[edge.parent]
            child = nodes[edge.child]
            input_pin = parent.input_pins[edge.slot]
            table.inputs.setdefault((edge.parent, edge.slot), []).append(
                f"{child.graph_name} {child.output_pin}"
            )
            table.outputs.setdefault(edge.child, []).append(f"{parent.graph_name} {input_pin}")
        return table

    def input_links(self, index: int, slot: int) -> List[str]:
        return self.inputs.get((index, slot), [])

    def output_links(self, index: int) -> List[str]:
        return self.outputs.get(index, [])


def _linked_to(entries: Sequence[str]) -> str:
    return "".join(f"{entry}," for entry in entries)


def export_base_path(records: Sequence[SourceRecord]) -> str:
    """Asset path of the cue, taken from the first ``SoundCue`` record.

    Falls back to ``/Game/NewSoundCue.NewSoundCue``.
    """
    for record in records:
        if not record.is_container:
            continue
        first = record.properties.get("FirstNode")
        candidate = None
        if isinstance(first, Mapping):
            candidate = first.get("ObjectPath") or first.get("ObjectName")
        candidate = candidate or record.raw.get("Name")
        if isinstance(candidate, str) and candidate.strip():
            resolved = normalize_asset_path(candidate)
            if resolved is None:
                last = candidate.strip()
                resolved = f"{last}.{last}"
            return resolved
        break
    return DEFAULT_EXPORT_BASE


class SoundCueExport:
    """A SoundCue record list prepared for export.

    Resolves references, lays out the graph, assigns identifiers and builds
    the link table on construction. ``str()`` renders the editor text.

    Parameters
    ----------
    records : sequence of SourceRecord
        The normalized input records
    include_identity_tokens : bool
        Render random node GUIDs (default: True)
    seed : int, optional
        Seed for identifier generation
    layout : LayoutEngine, optional
        Layout engine to use instead of the default one

    Raises
    ------
    InputError
        If ``records`` is empty.
    CycleError
        If child references form a cycle.

    Example
    -------
    >>> export = SoundCueExport(load_records(data), seed=0)
    >>> export.save('SoundCueGraph.txt')
    """

    graph: SoundGraph
    nodes: Dict[int, GraphNode]
    layout: Dict[int, LayoutInfo]
    links: LinkTable
    base_path: str

    def __init__(
        self,
        records: Sequence[SourceRecord],
        include_identity_tokens: bool = True,
        seed: Optional[int] = None,
        layout: Optional[LayoutEngine] = None,
    ) -> None:
        self.graph = resolve_references(records)
        self.graph.check_acyclic()
        self.context = ConversionContext(include_identity_tokens, seed)
        self.base_path = export_base_path(self.graph.records)
        self.layout = (layout or LayoutEngine()).compute(self.graph)
        self.nodes = build_graph_nodes(self.graph, self.context)
        self.links = LinkTable.build(self.graph, self.nodes)

    def __str__(self) -> str:
        return "".join(self.blocks())

    def __repr__(self) -> str:
        return f"SoundCueExport(nodes={len(self.nodes)}, roots={self.graph.roots})"

    def engine_path(self, graph_node: GraphNode) -> str:
        return (
            f"{ENGINE_NAMESPACE}.{graph_node.type_tag}'{self.base_path}:SoundCueGraph_0."
            f"{graph_node.graph_name}.{graph_node.name}'"
        )

    def comment(self, graph_node: GraphNode) -> str:
        """Visible annotation of a node.

        Asset players and attenuation nodes show their asset's short name;
        otherwise roots show ``Output`` and everything else nothing.
        """
        if isinstance(graph_node.node, ASSET_NODE_TYPES):
            return graph_node.node.comment
        if graph_node.index in self.graph.roots:
            return ROOT_COMMENT
        return ""

    def blocks(self) -> List[str]:
        """Rendered blocks in index order, skipping the container record."""
        return [
            self.serialize_node(graph_node)
            for graph_node in self.nodes.values()
            if not graph_node.is_dead
        ]

    def serialize_node(self, graph_node: GraphNode) -> str:
        """Render one ``SoundCueGraphNode`` block."""
        index = graph_node.index
        info = self.layout[index]
        engine_path = self.engine_path(graph_node)
        comment = self.comment(graph_node)

        lines = [
            f'Begin Object Class={GRAPH_NODE_CLASS} Name="{graph_node.graph_name}" '
            f"ExportPath=\"{GRAPH_NODE_CLASS}'{self.base_path}:SoundCueGraph_0."
            f"{graph_node.graph_name}'\"",
            f"{INDENT}Begin Object Class={ENGINE_NAMESPACE}.{graph_node.type_tag} "
            f'Name="{graph_node.name}" ExportPath="{engine_path}">',
            f"{INDENT}End Object",
            f'{INDENT}Begin Object Name="{graph_node.name}" ExportPath="{engine_path}"',
        ]
        body = list(graph_node.node.property_lines())
        body.append(f"GraphNode=\"{GRAPH_NODE_CLASS}'{graph_node.graph_name}'\"")
        for slot, child_index in enumerate(self.graph.children.get(index, [])):
            if child_index is None:
                body.append(f"ChildNodes({slot})=None")
            else:
                child_path = self.engine_path(self.nodes[child_index])
                body.append(f'ChildNodes({slot})="{child_path}"')
        lines.extend(f"{INDENT}{INDENT}{line}" for line in body)
        lines.extend(
            [
                f"{INDENT}End Object",
                f"{INDENT}SoundNode=\"{ENGINE_NAMESPACE}.{graph_node.type_tag}'{graph_node.name}'\"",
                f"{INDENT}NodePosX={info.pos_x}",
                f"{INDENT}NodePosY={info.pos_y}",
                f"{INDENT}bCommentBubbleVisible={format_bool(bool(comment))}",
                f'{INDENT}NodeComment="{comment}"',
                f"{INDENT}NodeGuid={graph_node.guid}",
                f"{INDENT}CustomProperties Pin (PinId={graph_node.output_pin},"
                f'PinName="Output",Direction="EGPD_Output",PinType.PinCategory="SoundNode",'
                f'PinType.PinSubCategory="",'
                f"LinkedTo=({_linked_to(self.links.output_links(index))}),"
                f"PersistentGuid={ZERO_GUID},)",
            ]
        )
        for slot, pin in enumerate(graph_node.input_pins):
            lines.append(
                f"{INDENT}CustomProperties Pin (PinId={pin},"
                f'PinName="{graph_node.input_pin_name(slot)}",PinFriendlyName=" ",'
                f'PinType.PinCategory="SoundNode",PinType.PinSubCategory="",'
                f"LinkedTo=({_linked_to(self.links.input_links(index, slot))}),"
                f"PersistentGuid={ZERO_GUID},)"
            )
        lines.append("End Object")
        return "\n".join(lines) + "\n\n"

    def save(self, filename: str) -> None:
        """Write the exported text to ``filename``."""
        with open(filename, "w", encoding="utf-8") as f:
            f.write(str(self))


def convert(
    data: Any,
    include_identity_tokens: bool = True,
    *,
    seed: Optional[int] = None,
    layout: Optional[LayoutEngine] = None,
) -> str:
    """Convert a parsed SoundCue JSON export into SoundCue graph text.

    Parameters
    ----------
    data : list or dict
        Parsed JSON: the record list, or an object with an ``Exports`` list
    include_identity_tokens : bool
        Render random node GUIDs; False renders the all-zero placeholder
    seed : int, optional
        Seed for identifier generation, for reproducible output
    layout : LayoutEngine, optional
        Custom layout engine

    Returns
    -------
    str
        The complete export text.

    Raises
    ------
    InputError
        If ``data`` is not a non-empty record list, or is cyclic.
    """
    records = load_records(data)
    export = SoundCueExport(records, include_identity_tokens, seed=seed, layout=layout)
    text = str(export)
    logger.debug(
        "conversion_complete",
        records=len(records),
        roots=export.graph.roots,
        edges=sum(1 for _ in export.graph.edges()),
    )
    return text


def convert_file(
    filepath: str,
    include_identity_tokens: bool = True,
    *,
    seed: Optional[int] = None,
) -> str:
    """Read a JSON export from disk and convert it."""
    records = load_file(filepath)
    return str(SoundCueExport(records, include_identity_tokens, seed=seed))
