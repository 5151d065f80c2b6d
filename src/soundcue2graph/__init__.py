"""
soundcue2graph - SoundCue JSON to SoundCue graph text
=====================================================

Convert a flat SoundCue JSON export into the text the SoundCue editor
accepts on paste: laid-out graph nodes with linked pins.

Conversion example:
  >>> import json
  >>> from soundcue2graph import convert
  >>> with open('cue.json') as f:
  ...     text = convert(json.load(f), include_identity_tokens=False)
  >>> print(text)

Step-by-step example:
  >>> from soundcue2graph import LayoutEngine, load_records, resolve_references
  >>> graph = resolve_references(load_records(data))
  >>> layout = LayoutEngine().compute(graph)
  >>> layout[graph.roots[0]].pos_x
"""

__version__ = "0.1.0"

# Conversion
from .export import (
    SoundCueExport as SoundCueExport,
    ConversionContext as ConversionContext,
    GraphNode as GraphNode,
    LinkTable as LinkTable,
    convert as convert,
    convert_file as convert_file,
)

# Input and graph
from .records import (
    SourceRecord as SourceRecord,
    InputError as InputError,
    load_records as load_records,
    load_file as load_file,
)
from .graph import (
    SoundGraph as SoundGraph,
    Edge as Edge,
    CycleError as CycleError,
    parse_ref_index as parse_ref_index,
    resolve_references as resolve_references,
)

# Layout
from .layout import (
    LayoutEngine as LayoutEngine,
    LayoutInfo as LayoutInfo,
    X_STEP as X_STEP,
    Y_STEP as Y_STEP,
    REGION_GAP as REGION_GAP,
    MIN_GAP_RATIO as MIN_GAP_RATIO,
)

# Nodes and assets
from .nodes import (
    WavePlayerNode as WavePlayerNode,
    AttenuationNode as AttenuationNode,
    MixerNode as MixerNode,
    ModulatorNode as ModulatorNode,
    EnvelopeNode as EnvelopeNode,
    DelayNode as DelayNode,
    RandomNode as RandomNode,
    SoundCueNode as SoundCueNode,
    GenericNode as GenericNode,
    CurveKey as CurveKey,
    node_from_record as node_from_record,
)
from .assets import (
    resolve_asset_path as resolve_asset_path,
    normalize_asset_path as normalize_asset_path,
    asset_short_name as asset_short_name,
    DEFAULT_ATTENUATION_PATH as DEFAULT_ATTENUATION_PATH,
)
