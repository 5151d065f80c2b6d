"""
Typed SoundCue node categories.

Each supported engine node type maps to a frozen dataclass with named,
validated fields built from the record's property bag. Unrecognized types
become ``GenericNode``, which renders only the mandatory fields.

Example usage:
    >>> from soundcue2graph.nodes import node_from_record
    >>> node = node_from_record(record)
    >>> node.property_lines()
    ['PitchMin=0.950000', 'PitchMax=1.050000']
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Type, Union

from .assets import (
    ATTENUATION_KEYS,
    DEFAULT_ATTENUATION_PATH,
    SOUND_WAVE_KEYS,
    asset_short_name,
    resolve_asset_path,
)
from .log import get_logger
from .records import CONTAINER_TYPE, SourceRecord

logger = get_logger(__name__)

UNRESOLVED_WAVE_MARKER = "/* SoundWaveAssetPtr unresolved for this WavePlayer */"


def format_float(value: float) -> str:
    """Render a number with six decimals, never as ``-0.000000``."""
    if value == 0:
        value = 0.0
    return f"{value:.6f}"


def format_bool(value: bool) -> str:
    return "True" if value else "False"


def _parse_float(value: Any, default: float = 0.0) -> float:
    """Parse a float, returning default on failure."""
    try:
        return float(value)
    except (ValueError, TypeError):
        return default


def _parse_int(value: Any, default: int = 0) -> int:
    """Parse an integer, returning default on failure."""
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def _parse_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


def _optional_float(props: Mapping[str, Any], key: str) -> Optional[float]:
    if props.get(key) is None:
        return None
    return _parse_float(props[key])


def _per_slot(values: Any, slot_count: int, default: float = 1.0) -> Tuple[float, ...]:
    """One float per slot, taken from ``values`` where present."""
    items = values if isinstance(values, list) else []
    return tuple(
        _parse_float(items[i], default) if i < len(items) else default
        for i in range(slot_count)
    )


# Curves


@dataclass(frozen=True)
class CurveKey:
    """A single key of a rich curve."""

    time: float = 0.0
    value: float = 0.0
    interp_mode: str = "RCIM_Linear"
    tangent_mode: str = "RCTM_Auto"
    tangent_weight_mode: str = "RCTWM_WeightedNone"
    arrive_tangent: float = 0.0
    arrive_tangent_weight: float = 0.0
    leave_tangent: float = 0.0
    leave_tangent_weight: float = 0.0

    @classmethod
    def from_properties(cls, props: Mapping[str, Any]) -> "CurveKey":
        return cls(
            time=_parse_float(props.get("Time")),
            value=_parse_float(props.get("Value")),
            interp_mode=str(props.get("InterpMode") or "RCIM_Linear"),
            tangent_mode=str(props.get("TangentMode") or "RCTM_Auto"),
            tangent_weight_mode=str(props.get("TangentWeightMode") or "RCTWM_WeightedNone"),
            arrive_tangent=_parse_float(props.get("ArriveTangent")),
            arrive_tangent_weight=_parse_float(props.get("ArriveTangentWeight")),
            leave_tangent=_parse_float(props.get("LeaveTangent")),
            leave_tangent_weight=_parse_float(props.get("LeaveTangentWeight")),
        )

    def __str__(self) -> str:
        return (
            f"(InterpMode={self.interp_mode},TangentMode={self.tangent_mode},"
            f"TangentWeightMode={self.tangent_weight_mode},"
            f"Time={format_float(self.time)},Value={format_float(self.value)},"
            f"ArriveTangent={format_float(self.arrive_tangent)},"
            f"ArriveTangentWeight={format_float(self.arrive_tangent_weight)},"
            f"LeaveTangent={format_float(self.leave_tangent)},"
            f"LeaveTangentWeight={format_float(self.leave_tangent_weight)})"
        )


def _parse_curve(value: Any) -> Tuple[CurveKey, ...]:
    """Accepts ``{EditorCurveData: {Keys: [...]}}``, ``{Keys: [...]}`` or a list."""
    if isinstance(value, Mapping):
        value = value.get("EditorCurveData", value)
    if isinstance(value, Mapping):
        value = value.get("Keys")
    if not isinstance(value, list):
        return ()
    return tuple(CurveKey.from_properties(k) for k in value if isinstance(k, Mapping))


def _curve_str(keys: Tuple[CurveKey, ...]) -> str:
    return f"(EditorCurveData=(Keys=({','.join(str(k) for k in keys)})))"


# Node categories


@dataclass(frozen=True)
class WavePlayerNode:
    """Plays a sound wave asset (``SoundNodeWavePlayer``)."""

    type_tag: ClassVar[str] = "SoundNodeWavePlayer"

    sound_wave: Optional[str] = None
    looping: bool = False

    @classmethod
    def from_record(cls, record: SourceRecord) -> "WavePlayerNode":
        props = record.properties
        sound_wave = resolve_asset_path(props, SOUND_WAVE_KEYS)
        if sound_wave is None:
            sound_wave = resolve_asset_path(record.raw, ("SoundWave",))
        if sound_wave is None:
            logger.debug("asset_unresolved", type_tag=cls.type_tag)
        return cls(sound_wave=sound_wave, looping=_parse_bool(props.get("bLooping")))

    @property
    def comment(self) -> str:
        return asset_short_name(self.sound_wave)

    def property_lines(self) -> List[str]:
        if self.sound_wave:
            lines = [f'SoundWaveAssetPtr="{self.sound_wave}"']
        else:
            lines = [UNRESOLVED_WAVE_MARKER]
        lines.append(f"bLooping={format_bool(self.looping)}")
        return lines


@dataclass(frozen=True)
class AttenuationNode:
    """Applies attenuation settings (``SoundNodeAttenuation``)."""

    type_tag: ClassVar[str] = "SoundNodeAttenuation"

    attenuation: Optional[str] = None
    override_attenuation: Optional[bool] = None

    @classmethod
    def from_record(cls, record: SourceRecord) -> "AttenuationNode":
        props = record.properties
        attenuation = resolve_asset_path(props, ATTENUATION_KEYS)
        if attenuation is None:
            logger.debug(
                "asset_unresolved", type_tag=cls.type_tag, fallback=DEFAULT_ATTENUATION_PATH
            )
        override = props.get("bOverrideAttenuation")
        return cls(
            attenuation=attenuation,
            override_attenuation=None if override is None else _parse_bool(override),
        )

    @property
    def attenuation_path(self) -> str:
        return self.attenuation or DEFAULT_ATTENUATION_PATH

    @property
    def comment(self) -> str:
        return asset_short_name(self.attenuation)

    def property_lines(self) -> List[str]:
        lines = [f"AttenuationSettings=\"/Script/Engine.SoundAttenuation'{self.attenuation_path}'\""]
        if self.override_attenuation is not None:
            lines.append(f"bOverrideAttenuation={format_bool(self.override_attenuation)}")
        return lines


@dataclass(frozen=True)
class MixerNode:
    """Mixes its inputs with one volume per slot (``SoundNodeMixer``)."""

    type_tag: ClassVar[str] = "SoundNodeMixer"

    input_volume: Tuple[float, ...] = ()

    @classmethod
    def from_record(cls, record: SourceRecord) -> "MixerNode":
        volumes = _per_slot(record.properties.get("InputVolume"), record.slot_count)
        return cls(input_volume=volumes)

    def property_lines(self) -> List[str]:
        return [f"InputVolume({i})={format_float(v)}" for i, v in enumerate(self.input_volume)]


@dataclass(frozen=True)
class ModulatorNode:
    """Randomizes pitch and volume (``SoundNodeModulator``)."""

    type_tag: ClassVar[str] = "SoundNodeModulator"

    pitch_min: Optional[float] = None
    pitch_max: Optional[float] = None
    volume_min: Optional[float] = None
    volume_max: Optional[float] = None

    @classmethod
    def from_record(cls, record: SourceRecord) -> "ModulatorNode":
        props = record.properties
        return cls(
            pitch_min=_optional_float(props, "PitchMin"),
            pitch_max=_optional_float(props, "PitchMax"),
            volume_min=_optional_float(props, "VolumeMin"),
            volume_max=_optional_float(props, "VolumeMax"),
        )

    def property_lines(self) -> List[str]:
        fields = (
            ("PitchMin", self.pitch_min),
            ("PitchMax", self.pitch_max),
            ("VolumeMin", self.volume_min),
            ("VolumeMax", self.volume_max),
        )
        return [f"{name}={format_float(value)}" for name, value in fields if value is not None]


@dataclass(frozen=True)
class EnvelopeNode:
    """Volume and pitch envelope with optional looping (``SoundNodeEnveloper``)."""

    type_tag: ClassVar[str] = "SoundNodeEnveloper"

    loop_start: float = 0.0
    loop_end: float = 0.0
    duration_after_loop: float = 0.0
    loop_count: int = 0
    loop_indefinitely: bool = False
    loop: bool = False
    volume_curve: Tuple[CurveKey, ...] = field(default_factory=tuple)
    pitch_curve: Tuple[CurveKey, ...] = field(default_factory=tuple)

    @classmethod
    def from_record(cls, record: SourceRecord) -> "EnvelopeNode":
        props = record.properties
        return cls(
            loop_start=_parse_float(props.get("LoopStart")),
            loop_end=_parse_float(props.get("LoopEnd")),
            duration_after_loop=_parse_float(props.get("DurationAfterLoop")),
            loop_count=_parse_int(props.get("LoopCount")),
            loop_indefinitely=_parse_bool(props.get("bLoopIndefinitely")),
            loop=_parse_bool(props.get("bLoop")),
            volume_curve=_parse_curve(props.get("VolumeCurve")),
            pitch_curve=_parse_curve(props.get("PitchCurve")),
        )

    def property_lines(self) -> List[str]:
        return [
            f"LoopStart={format_float(self.loop_start)}",
            f"LoopEnd={format_float(self.loop_end)}",
            f"DurationAfterLoop={format_float(self.duration_after_loop)}",
            f"LoopCount={self.loop_count}",
            f"bLoopIndefinitely={format_bool(self.loop_indefinitely)}",
            f"bLoop={format_bool(self.loop)}",
            f"VolumeCurve={_curve_str(self.volume_curve)}",
            f"PitchCurve={_curve_str(self.pitch_curve)}",
        ]


@dataclass(frozen=True)
class DelayNode:
    """Random delay before playback (``SoundNodeDelay``)."""

    type_tag: ClassVar[str] = "SoundNodeDelay"

    delay_min: float = 0.0
    delay_max: float = 0.0

    @classmethod
    def from_record(cls, record: SourceRecord) -> "DelayNode":
        props = record.properties
        return cls(
            delay_min=_parse_float(props.get("DelayMin")),
            delay_max=_parse_float(props.get("DelayMax")),
        )

    def property_lines(self) -> List[str]:
        return [
            f"DelayMin={format_float(self.delay_min)}",
            f"DelayMax={format_float(self.delay_max)}",
        ]


@dataclass(frozen=True)
class RandomNode:
    """Picks one branch at random, weighted per slot (``SoundNodeRandom``)."""

    type_tag: ClassVar[str] = "SoundNodeRandom"

    weights: Tuple[float, ...] = ()
    randomize_without_replacement: bool = True

    @classmethod
    def from_record(cls, record: SourceRecord) -> "RandomNode":
        props = record.properties
        return cls(
            weights=_per_slot(props.get("Weights"), record.slot_count),
            randomize_without_replacement=_parse_bool(
                props.get("bRandomizeWithoutReplacement"), True
            ),
        )

    def property_lines(self) -> List[str]:
        lines = [f"Weights({i})={format_float(w)}" for i, w in enumerate(self.weights)]
        lines.append(
            f"bRandomizeWithoutReplacement={format_bool(self.randomize_without_replacement)}"
        )
        return lines


@dataclass(frozen=True)
class SoundCueNode:
    """The top-level container. Keeps its index but is never rendered."""

    type_tag: ClassVar[str] = CONTAINER_TYPE

    @classmethod
    def from_record(cls, record: SourceRecord) -> "SoundCueNode":
        return cls()

    def property_lines(self) -> List[str]:
        return []


@dataclass(frozen=True)
class GenericNode:
    """Any other node type; renders only the mandatory fields."""

    type_tag: str = "SoundNodeUnknown"

    @classmethod
    def from_record(cls, record: SourceRecord) -> "GenericNode":
        return cls(type_tag=record.type_tag)

    def property_lines(self) -> List[str]:
        return []


SoundNode = Union[
    WavePlayerNode,
    AttenuationNode,
    MixerNode,
    ModulatorNode,
    EnvelopeNode,
    DelayNode,
    RandomNode,
    SoundCueNode,
    GenericNode,
]

# Type tag -> node category
NODE_TYPE_REGISTRY: Dict[str, Type[Any]] = {
    cls.type_tag: cls
    for cls in (
        WavePlayerNode,
        AttenuationNode,
        MixerNode,
        ModulatorNode,
        EnvelopeNode,
        DelayNode,
        RandomNode,
        SoundCueNode,
    )
}

# Categories whose annotation is the name of the asset they reference
ASSET_NODE_TYPES = (WavePlayerNode, AttenuationNode)


def node_from_record(record: SourceRecord) -> SoundNode:
    """Build the typed node for a record, falling back to ``GenericNode``."""
    cls = NODE_TYPE_REGISTRY.get(record.type_tag)
    if cls is None:
        logger.debug("unknown_node_type", type_tag=record.type_tag)
        return GenericNode.from_record(record)
    return cls.from_record(record)
