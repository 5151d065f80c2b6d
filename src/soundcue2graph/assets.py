"""Locate external asset references inside loosely-typed property bags."""

import re
from typing import Any, Mapping, Optional, Sequence

SOUND_WAVE_KEYS = ("SoundWaveAssetPtr", "SoundWave", "SoundWaveAsset", "Wave")

ATTENUATION_KEYS = (
    "AttenuationSettings",
    "AttenuationAsset",
    "SoundAttenuation",
    "Attenuation",
    "AttenuationPreset",
    "AttenuationObject",
    "AttenuationPath",
    "AttenuationName",
)

# Object fields that may carry an asset path, in lookup order
ASSET_PATH_FIELDS = ("ObjectPath", "AssetPathName", "Asset")

DEFAULT_ATTENUATION_PATH = (
    "/Game/Sounds/Attenuation/Default_Attenuation.Default_Attenuation"
)

_NUMERIC_SUFFIX = re.compile(r"\.\d+$")
_IDENTIFIER_SUFFIX = re.compile(r"\.[A-Za-z_][A-Za-z0-9_]*$")
# Class-qualified references: SoundWave'/Game/A/Boom.Boom'
_CLASS_WRAPPED = re.compile(r"^[^']*'(.+)'$")


def normalize_asset_path(value: str) -> Optional[str]:
    """Normalize a candidate string to ``/Path/To/Asset.Asset`` form.

    Path-like strings lose a trailing ``.<digits>`` export index and gain
    ``.<lastSegment>`` when their last segment has no dot. Strings without a
    ``/`` are accepted only when they already end in ``.<identifier>``.

    Returns
    -------
    str or None
        The normalized path, or None if the string does not look like one.
    """
    text = value.strip()
    wrapped = _CLASS_WRAPPED.match(text)
    if wrapped:
        text = wrapped.group(1)
    if "/" in text:
        text = _NUMERIC_SUFFIX.sub("", text).rstrip("/")
        last = text.split("/")[-1]
        if not last:
            return None
        if "." not in last:
            text = f"{text}.{last}"
        return text
    if _IDENTIFIER_SUFFIX.search(text):
        return text
    return None


def _from_value(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return normalize_asset_path(value)
    if isinstance(value, Mapping):
        for name in ASSET_PATH_FIELDS:
            candidate = value.get(name)
            if isinstance(candidate, str) and candidate.strip():
                resolved = normalize_asset_path(candidate)
                if resolved:
                    return resolved
    return None


def resolve_asset_path(props: Mapping[str, Any], keys: Sequence[str]) -> Optional[str]:
    """Return the first asset path found under ``keys``, in priority order.

    Parameters
    ----------
    props : mapping
        Property bag of a record
    keys : sequence of str
        Candidate keys, highest priority first

    Returns
    -------
    str or None
        The normalized asset path. Callers supply their own fallback.
    """
    if not isinstance(props, Mapping):
        return None
    for key in keys:
        value = props.get(key)
        if not value:
            continue
        resolved = _from_value(value)
        if resolved:
            return resolved
    return None


def asset_short_name(path: Optional[str]) -> str:
    """Short display name of an asset path: ``/Game/A/Boom.Boom`` -> ``Boom``."""
    if not path:
        return ""
    last = path.rstrip("/").split("/")[-1]
    return last.split(".")[-1]
