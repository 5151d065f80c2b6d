"""
Input records for a SoundCue export.

A SoundCue export is a flat JSON list of objects. Each object carries a
``Type`` tag and an optional ``Properties`` bag; nodes point at each other
through ``Properties.ChildNodes`` entries whose trailing ``.<digits>`` names
the index of the target record.

Example usage:
    >>> from soundcue2graph.records import load_records
    >>> records = load_records([{"Type": "SoundNodeWavePlayer"}])
    >>> records[0].type_tag
    'SoundNodeWavePlayer'
"""

import json
from dataclasses import dataclass, field
from typing import Any, List, Mapping

UNKNOWN_TYPE = "SoundNodeUnknown"
CONTAINER_TYPE = "SoundCue"
EXPORTS_KEY = "Exports"


class InputError(ValueError):
    """Raised when the input is not a well-formed, non-empty record list."""

    pass


@dataclass(frozen=True)
class SourceRecord:
    """One exported object. Its position in the record list is its identity."""

    type_tag: str
    properties: Mapping[str, Any] = field(default_factory=dict)
    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_container(self) -> bool:
        return self.type_tag == CONTAINER_TYPE

    @property
    def child_refs(self) -> List[Any]:
        children = self.properties.get("ChildNodes")
        if isinstance(children, list):
            return children
        return []

    @property
    def slot_count(self) -> int:
        """Number of input slots: one per declared child reference, minimum 1."""
        return max(1, len(self.child_refs))


def _unwrap(data: Any) -> Any:
    if isinstance(data, Mapping) and EXPORTS_KEY in data:
        return data[EXPORTS_KEY]
    return data


def load_records(data: Any) -> List[SourceRecord]:
    """Normalize parsed JSON into a list of ``SourceRecord``.

    Parameters
    ----------
    data : list or dict
        The parsed export: either the record list itself or an object
        exposing it under ``Exports``.

    Returns
    -------
    list of SourceRecord

    Raises
    ------
    InputError
        If ``data`` is not a non-empty list of objects.
    """
    items = _unwrap(data)
    if not isinstance(items, list):
        raise InputError(
            f"Input must be a non-empty array of records, got {type(items).__name__}"
        )
    if not items:
        raise InputError("Input must be a non-empty array of records")

    records: List[SourceRecord] = []
    for index, item in enumerate(items):
        if not isinstance(item, Mapping):
            raise InputError(f"Record {index} is not an object ({type(item).__name__})")
        props = item.get("Properties")
        if props is None:
            props = {}
        elif not isinstance(props, Mapping):
            raise InputError(f"Record {index} has non-object Properties")
        type_tag = item.get("Type") or UNKNOWN_TYPE
        records.append(SourceRecord(str(type_tag), props, item))
    return records


def load_file(filepath: str) -> List[SourceRecord]:
    """Read a JSON export from disk and normalize it.

    Raises
    ------
    InputError
        If the file is not valid JSON or not a record list.
    """
    with open(filepath, encoding="utf-8") as f:
        content = f.read()
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise InputError(f"Invalid JSON in {filepath}: {e}") from e
    return load_records(data)
