"""Mapping of fields between nested dictionaries by dotted paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class FieldMapping:
    """Copy the value at ``source`` to ``destination`` (or to ``source`` when empty)."""

    source: str = ""
    destination: str = ""


def get_field_value(data: dict[str, Any], path: str) -> Any:
    """Return the value at a dotted path, or None if any step is missing."""
    *parents, last = path.split(".")
    current = data
    for part in parents:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            return None
        current = nxt
    return current.get(last)


def set_field_value(data: dict[str, Any], path: str, value: Any) -> None:
    """Set a value at a dotted path, creating or replacing intermediate mappings."""
    *parents, last = path.split(".")
    current = data
    for part in parents:
        nxt = current.get(part)
        if not isinstance(nxt, dict):
            nxt = {}
            current[part] = nxt
        current = nxt
    current[last] = value


@dataclass
class FieldMapper:
    field_maps: list[FieldMapping] = field(default_factory=list)

    def map_fields(self, source: dict[str, Any]) -> dict[str, Any]:
        """Build a new mapping holding only the mapped fields; no mappings returns the source."""
        if not self.field_maps:
            return source
        result: dict[str, Any] = {}
        for mapping in self.field_maps:
            value = get_field_value(source, mapping.source)
            if value is not None:
                set_field_value(result, mapping.destination or mapping.source, value)
        return result