"""Turning opaque record cells into short, readable text."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ...store.models import FieldValue

SNIPPET_MAX_CHARS = 400
SNIPPET_MAX_FIELDS = 8


def stringify_value(value: FieldValue) -> str:
    """Render any cell value as text; total over every JSON-like shape."""

    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float, str)):
        return str(value)
    if isinstance(value, (list, tuple)):
        parts = (stringify_value(item) for item in value)
        return ", ".join(part for part in parts if part)
    if isinstance(value, dict):
        # attachments, linked records, collaborators, ...
        try:
            return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        except (TypeError, ValueError):
            return ""
    return ""


def select_snippet_fields(
    fields: Mapping[str, Any],
    primary_field_name: Optional[str],
    priority_names: Sequence[str],
    limit: int = SNIPPET_MAX_FIELDS,
) -> List[str]:
    """Pick up to *limit* field names worth showing, most meaningful first."""

    selected: List[str] = []
    seen = set()
    candidates = [primary_field_name] if primary_field_name else []
    candidates.extend(priority_names)
    for name in candidates:
        if len(selected) >= limit:
            return selected
        if name in seen or name not in fields:
            continue
        seen.add(name)
        selected.append(name)
    for name, value in fields.items():
        if len(selected) >= limit:
            break
        if name in seen:
            continue
        if stringify_value(value):
            seen.add(name)
            selected.append(name)
    return selected


def build_snippet(
    fields: Mapping[str, Any],
    primary_field_name: Optional[str],
    priority_names: Sequence[str],
    max_chars: int = SNIPPET_MAX_CHARS,
) -> str:
    names = select_snippet_fields(fields, primary_field_name, priority_names)
    text = " | ".join(f"{name}: {stringify_value(fields[name])}" for name in names)
    if not text:
        text = dump_fields(fields)
    return text[:max_chars]


def dump_fields(fields: Mapping[str, Any]) -> str:
    return json.dumps(dict(fields), ensure_ascii=False, default=str)


def primary_value(fields: Dict[str, Any], primary_field_name: Optional[str]) -> str:
    if not primary_field_name:
        return ""
    return stringify_value(fields.get(primary_field_name))


__all__ = [
    "SNIPPET_MAX_CHARS",
    "SNIPPET_MAX_FIELDS",
    "build_snippet",
    "dump_fields",
    "primary_value",
    "select_snippet_fields",
    "stringify_value",
]
