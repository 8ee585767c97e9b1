"""Metadata utilities for documents and segments."""
from __future__ import annotations

from typing import Any, Mapping


def stringify_metadata(values: Mapping[Any, Any]) -> dict[str, str]:
    """Coerce metadata to string keys and values.

    ``None`` values are dropped and lists/tuples are joined with ", ", so
    frontmatter and LangChain metadata fit the string-to-string segment schema.

    Example:
        >>> stringify_metadata({"tags": ["a", "b"], "page": 3, "draft": None})
        {'tags': 'a, b', 'page': '3'}
    """
    out: dict[str, str] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            out[str(key)] = ", ".join(str(v) for v in value)
        else:
            out[str(key)] = str(value)
    return out


def enrich_metadata(base_meta: Mapping[str, str], chunk_index: int, index_key: str | None = "index") -> dict[str, str]:
    """Copy of ``base_meta`` with the segment position under ``index_key``."""
    enriched = dict(base_meta)
    if index_key:
        enriched[index_key] = str(chunk_index)
    return enriched
