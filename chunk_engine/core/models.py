"""Value objects passed through the splitting pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from chunk_engine.core.exceptions import DocumentInputError


def _frozen_metadata(metadata: Mapping[str, Any] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(metadata or {}))


@dataclass(frozen=True)
class Document:
    """Document text with metadata. Never mutated by the splitter."""

    text: str
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.text is None:
            raise DocumentInputError("Document text is required, got None")
        if not isinstance(self.text, str):
            raise DocumentInputError(f"Document text must be a string, got {type(self.text).__name__}")
        object.__setattr__(self, "metadata", _frozen_metadata(self.metadata))


@dataclass(frozen=True)
class Fragment:
    """Slice of the original text produced while splitting.

    ``start_offset`` indexes into the original document text, so
    ``text == document.text[start_offset:end_offset]`` always holds.
    """

    text: str
    start_offset: int

    @property
    def end_offset(self) -> int:
        return self.start_offset + len(self.text)


@dataclass(frozen=True)
class TextSegment:
    """Chunk of document text handed to the embedding/indexing pipeline."""

    text: str
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _frozen_metadata(self.metadata))
