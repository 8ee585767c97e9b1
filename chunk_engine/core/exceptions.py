"""Exceptions raised by the document splitter."""
from __future__ import annotations


class ChunkEngineError(Exception):
    """Base class for all splitter errors."""


class ConfigurationError(ChunkEngineError, ValueError):
    """Splitter configuration violates a constraint; raised before any splitting."""


class DocumentInputError(ChunkEngineError, ValueError):
    """Document text is missing or is not a string."""


class OversizedFragmentError(ChunkEngineError):
    """A fragment exceeds the budget at the finest separator level.

    Only raised when the splitter is configured with ``oversized_policy="error"``.
    """

    def __init__(self, text: str, tokens: int, limit: int, start_offset: int):
        preview = text[:40] + ("..." if len(text) > 40 else "")
        super().__init__(
            f"Fragment at offset {start_offset} has {tokens} tokens, "
            f"exceeding the limit of {limit}: {preview!r}"
        )
        self.tokens = tokens
        self.limit = limit
        self.start_offset = start_offset
