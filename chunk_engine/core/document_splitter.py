"""Document splitter facade: validate, split recursively, pack, attach metadata."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable, Mapping, Sequence

from chunk_engine.config.schemas import SplitterConfig, get_separators
from chunk_engine.config.settings import Settings
from chunk_engine.core.exceptions import DocumentInputError
from chunk_engine.core.models import Document, Fragment, TextSegment
from chunk_engine.core.packer import ChunkPacker, PackedChunk
from chunk_engine.core.recursive_splitter import RecursiveSplitter
from chunk_engine.core.separators import Separator
from chunk_engine.llm.token_utils import TiktokenTokenCountEstimator, get_estimator
from chunk_engine.utils.metadata_utils import enrich_metadata

logger = logging.getLogger(__name__)


class DocumentSplitter:
    """Split documents into token-bounded, overlapping text segments.

    The configuration is validated once, here; after that every call to
    :meth:`split` succeeds (under the default ``allow`` policy). Instances hold
    no per-call state and may be shared between threads.
    """

    def __init__(
        self,
        max_segment_size_in_tokens: int,
        max_overlap_size_in_tokens: int = 0,
        estimator: Any = None,
        separators: Sequence[Separator | Mapping[str, Any] | str] | None = None,
        oversized_policy: str = "allow",
        index_key: str | None = "index",
    ):
        """Initialize splitter.

        Args:
            max_segment_size_in_tokens: Budget for every segment.
            max_overlap_size_in_tokens: Budget for text repeated at the head of
                the next segment; 0 disables overlap.
            estimator: Object with ``estimate(text)`` or a ``text -> int``
                callable. Defaults to tiktoken ``cl100k_base``.
            separators: Hierarchy, coarsest first. Defaults to the ``prose`` preset.
            oversized_policy: ``allow`` or ``error``.
            index_key: Metadata key for the segment position, or None.

        Raises:
            ConfigurationError: If any setting violates its constraint.
        """
        config = SplitterConfig.create(
            max_segment_size_in_tokens=max_segment_size_in_tokens,
            max_overlap_size_in_tokens=max_overlap_size_in_tokens,
            separators=get_separators("prose") if separators is None else separators,
            estimator=TiktokenTokenCountEstimator() if estimator is None else estimator,
            oversized_policy=oversized_policy,
            index_key=index_key,
        )
        self._init_from_config(config)

    def _init_from_config(self, config: SplitterConfig) -> None:
        self.config = config
        self.splitter = RecursiveSplitter(
            separators=config.separators,
            estimator=config.estimator,
            max_tokens=config.max_segment_size_in_tokens,
            oversized_policy=config.oversized_policy,
        )
        self.packer = ChunkPacker(
            estimator=config.estimator,
            max_tokens=config.max_segment_size_in_tokens,
            max_overlap_tokens=config.max_overlap_size_in_tokens,
            splitter=self.splitter,
        )

    @classmethod
    def from_config(cls, config: SplitterConfig) -> "DocumentSplitter":
        instance = cls.__new__(cls)
        instance._init_from_config(config)
        return instance

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "DocumentSplitter":
        """Build a splitter from env-driven settings (module settings by default)."""
        if settings is None:
            from chunk_engine.config.settings import settings as default_settings

            settings = default_settings
        estimator = get_estimator(
            settings.token_estimator,
            encoding_name=settings.tiktoken_encoding,
            chars_per_token=settings.chars_per_token,
        )
        return cls(
            max_segment_size_in_tokens=settings.max_segment_size_tokens,
            max_overlap_size_in_tokens=settings.max_overlap_size_tokens,
            estimator=estimator,
            separators=get_separators(settings.separator_preset),
            oversized_policy=settings.oversized_policy,
            index_key=settings.segment_index_key or None,
        )

    def fragments(self, text: str) -> list[Fragment]:
        """Budget-fitting fragments of ``text`` before packing."""
        return self.splitter.split(text)

    def pack(self, text: str) -> list[PackedChunk]:
        """Packed chunks of ``text`` with their overlap and offset details."""
        if not text or not text.strip():
            return []
        return self.packer.pack(self.splitter.split(text))

    def split(self, document: Document) -> list[TextSegment]:
        """Split one document into ordered segments.

        Each segment's metadata is a copy of the document metadata plus the
        segment position under ``index_key`` (overriding any existing value).

        Raises:
            DocumentInputError: If ``document`` is not a Document.
        """
        if not isinstance(document, Document):
            raise DocumentInputError(f"Expected a Document, got {type(document).__name__}")

        chunks = self.pack(document.text)
        segments = [self._to_segment(chunk, i, document.metadata) for i, chunk in enumerate(chunks)]

        oversized = sum(1 for c in chunks if c.oversized)
        if oversized:
            logger.warning(
                "%d segment(s) exceed %d tokens: no finer separator applies",
                oversized,
                self.config.max_segment_size_in_tokens,
            )
        logger.debug("Split %d chars into %d segments", len(document.text), len(segments))
        return segments

    def split_text(self, text: str, metadata: Mapping[str, str] | None = None) -> list[TextSegment]:
        return self.split(Document(text, metadata or {}))

    def split_all(self, documents: Iterable[Document]) -> list[TextSegment]:
        """Split several documents, keeping document order then segment order."""
        segments: list[TextSegment] = []
        for document in documents:
            segments.extend(self.split(document))
        return segments

    async def split_async(self, document: Document) -> list[TextSegment]:
        """Run :meth:`split` in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.split, document)

    def _to_segment(self, chunk: PackedChunk, index: int, metadata: Mapping[str, str]) -> TextSegment:
        return TextSegment(chunk.text, enrich_metadata(metadata, index, self.config.index_key))


def recursive(
    max_segment_size_in_tokens: int,
    max_overlap_size_in_tokens: int,
    estimator: Any = None,
) -> DocumentSplitter:
    """Recursive splitter over the prose hierarchy."""
    return DocumentSplitter(
        max_segment_size_in_tokens=max_segment_size_in_tokens,
        max_overlap_size_in_tokens=max_overlap_size_in_tokens,
        estimator=estimator,
    )


def create_default_splitter() -> DocumentSplitter:
    """300-token segments with 30-token overlap, counted with tiktoken."""
    return recursive(300, 30, TiktokenTokenCountEstimator())
