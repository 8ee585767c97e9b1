"""Greedy packing of budget-fitting fragments into overlapping chunks."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from chunk_engine.core.models import Fragment
from chunk_engine.core.recursive_splitter import RecursiveSplitter
from chunk_engine.llm.token_utils import TokenCountEstimator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PackedChunk:
    """Chunk text plus where it came from.

    ``text[:overlap_length]`` is the overlap carried over from the previous
    chunk; it is always a suffix of that chunk's own (non-overlap) text.
    """

    text: str
    start_offset: int
    overlap_length: int = 0
    oversized: bool = False

    @property
    def overlap(self) -> str:
        return self.text[: self.overlap_length]


def _join(fragments: Sequence[Fragment]) -> str:
    return "".join(f.text for f in fragments)


class ChunkPacker:
    """Merge consecutive fragments into chunks as large as the budget allows.

    Token counts are always taken on the joined chunk text, never summed per
    fragment, since most tokenizers are not additive across boundaries.
    """

    def __init__(
        self,
        estimator: TokenCountEstimator,
        max_tokens: int,
        max_overlap_tokens: int,
        splitter: RecursiveSplitter,
    ):
        self.estimator = estimator
        self.max_tokens = max_tokens
        self.max_overlap_tokens = max_overlap_tokens
        self.splitter = splitter

    def pack(self, fragments: Sequence[Fragment]) -> list[PackedChunk]:
        chunks: list[PackedChunk] = []
        buffer: list[Fragment] = []
        seeded = 0  # leading fragments of buffer that are overlap

        for frag in fragments:
            if self.estimator.estimate(frag.text) > self.max_tokens:
                # Oversized singleton: no overlap into or out of it
                if buffer:
                    self._emit(chunks, buffer, seeded)
                chunks.append(PackedChunk(frag.text, frag.start_offset, oversized=True))
                buffer, seeded = [], 0
                continue

            if buffer and self.estimator.estimate(_join(buffer) + frag.text) > self.max_tokens:
                self._emit(chunks, buffer, seeded)
                seed = [] if chunks[-1].oversized else self._overlap_suffix(buffer[seeded:])
                while seed and self.estimator.estimate(_join(seed) + frag.text) > self.max_tokens:
                    seed = seed[1:]
                buffer, seeded = [*seed, frag], len(seed)
            else:
                buffer = [*buffer, frag]

        if buffer:
            self._emit(chunks, buffer, seeded)
        return chunks

    def _emit(self, chunks: list[PackedChunk], buffer: Sequence[Fragment], seeded: int) -> None:
        """Append the closed buffer, folding a whitespace-only remainder into the previous chunk.

        The fold happens when the previous chunk is oversized already or still
        fits with the whitespace added. A whitespace run that alone exceeds the
        budget stays a chunk of its own.
        """
        own = _join(buffer[seeded:])
        if chunks and not own.strip():
            last = chunks[-1]
            merged = last.text + own
            if last.oversized or self.estimator.estimate(merged) <= self.max_tokens:
                chunks[-1] = PackedChunk(merged, last.start_offset, last.overlap_length, last.oversized)
                return
        chunks.append(self._close(buffer, seeded))

    def _close(self, buffer: Sequence[Fragment], seeded: int) -> PackedChunk:
        return PackedChunk(
            text=_join(buffer),
            start_offset=buffer[0].start_offset,
            overlap_length=len(_join(buffer[:seeded])),
        )

    def _overlap_suffix(self, fragments: Sequence[Fragment]) -> list[Fragment]:
        """Longest run of trailing text within the overlap budget.

        Whole fragments are taken from the end while they fit. The first one
        that does not fit is re-split against the overlap budget and its
        trailing pieces are taken while they fit.
        """
        if self.max_overlap_tokens <= 0:
            return []

        taken: list[Fragment] = []
        for frag in reversed(fragments):
            if self.estimator.estimate(frag.text + _join(taken)) <= self.max_overlap_tokens:
                taken = [frag, *taken]
                continue
            pieces = self.splitter.split(
                frag.text,
                base_offset=frag.start_offset,
                limit=self.max_overlap_tokens,
                oversized_policy="allow",
            )
            for piece in reversed(pieces):
                if self.estimator.estimate(piece.text + _join(taken)) > self.max_overlap_tokens:
                    break
                taken = [piece, *taken]
            break
        return taken
