"""Recursive descent over the separator hierarchy until every piece fits the budget."""
from __future__ import annotations

import logging
from typing import Sequence

from chunk_engine.core.exceptions import OversizedFragmentError
from chunk_engine.core.models import Fragment
from chunk_engine.core.separators import Separator, fragment
from chunk_engine.llm.token_utils import TokenCountEstimator

logger = logging.getLogger(__name__)


class RecursiveSplitter:
    """Split text into fragments that each fit ``max_tokens``.

    Text that fits is returned whole. Otherwise it is fragmented by the
    separator at the current level and only the pieces that still do not fit
    descend to finer separators. Levels that leave the text in one piece are
    skipped. Past the finest level, whitespace absorbed around a single unit
    is split back into single characters so only the unit itself can stay over
    budget. Fragments come back in text order and join to the input exactly.
    """

    def __init__(
        self,
        separators: Sequence[Separator],
        estimator: TokenCountEstimator,
        max_tokens: int,
        oversized_policy: str = "allow",
    ):
        self.separators = tuple(separators)
        self.estimator = estimator
        self.max_tokens = max_tokens
        self.oversized_policy = oversized_policy

    def split(
        self,
        text: str,
        level: int = 0,
        base_offset: int = 0,
        limit: int | None = None,
        oversized_policy: str | None = None,
    ) -> list[Fragment]:
        """Split ``text`` starting at separator ``level``.

        Args:
            text: Text to split.
            level: Index of the first separator to try.
            base_offset: Offset of ``text`` inside the original document.
            limit: Token budget; defaults to ``max_tokens``.
            oversized_policy: Overrides the configured policy for this call.

        Returns:
            Fragments in text order, each within ``limit`` unless a single
            unsplittable fragment is kept under the ``allow`` policy.
        """
        if not text:
            return []
        return self._split(
            text,
            level,
            base_offset,
            self.max_tokens if limit is None else limit,
            oversized_policy or self.oversized_policy,
        )

    def _split(self, text: str, level: int, offset: int, limit: int, policy: str) -> list[Fragment]:
        tokens = self.estimator.estimate(text)
        if tokens <= limit:
            return [Fragment(text, offset)]

        pieces: list[Fragment] = []
        while level < len(self.separators):
            pieces = fragment(text, self.separators[level], offset)
            if len(pieces) > 1:
                break
            level += 1
        else:
            if len(text) > 1:
                # One unit with absorbed whitespace: the whitespace is not atomic
                return self._split_characters(text, offset, limit, policy)
            return self._handle_oversized(text, offset, tokens, limit, policy)

        result: list[Fragment] = []
        for piece in pieces:
            result.extend(self._split(piece.text, level + 1, piece.start_offset, limit, policy))
        return result

    def _split_characters(self, text: str, offset: int, limit: int, policy: str) -> list[Fragment]:
        result: list[Fragment] = []
        for i, char in enumerate(text):
            tokens = self.estimator.estimate(char)
            if tokens <= limit:
                result.append(Fragment(char, offset + i))
            else:
                result.extend(self._handle_oversized(char, offset + i, tokens, limit, policy))
        return result

    def _handle_oversized(self, text: str, offset: int, tokens: int, limit: int, policy: str) -> list[Fragment]:
        if policy == "error":
            raise OversizedFragmentError(text, tokens, limit, offset)
        logger.debug("Keeping unsplittable fragment at offset %d (%d > %d tokens)", offset, tokens, limit)
        return [Fragment(text, offset)]

