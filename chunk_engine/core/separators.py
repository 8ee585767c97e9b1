"""Separator hierarchy and the fragmenter that splits text by one separator."""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable

from chunk_engine.core.exceptions import ConfigurationError
from chunk_engine.core.models import Fragment


@lru_cache(maxsize=64)
def _compile(pattern: str, is_regex: bool) -> re.Pattern[str]:
    return re.compile(pattern if is_regex else re.escape(pattern))


@dataclass(frozen=True)
class Separator:
    """One split rule. Lower ``level`` is coarser and is tried first.

    An empty ``pattern`` is the character-level separator: it can split any
    string longer than one character, so it must close every hierarchy.
    """

    pattern: str
    level: int
    keep_in_output: bool = True
    is_regex: bool = False
    name: str = ""

    @property
    def is_character_level(self) -> bool:
        return self.pattern == ""

    @property
    def regex(self) -> re.Pattern[str]:
        return _compile(self.pattern, self.is_regex)


def _raw_pieces(text: str, separator: Separator) -> list[tuple[int, str]]:
    if separator.is_character_level:
        return list(enumerate(text))

    pieces: list[tuple[int, str]] = []
    prev = 0
    for match in separator.regex.finditer(text):
        if match.start() == match.end():
            continue
        end = match.end() if separator.keep_in_output else match.start()
        if end > prev:
            pieces.append((prev, text[prev:end]))
        prev = match.end()
    if prev < len(text):
        pieces.append((prev, text[prev:]))
    return pieces


def fragment(text: str, separator: Separator, base_offset: int = 0) -> list[Fragment]:
    """Split ``text`` at every occurrence of ``separator``.

    With ``keep_in_output`` the separator text stays attached to the piece
    before it, so joining the fragments gives back ``text`` exactly. Empty
    pieces are dropped. Whitespace-only pieces are folded into the next piece
    (or the previous one at the end of the text); a whitespace-only ``text``
    comes back as a single fragment.
    """
    if not text:
        return []

    fragments: list[Fragment] = []
    pending_start: int | None = None
    for start, piece in _raw_pieces(text, separator):
        if not piece.strip():
            if separator.keep_in_output and pending_start is None:
                pending_start = start
            continue
        if pending_start is not None:
            fragments.append(Fragment(text[pending_start : start + len(piece)], base_offset + pending_start))
            pending_start = None
        else:
            fragments.append(Fragment(piece, base_offset + start))

    if pending_start is not None:
        if fragments:
            last = fragments.pop()
            fragments.append(Fragment(last.text + text[pending_start:], last.start_offset))
        else:
            fragments.append(Fragment(text, base_offset))
    return fragments


def validate_hierarchy(separators: Iterable[Separator]) -> tuple[Separator, ...]:
    """Return the hierarchy ordered coarsest to finest.

    Raises:
        ConfigurationError: If the hierarchy is empty, repeats a level, or does
            not end with the character-level separator.
    """
    ordered = tuple(sorted(separators, key=lambda s: s.level))
    if not ordered:
        raise ConfigurationError("Separator hierarchy must contain at least one separator")

    levels = [s.level for s in ordered]
    if len(set(levels)) != len(levels):
        raise ConfigurationError(f"Separator levels must be unique, got {levels}")

    for sep in ordered[:-1]:
        if sep.is_character_level:
            raise ConfigurationError(
                f"Character-level separator must be the finest entry, found at level {sep.level}"
            )
    finest = ordered[-1]
    if not finest.is_character_level:
        raise ConfigurationError(
            f"Finest separator must be character-level (empty pattern) to guarantee progress, "
            f"got {finest.pattern!r} at level {finest.level}"
        )
    if not finest.keep_in_output:
        raise ConfigurationError("Character-level separator must keep its text in the output")
    return ordered
