"""Token count estimators used to budget segment sizes.

The splitter only ever calls ``estimate(text)``. Any object exposing that
method, or a plain ``text -> int`` callable wrapped by :func:`as_estimator`,
can drive chunk boundaries. Different estimators produce different (and not
interchangeable) boundaries for the same text.
"""

from __future__ import annotations

import math
import threading
from typing import Any, Callable, Protocol, runtime_checkable

import tiktoken

from chunk_engine.core.exceptions import ConfigurationError

DEFAULT_ENCODING = "cl100k_base"


@runtime_checkable
class TokenCountEstimator(Protocol):
    """Capability estimating how many model tokens a string consumes.

    Implementations must be deterministic and safe to call from several
    threads at once when documents are split concurrently.
    """

    def estimate(self, text: str) -> int: ...


class TiktokenTokenCountEstimator:
    """Exact counts from a tiktoken encoding (``cl100k_base`` by default)."""

    def __init__(self, encoding_name: str = DEFAULT_ENCODING):
        self.encoding_name = encoding_name
        self._encoding: tiktoken.Encoding | None = None
        self._lock = threading.Lock()

    def _get_encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            with self._lock:
                if self._encoding is None:
                    self._encoding = tiktoken.get_encoding(self.encoding_name)
        return self._encoding

    def estimate(self, text: str) -> int:
        if not text:
            return 0
        # Special-token strings such as "<|endoftext|>" are ordinary text in documents
        return len(self._get_encoding().encode(text, disallowed_special=()))

    def __repr__(self) -> str:
        return f"TiktokenTokenCountEstimator(encoding_name={self.encoding_name!r})"


class CharacterTokenCountEstimator:
    """Approximation: one token per ``chars_per_token`` characters, rounded up."""

    def __init__(self, chars_per_token: float = 4):
        if chars_per_token <= 0:
            raise ConfigurationError(f"chars_per_token must be positive, got {chars_per_token}")
        self.chars_per_token = chars_per_token

    def estimate(self, text: str) -> int:
        return math.ceil(len(text) / self.chars_per_token)

    def __repr__(self) -> str:
        return f"CharacterTokenCountEstimator(chars_per_token={self.chars_per_token!r})"


class WordTokenCountEstimator:
    """One token per whitespace-delimited word."""

    def estimate(self, text: str) -> int:
        return len(text.split())

    def __repr__(self) -> str:
        return "WordTokenCountEstimator()"


class CallableTokenCountEstimator:
    """Adapter turning a plain ``text -> int`` function into an estimator."""

    def __init__(self, func: Callable[[str], int]):
        self.func = func

    def estimate(self, text: str) -> int:
        return int(self.func(text))

    def __repr__(self) -> str:
        return f"CallableTokenCountEstimator({getattr(self.func, '__name__', self.func)!r})"


def as_estimator(obj: Any) -> TokenCountEstimator:
    """Return ``obj`` as a :class:`TokenCountEstimator`.

    Objects that already expose ``estimate`` are returned unchanged; other
    callables are wrapped.

    Raises:
        ConfigurationError: If ``obj`` is neither.
    """
    if isinstance(obj, TokenCountEstimator):
        return obj
    if callable(obj):
        return CallableTokenCountEstimator(obj)
    raise ConfigurationError(
        f"Token count estimator must provide estimate(text) or be callable, got {type(obj).__name__}"
    )


def get_estimator(
    name: str,
    *,
    encoding_name: str = DEFAULT_ENCODING,
    chars_per_token: float = 4,
) -> TokenCountEstimator:
    """Build an estimator by its settings name (``tiktoken``, ``characters``, ``words``)."""
    key = (name or "").strip().lower()
    if key == "tiktoken":
        return TiktokenTokenCountEstimator(encoding_name)
    if key in ("characters", "chars"):
        return CharacterTokenCountEstimator(chars_per_token)
    if key == "words":
        return WordTokenCountEstimator()
    raise ConfigurationError(f"Unknown token estimator: {name!r}. Available: ['tiktoken', 'characters', 'words']")

