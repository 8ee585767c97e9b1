from __future__ import annotations

from pathlib import Path
import sys

import pytest

# Ensure project root is on sys.path for module imports during tests
_tests_dir = Path(__file__).resolve().parent
_project_root = _tests_dir.parent  # chunk_engine/
_repo_root = _project_root.parent  # repo root
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

from chunk_engine.llm.token_utils import WordTokenCountEstimator  # noqa: E402

# Stand-in for an embedded object (image, attachment) that a tokenizer counts
# as one very dense unit
OBJECT_MARK = "\ufffc"


class DenseObjectEstimator:
    """Word counts, except every object mark weighs 500 tokens."""

    def estimate(self, text: str) -> int:
        return len(text.split()) + 499 * text.count(OBJECT_MARK)


@pytest.fixture
def words() -> WordTokenCountEstimator:
    return WordTokenCountEstimator()


@pytest.fixture
def dense() -> DenseObjectEstimator:
    return DenseObjectEstimator()


@pytest.fixture
def paragraphs_text() -> str:
    """Six paragraphs of 150 distinct words each, blank-line separated."""
    paragraphs = [" ".join(f"p{p}w{w}" for w in range(150)) for p in range(6)]
    return "\n\n".join(paragraphs)
