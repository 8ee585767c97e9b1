from __future__ import annotations

from chunk_engine.config.schemas import get_separators
from chunk_engine.core.models import Fragment
from chunk_engine.core.packer import ChunkPacker
from chunk_engine.core.recursive_splitter import RecursiveSplitter
from chunk_engine.llm.token_utils import CharacterTokenCountEstimator, WordTokenCountEstimator

OBJECT_MARK = "\ufffc"


def _packer(max_tokens: int, overlap: int, estimator=None) -> ChunkPacker:
    estimator = estimator or WordTokenCountEstimator()
    splitter = RecursiveSplitter(get_separators("prose"), estimator, max_tokens)
    return ChunkPacker(estimator, max_tokens, overlap, splitter)


def _fragments(*texts: str) -> list[Fragment]:
    out, offset = [], 0
    for text in texts:
        out.append(Fragment(text, offset))
        offset += len(text)
    return out


def test_packs_greedily_without_overlap():
    chunks = _packer(4, 0).pack(_fragments("a b ", "c d ", "e f ", "g"))

    assert [c.text for c in chunks] == ["a b c d ", "e f g"]
    assert [c.start_offset for c in chunks] == [0, 8]
    assert all(c.overlap_length == 0 for c in chunks)


def test_overlap_carries_trailing_fragments():
    frags = _fragments(*[f"w{i} " for i in range(9)], "w9")
    chunks = _packer(4, 2).pack(frags)

    assert [c.text for c in chunks] == [
        "w0 w1 w2 w3 ",
        "w2 w3 w4 w5 ",
        "w4 w5 w6 w7 ",
        "w6 w7 w8 w9",
    ]
    assert [c.overlap for c in chunks] == ["", "w2 w3 ", "w4 w5 ", "w6 w7 "]


def test_overlap_resplits_a_fragment_larger_than_the_overlap_budget():
    chunks = _packer(6, 2).pack(_fragments("a b c d e\n\n", "f g h"))

    assert [c.text for c in chunks] == ["a b c d e\n\n", "d e\n\nf g h"]
    assert chunks[1].overlap == "d e\n\n"
    assert chunks[1].start_offset == 6


def test_overlap_is_dropped_when_it_would_overflow_the_next_chunk():
    chunks = _packer(5, 3).pack(_fragments("a b c ", "d e f g h"))

    assert [c.text for c in chunks] == ["a b c ", "d e f g h"]
    assert chunks[1].overlap_length == 0


def test_oversized_fragment_is_a_singleton_without_overlap(dense):
    frags = _fragments("a b ", OBJECT_MARK + " ", "c d")
    chunks = _packer(3, 1, dense).pack(frags)

    assert [c.text for c in chunks] == ["a b ", OBJECT_MARK + " ", "c d"]
    assert [c.oversized for c in chunks] == [False, True, False]
    assert all(c.overlap_length == 0 for c in chunks)


def test_no_fragments_no_chunks():
    assert _packer(4, 1).pack([]) == []


def test_trailing_whitespace_folds_into_the_oversized_chunk(dense):
    frags = _fragments("a b ", OBJECT_MARK, " ", "\n")
    chunks = _packer(3, 1, dense).pack(frags)

    assert [c.text for c in chunks] == ["a b ", OBJECT_MARK + " \n"]
    assert chunks[1].oversized


def test_whitespace_run_larger_than_the_budget_stays_within_it():
    frags = _fragments("x", *([" "] * 7), "y")
    chunks = _packer(3, 0, CharacterTokenCountEstimator(1)).pack(frags)

    assert [c.text for c in chunks] == ["x  ", "   ", "  y"]
    assert not any(c.oversized for c in chunks)
