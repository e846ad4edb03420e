"""Tests for the chunked parallel corpus rewrite."""

from concurrent.futures import ThreadPoolExecutor
import random

import pytest

from seqtok import ParallelMode, list_parallel_modes
from seqtok._bpe import bpe_merge
from seqtok.errors import StrategyError
from seqtok.parallel import apply_merge, parallel_bpe_merge, split_chunks


def random_corpus(n: int, symbols: str, seed: int) -> list[str]:
    rng = random.Random(seed)
    return [rng.choice(symbols) for _ in range(n)]


# Equivalence with the sequential rewrite
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 4, 5, 7, 12, 24, 25, 100])
def test_chunked_matches_sequential_distinct_pair(chunk_size):
    """Even and uneven partitions of a 24-token corpus give the same rewrite."""
    tokens = list("ABABXABABYABAB") + list("BABABABABA")
    expected = bpe_merge(tokens, ("A", "B"), "AB")
    assert parallel_bpe_merge(tokens, ("A", "B"), "AB", chunk_size, 4) == expected


@pytest.mark.parametrize("chunk_size", [1, 2, 3, 4, 5, 6, 7, 8, 9, 10])
def test_chunked_matches_sequential_repeated_symbol(chunk_size):
    """Runs of one symbol straddling chunk boundaries merge like a single scan."""
    tokens = list("AAAAAAABAAAAAAAAA")
    expected = bpe_merge(tokens, ("A", "A"), "AA")
    assert parallel_bpe_merge(tokens, ("A", "A"), "AA", chunk_size, 3) == expected


def test_boundary_pair_shifts_alignment():
    """A pair consumed at the boundary changes how the next chunk pairs up."""
    tokens = ["A", "A", "A", "A"]
    # chunks [A] [A, A, A]: sequential scan gives AA, AA
    assert parallel_bpe_merge(tokens, ("A", "A"), "AA", 1) == ["AA", "AA"]
    assert parallel_bpe_merge(["X", "A", "A", "A", "A"], ("A", "A"), "AA", 2) == [
        "X",
        "AA",
        "AA",
    ]


@pytest.mark.parametrize("seed", range(10))
@pytest.mark.parametrize("pair", [("A", "B"), ("B", "B"), ("C", "A")])
def test_chunked_matches_sequential_random(seed, pair):
    tokens = random_corpus(200, "ABC", seed)
    merged = pair[0] + pair[1]
    expected = bpe_merge(tokens, pair, merged)
    for chunk_size in (1, 3, 16, 64, 199, 200, 500):
        assert parallel_bpe_merge(tokens, pair, merged, chunk_size, 4) == expected


def test_multi_character_tokens():
    tokens = ["AB", "C", "AB", "C", "C", "AB", "AB", "C"]
    expected = bpe_merge(tokens, ("AB", "C"), "ABC")
    assert expected == ["ABC", "ABC", "C", "AB", "ABC"]
    for chunk_size in range(1, 9):
        assert parallel_bpe_merge(tokens, ("AB", "C"), "ABC", chunk_size) == expected


def test_shared_pool_is_reused():
    tokens = list("ABABABAB")
    with ThreadPoolExecutor(max_workers=2) as pool:
        first = parallel_bpe_merge(tokens, ("A", "B"), "AB", 3, pool=pool)
        second = parallel_bpe_merge(first, ("AB", "AB"), "ABAB", 3, pool=pool)
    assert first == ["AB"] * 4
    assert second == ["ABAB"] * 2


def test_empty_corpus():
    assert parallel_bpe_merge([], ("A", "B"), "AB", 4) == []


def test_input_is_not_mutated():
    tokens = list("ABABAB")
    parallel_bpe_merge(tokens, ("A", "B"), "AB", 2)
    assert tokens == list("ABABAB")


# Chunking
# ---------------------------------------------------------------------------


def test_split_chunks_uneven():
    assert split_chunks(list("ABCDE"), 2) == [["A", "B"], ["C", "D"], ["E"]]


def test_split_chunks_rejects_zero():
    with pytest.raises(ValueError):
        split_chunks(list("AB"), 0)


# Modes
# ---------------------------------------------------------------------------


def test_parallel_mode_lookup_is_case_insensitive():
    assert ParallelMode.get("CHUNK") is ParallelMode.CHUNK
    assert ParallelMode.get("off") is ParallelMode.OFF
    assert ParallelMode.get(ParallelMode.AUTO) is ParallelMode.AUTO


def test_unknown_parallel_mode_raises():
    with pytest.raises(StrategyError):
        ParallelMode.get("turbo")


def test_list_parallel_modes():
    assert list_parallel_modes() == ["auto", "chunk", "off"]


@pytest.mark.parametrize("mode", list(ParallelMode))
def test_apply_merge_modes_agree(mode):
    tokens = random_corpus(50, "AB", seed=7)
    expected = bpe_merge(tokens, ("A", "B"), "AB")
    assert apply_merge(tokens, ("A", "B"), "AB", mode, chunk_size=8) == expected
