"""Tests for the BPE vocabulary trainer."""

import logging

import pytest

from seqtok import Vocabulary, VocabularyTrainer
from seqtok._bpe import BOUNDARY, bpe_freqs, bpe_merge, select_pair
from seqtok.errors import TrainingError, VocabularyError
from seqtok.trainer import flatten_corpus


def make_trainer(sequences, alphabet, **kwargs):
    kwargs.setdefault("parallel_mode", "off")
    return VocabularyTrainer(sequences, alphabet, **kwargs)


# BPE primitives
# ---------------------------------------------------------------------------


def test_bpe_freqs_counts_ordered_pairs():
    counts = bpe_freqs(list("ABAB"))
    assert counts == {("A", "B"): 2, ("B", "A"): 1}


def test_bpe_freqs_skips_boundaries():
    counts = bpe_freqs(["A", "B", BOUNDARY, "A", "B"])
    assert counts == {("A", "B"): 2}


def test_select_pair_prefers_highest_count():
    counts = bpe_freqs(list("ABABAB"))
    assert select_pair(counts) == (("A", "B"), 3)


def test_select_pair_breaks_ties_by_concatenation():
    """Among equally frequent pairs the smallest concatenated string wins."""
    counts = bpe_freqs(["C", "D", "X", "A", "B"])
    assert select_pair(counts) == (("A", "B"), 1)


def test_select_pair_breaks_equal_concatenations_by_tuple():
    counts = bpe_freqs(["AB", "C", "X", "A", "BC"])
    # ("A", "BC") and ("AB", "C") both concatenate to "ABC"
    assert select_pair(counts) == (("A", "BC"), 1)


def test_select_pair_empty():
    assert select_pair(bpe_freqs(["A"])) is None


def test_bpe_merge_left_to_right():
    """Overlapping runs are consumed greedily from the left."""
    assert bpe_merge(list("AAA"), ("A", "A"), "AA") == ["AA", "A"]
    assert bpe_merge(list("AAAA"), ("A", "A"), "AA") == ["AA", "AA"]


def test_bpe_merge_does_not_mutate_input():
    tokens = list("ABAB")
    bpe_merge(tokens, ("A", "B"), "AB")
    assert tokens == list("ABAB")


# Preconditions
# ---------------------------------------------------------------------------


def test_empty_alphabet_raises():
    with pytest.raises(TrainingError):
        make_trainer(["AB"], [])


def test_empty_corpus_raises():
    with pytest.raises(TrainingError):
        make_trainer([], ["A", "B"])
    with pytest.raises(TrainingError):
        make_trainer(["", ""], ["A", "B"])


@pytest.mark.parametrize("alphabet", [["A", "BC"], ["A", "A"], ["A", ""]])
def test_invalid_alphabet_raises(alphabet):
    with pytest.raises(TrainingError):
        make_trainer(["AB"], alphabet)


def test_invalid_chunk_size_raises():
    with pytest.raises(TrainingError):
        make_trainer(["AB"], ["A", "B"], chunk_size=0)


def test_target_below_current_size_raises():
    trainer = make_trainer(["AB"], ["A", "B", "C"])
    with pytest.raises(VocabularyError):
        trainer.train(2, show_progress=False)


def test_unknown_symbols_are_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="seqtok.trainer"):
        make_trainer(["ABZ"], ["A", "B"])
    assert "Z" in caplog.text


# Training
# ---------------------------------------------------------------------------


def test_concrete_scenario():
    """"ABAB" + "AB" merges (A, B) first, the unique most frequent pair."""
    trainer = make_trainer(["ABAB", "AB"], ["A", "B"])
    result = trainer.train(3, show_progress=False)

    assert result.vocab.tokens() == ["A", "B", "AB"]
    assert result.corpus == ["AB", "AB", "AB"]
    assert result.merges == [("A", "B")]
    assert result.n_merges_completed == 1


def test_training_stops_when_corpus_collapses(caplog):
    trainer = make_trainer(["ABAB"], ["A", "B"])
    with caplog.at_level(logging.WARNING, logger="seqtok.trainer"):
        result = trainer.train(100, show_progress=False)

    assert result.vocab.tokens() == ["A", "B", "AB", "ABAB"]
    assert result.corpus == ["ABAB"]
    assert result.n_merges_completed == 2
    assert "stopping early" in caplog.text


def test_target_equal_to_current_size_is_noop():
    trainer = make_trainer(["ABAB"], ["A", "B"])
    result = trainer.train(2, show_progress=False)
    assert result.vocab.tokens() == ["A", "B"]
    assert result.corpus == list("ABAB")
    assert result.n_merges_completed == 0


def test_vocabulary_is_append_only():
    """Existing entries keep their ids, and growth is monotonic across calls."""
    trainer = make_trainer(["MKTAYIAKQRQISFVKSHFSRQ" * 3], list("ARNDCEQGHILKMFPSTWYV"))
    before = trainer.vocab.tokens()

    first = trainer.train(25, show_progress=False)
    second = trainer.train(30, show_progress=False)

    assert first.vocab.tokens()[: len(before)] == before
    assert second.vocab.tokens()[: len(first.vocab)] == first.vocab.tokens()
    assert len(first.vocab) == 25
    assert len(second.vocab) == 30


def test_vocabulary_entries_are_unique():
    trainer = make_trainer(["ABCABCBCA" * 4, "CABAB"], ["A", "B", "C"])
    result = trainer.train(40, show_progress=False)
    tokens = result.vocab.tokens()
    assert len(tokens) == len(set(tokens))


def test_corpus_tokens_stay_in_vocabulary():
    trainer = make_trainer(["GATTACA", "TTAGGC", "CATGAT"], list("ACGT"))
    result = trainer.train(15, show_progress=False)
    assert set(result.corpus) <= set(result.vocab.tokens())
    assert "".join(result.corpus) == "GATTACATTAGGCCATGAT"


def test_training_is_deterministic():
    sequences = ["ACGTTGCA", "TGCAACGT", "GGCCAATT"]
    first = make_trainer(sequences, list("ACGT")).train(14, show_progress=False)
    second = make_trainer(sequences, list("ACGT")).train(14, show_progress=False)
    assert first.vocab == second.vocab
    assert first.merges == second.merges


def test_parallel_training_matches_sequential():
    sequences = ["MKTAYIAKQRQISFVKSHFSRQLEERLGLIEVQ" * 5, "GGPTDSTDNNQNGGRSGARPKQ" * 4]
    alphabet = list("ARNDCEQGHILKMFPSTWYV")

    sequential = make_trainer(sequences, alphabet, parallel_mode="off")
    chunked = make_trainer(
        sequences, alphabet, parallel_mode="chunk", chunk_size=7, num_workers=3
    )

    seq_result = sequential.train(60, show_progress=False)
    par_result = chunked.train(60, show_progress=False)

    assert par_result.vocab == seq_result.vocab
    assert par_result.corpus == seq_result.corpus


class CountingBar:
    """Stand-in progress bar that records how many merges were reported."""

    def __init__(self):
        self.updates = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def update(self, n=1):
        self.updates += n


@pytest.mark.parametrize("mode", ["off", "chunk"])
def test_merge_already_in_vocabulary_only_rewrites(mode, monkeypatch, caplog):
    """("A", "BC") concatenates to the existing "ABC": rewrite, but learn nothing."""
    bar = CountingBar()
    monkeypatch.setattr("seqtok.trainer.progress_bar", lambda *args, **kwargs: bar)

    trainer = make_trainer(["ABCA"], ["A", "B", "C"], parallel_mode=mode, chunk_size=1)
    trainer.vocab = Vocabulary(["A", "B", "C", "BC", "ABC"])
    trainer.corpus = ["A", "BC", "A", "BC"]

    with caplog.at_level(logging.DEBUG, logger="seqtok.trainer"):
        result = trainer.train(6, show_progress=False)

    tokens = result.vocab.tokens()
    assert tokens == ["A", "B", "C", "BC", "ABC", "ABCABC"]
    assert len(tokens) == len(set(tokens))
    assert result.merges == [("ABC", "ABC")]
    assert len(result.merges) == result.n_merges_completed == 1
    assert result.corpus == ["ABCABC"]
    assert bar.updates == 1
    assert "already in vocabulary, rewriting only" in caplog.text


def test_training_time_log_reports_merges(caplog):
    trainer = make_trainer(["ABAB", "AB"], ["A", "B"])
    with caplog.at_level(logging.INFO, logger="seqtok._decorators"):
        trainer.train(3, show_progress=False)

    assert "VocabularyTrainer.train completed in" in caplog.text
    assert "1 merges learned" in caplog.text


def test_training_time_is_logged_on_failure(caplog):
    trainer = make_trainer(["ABAB"], ["A", "B"])
    with caplog.at_level(logging.INFO, logger="seqtok._decorators"):
        with pytest.raises(VocabularyError):
            trainer.train(1, show_progress=False)

    assert "VocabularyTrainer.train stopped in" in caplog.text
    assert "merges learned" not in caplog.text


# Record boundaries
# ---------------------------------------------------------------------------


def test_flatten_corpus_joins_records():
    assert flatten_corpus(["AB", "", "BA"]) == ["A", "B", "B", "A"]


def test_flatten_corpus_preserves_boundaries():
    assert flatten_corpus(["AB", "", "BA"], preserve_boundaries=True) == [
        "A",
        "B",
        BOUNDARY,
        "B",
        "A",
    ]


def test_cross_record_merges_by_default():
    """Without boundaries the last symbol of one record pairs with the next record."""
    trainer = make_trainer(["AB", "BA", "AB"], ["A", "B"])
    result = trainer.train(3, show_progress=False)
    # A,B,B,A,A,B: (A, B) occurs twice, (B, B) and (B, A) and (A, A) once
    assert result.vocab.tokens() == ["A", "B", "AB"]
    assert result.corpus == ["AB", "B", "A", "AB"]


def test_preserved_boundaries_block_cross_record_merges():
    trainer = make_trainer(["AB", "BA"], ["A", "B"], preserve_boundaries=True)
    result = trainer.train(10, show_progress=False)

    assert "BB" not in result.vocab
    assert result.vocab.tokens() == ["A", "B", "AB", "BA"]
    assert result.corpus == ["AB", BOUNDARY, "BA"]
