"""BPE vocabulary training over sequence corpora."""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
import logging

from ._bpe import BOUNDARY, bpe_freqs, select_pair
from ._decorators import measure_time
from ._progress import progress_bar
from .errors import TrainingError, VocabularyError
from .parallel import (
    DEFAULT_CHUNK_SIZE,
    ParallelMode,
    ParallelStrategy,
    apply_merge,
    resolve_workers,
)
from .types import Corpus, TokenPair
from .vocab import Vocabulary

log = logging.getLogger(__name__)


@dataclass
class BPETrainingResult:
    """Results from one BPE training run."""

    vocab: Vocabulary
    merges: list[TokenPair]
    corpus: Corpus
    n_merges_completed: int


def flatten_corpus(sequences: Iterable[str], preserve_boundaries: bool = False) -> Corpus:
    """
    Split sequences into single-character tokens and concatenate them.

    With ``preserve_boundaries`` a separator is placed between records so no
    pair is ever formed across two records.
    """
    corpus: Corpus = []
    for seq in sequences:
        if not seq:
            continue
        if preserve_boundaries and corpus:
            corpus.append(BOUNDARY)
        corpus.extend(seq)
    return corpus


class VocabularyTrainer:
    """
    BPE trainer that grows a vocabulary by repeatedly merging the most frequent pair.

    The trainer exclusively owns its working corpus and replaces it with a
    freshly rewritten list after every merge.

    Example:
       >>> trainer = VocabularyTrainer(["ABAB", "AB"], ["A", "B"])
       >>> result = trainer.train(3)
       >>> result.vocab.tokens()
       ['A', 'B', 'AB']
       >>> result.corpus
       ['AB', 'AB', 'AB']
    """

    def __init__(
        self,
        sequences: Iterable[str],
        alphabet: Iterable[str],
        *,
        preserve_boundaries: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        parallel_mode: ParallelStrategy | ParallelMode = ParallelMode.AUTO,
        num_workers: int | None = None,
    ) -> None:
        """
        Validate inputs and build the starting vocabulary and working corpus.

        :param sequences: Training records, flattened in order.
        :param alphabet: Single-character symbols seeding the vocabulary, in id order.
        :param preserve_boundaries: Prevent merges across record boundaries when ``True``.
        :param chunk_size: Tokens per chunk for the parallel rewrite.
        :param parallel_mode: Rewrite mode, see :class:`seqtok.parallel.ParallelMode`.
        :param num_workers: Worker count for the parallel rewrite (default: CPU count).
        :raises TrainingError: If the alphabet is empty or invalid, or the corpus is empty.
        """
        symbols = list(alphabet)
        if not symbols:
            raise TrainingError("starting alphabet can not be empty")
        for sym in symbols:
            if not isinstance(sym, str) or len(sym) != 1:
                raise TrainingError(
                    f"alphabet entries must be single characters (got {sym!r})"
                )
        if len(set(symbols)) != len(symbols):
            raise TrainingError("alphabet entries must be unique")
        if chunk_size < 1:
            raise TrainingError(f"chunk size must be at least 1 (got {chunk_size})")

        corpus = flatten_corpus(sequences, preserve_boundaries)
        if not corpus:
            raise TrainingError("training corpus can not be empty", corpus_size=0)

        self.vocab = Vocabulary(symbols)
        self.corpus: Corpus = corpus
        self.merges: list[TokenPair] = []
        self.initial_vocab_size = len(self.vocab)
        self.preserve_boundaries = preserve_boundaries
        self.chunk_size = chunk_size
        self.parallel_mode = ParallelMode.get(parallel_mode)
        self.num_workers = resolve_workers(num_workers)

        unknown = set(corpus) - set(symbols) - {BOUNDARY}
        if unknown:
            log.warning(
                f"corpus contains symbols missing from the alphabet: {sorted(unknown)} "
                "(sequences containing them cannot be encoded)"
            )

        log.info(f"training corpus holds {len(corpus)} tokens")

    @measure_time
    def train(
        self,
        target_vocab_size: int,
        verbose: bool = False,
        show_progress: bool = True,
    ) -> BPETrainingResult:
        """
        Merge pairs until the vocabulary reaches ``target_vocab_size``.

        Stops early when the corpus has no adjacent pair left to merge.

        :param target_vocab_size: Vocabulary size to grow to, alphabet included.
        :param verbose: Log each learned merge when ``True``.
        :param show_progress: Display a progress bar during training when ``True``.
        :return: Snapshot of the vocabulary, merge history and working corpus.
        :raises VocabularyError: If the target is smaller than the current vocabulary.
        """
        if target_vocab_size < len(self.vocab):
            raise VocabularyError(
                f"target vocab size must be at least the current size ({len(self.vocab)})",
                vocab_size=target_vocab_size,
            )

        n_merges = target_vocab_size - len(self.vocab)
        completed = 0

        with (
            ThreadPoolExecutor(max_workers=self.num_workers) as pool,
            progress_bar(n_merges, "training", show_progress) as pbar,
        ):
            while len(self.vocab) < target_vocab_size:
                selected = select_pair(bpe_freqs(self.corpus))
                if selected is None:
                    break

                pair, count = selected
                merged = pair[0] + pair[1]

                # different pairs can concatenate to the same string
                if merged in self.vocab:
                    log.debug(f"{pair} -> {merged!r} already in vocabulary, rewriting only")
                else:
                    self.vocab.append(merged)
                    self.merges.append(pair)
                    completed += 1
                    pbar.update(1)
                    if verbose:
                        log.info(
                            f"merge {completed}/{n_merges}: {pair} -> {merged!r} (count {count})"
                        )

                self.corpus = apply_merge(
                    self.corpus,
                    pair,
                    merged,
                    parallel_mode=self.parallel_mode,
                    chunk_size=self.chunk_size,
                    pool=pool,
                )

        if completed < n_merges:
            log.warning(
                f"no more token pairs to merge after {completed} merges "
                f"(requested {n_merges}) stopping early"
            )

        return BPETrainingResult(
            vocab=self.vocab.copy(),
            merges=list(self.merges),
            corpus=list(self.corpus),
            n_merges_completed=completed,
        )


__all__ = ["BPETrainingResult", "VocabularyTrainer", "flatten_corpus"]
