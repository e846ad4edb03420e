"""
Sequence tokenizer: BPE training, greedy encoding and model persistence.
"""

import json
import logging
from collections.abc import Iterable
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Final

from ._sanitise import render_token
from .alphabet import SequenceAlphabet
from .encoder import GreedyEncoder
from .errors import ModelLoadError, VocabularyError
from .parallel import DEFAULT_CHUNK_SIZE, ParallelMode, ParallelStrategy
from .trainer import VocabularyTrainer
from .types import Corpus, Token, TokenId, TokenPair
from .vocab import Vocabulary

try:
    _version = version("seqtok")
except PackageNotFoundError:
    _version = "dev"


VERSION: Final[str] = _version
MODEL_SUFFIX: Final[str] = ".json"
VOCAB_SUFFIX: Final[str] = ".vocab"

log = logging.getLogger(__name__)


class SequenceTokenizer:
    """
    BPE tokenizer for biological sequences.

    Holds the ordered vocabulary, the merge history and the final training
    corpus, and provides serialization methods.
    """

    def __init__(
        self,
        alphabet: Iterable[str] | None = None,
        *,
        preserve_boundaries: bool = False,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        parallel_mode: ParallelStrategy | ParallelMode = ParallelMode.AUTO,
        num_workers: int | None = None,
    ) -> None:
        """Initialize tokenizer with the given (default: protein) starting alphabet."""
        if alphabet is None:
            alphabet = SequenceAlphabet.get("protein")
        self.alphabet: list[str] = list(alphabet)
        self.preserve_boundaries = preserve_boundaries
        self.chunk_size = chunk_size
        self.parallel_mode = ParallelMode.get(parallel_mode)
        self.num_workers = num_workers
        # token id -> token, token -> token id
        self.vocab: Vocabulary = Vocabulary(self.alphabet)
        # merge history in the order the merged tokens were added
        self.merges: list[TokenPair] = []
        # working corpus as it stood when training finished
        self.training_data: Corpus = []
        # cached encoder, rebuilt whenever the vocabulary changes
        self._encoder: GreedyEncoder | None = None

    def train(
        self,
        sequences: str | Iterable[str],
        vocab_size: int,
        verbose: bool = False,
        show_progress: bool = True,
    ) -> None:
        """
        Train a fresh vocabulary on ``sequences`` up to ``vocab_size`` tokens.

        :param sequences: One sequence or an iterable of sequence records.
        :param vocab_size: Target vocabulary size including the starting alphabet.
        :param verbose: Log each learned merge when ``True``.
        :param show_progress: Display a progress bar during training when ``True``.
        :raises TrainingError: If the alphabet or the corpus is empty.
        :raises VocabularyError: If ``vocab_size`` is smaller than the alphabet.
        """
        if isinstance(sequences, str):
            sequences = [sequences]

        trainer = VocabularyTrainer(
            sequences,
            self.alphabet,
            preserve_boundaries=self.preserve_boundaries,
            chunk_size=self.chunk_size,
            parallel_mode=self.parallel_mode,
            num_workers=self.num_workers,
        )
        result = trainer.train(vocab_size, verbose=verbose, show_progress=show_progress)

        self.vocab = result.vocab
        self.merges = result.merges
        self.training_data = result.corpus
        # invalidate encoder cache since the vocabulary changed
        self._encoder = None

    def string_to_tokens(self, text: str) -> list[Token]:
        """Split ``text`` into the longest matching vocabulary tokens."""
        return self._get_encoder().string_to_tokens(text)

    def encode(self, text: str) -> list[TokenId]:
        """
        Encode a sequence into token ids.

        :raises TokenizationError: If ``text`` holds a character outside the vocabulary.
        """
        return self._get_encoder().tokenize(text)

    def encode_batch(self, texts: Iterable[str]) -> list[list[TokenId]]:
        """Encode several sequences, preserving input order."""
        encoder = self._get_encoder()
        return [encoder.tokenize(text) for text in texts]

    def decode(self, tokens: Iterable[TokenId]) -> str:
        """
        Decode token ids back into the sequence they encode.

        :raises VocabularyError: If any token id is not in the vocabulary.
        """
        return self._get_encoder().decode(tokens)

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self.vocab)

    def compression_ratio(self, text: str) -> float:
        """Return encoded length divided by the number of characters in ``text``."""
        if not text:
            return 0.0
        return len(self.encode(text)) / len(text)

    def save(self, file_prefix: str | Path) -> Path:
        """
        Save tokenizer state to disk.

        Creates two files: a .json model file with the training corpus,
        vocabulary and merges, and a .vocab file with human-readable tokens.

        :param file_prefix: Path prefix for output files.
        :return: Path of the written model file.
        """
        log.info(f"saving tokenizer to {file_prefix}")
        model_path = self._save_model(file_prefix)
        self._save_vocab(file_prefix)
        log.info("tokenizer saved successfully")
        return model_path

    def load(self, model_filename: str | Path) -> None:
        """
        Load tokenizer state from a .json model file.

        Files holding only ``training_data`` and ``vocab`` are accepted; the
        starting alphabet is then taken to be the single-character entries.

        :param model_filename: Path to the .json model file.
        :raises ModelLoadError: If the file is missing, has the wrong suffix,
                                is not valid JSON or has an invalid layout.
        """
        path = Path(model_filename)

        if not path.exists():
            raise ModelLoadError("model filepath does not exist", model_path=str(path))

        if path.suffix != MODEL_SUFFIX:
            raise ModelLoadError(f"expected {MODEL_SUFFIX} file", model_path=str(path))

        log.info(f"loading model from {path}")

        with path.open("r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ModelLoadError(
                    f"invalid json: {e.msg}", model_path=str(path)
                ) from e
            except UnicodeDecodeError as e:
                raise ModelLoadError(
                    f"model file is not valid utf-8: {e.reason}", model_path=str(path)
                ) from e

        if not isinstance(data, dict):
            raise ModelLoadError("model must be a json object", model_path=str(path))

        model_ver = data.get("version")
        if model_ver is not None and model_ver != VERSION:
            raise ModelLoadError(
                "model version mismatch",
                model_path=str(path),
                version_mismatch=(str(model_ver), VERSION),
            )

        training_data = _string_list(data, "training_data", path)
        # older two-key models name the vocabulary "dict"
        tokens = _string_list(data, "vocab" if "vocab" in data else "dict", path)

        try:
            vocab = Vocabulary(tokens)
        except VocabularyError as e:
            raise ModelLoadError(f"invalid vocabulary: {e}", model_path=str(path)) from e

        if "merges" in data:
            merges = _parse_merges(data["merges"], vocab, path)
            alphabet = tokens[: len(tokens) - len(merges)]
        else:
            merges = []
            alphabet = [tok for tok in tokens if len(tok) == 1]
        log.debug(f"loaded {len(merges)} merge rules")

        # atomically update tokenizer state after successful read
        self.alphabet = alphabet
        self.vocab = vocab
        self.merges = merges
        self.training_data = training_data
        self._encoder = None

        log.info(
            f"model loaded successfully: {len(self.alphabet)} alphabet symbols, "
            f"{len(self.merges)} merge rules, {len(self.vocab)} total tokens"
        )

    def _get_encoder(self) -> GreedyEncoder:
        """Build or return the cached greedy encoder."""
        if self._encoder is None:
            self._encoder = GreedyEncoder(self.vocab)
        return self._encoder

    def _save_model(self, file_prefix: str | Path) -> Path:
        """Persist corpus snapshot, vocabulary and merges to a .json file."""
        model_path = Path(file_prefix).with_suffix(MODEL_SUFFIX)
        # create directory if does not exist
        model_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving model to {model_path}")
        log.debug(
            f"saving {len(self.training_data)} corpus tokens and {len(self.vocab)} vocabulary entries"
        )

        # key order is part of the format: corpus first, then vocabulary
        payload = {
            "training_data": self.training_data,
            "vocab": self.vocab.tokens(),
            "merges": [list(pair) for pair in self.merges],
            "version": VERSION,
        }
        with model_path.open("w", encoding="utf-8", newline="\n") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.write("\n")
        return model_path

    def _save_vocab(self, file_prefix: str | Path) -> None:
        """Persist human-readable token representations to a .vocab file."""
        vocab_path = Path(file_prefix).with_suffix(VOCAB_SUFFIX)
        vocab_path.parent.mkdir(parents=True, exist_ok=True)

        log.debug(f"saving vocab to {vocab_path}")

        derivations = {left + right: (left, right) for left, right in self.merges}

        with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
            for tok_id, tok in enumerate(self.vocab):
                # token arises from merging: show derivation from child tokens
                if tok in derivations:
                    left, right = derivations[tok]
                    f.write(
                        f"[{tok_id}] [{render_token(left)}][{render_token(right)}] -> {render_token(tok)}\n"
                    )
                else:
                    # one of the starting alphabet symbols: no merging
                    f.write(f"[{tok_id}] {render_token(tok)}\n")


def _string_list(data: dict[str, Any], key: str, path: Path) -> list[str]:
    """Return ``data[key]`` if it is a list of strings, else raise ModelLoadError."""
    if key not in data:
        raise ModelLoadError(f"missing key {key!r}", model_path=str(path))
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ModelLoadError(f"{key!r} must be a list of strings", model_path=str(path))
    return value


def _parse_merges(raw: Any, vocab: Vocabulary, path: Path) -> list[TokenPair]:
    """Validate the merge history against the tail of the vocabulary."""
    if not isinstance(raw, list) or len(raw) > len(vocab):
        raise ModelLoadError("'merges' must be a list of pairs", model_path=str(path))

    base = len(vocab) - len(raw)
    merges: list[TokenPair] = []
    for offset, pair in enumerate(raw):
        if (
            not isinstance(pair, list)
            or len(pair) != 2
            or not all(isinstance(p, str) for p in pair)
        ):
            raise ModelLoadError(f"invalid merge format: {pair!r}", model_path=str(path))
        left, right = pair
        if vocab[base + offset] != left + right:
            raise ModelLoadError(
                f"merge {pair!r} does not match vocabulary entry {vocab[base + offset]!r}",
                model_path=str(path),
            )
        merges.append((left, right))
    return merges


__all__ = ["SequenceTokenizer", "MODEL_SUFFIX", "VOCAB_SUFFIX", "VERSION"]
