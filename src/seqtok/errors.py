"""Custom exception hierarchy for seqtok training and tokenization errors."""

from .types import Token, TokenId


class SeqTokError(Exception):
    """Base exception for all seqtok errors."""


class TrainingError(SeqTokError):
    """Raised when trainer preconditions are violated."""

    def __init__(self, message: str, *, corpus_size: int | None = None) -> None:
        """Initialize with optional corpus_size that gets appended to the message."""
        if corpus_size is not None:
            message = f"{message} (corpus size: {corpus_size})"
        super().__init__(message)
        self.corpus_size = corpus_size


class TokenizationError(SeqTokError):
    """Raised when a character of the input has no match in the vocabulary."""

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        input_text: str | None = None,
    ) -> None:
        if position is not None and input_text is not None:
            message = f"{message} (position: {position}) (char: {input_text[position]!r})"
        super().__init__(message)
        self.position = position
        self.input_text = input_text


class VocabularyError(SeqTokError):
    """Raised when vocabulary operations fail."""

    def __init__(
        self,
        message: str,
        *,
        vocab_size: int | None = None,
        invalid_tok: Token | TokenId | None = None,
    ) -> None:
        """Initialize with optional token and vocab_size that get appended to the message."""
        extra = " "
        # training: target smaller than current vocab
        if vocab_size is not None:
            extra += f"(vocab size: {vocab_size}) "
        # decoding: id not in vocab, appending: duplicate token
        if invalid_tok is not None:
            extra += f"(invalid token: {invalid_tok!r}) "
        super().__init__((message + extra).rstrip())
        self.vocab_size = vocab_size
        self.invalid_tok = invalid_tok


class InconsistentVocabularyError(VocabularyError):
    """
    Raised when a matched token cannot be located in the vocabulary.

    This signals a bug in matching or indexing, never bad input.
    """


class ModelLoadError(SeqTokError):
    """Raised when loading a persisted tokenizer model fails."""

    def __init__(
        self,
        message: str,
        *,
        model_path: str | None = None,
        version_mismatch: tuple[str, str] | None = None,
    ) -> None:
        extra = " "
        if model_path:
            extra += f"(path: {model_path}) "
        if version_mismatch is not None:
            extra += f"(expected: {version_mismatch[1]}) (got {version_mismatch[0]}) "
        super().__init__((message + extra).rstrip())
        self.model_path = model_path
        self.version_mismatch = version_mismatch


class CorpusError(SeqTokError):
    """Raised when the training corpus cannot be read."""

    def __init__(self, message: str, *, path: str | None = None) -> None:
        if path:
            message = f"{message} (path: {path})"
        super().__init__(message)
        self.path = path


class StrategyError(SeqTokError):
    """Raised when looking up a named mode or alphabet fails."""

    def __init__(
        self,
        message: str,
        *,
        invalid_name: str | None = None,
        available_strats: list[str] | None = None,
    ) -> None:
        extra = " "
        if invalid_name:
            extra += f"(available: {available_strats}) (got {invalid_name}) "
        super().__init__((message + extra).rstrip())
        self.invalid_name = invalid_name
        self.available_strats = available_strats
