"""Ordered, append-only token vocabulary with bidirectional lookup."""

from collections.abc import Iterable, Iterator
import logging

from .errors import InconsistentVocabularyError, VocabularyError
from .types import Token, TokenId

log = logging.getLogger(__name__)


class Vocabulary:
    """
    Ordered collection of unique token strings where list position is the token id.

    Keeps an id -> token list and a token -> id mapping in sync so lookups in
    both directions are O(1). Entries are only ever appended.
    """

    def __init__(self, tokens: Iterable[Token] = ()) -> None:
        self._tokens: list[Token] = []
        self._ids: dict[Token, TokenId] = {}
        for tok in tokens:
            self.append(tok)

    def append(self, token: Token) -> TokenId:
        """
        Append a new token and return its id.

        :raises VocabularyError: If ``token`` is empty or already present.
        """
        if not token:
            raise VocabularyError("empty token cannot be added to vocabulary")
        if token in self._ids:
            raise VocabularyError("token already in vocabulary", invalid_tok=token)
        tok_id = len(self._tokens)
        self._tokens.append(token)
        self._ids[token] = tok_id
        return tok_id

    def id_of(self, token: Token) -> TokenId:
        """
        Return the id of ``token``.

        :raises InconsistentVocabularyError: If ``token`` is not in the vocabulary.
        """
        try:
            return self._ids[token]
        except KeyError:
            raise InconsistentVocabularyError(
                "token not found in vocabulary", invalid_tok=token
            ) from None

    def token_of(self, tok_id: TokenId) -> Token:
        """
        Return the token string for ``tok_id``.

        :raises VocabularyError: If ``tok_id`` is out of range.
        """
        if not 0 <= tok_id < len(self._tokens):
            raise VocabularyError(
                "token id not in vocabulary",
                vocab_size=len(self._tokens),
                invalid_tok=tok_id,
            )
        return self._tokens[tok_id]

    def max_token_len(self) -> int:
        """Length in characters of the longest token (0 when empty)."""
        return max((len(tok) for tok in self._tokens), default=0)

    def tokens(self) -> list[Token]:
        """Return a copy of the tokens in id order."""
        return list(self._tokens)

    def copy(self) -> "Vocabulary":
        return Vocabulary(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._ids

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __getitem__(self, tok_id: TokenId) -> Token:
        return self._tokens[tok_id]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Vocabulary):
            return self._tokens == other._tokens
        if isinstance(other, list):
            return self._tokens == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Vocabulary({self._tokens!r})"


__all__ = ["Vocabulary"]
