"""Greedy longest-match encoding against a trained vocabulary."""

from collections.abc import Iterable
import logging

from .errors import TokenizationError
from .types import Token, TokenId
from .vocab import Vocabulary

log = logging.getLogger(__name__)


class GreedyEncoder:
    """
    Maximal-munch encoder over a finished vocabulary.

    At every position the longest vocabulary entry starting there is taken.
    Candidate lengths never exceed the longest token, so each position costs
    at most ``max_token_len`` dictionary lookups.
    """

    def __init__(self, vocab: Vocabulary | Iterable[Token]) -> None:
        self.vocab = vocab if isinstance(vocab, Vocabulary) else Vocabulary(vocab)
        # (vocabulary size, longest token) the scan bound was last computed for
        self._bound: tuple[int, int] = (-1, 0)

    @property
    def max_token_len(self) -> int:
        """Length of the longest token, recomputed when the vocabulary has grown."""
        size = len(self.vocab)
        if self._bound[0] != size:
            self._bound = (size, self.vocab.max_token_len())
        return self._bound[1]

    def string_to_tokens(self, text: str) -> list[Token]:
        """
        Split ``text`` into the longest matching vocabulary tokens, left to right.

        :raises TokenizationError: At the first character that starts no vocabulary entry.
        """
        tokens: list[Token] = []
        i = 0
        n = len(text)
        bound = self.max_token_len

        while i < n:
            for j in range(min(n, i + bound), i, -1):
                piece = text[i:j]
                if piece in self.vocab:
                    tokens.append(piece)
                    i = j
                    break
            else:
                raise TokenizationError(
                    "undefined token", position=i, input_text=text
                )

        return tokens

    def tokenize(self, text: str) -> list[TokenId]:
        """
        Encode ``text`` into token ids.

        :raises TokenizationError: If ``text`` holds a character outside the vocabulary.
        :raises InconsistentVocabularyError: If a matched token has no id.
        """
        return [self.vocab.id_of(tok) for tok in self.string_to_tokens(text)]

    def decode(self, ids: Iterable[TokenId]) -> str:
        """
        Concatenate the tokens for ``ids`` back into a sequence.

        :raises VocabularyError: If any id is not in the vocabulary.
        """
        return "".join(self.vocab.token_of(tok_id) for tok_id in ids)


def string_to_tokens(vocab: Vocabulary | Iterable[Token], text: str) -> list[Token]:
    """Split ``text`` into vocabulary tokens by maximal munch."""
    return GreedyEncoder(vocab).string_to_tokens(text)


def tokenize(vocab: Vocabulary | Iterable[Token], text: str) -> list[TokenId]:
    """Encode ``text`` into ids of ``vocab`` by maximal munch."""
    return GreedyEncoder(vocab).tokenize(text)


__all__ = ["GreedyEncoder", "string_to_tokens", "tokenize"]
