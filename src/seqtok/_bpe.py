"""
Core Byte Pair Encoding (BPE) operations over string tokens.
"""

from collections import Counter
from typing import Final

from .types import Corpus, Token, TokenPair

# separator placed between records when record boundaries are preserved;
# never a real token, so pairs touching it are never counted or merged
BOUNDARY: Final[Token] = ""


def bpe_freqs(tokens: Corpus) -> Counter[TokenPair]:
    """
    Count every adjacent token pair in the corpus.

    Pairs that touch a record boundary are skipped.

    :param tokens: Current working corpus.
    :return: Mapping of token pairs to their occurrence counts.
    """
    counts: Counter[TokenPair] = Counter()
    for tok0, tok1 in zip(tokens, tokens[1:]):
        if tok0 and tok1:
            counts[(tok0, tok1)] += 1
    return counts


def select_pair(counts: Counter[TokenPair]) -> tuple[TokenPair, int] | None:
    """
    Pick the most frequent pair, breaking ties deterministically.

    Among pairs sharing the maximum count, the one whose concatenation is
    lexicographically smallest wins; remaining ties fall back to comparing
    the ``(left, right)`` tuples.

    :param counts: Pair frequencies from :func:`bpe_freqs`.
    :return: The selected pair and its count, or ``None`` if there are no pairs.
    """
    if not counts:
        return None
    best = min(counts.items(), key=lambda kv: (-kv[1], kv[0][0] + kv[0][1], kv[0]))
    return best


def bpe_merge(tokens: Corpus, target: TokenPair, merged: Token) -> Corpus:
    """
    Replace every non-overlapping occurrence of ``target`` with ``merged``.

    Scans left to right and resumes after each replacement, so ``(a, a, a)``
    with pair ``(a, a)`` becomes ``(aa, a)``. The input is never mutated.

    :param tokens: Corpus (or corpus slice) to rewrite.
    :param target: The adjacent pair to collapse.
    :param merged: The token that replaces each occurrence.
    :return: A freshly built corpus with all occurrences replaced.
    """
    left, right = target
    newtoks: Corpus = []

    i = 0
    n = len(tokens)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and tokens[i] == left and tokens[i + 1] == right:
            newtoks.append(merged)
            i += 2
        else:
            newtoks.append(tokens[i])
            i += 1

    return newtoks


__all__ = ["BOUNDARY", "bpe_freqs", "select_pair", "bpe_merge"]
