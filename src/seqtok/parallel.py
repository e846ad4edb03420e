"""Chunked parallel corpus rewrite and parallel mode helpers."""

from concurrent.futures import Executor, ThreadPoolExecutor
from enum import Enum
from typing import Final, Literal
import logging
import os

from ._bpe import bpe_merge
from .errors import StrategyError
from .types import Corpus, Token, TokenPair

log = logging.getLogger(__name__)

ParallelStrategy = Literal["auto", "chunk", "off"]

DEFAULT_CHUNK_SIZE: Final[int] = 50_000


class ParallelMode(str, Enum):
    """Named parallelization modes for the corpus rewrite step."""

    AUTO = "auto"
    CHUNK = "chunk"
    OFF = "off"

    @classmethod
    def get(cls, name: "str | ParallelMode") -> "ParallelMode":
        """Get parallel mode by name (case-insensitive)."""
        if isinstance(name, ParallelMode):
            return name
        try:
            return cls[name.upper()]
        except KeyError:
            raise StrategyError(
                "unknown mode",
                invalid_name=name,
                available_strats=[mode.value for mode in cls],
            ) from None


def list_parallel_modes() -> list[str]:
    """Return available parallel mode names."""
    return [mode.value for mode in ParallelMode]


def resolve_workers(num_workers: int | None) -> int:
    """Return a usable worker count, defaulting to the number of CPUs."""
    if num_workers is None:
        return os.cpu_count() or 1
    return max(1, num_workers)


def split_chunks(tokens: Corpus, chunk_size: int) -> list[Corpus]:
    """Split the corpus into contiguous chunks of at most ``chunk_size`` tokens."""
    if chunk_size < 1:
        raise ValueError(f"chunk size must be at least 1 (got {chunk_size})")
    return [tokens[i : i + chunk_size] for i in range(0, len(tokens), chunk_size)]


def _join_chunk(
    out: Corpus,
    chunk: Corpus,
    part: Corpus,
    target: TokenPair,
    merged: Token,
) -> None:
    """
    Append one rewritten chunk to the accumulated result, in place.

    ``chunk`` is the original slice and ``part`` its independent rewrite. If
    the accumulated result ends with an unconsumed ``left`` token and the
    original chunk starts with ``right``, the pair straddles the boundary and
    collapses into ``merged``.
    """
    left, right = target
    if out and chunk and out[-1] == left and chunk[0] == right:
        out[-1] = merged
        if left == right:
            # consuming chunk[0] at the boundary shifts where the pairs inside
            # this chunk start, so its own rewrite no longer applies
            out.extend(bpe_merge(chunk[1:], target, merged))
        else:
            # chunk[0] == right can never start a pair when left != right,
            # so the rest of the independent rewrite is still valid
            out.extend(part[1:])
    else:
        out.extend(part)


def parallel_bpe_merge(
    tokens: Corpus,
    target: TokenPair,
    merged: Token,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    num_workers: int | None = None,
    pool: Executor | None = None,
) -> Corpus:
    """
    Rewrite the corpus chunk by chunk in parallel, then join chunks in order.

    Each worker rewrites a read-only slice into its own output list. The
    join is a strictly ordered left-to-right reduction that reconciles pairs
    straddling chunk boundaries, so the result is identical to
    :func:`seqtok._bpe.bpe_merge` on the whole corpus for any chunk size.

    :param tokens: Corpus to rewrite.
    :param target: The adjacent pair to collapse.
    :param merged: The token that replaces each occurrence.
    :param chunk_size: Number of tokens per chunk.
    :param num_workers: Worker count when no ``pool`` is given.
    :param pool: Executor to reuse across calls; a temporary one is created if ``None``.
    :return: The rewritten corpus.
    """
    chunks = split_chunks(tokens, chunk_size)

    def rewrite(chunk: Corpus) -> Corpus:
        """Rewrite a single chunk with the sequential algorithm."""
        return bpe_merge(chunk, target, merged)

    if pool is None:
        with ThreadPoolExecutor(max_workers=resolve_workers(num_workers)) as tmp:
            parts = list(tmp.map(rewrite, chunks))
    else:
        parts = list(pool.map(rewrite, chunks))

    out: Corpus = []
    for chunk, part in zip(chunks, parts):
        _join_chunk(out, chunk, part, target, merged)
    return out


def apply_merge(
    tokens: Corpus,
    target: TokenPair,
    merged: Token,
    parallel_mode: ParallelMode = ParallelMode.AUTO,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    num_workers: int | None = None,
    pool: Executor | None = None,
) -> Corpus:
    """Rewrite the corpus with the sequential or chunked algorithm per ``parallel_mode``."""
    match parallel_mode:
        case ParallelMode.OFF:
            return bpe_merge(tokens, target, merged)
        case ParallelMode.CHUNK:
            return parallel_bpe_merge(
                tokens, target, merged, chunk_size, num_workers, pool
            )
        case ParallelMode.AUTO:
            if len(tokens) <= chunk_size:
                return bpe_merge(tokens, target, merged)
            return parallel_bpe_merge(
                tokens, target, merged, chunk_size, num_workers, pool
            )


__all__ = [
    "DEFAULT_CHUNK_SIZE",
    "ParallelStrategy",
    "ParallelMode",
    "list_parallel_modes",
    "split_chunks",
    "parallel_bpe_merge",
    "apply_merge",
]
