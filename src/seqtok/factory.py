"""Factory functions for creating tokenizers."""

from collections.abc import Iterable
from pathlib import Path
from typing import Any, Literal, overload

from .alphabet import SequenceAlphabet
from .tokenizer import SequenceTokenizer

AlphabetName = Literal["protein", "protein-extended", "dna", "rna", "dna-iupac"]


@overload
def get_tokenizer(alphabet: AlphabetName, **kwargs: Any) -> SequenceTokenizer: ...


@overload
def get_tokenizer(
    *, custom_alphabet: Iterable[str], **kwargs: Any
) -> SequenceTokenizer: ...


def get_tokenizer(
    alphabet: AlphabetName = "protein",
    *,
    custom_alphabet: Iterable[str] | None = None,
    **kwargs: Any,
) -> SequenceTokenizer:
    """
    Create a tokenizer seeded with a built-in or custom starting alphabet.

    :param alphabet: Built-in alphabet name (e.g., "protein", "dna").
                     Ignored if custom_alphabet is provided.
    :param custom_alphabet: Custom single-character symbols. Overrides alphabet parameter.
    :param kwargs: Forwarded to :class:`SequenceTokenizer` (chunk_size, parallel_mode, ...).
    :return: Untrained tokenizer instance.
    :raises StrategyError: If the alphabet name is unknown.

    .. code-block:: python

        tokenizer = get_tokenizer("dna")
        tokenizer = get_tokenizer(custom_alphabet="ACGTN", preserve_boundaries=True)
    """
    if custom_alphabet is not None:
        return SequenceTokenizer(custom_alphabet, **kwargs)

    # get() handles invalid alphabet names
    return SequenceTokenizer(SequenceAlphabet.get(alphabet), **kwargs)


def from_pretrained(model_path: str | Path) -> SequenceTokenizer:
    """
    Load a pre-trained tokenizer from disk.

    :param model_path: Path to the .json model file.
    :return: Loaded tokenizer instance with vocabulary and merge history.
    :raises ModelLoadError: If the file doesn't exist, has the wrong extension
                            or is malformed.

    .. code-block:: python

        tokenizer = from_pretrained("path/to/tokenizer.json")
        ids = tokenizer.encode("MKTAYIAK")
    """
    tokenizer = SequenceTokenizer()
    tokenizer.load(model_path)
    return tokenizer


__all__ = ["get_tokenizer", "from_pretrained"]
