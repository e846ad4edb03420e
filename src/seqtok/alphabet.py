from enum import Enum

from .errors import StrategyError


class SequenceAlphabet(str, Enum):
    """
    Pre-defined starting alphabets for biological sequences.

    Each value lists the single-character symbols, in the order they seed
    the vocabulary (and therefore the order of their token ids).
    """

    # 20 standard amino acids
    PROTEIN = "ARNDCEQGHILKMFPSTWYV"

    # standard amino acids plus ambiguity codes, selenocysteine,
    # pyrrolysine and the stop symbol
    PROTEIN_EXTENDED = "ARNDCEQGHILKMFPSTWYVBZXUO*"

    # nucleotides
    DNA = "ACGT"
    RNA = "ACGU"

    # IUPAC nucleotide codes including ambiguity symbols
    DNA_IUPAC = "ACGTRYSWKMBDHVN"

    @classmethod
    def get(cls, name: str) -> list[str]:
        """Get an alphabet's symbols by name (case-insensitive)."""
        try:
            return list(cls[name.upper().replace("-", "_")].value)
        except KeyError:
            raise StrategyError(
                "unknown alphabet",
                invalid_name=name,
                available_strats=list_alphabets(),
            ) from None


def list_alphabets() -> list[str]:
    """Return names of all built-in alphabets."""
    return [alph.name.lower().replace("_", "-") for alph in SequenceAlphabet]
