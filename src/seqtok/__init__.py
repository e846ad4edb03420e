"""seqtok: BPE tokenization for biological sequences."""

from ._progress import disable_progress, enable_progress
from .alphabet import SequenceAlphabet, list_alphabets
from .encoder import GreedyEncoder, string_to_tokens, tokenize
from .factory import from_pretrained, get_tokenizer
from .fasta import read_sequences
from .parallel import ParallelMode, list_parallel_modes
from .tokenizer import SequenceTokenizer
from .trainer import BPETrainingResult, VocabularyTrainer
from .vocab import Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("seqtok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "SequenceTokenizer",
    "VocabularyTrainer",
    "BPETrainingResult",
    "GreedyEncoder",
    "Vocabulary",
    "SequenceAlphabet",
    "ParallelMode",
    "string_to_tokens",
    "tokenize",
    "read_sequences",
    "get_tokenizer",
    "from_pretrained",
    "list_alphabets",
    "list_parallel_modes",
    "enable_progress",
    "disable_progress",
]
