"""Command-line entry point: train a vocabulary or encode a sample with a saved one."""

import argparse
import logging
import sys

from ._progress import disable_progress
from .alphabet import list_alphabets
from .errors import SeqTokError
from .factory import from_pretrained, get_tokenizer
from .fasta import read_sequences
from .parallel import DEFAULT_CHUNK_SIZE, list_parallel_modes

DEFAULT_CORPUS = "seq.csv"
DEFAULT_LIMIT = 5000
DEFAULT_VOCAB_SIZE = 10_000
DEFAULT_MODEL_PREFIX = "tokenizer"
DEFAULT_SAMPLE = "CIRACKPDLSAETPMFPGNGDEQPLTENPRKYVM"

log = logging.getLogger("seqtok")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seqtok",
        description="Train a BPE vocabulary on biological sequences and encode with it.",
    )
    sub = parser.add_subparsers(dest="command")

    train = sub.add_parser("train", help="Train, save, reload and encode a sample (default).")
    train.add_argument("--corpus", default=DEFAULT_CORPUS, help="FASTA-style corpus file.")
    train.add_argument(
        "--limit",
        type=int,
        default=DEFAULT_LIMIT,
        help=f"Maximum number of sequence records to read (default: {DEFAULT_LIMIT}).",
    )
    train.add_argument(
        "--vocab-size",
        type=int,
        default=DEFAULT_VOCAB_SIZE,
        help=f"Target vocabulary size (default: {DEFAULT_VOCAB_SIZE:,}).",
    )
    train.add_argument(
        "--alphabet",
        default="protein",
        choices=list_alphabets(),
        help="Starting alphabet (default: protein).",
    )
    train.add_argument(
        "--model",
        default=DEFAULT_MODEL_PREFIX,
        help="Output path prefix for the .json and .vocab files.",
    )
    train.add_argument("--sample", default=DEFAULT_SAMPLE, help="Sequence to encode after training.")
    train.add_argument(
        "--chunk-size",
        type=int,
        default=DEFAULT_CHUNK_SIZE,
        help=f"Tokens per chunk for the parallel rewrite (default: {DEFAULT_CHUNK_SIZE:,}).",
    )
    train.add_argument(
        "--parallel-mode",
        default="auto",
        choices=list_parallel_modes(),
        help="Corpus rewrite mode (default: auto).",
    )
    train.add_argument("--workers", type=int, default=None, help="Worker count (default: CPUs).")
    train.add_argument(
        "--preserve-boundaries",
        action="store_true",
        help="Never merge across sequence record boundaries.",
    )
    train.add_argument("--no-progress", action="store_true", help="Hide the progress bar.")
    train.add_argument("-v", "--verbose", action="store_true", help="Log every merge.")
    train.set_defaults(func=run_train)

    encode = sub.add_parser("encode", help="Encode a sample with a saved vocabulary.")
    encode.add_argument(
        "--model",
        default=f"{DEFAULT_MODEL_PREFIX}.json",
        help="Saved .json model file.",
    )
    encode.add_argument("--sample", default=DEFAULT_SAMPLE, help="Sequence to encode.")
    encode.add_argument("--show-vocab", action="store_true", help="Print the full vocabulary.")
    encode.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    encode.set_defaults(func=run_encode)

    return parser


def run_train(args: argparse.Namespace) -> None:
    """Train a fresh vocabulary, persist it, reload it and encode the sample."""
    if args.no_progress:
        disable_progress()

    log.info(f"loading training data from {args.corpus}")
    sequences = read_sequences(args.corpus, args.limit)
    log.info(f"training data holds {len(sequences)} sequences")

    tokenizer = get_tokenizer(
        args.alphabet,
        preserve_boundaries=args.preserve_boundaries,
        chunk_size=args.chunk_size,
        parallel_mode=args.parallel_mode,
        num_workers=args.workers,
    )
    log.info("starting training")
    tokenizer.train(sequences, args.vocab_size, verbose=args.verbose)

    print(f"Vocabulary ({tokenizer.vocab_size()} tokens): {tokenizer.vocab.tokens()}")
    model_path = tokenizer.save(args.model)

    reloaded = from_pretrained(model_path)
    ids = reloaded.encode(args.sample)
    print(f"Tokens: {ids}")
    print(f"Compression ratio: {reloaded.compression_ratio(args.sample):.4f}")


def run_encode(args: argparse.Namespace) -> None:
    """Encode the sample with a previously saved vocabulary."""
    tokenizer = from_pretrained(args.model)
    if args.show_vocab:
        print(f"Vocabulary: {tokenizer.vocab.tokens()}")
    print(f"Vocabulary size: {tokenizer.vocab_size()}")
    print(f"Matched tokens: {tokenizer.string_to_tokens(args.sample)}")
    print(f"Tokens: {tokenizer.encode(args.sample)}")


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    argv = list(sys.argv[1:] if argv is None else argv)
    # no subcommand means train, with any flags applying to it
    if not argv or (argv[0].startswith("-") and argv[0] not in ("-h", "--help")):
        argv = ["train", *argv]

    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        args.func(args)
    except (SeqTokError, OSError) as e:
        log.error(f"{type(e).__name__}: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
