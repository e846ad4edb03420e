"""Benchmark sequential vs chunked-parallel BPE training on a protein corpus.

Outputs one line per parallel mode:
  Mode | Workers | Training Time | Final Vocab Size | Compression Ratio
"""

import argparse
import logging
import random
import time

from datasets import load_dataset

from seqtok import SequenceAlphabet, get_tokenizer, read_sequences

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%H:%M:%S",
)


def make_sequences(num_seqs: int, length: int, seed: int = 0) -> list[str]:
    """Build deterministic synthetic protein sequences with shared motifs."""
    rng = random.Random(seed)
    residues = SequenceAlphabet.PROTEIN.value
    motifs = ["".join(rng.choice(residues) for _ in range(rng.randint(3, 8))) for _ in range(50)]
    seqs = []
    for _ in range(num_seqs):
        parts: list[str] = []
        while sum(map(len, parts)) < length:
            parts.append(rng.choice(motifs) if rng.random() < 0.6 else rng.choice(residues))
        seqs.append("".join(parts)[:length])
    return seqs


def load_corpus(args: argparse.Namespace) -> list[str]:
    """Load sequences from a FASTA file, a Hugging Face dataset, or synthesize them."""
    if args.fasta:
        return read_sequences(args.fasta, args.num_seqs)
    if args.hf_dataset:
        print(f"Loading {args.hf_dataset} (non-streaming) …")
        ds = load_dataset(args.hf_dataset, split="train")
        return ds[: args.num_seqs][args.hf_column]
    return make_sequences(args.num_seqs, args.length)


def measure(mode: str, sequences: list[str], args: argparse.Namespace) -> tuple[float, int, float]:
    """Train once with ``mode`` and return (seconds, vocab size, compression ratio)."""
    tok = get_tokenizer(
        "protein-extended",
        parallel_mode=mode,
        chunk_size=args.chunk_size,
        num_workers=args.workers,
    )
    start = time.perf_counter()
    tok.train(sequences, vocab_size=args.vocab_size, show_progress=False)
    elapsed = time.perf_counter() - start

    total_chars = sum(len(s) for s in sequences)
    total_tokens = sum(len(ids) for ids in tok.encode_batch(sequences))
    return elapsed, tok.vocab_size(), total_tokens / total_chars


def main() -> None:
    """Run the training benchmark for each parallel mode."""
    parser = argparse.ArgumentParser(description="Benchmark seqtok training modes.")
    parser.add_argument("--num-seqs", type=int, default=2000, help="Number of sequences.")
    parser.add_argument("--length", type=int, default=300, help="Synthetic sequence length.")
    parser.add_argument("--vocab-size", type=int, default=500, help="Target vocabulary size.")
    parser.add_argument("--chunk-size", type=int, default=50_000, help="Rewrite chunk size.")
    parser.add_argument("--workers", type=int, default=None, help="Worker count (default: CPUs).")
    parser.add_argument("--fasta", type=str, default=None, help="Optional FASTA corpus file.")
    parser.add_argument(
        "--hf-dataset",
        type=str,
        default=None,
        help="Optional Hugging Face dataset with a sequence column.",
    )
    parser.add_argument("--hf-column", type=str, default="sequence", help="Dataset column.")
    args = parser.parse_args()

    sequences = load_corpus(args)
    if not sequences:
        raise RuntimeError("No sequences loaded.")
    print(f"Corpus: {len(sequences):,} sequences, {sum(map(len, sequences)):,} residues")

    results = {}
    for mode in ("off", "chunk"):
        elapsed, size, ratio = measure(mode, sequences, args)
        results[mode] = elapsed
        print(f"{mode:<6} {args.workers or 'cpu':>5}  {elapsed:>9.3f}s  {size:>7,}  {ratio:.4f}")

    print(f"chunk vs off speedup: {results['off'] / results['chunk']:.2f}x")


if __name__ == "__main__":
    main()
