"""Reader for FASTA-style sequence files."""

from collections.abc import Iterator
from pathlib import Path
import logging

from .errors import CorpusError

HEADER_PREFIX = ">"

log = logging.getLogger(__name__)


def iter_sequences(path: str | Path) -> Iterator[str]:
    """
    Yield sequence records from a FASTA-style file in file order.

    Lines starting with ``>`` are headers and are skipped, as are blank
    lines. Every other line is one record.

    :raises CorpusError: If ``path`` does not exist or is not valid UTF-8.
    """
    path = Path(path)
    if not path.exists():
        raise CorpusError("corpus file does not exist", path=str(path))

    with path.open("r", encoding="utf-8") as f:
        try:
            for line in f:
                record = line.strip()
                if not record or record.startswith(HEADER_PREFIX):
                    continue
                yield record
        except UnicodeDecodeError as e:
            raise CorpusError(
                f"corpus file is not valid utf-8: {e.reason}", path=str(path)
            ) from e


def read_sequences(path: str | Path, limit: int | None = None) -> list[str]:
    """
    Read at most ``limit`` sequence records from a FASTA-style file.

    :param path: Path to the corpus file.
    :param limit: Maximum number of records to return; ``None`` reads all.
    :return: Records in file order.
    :raises CorpusError: If ``path`` does not exist or is not valid UTF-8.
    """
    records: list[str] = []

    for record in iter_sequences(path):
        if limit is not None and len(records) >= limit:
            break
        records.append(record)

    log.info(f"read {len(records)} sequence records from {path}")
    return records


__all__ = ["iter_sequences", "read_sequences"]
