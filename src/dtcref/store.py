# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Immutable record store for a loaded code corpus."""

import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import MappingProxyType

from dtcref.corpus import LoadError, parse_corpus, read_corpus_file
from dtcref.model import CodeRecord, normalize_code

logger = logging.getLogger(__name__)


class RecordStore:
    """Hold every code record for the lifetime of a database snapshot."""

    def __init__(self, records: Iterable[CodeRecord]) -> None:
        """Initialize the store from validated records.

        Args:
            records: Records with unique codes, in corpus order.

        Raises:
            LoadError: If two records share a code. Its ``line`` is the
                1-based position of the repeat in ``records``.
        """
        by_code: dict[str, CodeRecord] = {}
        for position, record in enumerate(records, start=1):
            if record.code in by_code:
                raise LoadError(
                    position,
                    f"duplicate code {record.code} at record position {position}",
                )
            by_code[record.code] = record
        self._records = MappingProxyType(by_code)

    @classmethod
    def load(cls, corpus: str) -> "RecordStore":
        """Parse block-format corpus text into a store.

        Raises:
            LoadError: If any record in the corpus is invalid.
        """
        return cls(parse_corpus(corpus))

    def get(self, code: str) -> CodeRecord | None:
        return self._records.get(normalize_code(code))

    def __getitem__(self, code: str) -> CodeRecord:
        return self._records[normalize_code(code)]

    def all(self) -> Iterator[CodeRecord]:
        """Iterate records in corpus order; each call starts a fresh pass."""
        return iter(self._records.values())

    def codes(self) -> list[str]:
        return list(self._records)

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._records

    def __len__(self) -> int:
        return len(self._records)


def load_store(path: Path) -> RecordStore:
    """Load a store from a corpus file.

    Args:
        path: Block-text or ``.csv`` corpus file.

    Returns:
        Fully loaded store.

    Raises:
        LoadError: If the file cannot be read or any record is invalid.
    """
    store = RecordStore(read_corpus_file(path))
    logger.info(f"Corpus loaded (path={path} records={len(store)})")
    return store
