# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Code database lifecycle: load, publish and reload query snapshots."""

import logging
from pathlib import Path

from dtcref.indexing import IndexBuilder
from dtcref.query import QueryEngine
from dtcref.ranking import Ranker
from dtcref.store import RecordStore, load_store

logger = logging.getLogger(__name__)

DEFAULT_CORPUS_PATH: Path = Path(__file__).resolve().parent / "data" / "error_codes.txt"


class CodeDatabase:
    """Own the currently published query engine for a corpus.

    Each snapshot (store, indices, engine) is built completely before it
    replaces the previous one, so readers never see a partial index.
    """

    def __init__(self, store: RecordStore, ranker: Ranker | None = None) -> None:
        self._ranker = ranker
        self._engine = self._build_engine(store)

    @classmethod
    def open(
        cls, path: Path = DEFAULT_CORPUS_PATH, ranker: Ranker | None = None
    ) -> "CodeDatabase":
        """Load a corpus file and publish its first snapshot.

        Raises:
            LoadError: If the corpus fails to load.
        """
        return cls(load_store(path), ranker=ranker)

    @property
    def engine(self) -> QueryEngine:
        return self._engine

    def reload(self, path: Path) -> QueryEngine:
        """Replace the published snapshot with one loaded from ``path``.

        The previous snapshot stays published when loading fails.

        Args:
            path: Corpus file path.

        Returns:
            Newly published engine.

        Raises:
            LoadError: If the corpus fails to load.
        """
        engine = self._build_engine(load_store(path))
        self._engine = engine
        logger.info(f"Corpus reloaded (path={path} records={len(engine.store)})")
        return engine

    def _build_engine(self, store: RecordStore) -> QueryEngine:
        indices = IndexBuilder().build(store)
        return QueryEngine(store, indices=indices, ranker=self._ranker)
