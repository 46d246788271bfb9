# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Query engine answering lookup, filter and keyword search requests."""

import logging

import Levenshtein

from dtcref.indexing import IndexBuilder, Indices, tokenize
from dtcref.model import (
    CodeRecord,
    FilterCriteria,
    SearchHit,
    Severity,
    normalize_code,
    system_key,
)
from dtcref.ranking import Ranker, TokenSumRanker
from dtcref.store import RecordStore

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 3
MAX_SUGGESTION_DISTANCE = 2


class NotFound(RuntimeError):
    """Represent a lookup for a code absent from the store.

    Attributes:
        code: Normalized code that was requested.
        suggestions: Closest stored codes, nearest first.
    """

    def __init__(self, code: str, suggestions: tuple[str, ...] = ()) -> None:
        super().__init__(f"Code {code} not found")
        self.code = code
        self.suggestions = suggestions


class InvalidQuery(RuntimeError):
    """Represent a query that cannot be evaluated as given."""


class QueryEngine:
    """Answer queries against one store and its indices."""

    def __init__(
        self,
        store: RecordStore,
        indices: Indices | None = None,
        ranker: Ranker | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Loaded record store.
            indices: Prebuilt indices for ``store``; built here when omitted.
            ranker: Search ranker; defaults to ``TokenSumRanker``.
        """
        self._store = store
        self._indices = indices if indices is not None else IndexBuilder().build(store)
        self._ranker: Ranker = ranker if ranker is not None else TokenSumRanker()

    @property
    def store(self) -> RecordStore:
        return self._store

    @property
    def indices(self) -> Indices:
        return self._indices

    def lookup_by_code(self, code: str) -> CodeRecord:
        """Return the record for a code, ignoring case.

        Args:
            code: Requested code, e.g. ``p0300``.

        Returns:
            Matching record.

        Raises:
            NotFound: If no record has this code.
        """
        normalized = normalize_code(code)
        record = self._store.get(normalized)
        if record is None:
            suggestions = self.suggest_codes(normalized)
            logger.debug(
                f"Code lookup missed (code={normalized} suggestions={suggestions})"
            )
            raise NotFound(normalized, suggestions)
        return record

    def filter(self, criteria: FilterCriteria) -> list[CodeRecord]:
        """Return records matching system and/or severity, sorted by code.

        Args:
            criteria: Filter with at least one field set. ``severity`` may be
                a ``Severity`` or its name.

        Returns:
            Matching records in ascending code order.

        Raises:
            InvalidQuery: If no criterion is set or the severity is unknown.
        """
        if criteria.is_empty:
            raise InvalidQuery("filter requires a system and/or a severity")

        buckets: list[frozenset[str]] = []
        if criteria.system is not None:
            buckets.append(
                self._indices.by_system.get(system_key(criteria.system), frozenset())
            )
        if criteria.severity is not None:
            severity = _coerce_severity(criteria.severity)
            buckets.append(self._indices.by_severity.get(severity, frozenset()))

        codes = frozenset.intersection(*buckets)
        return [self._record(code) for code in sorted(codes)]

    def search(self, text: str, limit: int | None = None) -> list[SearchHit]:
        """Rank records by keyword relevance.

        Args:
            text: Free-text keywords or phrase.
            limit: Optional maximum number of hits.

        Returns:
            Hits by descending score, ties by ascending code. Empty when no
            query token matches.

        Raises:
            InvalidQuery: If ``limit`` is not positive.
        """
        if limit is not None and limit <= 0:
            raise InvalidQuery("search limit must be > 0")
        query_tokens = list(dict.fromkeys(tokenize(text)))
        if not query_tokens:
            return []

        scores = self._ranker.score(query_tokens, self._indices.tokens)
        ordered = sorted(
            (
                (code, score)
                for code, score in scores.items()
                if score > 0
            ),
            key=lambda item: (-item[1], item[0]),
        )
        if limit is not None:
            ordered = ordered[:limit]
        return [
            SearchHit(record=self._record(code), score=score) for code, score in ordered
        ]

    def systems(self) -> list[str]:
        """Return distinct system labels in alphabetical order."""
        return sorted(self._indices.system_labels.values(), key=str.casefold)

    def severities(self) -> list[Severity]:
        """Return the severity levels present in the store, lowest first."""
        return sorted(self._indices.by_severity)

    def suggest_codes(self, code: str) -> tuple[str, ...]:
        """Return stored codes within a small edit distance of ``code``."""
        return _closest(normalize_code(code), self._store.codes())

    def suggest_systems(self, name: str) -> tuple[str, ...]:
        """Return system labels close to ``name``, ignoring case."""
        labels = self._indices.system_labels
        keys = _closest(system_key(name), list(labels))
        return tuple(labels[key] for key in keys)

    def _record(self, code: str) -> CodeRecord:
        return self._store[code]


def _coerce_severity(value: Severity | str) -> Severity:
    if isinstance(value, Severity):
        return value
    try:
        return Severity.parse(value)
    except ValueError as exc:
        raise InvalidQuery(
            f"unknown severity {value!r}; expected one of "
            f"{', '.join(level.value for level in Severity)}"
        ) from exc


def _closest(target: str, candidates: list[str]) -> tuple[str, ...]:
    """Pick the nearest candidates by Levenshtein distance.

    Args:
        target: Normalized value to match.
        candidates: Normalized candidate values.

    Returns:
        Up to ``MAX_SUGGESTIONS`` candidates, nearest first, ties alphabetical.
    """
    if not target:
        return ()
    scored = [
        (Levenshtein.distance(target, candidate), candidate)
        for candidate in candidates
    ]
    nearby = sorted(item for item in scored if item[0] <= MAX_SUGGESTION_DISTANCE)
    return tuple(candidate for _, candidate in nearby[:MAX_SUGGESTIONS])
