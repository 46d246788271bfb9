# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Secondary index construction over a record store."""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from dtcref.model import CodeRecord, RecordField, Severity, system_key
from dtcref.ranking import DEFAULT_FIELD_WEIGHTS, FieldWeights
from dtcref.store import RecordStore

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 2

_TOKEN_PATTERN = re.compile(r"[^\W_]+")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase letter-and-digit tokens, any script.

    Tokens shorter than ``MIN_TOKEN_LENGTH`` are dropped. Order and
    repeats are preserved.
    """
    return [
        token
        for token in _TOKEN_PATTERN.findall(text.lower())
        if len(token) >= MIN_TOKEN_LENGTH
    ]


@dataclass(frozen=True)
class Occurrence:
    """Represent one token appearing in one field of one record."""

    code: str
    field: RecordField
    weight: float


@dataclass(frozen=True)
class Indices:
    """Derived lookup structures for one store snapshot.

    Attributes:
        by_system: Casefolded system label to codes.
        by_severity: Severity level to codes.
        tokens: Normalized token to its occurrences.
        system_labels: Casefolded system label to its display label.
    """

    by_system: Mapping[str, frozenset[str]]
    by_severity: Mapping[Severity, frozenset[str]]
    tokens: Mapping[str, frozenset[Occurrence]]
    system_labels: Mapping[str, str]


class IndexBuilder:
    """Build system, severity and token indices from a store."""

    def __init__(self, weights: FieldWeights = DEFAULT_FIELD_WEIGHTS) -> None:
        self._weights = weights

    def build(self, store: RecordStore) -> Indices:
        """Build all indices for the store.

        The result depends only on the store contents, and nothing is
        shared with a previously built value.

        Args:
            store: Loaded record store.

        Returns:
            Complete, read-only indices.
        """
        by_system: dict[str, set[str]] = {}
        by_severity: dict[Severity, set[str]] = {}
        tokens: dict[str, set[Occurrence]] = {}
        system_labels: dict[str, str] = {}

        for record in store.all():
            key = system_key(record.system)
            by_system.setdefault(key, set()).add(record.code)
            system_labels.setdefault(key, record.system)
            by_severity.setdefault(record.severity, set()).add(record.code)
            for field_name, text in _field_texts(record):
                weight = self._weights.for_field(field_name)
                for token in tokenize(text):
                    tokens.setdefault(token, set()).add(
                        Occurrence(code=record.code, field=field_name, weight=weight)
                    )

        logger.info(
            f"Indices built (records={len(store)} systems={len(by_system)} "
            f"tokens={len(tokens)})"
        )
        return Indices(
            by_system=_freeze(by_system),
            by_severity=_freeze(by_severity),
            tokens=_freeze(tokens),
            system_labels=MappingProxyType(dict(system_labels)),
        )


def _field_texts(record: CodeRecord) -> list[tuple[RecordField, str]]:
    """List the searchable texts of a record with their source field."""
    texts: list[tuple[RecordField, str]] = [("description", record.description)]
    texts.extend(("causes", cause) for cause in record.possible_causes)
    texts.extend(("actions", action) for action in record.recommended_actions)
    return texts


def _freeze(buckets: dict) -> Mapping:
    return MappingProxyType({key: frozenset(values) for key, values in buckets.items()})
