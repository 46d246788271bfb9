# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Keyword search ranking contracts and the token-sum ranker."""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from dtcref.model import RecordField

if TYPE_CHECKING:
    from dtcref.indexing import Occurrence


@dataclass(frozen=True)
class FieldWeights:
    """Per-field match weights; description must outrank causes and actions."""

    description: float = 3.0
    causes: float = 2.0
    actions: float = 1.0

    def __post_init__(self) -> None:
        if not self.description > self.causes > self.actions > 0.0:
            raise ValueError(
                "weights must satisfy description > causes > actions > 0"
            )

    def for_field(self, field_name: RecordField) -> float:
        return float(getattr(self, field_name))


DEFAULT_FIELD_WEIGHTS = FieldWeights()


class Ranker(Protocol):
    """Score candidate records for a tokenized query.

    Phrase or proximity aware ranking plugs in here; the engine only
    relies on the returned scores.
    """

    def score(
        self,
        query_tokens: Sequence[str],
        token_index: Mapping[str, frozenset["Occurrence"]],
    ) -> dict[str, float]:
        """Return a positive score per matching code.

        Args:
            query_tokens: Distinct normalized query tokens.
            token_index: Token to occurrence mapping from the indices.

        Returns:
            Mapping of code to score; codes without matches are absent.
        """


class TokenSumRanker:
    """Sum, per matched query token, the weight of the best matching field."""

    def score(
        self,
        query_tokens: Sequence[str],
        token_index: Mapping[str, frozenset["Occurrence"]],
    ) -> dict[str, float]:
        scores: dict[str, float] = {}
        for token in query_tokens:
            best: dict[str, float] = {}
            for occurrence in token_index.get(token, frozenset()):
                if occurrence.weight > best.get(occurrence.code, 0.0):
                    best[occurrence.code] = occurrence.weight
            for code, weight in best.items():
                scores[code] = scores.get(code, 0.0) + weight
        return scores
