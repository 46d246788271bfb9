# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Explanation provider abstractions."""

import logging
from typing import Protocol

from dtcref.model import CodeRecord

logger = logging.getLogger(__name__)

EXPLAIN_INSTRUCTIONS = (
    "You are assisting a vehicle mechanic. Explain the diagnostic trouble code "
    "below in plain language: what it means, how urgent it is, and which "
    "checks to start with. Keep it under 150 words."
)


class ExplanationError(RuntimeError):
    """Represent an explanation generation failure."""


class Explainer(Protocol):
    """Define explanation behavior for a provider client."""

    def explain(self, record: CodeRecord) -> str:
        """Generate an explanation for a code record.

        Args:
            record: Record to explain.

        Returns:
            Explanation text.

        Raises:
            ExplanationError: If generation fails or response is malformed.
        """


def build_prompt(record: CodeRecord) -> str:
    """Render a record as the prompt body sent to a provider."""
    lines = [
        f"Code: {record.code} ({record.category.name.title()})",
        f"Description: {record.description}",
        f"Severity: {record.severity.value}",
        f"System: {record.system}",
    ]
    if record.possible_causes:
        lines.append("Possible causes:")
        lines.extend(f"- {cause}" for cause in record.possible_causes)
    if record.recommended_actions:
        lines.append("Recommended actions:")
        lines.extend(f"- {action}" for action in record.recommended_actions)
    return "\n".join(lines)
