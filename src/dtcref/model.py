# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models for diagnostic trouble code records."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Literal

CODE_PATTERN = re.compile(r"[PCBU][0-9A-Fa-f]{4}")

RecordField = Literal["description", "causes", "actions"]

KNOWN_SYSTEMS: frozenset[str] = frozenset(
    {
        "ABS",
        "Airbag",
        "Body",
        "Brakes",
        "Charging",
        "Climate Control",
        "Emissions",
        "Engine",
        "Exhaust",
        "Fuel System",
        "Ignition",
        "Lighting",
        "Network",
        "Steering",
        "Suspension",
        "Transmission",
    }
)


class Severity(Enum):
    """Ordered criticality of a trouble code."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, token: str) -> "Severity":
        """Parse a severity token case-insensitively.

        Args:
            token: Raw severity text such as ``"High"`` or ``"critical"``.

        Returns:
            Matching severity level.

        Raises:
            ValueError: If the token is not one of the known levels.
        """
        lowered = token.strip().lower()
        for level in cls:
            if level.value.lower() == lowered:
                return level
        raise ValueError(f"Unrecognized severity: {token!r}")


_SEVERITY_RANKS: dict[Severity, int] = {
    Severity.LOW: 0,
    Severity.MEDIUM: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class CodeCategory(Enum):
    """Code family denoted by the first character of a code."""

    POWERTRAIN = "P"
    CHASSIS = "C"
    BODY = "B"
    NETWORK = "U"


def normalize_code(code: str) -> str:
    """Return the canonical uppercase form of a code string."""
    return code.strip().upper()


def normalize_system(label: str) -> str:
    """Collapse whitespace in a system label."""
    return " ".join(label.split())


def system_key(label: str) -> str:
    """Return the case-insensitive lookup key for a system label."""
    return normalize_system(label).casefold()


@dataclass(frozen=True)
class CodeRecord:
    """Represent one diagnostic trouble code entry.

    Attributes:
        code: Canonical code, e.g. ``P0300``.
        description: Human-readable description.
        severity: Criticality level.
        system: Normalized subsystem label, e.g. ``Engine``.
        possible_causes: Ordered possible causes.
        recommended_actions: Ordered recommended actions.
    """

    code: str
    description: str
    severity: Severity
    system: str
    possible_causes: tuple[str, ...] = ()
    recommended_actions: tuple[str, ...] = ()

    @property
    def category(self) -> CodeCategory:
        return CodeCategory(self.code[0])


@dataclass(frozen=True)
class FilterCriteria:
    """Attribute filter; at least one field must be set."""

    system: str | None = None
    severity: Severity | str | None = None

    @property
    def is_empty(self) -> bool:
        return self.system is None and self.severity is None


@dataclass(frozen=True)
class SearchHit:
    """Represent one ranked keyword search result."""

    record: CodeRecord
    score: float
