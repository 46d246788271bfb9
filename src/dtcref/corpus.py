# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Corpus parsing for block-text and CSV code databases."""

import csv
import io
import logging
from dataclasses import dataclass, field
from pathlib import Path

from dtcref.model import (
    CODE_PATTERN,
    KNOWN_SYSTEMS,
    CodeRecord,
    Severity,
    normalize_code,
    normalize_system,
    system_key,
)

logger = logging.getLogger(__name__)

BULLET_PREFIXES: tuple[str, ...] = ("-", "*", "•")
LIST_SEPARATOR = "|"
CSV_COLUMNS: tuple[str, ...] = (
    "code",
    "description",
    "severity",
    "system",
    "possible_causes",
    "recommended_actions",
)

_KNOWN_SYSTEM_LABELS: dict[str, str] = {
    system_key(name): name for name in KNOWN_SYSTEMS
}

_SCALAR_KEYS: dict[str, str] = {
    "error code": "code",
    "description": "description",
    "severity": "severity",
    "system": "system",
}
_LIST_KEYS: dict[str, str] = {
    "possible causes": "possible_causes",
    "recommended actions": "recommended_actions",
}


class LoadError(RuntimeError):
    """Represent a fatal corpus load failure.

    Attributes:
        line: 1-based corpus line where the failure was detected.
        reason: Human-readable failure reason.
    """

    def __init__(self, line: int, reason: str) -> None:
        super().__init__(f"line {line}: {reason}")
        self.line = line
        self.reason = reason


@dataclass
class _PendingRecord:
    """Accumulate one block's fields while parsing."""

    start_line: int
    values: dict[str, str] = field(default_factory=dict)
    lists: dict[str, list[str]] = field(default_factory=dict)
    field_lines: dict[str, int] = field(default_factory=dict)


def parse_corpus(text: str) -> list[CodeRecord]:
    """Parse a block-format corpus into validated records.

    A record starts at an ``Error Code:`` line; blank lines only separate.
    List fields take bullet lines or an inline ``|``-separated value.

    Args:
        text: Full corpus text.

    Returns:
        Records in corpus order.

    Raises:
        LoadError: On the first malformed line or invalid record.
    """
    records: list[CodeRecord] = []
    seen: dict[str, int] = {}
    labels: dict[str, str] = {}
    pending: _PendingRecord | None = None
    open_list: str | None = None

    for line_no, raw_line in enumerate(text.splitlines(), start=1):
        stripped = raw_line.strip()
        if not stripped or stripped.startswith("#"):
            continue

        if stripped.startswith(BULLET_PREFIXES):
            if pending is None or open_list is None:
                raise LoadError(line_no, "bullet item outside of a list field")
            item = stripped[1:].strip()
            if item:
                pending.lists[open_list].append(item)
            continue

        key, sep, value = stripped.partition(":")
        if not sep:
            raise LoadError(line_no, f"expected 'Key: value', got {stripped!r}")
        key = " ".join(key.split()).lower()
        value = value.strip()

        if key == "error code":
            if pending is not None:
                records.append(_finish(pending, seen, labels))
            pending = _PendingRecord(start_line=line_no)
            open_list = None
        elif pending is None:
            raise LoadError(line_no, "field appears before any 'Error Code:' line")

        if key in _SCALAR_KEYS:
            name = _SCALAR_KEYS[key]
            if name in pending.values:
                raise LoadError(line_no, f"duplicate field {name!r} in record")
            pending.values[name] = value
            pending.field_lines[name] = line_no
            open_list = None
        elif key in _LIST_KEYS:
            name = _LIST_KEYS[key]
            if name in pending.lists:
                raise LoadError(line_no, f"duplicate field {name!r} in record")
            pending.lists[name] = _split_inline(value)
            pending.field_lines[name] = line_no
            open_list = name
        else:
            raise LoadError(line_no, f"unknown field {key!r}")

    if pending is not None:
        records.append(_finish(pending, seen, labels))
    if not records:
        logger.warning("Corpus contains no records")
    return records


def parse_csv_corpus(text: str) -> list[CodeRecord]:
    """Parse a CSV corpus with ``|``-separated list columns.

    Args:
        text: Full CSV text including the header row.

    Returns:
        Records in file order.

    Raises:
        LoadError: If the header is incomplete or any row is invalid.
    """
    reader = csv.DictReader(io.StringIO(text))
    header = [name.strip() for name in reader.fieldnames or []]
    missing = [column for column in CSV_COLUMNS if column not in header]
    if missing:
        raise LoadError(1, f"CSV header is missing columns: {', '.join(missing)}")
    reader.fieldnames = header

    records: list[CodeRecord] = []
    seen: dict[str, int] = {}
    labels: dict[str, str] = {}
    try:
        for row in reader:
            line_no = reader.line_num
            pending = _PendingRecord(start_line=line_no)
            for column in ("code", "description", "severity", "system"):
                pending.values[column] = (row.get(column) or "").strip()
                pending.field_lines[column] = line_no
            for column in ("possible_causes", "recommended_actions"):
                pending.lists[column] = _split_inline(row.get(column) or "")
            records.append(_finish(pending, seen, labels))
    except csv.Error as exc:
        raise LoadError(reader.line_num, f"malformed CSV: {exc}") from exc
    if not records:
        logger.warning("Corpus contains no records")
    return records


def read_corpus_file(path: Path) -> list[CodeRecord]:
    """Read and parse a corpus file, choosing the parser by suffix.

    Args:
        path: Corpus file path; ``.csv`` files use the CSV parser.

    Returns:
        Parsed records.

    Raises:
        LoadError: If the file cannot be read or fails validation.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Failed to read corpus file (path={path} error={exc})")
        raise LoadError(0, f"cannot read corpus file {path}: {exc}") from exc
    if path.suffix.lower() == ".csv":
        return parse_csv_corpus(text)
    return parse_corpus(text)


def _split_inline(value: str) -> list[str]:
    """Split an inline list value on ``|`` separators."""
    return [part.strip() for part in value.split(LIST_SEPARATOR) if part.strip()]


def _finish(
    pending: _PendingRecord, seen: dict[str, int], labels: dict[str, str]
) -> CodeRecord:
    """Validate accumulated fields and build a record.

    System labels that differ only in case share one spelling: the known
    system name when there is one, otherwise the first spelling loaded.

    Args:
        pending: Block fields collected so far.
        seen: Codes already accepted mapped to their first line; updated.
        labels: Case-folded system keys mapped to their label; updated.

    Returns:
        Validated record.

    Raises:
        LoadError: If any field is invalid or the code is a duplicate.
    """
    code_line = pending.field_lines.get("code", pending.start_line)
    raw_code = pending.values.get("code", "")
    code = normalize_code(raw_code)
    if not CODE_PATTERN.fullmatch(code):
        raise LoadError(code_line, f"malformed code {raw_code!r}")
    if code in seen:
        raise LoadError(
            code_line, f"duplicate code {code} (first defined on line {seen[code]})"
        )

    description = pending.values.get("description", "")
    if not description:
        line = pending.field_lines.get("description", pending.start_line)
        raise LoadError(line, f"empty description for {code}")

    severity_token = pending.values.get("severity", "")
    try:
        severity = Severity.parse(severity_token)
    except ValueError as exc:
        line = pending.field_lines.get("severity", pending.start_line)
        raise LoadError(
            line, f"unrecognized severity {severity_token!r} for {code}"
        ) from exc

    system = normalize_system(pending.values.get("system", ""))
    if not system:
        line = pending.field_lines.get("system", pending.start_line)
        raise LoadError(line, f"missing system for {code}")
    key = system_key(system)
    if key not in labels:
        labels[key] = _KNOWN_SYSTEM_LABELS.get(key, system)
        if key not in _KNOWN_SYSTEM_LABELS:
            logger.warning(f"Unlisted system label (code={code} system={system})")
    system = labels[key]

    seen[code] = code_line
    return CodeRecord(
        code=code,
        description=description,
        severity=severity,
        system=system,
        possible_causes=tuple(pending.lists.get("possible_causes", ())),
        recommended_actions=tuple(pending.lists.get("recommended_actions", ())),
    )
