# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Report formatters for records and search results."""

import html
import json
from collections.abc import Callable, Sequence
from typing import Any, Protocol

from dtcref.model import CodeRecord, SearchHit

REPORT_TITLE = "Car Error Code Report"

_HTML_STYLE = """body { font-family: Arial, sans-serif; margin: 20px; }
.error-code { border: 1px solid #ddd; padding: 15px; margin-bottom: 20px; }
.score { color: #777; font-size: 0.9em; }
.explanation { background: #f7f7f7; padding: 10px; }
h2 { color: #d9534f; }
h3 { color: #5bc0de; }"""


class Formatter(Protocol):
    """Render records and result sets into a report document."""

    def format_record(self, record: CodeRecord, explanation: str | None = None) -> str:
        """Render a single record, optionally with an explanation."""

    def format_records(self, records: Sequence[CodeRecord]) -> str:
        """Render an ordered list of records."""

    def format_hits(self, hits: Sequence[SearchHit]) -> str:
        """Render ranked search hits, keeping their order and scores."""


def record_to_dict(record: CodeRecord) -> dict[str, Any]:
    """Convert a record to a JSON-compatible mapping."""
    return {
        "code": record.code,
        "category": record.category.name.lower(),
        "description": record.description,
        "severity": record.severity.value,
        "system": record.system,
        "possible_causes": list(record.possible_causes),
        "recommended_actions": list(record.recommended_actions),
    }


class TextFormatter:
    """Plain-text report layout."""

    def format_record(self, record: CodeRecord, explanation: str | None = None) -> str:
        lines = [
            f"Error Code: {record.code}",
            f"Description: {record.description}",
            f"Severity: {record.severity.value}",
            f"System: {record.system}",
            "",
            "Possible Causes:",
        ]
        lines.extend(f"  - {cause}" for cause in record.possible_causes)
        lines.extend(["", "Recommended Actions:"])
        lines.extend(f"  - {action}" for action in record.recommended_actions)
        if explanation:
            lines.extend(["", "Explanation:", explanation.strip()])
        return "\n".join(lines) + "\n"

    def format_records(self, records: Sequence[CodeRecord]) -> str:
        return "\n".join(self.format_record(record) for record in records)

    def format_hits(self, hits: Sequence[SearchHit]) -> str:
        blocks = [
            f"Score: {hit.score:g}\n{self.format_record(hit.record)}" for hit in hits
        ]
        return "\n".join(blocks)


class HtmlFormatter:
    """Standalone HTML report; all record text is escaped."""

    def format_record(self, record: CodeRecord, explanation: str | None = None) -> str:
        body = self._record_block(record)
        if explanation:
            body += (
                "<h3>Explanation:</h3>\n"
                f"<p class='explanation'>{html.escape(explanation.strip())}</p>\n"
            )
        return self._document(body)

    def format_records(self, records: Sequence[CodeRecord]) -> str:
        return self._document("".join(self._record_block(record) for record in records))

    def format_hits(self, hits: Sequence[SearchHit]) -> str:
        return self._document(
            "".join(self._record_block(hit.record, score=hit.score) for hit in hits)
        )

    def _record_block(self, record: CodeRecord, score: float | None = None) -> str:
        parts = ["<div class='error-code'>\n"]
        parts.append(f"<h2>Error Code: {html.escape(record.code)}</h2>\n")
        if score is not None:
            parts.append(f"<p class='score'>Relevance: {score:g}</p>\n")
        parts.append(
            f"<p><strong>Description:</strong> {html.escape(record.description)}</p>\n"
        )
        parts.append(f"<p><strong>Severity:</strong> {record.severity.value}</p>\n")
        parts.append(f"<p><strong>System:</strong> {html.escape(record.system)}</p>\n")
        parts.append("<h3>Possible Causes:</h3>\n<ul>\n")
        parts.extend(f"<li>{html.escape(cause)}</li>\n" for cause in record.possible_causes)
        parts.append("</ul>\n<h3>Recommended Actions:</h3>\n<ul>\n")
        parts.extend(
            f"<li>{html.escape(action)}</li>\n" for action in record.recommended_actions
        )
        parts.append("</ul>\n</div>\n")
        return "".join(parts)

    def _document(self, body: str) -> str:
        return (
            "<!DOCTYPE html>\n<html>\n<head>\n"
            f"<meta charset='utf-8'>\n<title>{REPORT_TITLE}</title>\n"
            f"<style>\n{_HTML_STYLE}\n</style>\n"
            "</head>\n<body>\n"
            f"<h1>{REPORT_TITLE}</h1>\n{body}"
            "</body>\n</html>\n"
        )


class JsonFormatter:
    """JSON documents with sorted keys; result lists keep engine order."""

    def __init__(self, indent: int = 2) -> None:
        self._indent = indent

    def format_record(self, record: CodeRecord, explanation: str | None = None) -> str:
        payload = record_to_dict(record)
        if explanation:
            payload["explanation"] = explanation.strip()
        return self._dump(payload)

    def format_records(self, records: Sequence[CodeRecord]) -> str:
        return self._dump({"records": [record_to_dict(record) for record in records]})

    def format_hits(self, hits: Sequence[SearchHit]) -> str:
        return self._dump(
            {
                "results": [
                    {**record_to_dict(hit.record), "score": hit.score} for hit in hits
                ]
            }
        )

    def _dump(self, payload: dict[str, Any]) -> str:
        return json.dumps(
            payload, indent=self._indent, sort_keys=True, ensure_ascii=False
        )


FORMATTERS: dict[str, Callable[[], Formatter]] = {
    "text": TextFormatter,
    "html": HtmlFormatter,
    "json": JsonFormatter,
}


def get_formatter(name: str) -> Formatter:
    """Return a formatter instance by name.

    Raises:
        ValueError: If no formatter has this name.
    """
    try:
        return FORMATTERS[name]()
    except KeyError as exc:
        raise ValueError(f"Unsupported format: {name}") from exc
