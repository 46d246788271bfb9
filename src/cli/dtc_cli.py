# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line interface for the diagnostic code reference."""

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler
from rich.style import Style
from rich.table import Table
from rich.text import Text

from dtcref.corpus import LoadError
from dtcref.database import DEFAULT_CORPUS_PATH, CodeDatabase
from dtcref.explainer import Explainer, ExplanationError
from dtcref.explainers import (
    OLLAMA_DEFAULT_MODEL,
    OLLAMA_DEFAULT_URL,
    OPENAI_DEFAULT_BASE_URL,
    OPENAI_DEFAULT_MODEL,
    OllamaExplainer,
    OpenAIExplainer,
)
from dtcref.formatter import get_formatter
from dtcref.model import CodeRecord, FilterCriteria, SearchHit, Severity
from dtcref.query import InvalidQuery, NotFound, QueryEngine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_LOAD_ERROR = 3
EXIT_NOT_FOUND = 4
EXIT_INVALID_QUERY = 5
EXIT_EXPLANATION_FAILED = 6

TABLE_COLUMN_RATIOS: dict[str, int] = {
    "system": 1,
    "description": 3,
}

SEVERITY_STYLES: dict[Severity, Style] = {
    Severity.LOW: Style(color="bright_green"),
    Severity.MEDIUM: Style(color="bright_yellow"),
    Severity.HIGH: Style(color="bright_red"),
    Severity.CRITICAL: Style(color="bright_white", bgcolor="red"),
}

INTERACTIVE_HELP = """Available commands:
  lookup <code>        Look up details for an error code
  system <name>        List all errors for a specific system
  severity <level>     List all errors with a specific severity
  search <keywords>    Search for errors containing keywords
  systems              List known systems
  reload               Reload the corpus file
  help                 Display this help message
  exit                 Exit the interactive mode
"""

ARGUMENT_COMMANDS: dict[str, str] = {
    "lookup": "<code>",
    "system": "<system_name>",
    "severity": "<level>",
    "search": "<keywords>",
}


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(prog="dtcref")
    parser.add_argument(
        "--corpus",
        default=str(DEFAULT_CORPUS_PATH),
        help="Corpus file (block text or .csv). Defaults to the bundled corpus.",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    lookup_parser = subparsers.add_parser("lookup", help="Look up one error code.")
    lookup_parser.add_argument("code", help="Error code, e.g. P0300.")
    lookup_parser.add_argument(
        "--format",
        choices=("text", "html", "json"),
        default="text",
        help="Output format.",
    )
    lookup_parser.add_argument(
        "--output", required=False, help="Optional report file path."
    )

    list_parser = subparsers.add_parser("list", help="List codes by attribute.")
    list_parser.add_argument("--system", help="System label, e.g. Engine.")
    list_parser.add_argument(
        "--severity", help="Severity level: Low, Medium, High or Critical."
    )
    _add_listing_output_arguments(list_parser)

    search_parser = subparsers.add_parser("search", help="Keyword search.")
    search_parser.add_argument("keywords", help="Keywords or phrase to search for.")
    search_parser.add_argument(
        "--limit", type=int, default=None, help="Maximum number of results."
    )
    _add_listing_output_arguments(search_parser)

    explain_parser = subparsers.add_parser(
        "explain", help="Explain an error code with an LLM provider."
    )
    explain_parser.add_argument("code", help="Error code, e.g. P0300.")
    explain_parser.add_argument(
        "--provider", choices=("ollama", "openai"), default="ollama"
    )
    explain_parser.add_argument(
        "--provider-url", default=None, help="Provider API endpoint URL."
    )
    explain_parser.add_argument("--model", default=None, help="Provider model name.")
    explain_parser.add_argument(
        "--format",
        choices=("text", "html", "json"),
        default="text",
        help="Output format.",
    )
    explain_parser.add_argument(
        "--output", required=False, help="Optional report file path."
    )

    subparsers.add_parser("interactive", help="Start an interactive session.")
    return parser


def _add_listing_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=("table", "text", "html", "json"),
        default="table",
        help="Output format.",
    )
    parser.add_argument(
        "--output",
        required=False,
        help="Optional report file path; not supported with --format table.",
    )


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    stdin: TextIO | None = None,
) -> int:
    """Run CLI command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        stdin: Input stream for interactive mode; defaults to ``sys.stdin``.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return EXIT_USAGE
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    corpus_path = Path(args.corpus)
    try:
        database = CodeDatabase.open(corpus_path)
    except LoadError as exc:
        logger.warning(f"Corpus load failed (path={corpus_path} error={exc})")
        stderr.write(f"Failed to load corpus {corpus_path}: {exc}\n")
        return EXIT_LOAD_ERROR

    try:
        if args.command == "lookup":
            return _run_lookup(args, database.engine, stdout, stderr)
        if args.command == "list":
            return _run_list(args, database.engine, stdout, stderr)
        if args.command == "search":
            return _run_search(args, database.engine, stdout, stderr)
        if args.command == "explain":
            return _run_explain(args, database.engine, stdout, stderr)
        if args.command == "interactive":
            return run_interactive(
                database,
                corpus_path=corpus_path,
                stdin=stdin if stdin is not None else sys.stdin,
                stdout=stdout,
            )
    except NotFound as exc:
        stderr.write(f"{_not_found_message(exc)}\n")
        return EXIT_NOT_FOUND
    except InvalidQuery as exc:
        stderr.write(f"Invalid query: {exc}\n")
        return EXIT_INVALID_QUERY

    logger.warning(f"Unsupported command (command={args.command})")
    stderr.write(f"Unsupported command: {args.command}\n")
    return EXIT_USAGE


def _run_lookup(
    args: argparse.Namespace, engine: QueryEngine, stdout: TextIO, stderr: TextIO
) -> int:
    """Run lookup command.

    Raises:
        NotFound: If the code is not in the corpus.
    """
    record = engine.lookup_by_code(args.code)
    document = get_formatter(args.format).format_record(record)
    return _deliver(document, args.output, stdout, stderr)


def _run_list(
    args: argparse.Namespace, engine: QueryEngine, stdout: TextIO, stderr: TextIO
) -> int:
    """Run list command.

    Raises:
        InvalidQuery: If neither criterion is given or severity is unknown.
    """
    if args.format == "table" and args.output:
        stderr.write("--output requires --format text, html or json\n")
        return EXIT_USAGE
    records = engine.filter(FilterCriteria(system=args.system, severity=args.severity))
    logger.info(
        f"Filter completed (system={args.system} severity={args.severity} "
        f"results={len(records)})"
    )
    if not records and args.system is not None:
        suggestions = engine.suggest_systems(args.system)
        if suggestions:
            stderr.write(f"No codes found. Did you mean: {', '.join(suggestions)}?\n")
    if args.format == "table":
        _write_table(records=records, stdout=stdout)
        return EXIT_OK
    document = get_formatter(args.format).format_records(records)
    return _deliver(document, args.output, stdout, stderr)


def _run_search(
    args: argparse.Namespace, engine: QueryEngine, stdout: TextIO, stderr: TextIO
) -> int:
    """Run search command.

    Raises:
        InvalidQuery: If ``--limit`` is not positive.
    """
    if args.format == "table" and args.output:
        stderr.write("--output requires --format text, html or json\n")
        return EXIT_USAGE
    hits = engine.search(args.keywords, limit=args.limit)
    logger.info(f"Search completed (keywords={args.keywords!r} results={len(hits)})")
    if args.format == "table":
        _write_table(
            records=[hit.record for hit in hits], stdout=stdout, hits=hits
        )
        return EXIT_OK
    document = get_formatter(args.format).format_hits(hits)
    return _deliver(document, args.output, stdout, stderr)


def _run_explain(
    args: argparse.Namespace, engine: QueryEngine, stdout: TextIO, stderr: TextIO
) -> int:
    """Run explain command.

    Raises:
        NotFound: If the code is not in the corpus.
    """
    record = engine.lookup_by_code(args.code)
    try:
        explainer = build_explainer(
            provider=args.provider, provider_url=args.provider_url, model=args.model
        )
        explanation = explainer.explain(record)
    except ExplanationError as exc:
        stderr.write(f"Explanation failed for {record.code}: {exc}\n")
        return EXIT_EXPLANATION_FAILED
    document = get_formatter(args.format).format_record(record, explanation=explanation)
    return _deliver(document, args.output, stdout, stderr)


def build_explainer(
    provider: str, provider_url: str | None = None, model: str | None = None
) -> Explainer:
    """Create the configured explainer.

    Args:
        provider: ``ollama`` or ``openai``.
        provider_url: Provider endpoint URL; provider default when ``None``.
        model: Model name; provider default when ``None``.

    Returns:
        Configured explainer.

    Raises:
        ValueError: If the provider is unknown.
    """
    if provider == "ollama":
        return OllamaExplainer(
            provider_url=provider_url or OLLAMA_DEFAULT_URL,
            model=model or OLLAMA_DEFAULT_MODEL,
        )
    if provider == "openai":
        return OpenAIExplainer(
            provider_url=provider_url or OPENAI_DEFAULT_BASE_URL,
            model=model or OPENAI_DEFAULT_MODEL,
        )
    raise ValueError(f"Unsupported provider: {provider}")


def run_interactive(
    database: CodeDatabase, corpus_path: Path, stdin: TextIO, stdout: TextIO
) -> int:
    """Run a read-eval loop over the database until ``exit`` or end of input.

    Query errors are reported inline and never end the session.

    Args:
        database: Opened code database.
        corpus_path: Corpus file used by the ``reload`` command.
        stdin: Command input stream.
        stdout: Output stream.

    Returns:
        Exit code.
    """
    console = _console(stdout)
    formatter = get_formatter("text")
    console.print("=== Car Diagnostic Tool Interactive Mode ===", style="bright_blue")
    console.print("Type 'help' for available commands or 'exit' to quit", highlight=False)

    while True:
        console.print("> ", end="", style="bright_cyan")
        line = stdin.readline()
        if not line:
            break
        command, _, argument = line.strip().partition(" ")
        command = command.lower()
        argument = argument.strip()
        if not command:
            continue
        if command in {"exit", "quit"}:
            break

        engine = database.engine
        try:
            if command == "help":
                console.print(INTERACTIVE_HELP, markup=False, highlight=False)
            elif command == "systems":
                console.print("\n".join(engine.systems()), markup=False)
            elif command == "reload":
                engine = database.reload(corpus_path)
                console.print(f"Reloaded {len(engine.store)} codes", markup=False)
            elif command not in ARGUMENT_COMMANDS:
                console.print(
                    "Unknown command. Type 'help' for available commands.",
                    markup=False,
                )
            elif not argument:
                console.print(
                    f"Usage: {command} {ARGUMENT_COMMANDS[command]}", markup=False
                )
            elif command == "lookup":
                record = engine.lookup_by_code(argument)
                console.print(
                    formatter.format_record(record), markup=False, soft_wrap=True
                )
            elif command == "system":
                _write_table(
                    engine.filter(FilterCriteria(system=argument)), stdout=stdout
                )
            elif command == "severity":
                _write_table(
                    engine.filter(FilterCriteria(severity=argument)), stdout=stdout
                )
            else:
                hits = engine.search(argument)
                _write_table([hit.record for hit in hits], stdout=stdout, hits=hits)
        except NotFound as exc:
            console.print(_not_found_message(exc), markup=False, style="bright_red")
        except (InvalidQuery, LoadError) as exc:
            console.print(f"Error: {exc}", markup=False, style="bright_red")

    console.print("Exiting interactive mode", markup=False)
    return EXIT_OK


def _not_found_message(exc: NotFound) -> str:
    message = f"Error code '{exc.code}' not found in database"
    if exc.suggestions:
        message += f". Did you mean: {', '.join(exc.suggestions)}?"
    return message


def _deliver(
    document: str, output: str | None, stdout: TextIO, stderr: TextIO
) -> int:
    """Write a rendered document to a file or stdout.

    Args:
        document: Rendered report.
        output: Optional output file path.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    if output:
        output_path = Path(output)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(document, encoding="utf-8")
        except OSError as exc:
            logger.warning(
                f"Failed to write report file (output_path={output} error={exc})"
            )
            stderr.write(f"Failed to write report file: {output}\n")
            return EXIT_USAGE
        logger.info(f"Report exported (output_path={output})")
        return EXIT_OK
    _console(stdout).print(document, markup=False, highlight=False, soft_wrap=True)
    return EXIT_OK


def _console(stdout: TextIO) -> Console:
    return Console(file=stdout, force_terminal=False, color_system="truecolor")


def _write_table(
    records: Sequence[CodeRecord],
    stdout: TextIO,
    hits: Sequence[SearchHit] | None = None,
) -> None:
    """Write records as a Rich table, with a score column for search hits.

    Args:
        records: Records in display order.
        stdout: Standard output stream.
        hits: Search hits aligned with ``records``, if any.
    """
    console = _console(stdout)
    if not records:
        console.print("No matching codes.", markup=False)
        return
    table = Table(show_header=True, show_lines=False, expand=True)
    table.add_column("code", no_wrap=True)
    table.add_column("severity", no_wrap=True)
    table.add_column("system", ratio=TABLE_COLUMN_RATIOS["system"], overflow="fold")
    table.add_column(
        "description", ratio=TABLE_COLUMN_RATIOS["description"], overflow="fold"
    )
    if hits is not None:
        table.add_column("score", justify="right", no_wrap=True)
    for index, record in enumerate(records):
        row: list[Text] = [
            Text(record.code),
            Text(record.severity.value, style=SEVERITY_STYLES[record.severity]),
            Text(record.system),
            Text(record.description),
        ]
        if hits is not None:
            row.append(Text(f"{hits[index].score:g}"))
        table.add_row(*row)
    console.print(table)
    console.print(f"{len(records)} code(s)", markup=False, highlight=False)


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
