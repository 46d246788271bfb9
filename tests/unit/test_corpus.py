# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from pathlib import Path

import pytest

from dtcref.corpus import LoadError, parse_corpus, parse_csv_corpus, read_corpus_file
from dtcref.database import DEFAULT_CORPUS_PATH
from dtcref.model import CodeCategory, Severity


def test_ph1_corpus_001_parses_p0300_fields_exactly(sample_corpus: str) -> None:
    records = parse_corpus(sample_corpus)

    assert [record.code for record in records] == ["P0300", "P0171"]
    p0300 = records[0]
    assert p0300.description == "Random/Multiple Cylinder Misfire Detected"
    assert p0300.severity is Severity.HIGH
    assert p0300.system == "Engine"
    assert len(p0300.possible_causes) == 5
    assert p0300.possible_causes[0] == "Spark plug issues"
    assert p0300.recommended_actions == (
        "Inspect and replace spark plugs",
        "Test ignition coils",
    )
    assert p0300.category is CodeCategory.POWERTRAIN


def test_ph1_corpus_002_duplicate_code_fails_with_line_of_duplicate() -> None:
    corpus = "\n".join(
        [
            "Error Code: P0300",
            "Description: First",
            "Severity: High",
            "System: Engine",
            "",
            "Error Code: p0300",
            "Description: Second",
            "Severity: Low",
            "System: Engine",
        ]
    )

    with pytest.raises(LoadError) as excinfo:
        parse_corpus(corpus)

    assert excinfo.value.line == 6
    assert "duplicate code P0300" in excinfo.value.reason


@pytest.mark.parametrize(
    ("code_line", "expected_reason"),
    [
        ("Error Code: X0300", "malformed code"),
        ("Error Code: P030", "malformed code"),
        ("Error Code: P0G00", "malformed code"),
    ],
)
def test_ph1_corpus_003_malformed_codes_are_rejected(
    code_line: str, expected_reason: str
) -> None:
    corpus = f"{code_line}\nDescription: Something\nSeverity: Low\nSystem: Engine\n"

    with pytest.raises(LoadError) as excinfo:
        parse_corpus(corpus)

    assert excinfo.value.line == 1
    assert expected_reason in excinfo.value.reason


def test_ph1_corpus_004_empty_description_is_a_load_error() -> None:
    corpus = "Error Code: P0300\nDescription:   \nSeverity: High\nSystem: Engine\n"

    with pytest.raises(LoadError) as excinfo:
        parse_corpus(corpus)

    assert excinfo.value.line == 2
    assert "empty description" in excinfo.value.reason


def test_ph1_corpus_005_unknown_severity_is_a_load_error() -> None:
    corpus = "Error Code: P0300\nDescription: Misfire\nSeverity: Severe\nSystem: Engine\n"

    with pytest.raises(LoadError) as excinfo:
        parse_corpus(corpus)

    assert excinfo.value.line == 3
    assert "unrecognized severity" in excinfo.value.reason


def test_ph1_corpus_006_missing_system_is_a_load_error() -> None:
    corpus = "Error Code: P0300\nDescription: Misfire\nSeverity: High\n"

    with pytest.raises(LoadError) as excinfo:
        parse_corpus(corpus)

    assert "missing system" in excinfo.value.reason


def test_ph1_corpus_007_structural_errors_report_their_line() -> None:
    with pytest.raises(LoadError) as bullet_error:
        parse_corpus("Error Code: P0300\n  - orphan bullet\n")
    with pytest.raises(LoadError) as field_error:
        parse_corpus("Error Code: P0300\nColour: red\n")
    with pytest.raises(LoadError) as leading_error:
        parse_corpus("Description: no code yet\n")

    assert bullet_error.value.line == 2
    assert field_error.value.line == 2
    assert "unknown field" in field_error.value.reason
    assert leading_error.value.line == 1


def test_ph1_corpus_008_report_layout_and_inline_lists_are_accepted() -> None:
    corpus = "\n".join(
        [
            "Error Code: c0035",
            "Description: Left Front Wheel Speed Sensor Circuit",
            "severity: critical",
            "System:   Climate   Control ",
            "",
            "Possible Causes: Failed sensor | Damaged wiring",
            "",
            "Recommended Actions:",
            "  * Inspect wiring",
            "  • Replace sensor",
        ]
    )

    records = parse_corpus(corpus)

    assert len(records) == 1
    record = records[0]
    assert record.code == "C0035"
    assert record.severity is Severity.CRITICAL
    assert record.system == "Climate Control"
    assert record.possible_causes == ("Failed sensor", "Damaged wiring")
    assert record.recommended_actions == ("Inspect wiring", "Replace sensor")


def test_ph1_corpus_009_csv_corpus_uses_pipe_separated_lists() -> None:
    text = "\n".join(
        [
            "code,description,severity,system,possible_causes,recommended_actions",
            'P0300,Random/Multiple Cylinder Misfire Detected,High,Engine,"Spark plug issues|Vacuum leaks",Replace plugs',
            "U0100,Lost Communication With ECM,Critical,Network,,",
        ]
    )

    records = parse_csv_corpus(text)

    assert [record.code for record in records] == ["P0300", "U0100"]
    assert records[0].possible_causes == ("Spark plug issues", "Vacuum leaks")
    assert records[0].recommended_actions == ("Replace plugs",)
    assert records[1].possible_causes == ()


def test_ph1_corpus_010_csv_errors_report_csv_line() -> None:
    text = "\n".join(
        [
            "code,description,severity,system,possible_causes,recommended_actions",
            "P0300,Misfire,High,Engine,,",
            "P0301,Cylinder 1 Misfire,Urgent,Engine,,",
        ]
    )

    with pytest.raises(LoadError) as excinfo:
        parse_csv_corpus(text)

    assert excinfo.value.line == 3


def test_ph1_corpus_011_csv_header_must_have_all_columns() -> None:
    with pytest.raises(LoadError) as excinfo:
        parse_csv_corpus("code,description\nP0300,Misfire\n")

    assert "severity" in excinfo.value.reason


def test_ph1_corpus_012_read_corpus_file_handles_missing_file(tmp_path: Path) -> None:
    with pytest.raises(LoadError):
        read_corpus_file(tmp_path / "missing.txt")


def test_ph1_corpus_013_bundled_corpus_loads() -> None:
    records = read_corpus_file(DEFAULT_CORPUS_PATH)

    codes = {record.code for record in records}
    assert "P0300" in codes
    assert len(codes) == len(records)


def test_ph1_corpus_014_system_labels_differing_in_case_share_one_spelling() -> None:
    corpus = "\n".join(
        [
            "Error Code: P0300",
            "Description: Misfire",
            "Severity: High",
            "System: engine",
            "Error Code: P0128",
            "Description: Coolant thermostat",
            "Severity: Low",
            "System: ENGINE",
            "Error Code: P0299",
            "Description: Turbo underboost",
            "Severity: Medium",
            "System: turbo  charger",
            "Error Code: P0234",
            "Description: Turbo overboost",
            "Severity: High",
            "System: Turbo Charger",
        ]
    )

    records = parse_corpus(corpus)

    assert [record.system for record in records] == [
        "Engine",
        "Engine",
        "turbo charger",
        "turbo charger",
    ]


def test_ph1_corpus_015_csv_system_labels_use_known_spelling() -> None:
    text = (
        "code,description,severity,system,possible_causes,recommended_actions\n"
        "C0035,Wheel speed sensor,High,abs,,\n"
        "C0040,Wheel speed sensor,High,ABS,,\n"
    )

    records = parse_csv_corpus(text)

    assert {record.system for record in records} == {"ABS"}
