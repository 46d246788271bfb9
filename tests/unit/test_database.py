# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
from pathlib import Path

import pytest

from dtcref.corpus import LoadError
from dtcref.database import CodeDatabase
from dtcref.model import FilterCriteria, Severity

EXTRA_RECORD = """
Error Code: P0420
Description: Catalyst System Efficiency Below Threshold (Bank 1)
Severity: Medium
System: Emissions
"""


def test_ph4_db_001_open_publishes_a_complete_engine(sample_corpus_path: Path) -> None:
    database = CodeDatabase.open(sample_corpus_path)

    engine = database.engine
    assert len(engine.store) == 2
    assert engine.lookup_by_code("P0300").system == "Engine"
    assert [r.code for r in engine.filter(FilterCriteria(severity=Severity.MEDIUM))] == [
        "P0171"
    ]


def test_ph4_db_002_reload_swaps_snapshot_and_keeps_old_engine_consistent(
    sample_corpus_path: Path,
) -> None:
    database = CodeDatabase.open(sample_corpus_path)
    old_engine = database.engine
    sample_corpus_path.write_text(
        sample_corpus_path.read_text(encoding="utf-8") + EXTRA_RECORD,
        encoding="utf-8",
    )

    new_engine = database.reload(sample_corpus_path)

    assert database.engine is new_engine
    assert "P0420" in new_engine.store
    assert "P0420" not in old_engine.store
    assert old_engine.search("catalyst") == []
    assert [hit.record.code for hit in new_engine.search("catalyst")] == ["P0420"]


def test_ph4_db_003_failed_reload_keeps_previous_snapshot(
    sample_corpus_path: Path, tmp_path: Path
) -> None:
    database = CodeDatabase.open(sample_corpus_path)
    published = database.engine
    broken = tmp_path / "broken.txt"
    broken.write_text(
        sample_corpus_path.read_text(encoding="utf-8") * 2, encoding="utf-8"
    )

    with pytest.raises(LoadError):
        database.reload(broken)

    assert database.engine is published


def test_ph4_db_004_duplicate_corpus_never_opens(tmp_path: Path, sample_corpus: str) -> None:
    path = tmp_path / "dup.txt"
    path.write_text(sample_corpus + "\n" + sample_corpus, encoding="utf-8")

    with pytest.raises(LoadError) as excinfo:
        CodeDatabase.open(path)

    assert "duplicate code P0300" in excinfo.value.reason


def test_ph4_db_005_csv_corpus_is_selected_by_suffix(tmp_path: Path) -> None:
    path = tmp_path / "error_codes.csv"
    path.write_text(
        "code,description,severity,system,possible_causes,recommended_actions\n"
        "P0300,Random/Multiple Cylinder Misfire Detected,High,Engine,Spark plug issues,Replace plugs\n",
        encoding="utf-8",
    )

    database = CodeDatabase.open(path)

    assert database.engine.lookup_by_code("p0300").possible_causes == (
        "Spark plug issues",
    )
