import sys
from pathlib import Path

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

SAMPLE_CORPUS = """\
Error Code: P0300
Description: Random/Multiple Cylinder Misfire Detected
Severity: High
System: Engine
Possible Causes:
  - Spark plug issues
  - Ignition coil failure
  - Fuel injector problems
  - Vacuum leaks
  - Low fuel pressure
Recommended Actions:
  - Inspect and replace spark plugs
  - Test ignition coils

Error Code: P0171
Description: System Too Lean (Bank 1)
Severity: Medium
System: Fuel System
Possible Causes:
  - Vacuum leak downstream of the airflow sensor
  - Weak fuel pump
Recommended Actions:
  - Inspect intake hoses for leaks
  - Measure fuel pressure
"""


@pytest.fixture
def sample_corpus() -> str:
    return SAMPLE_CORPUS


@pytest.fixture
def sample_corpus_path(tmp_path: Path) -> Path:
    path = tmp_path / "error_codes.txt"
    path.write_text(SAMPLE_CORPUS, encoding="utf-8")
    return path
