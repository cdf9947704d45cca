from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for _path in (ROOT, ROOT / "src"):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))


import pytest

from gamslens.analysis.cancellation import NEVER_CANCELLED, cancellation_scope
from gamslens.analysis.token_cache import default_cache


SCENARIO_LINES = [
    "* Header ---",
    "SETS",
    "  i /1*3/",
    "  j /a,b/;",
    "* Footer ---",
]


@pytest.fixture(autouse=True)
def _cancellation_scope_fixture():
    with cancellation_scope(NEVER_CANCELLED):
        yield


@pytest.fixture(autouse=True)
def _fresh_default_cache():
    default_cache().clear()
    yield
    default_cache().clear()


@pytest.fixture
def scenario_lines() -> list[str]:
    return list(SCENARIO_LINES)


@pytest.fixture
def write_source(tmp_path: Path):
    def _write(lines: list[str], name: str = "model.gms") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write
