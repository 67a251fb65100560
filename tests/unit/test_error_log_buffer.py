from __future__ import annotations

import json
import re
from pathlib import Path

from ledger_analyzer.logging.error_log import ErrorLogBuffer, ErrorRecord

FIELDS = {"timestamp", "file", "sheet", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="ledger.xlsx",
        sheet="제품매출 (41110)",
        row=-1,
        error_type="NO_ANALYZABLE_DATA",
        message="no analyzable data",
    )
    data = json.loads(rec.to_json_line())
    assert set(data) == FIELDS
    assert data["sheet"] == "제품매출 (41110)"
    assert data["row"] == -1
    assert data["timestamp"].endswith("Z")
    # non-ASCII kept readable
    assert "제품매출" in rec.to_json_line()


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("a.xlsx", "S1", -1, "NO_ANALYZABLE_DATA", "no analyzable data"))
    buf.append(ErrorRecord.create("b.xlsx", "<FILE_LEVEL>", -1, "READ_ERROR", "bad zip"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent.resolve() == (temp_workdir / "logs").resolve()
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert all(set(json.loads(line)) == FIELDS for line in lines)
    assert len(buf) == 0


def test_multiple_flushes_append_to_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("a.xlsx", "S", 1, "X", "one"))
    first = buf.flush()
    buf.append(ErrorRecord.create("a.xlsx", "S", 2, "X", "two"))
    second = buf.flush()
    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_flush_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()
