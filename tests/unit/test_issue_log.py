from __future__ import annotations

import json
import re
from pathlib import Path

from tariff_refdata.logging.issue_log import ImportIssueLog
from tariff_refdata.models.import_issue import ImportIssue


def test_flush_empty_buffer_creates_nothing(tmp_path: Path):
    log = ImportIssueLog(tmp_path / "logs")
    assert log.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines_and_clears(tmp_path: Path):
    log = ImportIssueLog(tmp_path / "logs")
    log.append(ImportIssue.create("tec", "tec.xlsx", 4, "warning", "VALUE_COERCION", "Row 4, column dd: ..."))
    log.append(ImportIssue.create("tec", "tec.xlsx", -1, "error", "EMPTY_RESULT", "No valid records found in file"))
    assert len(log) == 2

    path = log.flush()

    assert re.fullmatch(r"import-issues-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(l)["row"] for l in lines] == [4, -1]
    assert len(log) == 0


def test_subsequent_flushes_append_to_same_file(tmp_path: Path):
    log = ImportIssueLog(tmp_path)
    log.append(ImportIssue.create("voc", "a.xlsx", 2, "warning", "ROW_SKIPPED", "first"))
    first = log.flush()
    log.append(ImportIssue.create("voc", "b.xlsx", 3, "warning", "ROW_SKIPPED", "second"))
    second = log.flush()
    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2
