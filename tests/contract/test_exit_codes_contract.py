from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from tariff_refdata.cli import main as cli_main
from tariff_refdata.cli.app import EXIT_FATAL, EXIT_IMPORT_FAILED, EXIT_SUCCESS
from tariff_refdata.db.reference_store import ReferenceStore
from tariff_refdata.logging.issue_log import ImportIssueLog
from tariff_refdata.services.reference_data import ReferenceDataService

"""Exit code contract: 0 success, 1 fatal, 2 import failed."""


@pytest.fixture()
def service(memory_store: ReferenceStore, temp_workdir: Path) -> ReferenceDataService:
    return ReferenceDataService(memory_store, issue_log=ImportIssueLog(temp_workdir / "logs"))


def _run(service: ReferenceDataService, *argv: str) -> int:
    with patch("tariff_refdata.cli.app._build_service", return_value=service):
        return cli_main(list(argv))


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_IMPORT_FAILED) == (0, 1, 2)


def test_missing_config_is_fatal(temp_workdir: Path, capsys):
    code = cli_main(["show", "voc"])
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_import_success(service, write_config, make_workbook, voc_rows):
    assert _run(service, "import", "voc", str(make_workbook(voc_rows)), "--actor", "admin") == EXIT_SUCCESS


def test_import_without_valid_rows(service, write_config, make_workbook):
    path = make_workbook([["Code SH", "Désignation"], ["", "sans code"]])
    assert _run(service, "import", "voc", str(path), "--actor", "admin") == EXIT_IMPORT_FAILED


def test_import_when_store_down(service, write_config, make_workbook, voc_rows, memory_provider):
    memory_provider.fail = True
    assert _run(service, "import", "voc", str(make_workbook(voc_rows)), "--actor", "admin") == EXIT_IMPORT_FAILED


def test_unauthorized_delete_is_fatal(service, write_config):
    assert _run(service, "delete", "voc", "--actor", "guest") == EXIT_FATAL


def test_show_when_every_tier_down_is_fatal(service, write_config, memory_provider, capsys):
    memory_provider.fail = True
    assert _run(service, "show", "voc") == EXIT_FATAL
    assert "ERROR store:" in capsys.readouterr().out
