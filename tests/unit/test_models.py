from __future__ import annotations

import json

import pytest

from tariff_refdata.models import (
    Actor,
    DatasetKind,
    ImportIssue,
    ImportResult,
    ImportRun,
    ImportState,
    TarifPortProduct,
    TecArticle,
    VocProduct,
)
from tariff_refdata.models.records import records_from_wire


@pytest.mark.parametrize(
    "value,expected",
    [("tec", DatasetKind.TEC), ("A", DatasetKind.TEC), ("Voc", DatasetKind.VOC),
     ("c", DatasetKind.TARIFPORT), ("TARIFPORT", DatasetKind.TARIFPORT)],
)
def test_dataset_kind_parse(value, expected):
    assert DatasetKind.parse(value) is expected


def test_dataset_kind_parse_unknown():
    with pytest.raises(ValueError, match="unknown dataset kind"):
        DatasetKind.parse("D")


def test_tec_wire_names():
    article = TecArticle(sh10_code="8471300000", designation="Laptop", cumul_sans_tva=6.5, sh6_code="847130")
    wire = article.to_dict()
    assert wire["sh10Code"] == "8471300000"
    assert wire["cumulSansTVA"] == 6.5
    assert wire["sh6Code"] == "847130"
    assert "sh10_code" not in wire
    assert article.identifier == "8471300000"


def test_from_wire_ignores_unknown_keys_and_defaults_missing():
    items = [{"codeSH": "1901901000", "designation": "Lait", "exempte": True, "legacy": 1}, "garbage"]
    (product,) = records_from_wire(DatasetKind.VOC, items)
    assert product == VocProduct(code_sh="1901901000", designation="Lait", observation="", exempte=True)


def test_tarifport_wire_uses_snake_names():
    product = TarifPortProduct(libelle_produit="Scanner", chapitre="14", tp="SCAN", coderedevance="SCAN001")
    assert product.to_dict() == {
        "libelle_produit": "Scanner", "chapitre": "14", "tp": "SCAN", "coderedevance": "SCAN001",
    }


def test_import_result_failure_keeps_all_fields():
    result = ImportResult.failure("boom", ["w1"])
    assert result.to_dict() == {"success": False, "imported": 0, "errors": ["boom"], "warnings": ["w1"]}


def test_import_run_transitions_are_one_directional():
    run = ImportRun(kind="tec", source="x.xlsx")
    assert run.can_enter(ImportState.READING)
    run.state = ImportState.MAPPING
    assert not run.can_enter(ImportState.READING)
    assert not run.can_enter(ImportState.DONE)
    assert run.can_enter(ImportState.ABORTED)
    run.state = ImportState.BUILDING
    assert run.can_enter(ImportState.DONE)
    run.state = ImportState.DONE
    assert not run.can_enter(ImportState.ABORTED)


def test_actor_defaults():
    assert Actor.anonymous().can_mutate is False
    assert Actor.anonymous().label == "<anonymous>"
    assert Actor("admin", True).label == "admin"


def test_import_issue_json_line_fixed_keys():
    issue = ImportIssue.create("voc", "voc.xlsx", 3, "warning", "ROW_SKIPPED", "Row 3: ...")
    data = json.loads(issue.to_json_line())
    assert set(data) == {"timestamp", "kind", "source", "row", "severity", "issue_type", "message"}
    assert data["timestamp"].endswith("Z")
