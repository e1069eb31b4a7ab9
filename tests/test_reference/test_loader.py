"""Tests for registry snapshot and problem-entry loaders."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dualcode.errors import RegistryLoadError
from dualcode.reference.loader import (
    load_problem_entries,
    load_registry_from_csv,
    load_registry_snapshot,
    parse_code_array,
)

SNAPSHOT = {
    "namaste_codes": [
        {
            "id": "nam-001",
            "code": "AYU.RESP.001",
            "display": "Kasa",
            "system": "AYURVEDA",
            "description": "Cough",
            "icd11_mappings": ["TM40.00"],
        },
        {
            "id": "nam-002",
            "code": "UNA.DIG.002",
            "display": "Su-e-Hazm",
            "system": "UNANI",
            "description": None,
            "icd11_mappings": None,
        },
    ],
    "icd11_codes": [
        {
            "id": "icd-001",
            "code": "TM40.00",
            "display": "Cough disorder (TM2)",
            "module": "TM2",
            "namaste_mappings": ["AYU.RESP.001"],
        },
    ],
}


@pytest.fixture()
def snapshot_path(tmp_path: Path) -> Path:
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(SNAPSHOT), encoding="utf-8")
    return path


class TestLoadRegistrySnapshot:
    def test_loads_both_tables(self, snapshot_path: Path) -> None:
        registry = load_registry_snapshot(snapshot_path)
        assert len(registry.sources) == 2
        assert len(registry.targets) == 1
        assert registry.find_source_by_code("UNA.DIG.002").description == ""  # type: ignore[union-attr]

    def test_fallback_keys(self, tmp_path: Path) -> None:
        path = tmp_path / "alt.json"
        path.write_text(
            json.dumps({"sources": SNAPSHOT["namaste_codes"], "targets": []}),
            encoding="utf-8",
        )
        registry = load_registry_snapshot(path)
        assert len(registry.sources) == 2
        assert registry.targets == ()

    def test_empty_snapshot(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.json"
        path.write_text("{}", encoding="utf-8")
        assert load_registry_snapshot(path).is_empty()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_registry_snapshot(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(RegistryLoadError, match="Invalid JSON"):
            load_registry_snapshot(path)

    def test_top_level_list_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "list.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(RegistryLoadError, match="JSON object"):
            load_registry_snapshot(path)

    def test_invalid_row_reports_index(self, tmp_path: Path) -> None:
        path = tmp_path / "row.json"
        rows = [SNAPSHOT["namaste_codes"][0], {"id": "x", "code": "X", "display": "X"}]
        path.write_text(json.dumps({"namaste_codes": rows}), encoding="utf-8")
        with pytest.raises(RegistryLoadError, match="index 1"):
            load_registry_snapshot(path)


class TestLoadRegistryFromCsv:
    def test_array_columns(self, tmp_path: Path) -> None:
        src = tmp_path / "namaste_codes.csv"
        src.write_text(
            "id,code,display,system,description,icd11_mappings\n"
            'nam-001,AYU.RESP.001,Kasa,AYURVEDA,Cough,"{TM40.00,CA23}"\n'
            "nam-002,SID.GEN.004,Suram,SIDDHA,,\n",
            encoding="utf-8",
        )
        tgt = tmp_path / "icd11_codes.csv"
        tgt.write_text(
            "id,code,display,module,description,namaste_mappings\n"
            "icd-001,TM40.00,Cough disorder (TM2),TM2,,AYU.RESP.001\n"
            "icd-002,CA23,Asthma,BIOMEDICINE,,\n",
            encoding="utf-8",
        )

        registry = load_registry_from_csv(src, tgt)

        kasa = registry.find_source_by_code("AYU.RESP.001")
        assert kasa is not None
        assert kasa.mapped_target_codes == ["TM40.00", "CA23"]
        assert registry.find_source_by_code("SID.GEN.004").mapped_target_codes == []  # type: ignore[union-attr]
        assert registry.find_target_by_code("TM40.00").mapped_source_codes == ["AYU.RESP.001"]  # type: ignore[union-attr]
        assert registry.find_target_by_code("CA23").mapped_source_codes is None  # type: ignore[union-attr]

    def test_missing_csv(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_registry_from_csv(tmp_path / "a.csv", tmp_path / "b.csv")


class TestParseCodeArray:
    def test_postgres_literal(self) -> None:
        assert parse_code_array('{TM40.00,"CA23"}') == ["TM40.00", "CA23"]

    def test_json_array(self) -> None:
        assert parse_code_array('["TM40.00", "CA23"]') == ["TM40.00", "CA23"]

    def test_semicolon_list(self) -> None:
        assert parse_code_array("TM40.00; CA23") == ["TM40.00", "CA23"]

    def test_blank(self) -> None:
        assert parse_code_array("") == []
        assert parse_code_array(None) == []
        assert parse_code_array("{}") == []

    def test_malformed_json(self) -> None:
        with pytest.raises(RegistryLoadError):
            parse_code_array("[TM40.00")


class TestLoadProblemEntries:
    def test_bare_list_keeps_order(self, tmp_path: Path) -> None:
        path = tmp_path / "problems.json"
        rows = [
            {
                "id": f"prob-{i}",
                "patient_id": "PATIENT-001",
                "namaste_code_id": "nam-001",
                "icd11_code_ids": ["icd-001"],
                "clinical_status": "active",
                "severity": "mild",
            }
            for i in (3, 1, 2)
        ]
        path.write_text(json.dumps(rows), encoding="utf-8")
        problems = load_problem_entries(path)
        assert [p.id for p in problems] == ["prob-3", "prob-1", "prob-2"]

    def test_wrapped_object(self, tmp_path: Path) -> None:
        path = tmp_path / "problems.json"
        path.write_text(
            json.dumps(
                {
                    "problem_entries": [
                        {
                            "id": "prob-1",
                            "patient_id": "PATIENT-001",
                            "clinical_status": "resolved",
                            "severity": "severe",
                            "recorded_date": "2024-02-01T09:00:00Z",
                        }
                    ]
                }
            ),
            encoding="utf-8",
        )
        problems = load_problem_entries(path)
        assert len(problems) == 1
        assert str(problems[0].recorded_date) == "2024-02-01"

    def test_wrong_container_type(self, tmp_path: Path) -> None:
        path = tmp_path / "problems.json"
        path.write_text(json.dumps({"problem_entries": {"id": "x"}}), encoding="utf-8")
        with pytest.raises(RegistryLoadError, match="must be a list"):
            load_problem_entries(path)
