"""Tests for JSON artifact and Excel exporters.

Checks canonical JSON text, fixed artifact names, the skip rule for a
missing ConceptMap, and the 2-sheet mapping workbook.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from dualcode.export.exporters import (
    MAPPING_HEADERS,
    artifact_name,
    export_all,
    export_artifact,
    export_mapping_to_excel,
    export_to_json,
    to_canonical_json,
)
from dualcode.models.codes import SourceCode, TargetCode
from dualcode.models.fhir import Bundle, CodeSystem, ConceptMap
from dualcode.reference.registry import CodeRegistry
from dualcode.synthesis import (
    FixedClock,
    GenerationContext,
    SequentialIds,
    build_code_registry_document,
    build_collection_document,
    build_mapping_document,
)


@pytest.fixture()
def generation() -> GenerationContext:
    return GenerationContext(clock=FixedClock(datetime(2024, 6, 1)), id_factory=SequentialIds())


@pytest.fixture()
def kasa() -> SourceCode:
    return SourceCode(id="nam-001", code="AYU.RESP.001", display="Kāsa", system="AYURVEDA")


@pytest.fixture()
def targets() -> list[TargetCode]:
    return [
        TargetCode(id="icd-001", code="TM40.00", display="Cough disorder (TM2)", module="TM2"),
        TargetCode(id="icd-002", code="CA23", display="Asthma", module="BIOMEDICINE"),
    ]


@pytest.fixture()
def code_system(kasa: SourceCode, generation: GenerationContext) -> CodeSystem:
    return build_code_registry_document(kasa, generation=generation)


@pytest.fixture()
def concept_map(
    kasa: SourceCode, targets: list[TargetCode], generation: GenerationContext
) -> ConceptMap:
    doc = build_mapping_document(kasa, targets, generation=generation)
    assert doc is not None
    return doc


@pytest.fixture()
def bundle(kasa: SourceCode, targets: list[TargetCode], generation: GenerationContext) -> Bundle:
    return build_collection_document(
        kasa, targets, [], registry=CodeRegistry([kasa], targets), generation=generation
    )


class TestCanonicalJson:
    def test_two_space_indent_and_field_order(self, code_system: CodeSystem) -> None:
        text = to_canonical_json(code_system)
        lines = text.splitlines()
        assert lines[1] == '  "resourceType": "CodeSystem",'
        assert lines[2] == '  "id": "namaste-terminology",'

    def test_non_ascii_kept(self, code_system: CodeSystem) -> None:
        assert "Kāsa" in to_canonical_json(code_system)

    def test_parses_back_to_fhir_dict(self, bundle: Bundle) -> None:
        assert json.loads(to_canonical_json(bundle)) == bundle.to_fhir()

    def test_matches_model_serializer(self, concept_map: ConceptMap) -> None:
        text = to_canonical_json(concept_map)
        assert text == concept_map.model_dump_json(indent=2, by_alias=True, exclude_none=True)
        assert "null" not in text
        assert '"sourceUri"' in text


class TestArtifactExport:
    def test_artifact_names(
        self, code_system: CodeSystem, concept_map: ConceptMap, bundle: Bundle
    ) -> None:
        assert artifact_name(code_system) == "namaste-codesystem.json"
        assert artifact_name(concept_map) == "namaste-icd11-conceptmap.json"
        assert artifact_name(bundle) == "fhir-bundle.json"

    def test_export_to_json_creates_parent(self, tmp_path: Path, code_system: CodeSystem) -> None:
        out = export_to_json(code_system, tmp_path / "nested" / "cs.json")
        assert out.exists()
        assert out.read_text(encoding="utf-8").endswith("}\n")

    def test_export_none_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Nothing to export"):
            export_artifact(None, tmp_path)
        with pytest.raises(ValueError):
            export_to_json(None, tmp_path / "x.json")

    def test_export_all(
        self, tmp_path: Path, code_system: CodeSystem, concept_map: ConceptMap, bundle: Bundle
    ) -> None:
        written = export_all(code_system, concept_map, bundle, tmp_path)
        assert [p.name for p in written] == [
            "namaste-codesystem.json",
            "namaste-icd11-conceptmap.json",
            "fhir-bundle.json",
        ]
        data = json.loads((tmp_path / "fhir-bundle.json").read_text(encoding="utf-8"))
        assert data["resourceType"] == "Bundle"

    def test_export_all_skips_missing_map(
        self, tmp_path: Path, code_system: CodeSystem, bundle: Bundle
    ) -> None:
        written = export_all(code_system, None, bundle, tmp_path)
        assert [p.name for p in written] == ["namaste-codesystem.json", "fhir-bundle.json"]
        assert not (tmp_path / "namaste-icd11-conceptmap.json").exists()


class TestExcelExport:
    def test_sheets_and_headers(self, tmp_path: Path, concept_map: ConceptMap) -> None:
        path = export_mapping_to_excel(concept_map, tmp_path / "mapping.xlsx")
        wb = load_workbook(path)
        assert wb.sheetnames == ["Mapping", "Summary"]
        ws = wb["Mapping"]
        assert [c.value for c in ws[1]] == MAPPING_HEADERS

    def test_mapping_rows(self, tmp_path: Path, concept_map: ConceptMap) -> None:
        path = export_mapping_to_excel(concept_map, tmp_path / "mapping.xlsx")
        ws = load_workbook(path)["Mapping"]
        rows = list(ws.iter_rows(min_row=2, values_only=True))
        assert len(rows) == 2
        assert rows[0][:4] == (1, "AYU.RESP.001", "Kāsa", "TM40.00")
        assert rows[1][3] == "CA23"
        assert rows[1][6] == "Mapped from AYURVEDA to BIOMEDICINE"
        assert ws.auto_filter.ref == "A1:G3"

    def test_summary_counts(self, tmp_path: Path, concept_map: ConceptMap) -> None:
        path = export_mapping_to_excel(concept_map, tmp_path / "mapping.xlsx")
        ws = load_workbook(path)["Summary"]
        values = {row[0]: row[1] for row in ws.iter_rows(values_only=True) if row[0]}
        assert values["Name"] == "NAMASTEToICD11Map"
        assert values["Source Codes"] == 1
        assert values["Target Codes"] == 2
        assert values["TM2 Targets"] == 1
        assert values["Biomedicine Targets"] == 1

    def test_none_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            export_mapping_to_excel(None, tmp_path / "mapping.xlsx")
