"""Tests for problem-entry data-quality checks."""

from __future__ import annotations

import pytest

from dualcode.models.codes import SourceCode, TargetCode
from dualcode.models.problems import ProblemEntry
from dualcode.reference.registry import CodeRegistry
from dualcode.validation.quality import check_problem_entries, check_problem_entry
from dualcode.validation.report import FindingSeverity


@pytest.fixture()
def registry() -> CodeRegistry:
    return CodeRegistry(
        [SourceCode(id="nam-001", code="AYU.RESP.001", display="Kasa", system="AYURVEDA")],
        [TargetCode(id="icd-001", code="TM40.00", display="Cough disorder (TM2)", module="TM2")],
    )


def _problem(**overrides: object) -> ProblemEntry:
    data: dict[str, object] = {
        "id": "prob-1",
        "patient_id": "PATIENT-001",
        "source_code_id": "nam-001",
        "target_code_ids": ["icd-001"],
        "clinical_status": "active",
        "severity": "moderate",
    }
    data.update(overrides)
    return ProblemEntry.model_validate(data)


class TestCheckProblemEntry:
    def test_clean_entry(self, registry: CodeRegistry) -> None:
        assert check_problem_entry(_problem(), registry) == []

    def test_unknown_severity(self, registry: CodeRegistry) -> None:
        findings = check_problem_entry(_problem(severity="critical"), registry)
        assert [f.rule_id for f in findings] == ["DQ-VOC-001"]
        assert findings[0].severity == FindingSeverity.ERROR

    def test_unknown_status(self, registry: CodeRegistry) -> None:
        findings = check_problem_entry(_problem(clinical_status="remission"), registry)
        assert [f.rule_id for f in findings] == ["DQ-VOC-002"]

    def test_dangling_ids(self, registry: CodeRegistry) -> None:
        findings = check_problem_entry(
            _problem(source_code_id="nam-x", target_code_ids=["icd-001", "icd-y"]), registry
        )
        assert [(f.rule_id, f.code_id) for f in findings] == [
            ("DQ-REF-001", "nam-x"),
            ("DQ-REF-002", "icd-y"),
        ]
        assert all(f.severity == FindingSeverity.WARNING for f in findings)

    def test_onset_after_recorded(self, registry: CodeRegistry) -> None:
        findings = check_problem_entry(
            _problem(onset_date="2024-05-03", recorded_date="2024-05-01"), registry
        )
        assert [f.rule_id for f in findings] == ["DQ-DAT-001"]

    def test_no_codes(self, registry: CodeRegistry) -> None:
        findings = check_problem_entry(
            _problem(source_code_id=None, target_code_ids=[]), registry
        )
        assert [f.rule_id for f in findings] == ["DQ-CMP-001"]
        assert findings[0].severity == FindingSeverity.NOTICE


class TestCheckProblemEntries:
    def test_report_counts(self, registry: CodeRegistry) -> None:
        problems = [
            _problem(),
            _problem(id="prob-2", severity="critical", target_code_ids=["icd-y"]),
            _problem(id="prob-3", source_code_id=None, target_code_ids=[]),
        ]
        report = check_problem_entries(problems, registry)
        assert report.problems_checked == 3
        assert report.error_count == 1
        assert report.warning_count == 1
        assert report.notice_count == 1
        assert report.has_errors

    def test_duplicate_ids(self, registry: CodeRegistry) -> None:
        report = check_problem_entries([_problem(), _problem()], registry)
        assert len(report.by_rule("DQ-ID-001")) == 1
        assert not report.has_errors

    def test_empty_list(self, registry: CodeRegistry) -> None:
        report = check_problem_entries([], registry)
        assert report.findings == []
        assert report.problems_checked == 0
