"""Data-quality checks over problem entries against a registry snapshot.

Rules:
    DQ-VOC-001  ERROR    severity outside mild/moderate/severe
    DQ-VOC-002  ERROR    clinical status outside active/inactive/resolved
    DQ-REF-001  WARNING  NAMASTE code id not in the snapshot
    DQ-REF-002  WARNING  ICD-11 code id not in the snapshot
    DQ-DAT-001  WARNING  onset date later than recorded date
    DQ-CMP-001  NOTICE   problem carries no code references at all
    DQ-ID-001   WARNING  problem id repeated in the list
"""

from __future__ import annotations

from collections.abc import Sequence

from dualcode.errors import UnknownVocabularyValue
from dualcode.models.problems import ProblemEntry
from dualcode.reference.registry import CodeRegistry
from dualcode.transforms.recoding import clinical_status_code, severity_code
from dualcode.validation.report import (
    FindingCategory,
    FindingSeverity,
    QualityFinding,
    QualityReport,
)


def check_problem_entries(
    problems: Sequence[ProblemEntry],
    registry: CodeRegistry,
) -> QualityReport:
    """Run every problem-entry check and aggregate the findings."""
    findings: list[QualityFinding] = []
    seen_ids: set[str] = set()

    for problem in problems:
        findings.extend(check_problem_entry(problem, registry))
        if problem.id in seen_ids:
            findings.append(
                QualityFinding(
                    rule_id="DQ-ID-001",
                    category=FindingCategory.IDENTITY,
                    severity=FindingSeverity.WARNING,
                    message=f"Problem id {problem.id} appears more than once",
                    problem_id=problem.id,
                )
            )
        seen_ids.add(problem.id)

    return QualityReport.from_findings(findings, problems_checked=len(problems))


def check_problem_entry(problem: ProblemEntry, registry: CodeRegistry) -> list[QualityFinding]:
    """Findings for a single problem entry."""
    findings: list[QualityFinding] = []

    try:
        severity_code(problem.severity)
    except UnknownVocabularyValue as e:
        findings.append(
            QualityFinding(
                rule_id="DQ-VOC-001",
                category=FindingCategory.VOCABULARY,
                severity=FindingSeverity.ERROR,
                message=str(e),
                problem_id=problem.id,
            )
        )

    try:
        clinical_status_code(problem.clinical_status)
    except UnknownVocabularyValue as e:
        findings.append(
            QualityFinding(
                rule_id="DQ-VOC-002",
                category=FindingCategory.VOCABULARY,
                severity=FindingSeverity.ERROR,
                message=str(e),
                problem_id=problem.id,
            )
        )

    source_id = problem.source_code_id
    if source_id is not None and registry.find_source_by_id(source_id) is None:
        findings.append(
            QualityFinding(
                rule_id="DQ-REF-001",
                category=FindingCategory.REFERENCE,
                severity=FindingSeverity.WARNING,
                message=f"NAMASTE code id {source_id} not found in registry",
                problem_id=problem.id,
                code_id=source_id,
            )
        )

    for target_id in problem.target_code_ids:
        if registry.find_target_by_id(target_id) is None:
            findings.append(
                QualityFinding(
                    rule_id="DQ-REF-002",
                    category=FindingCategory.REFERENCE,
                    severity=FindingSeverity.WARNING,
                    message=f"ICD-11 code id {target_id} not found in registry",
                    problem_id=problem.id,
                    code_id=target_id,
                )
            )

    if problem.onset_after_recorded:
        findings.append(
            QualityFinding(
                rule_id="DQ-DAT-001",
                category=FindingCategory.CHRONOLOGY,
                severity=FindingSeverity.WARNING,
                message=(
                    f"Onset date {problem.onset_date} is after recorded date "
                    f"{problem.recorded_date}"
                ),
                problem_id=problem.id,
            )
        )

    if problem.source_code_id is None and not problem.target_code_ids:
        findings.append(
            QualityFinding(
                rule_id="DQ-CMP-001",
                category=FindingCategory.COMPLETENESS,
                severity=FindingSeverity.NOTICE,
                message="Problem has no NAMASTE or ICD-11 code references",
                problem_id=problem.id,
            )
        )

    return findings
