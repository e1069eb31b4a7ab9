"""Referential containment checks for a synthesized Bundle.

Every Condition coding must use one of the two known code system URIs
and name a code present in the registry snapshot; every reference the
synthesizer dropped must be accounted for on the bundle. Entry fullUrls
must be unique so bundle-local references resolve to one resource.
"""

from __future__ import annotations

from collections import Counter

from dualcode.models.fhir import (
    KNOWN_CODING_SYSTEMS,
    SOURCE_SYSTEM_URI,
    TARGET_SYSTEM_URI,
    Bundle,
    ConceptMap,
    Condition,
)
from dualcode.reference.registry import CodeRegistry
from dualcode.validation.report import (
    FindingCategory,
    FindingSeverity,
    QualityFinding,
    QualityReport,
)


def verify_collection_references(bundle: Bundle, registry: CodeRegistry) -> QualityReport:
    """Check a bundle's codings and entry identities against the snapshot."""
    findings: list[QualityFinding] = []

    counts = Counter(entry.full_url for entry in bundle.entry)
    for full_url, n in counts.items():
        if n > 1:
            findings.append(
                _finding(
                    "DQ-CON-003",
                    FindingSeverity.ERROR,
                    f"fullUrl {full_url} is used by {n} entries",
                )
            )

    conditions = bundle.resources_of("Condition")
    for condition in conditions:
        findings.extend(_check_condition(condition, registry))  # type: ignore[arg-type]

    for concept_map in bundle.resources_of("ConceptMap"):
        findings.extend(_check_concept_map(concept_map, registry))  # type: ignore[arg-type]

    for ref in bundle.dangling_references:
        findings.append(
            _finding(
                "DQ-CON-004",
                FindingSeverity.WARNING,
                f"{ref.kind} code id {ref.code_id} omitted from Condition {ref.problem_id}",
                problem_id=ref.problem_id,
                code_id=ref.code_id,
            )
        )

    return QualityReport.from_findings(findings, problems_checked=len(conditions))


def _check_condition(condition: Condition, registry: CodeRegistry) -> list[QualityFinding]:
    findings: list[QualityFinding] = []
    for coding in condition.code.coding:
        if coding.system not in KNOWN_CODING_SYSTEMS:
            findings.append(
                _finding(
                    "DQ-CON-001",
                    FindingSeverity.ERROR,
                    f"Coding system {coding.system} is not a known code system",
                    problem_id=condition.id,
                    code_id=coding.code,
                )
            )
            continue
        if coding.system == SOURCE_SYSTEM_URI:
            resolved = registry.find_source_by_code(coding.code) is not None
        else:
            resolved = registry.find_target_by_code(coding.code) is not None
        if not resolved:
            findings.append(
                _finding(
                    "DQ-CON-002",
                    FindingSeverity.ERROR,
                    f"Code {coding.code} ({coding.system}) not found in registry",
                    problem_id=condition.id,
                    code_id=coding.code,
                )
            )

    if not condition.subject.reference.startswith("Patient/"):
        findings.append(
            _finding(
                "DQ-CON-006",
                FindingSeverity.ERROR,
                f"Subject reference {condition.subject.reference} is not a Patient reference",
                problem_id=condition.id,
            )
        )
    return findings


def _check_concept_map(concept_map: ConceptMap, registry: CodeRegistry) -> list[QualityFinding]:
    findings: list[QualityFinding] = []
    for group in concept_map.group:
        if group.source != SOURCE_SYSTEM_URI or group.target != TARGET_SYSTEM_URI:
            findings.append(
                _finding(
                    "DQ-CON-001",
                    FindingSeverity.ERROR,
                    f"ConceptMap group {group.source} -> {group.target} uses an unknown system",
                )
            )
        for element in group.element:
            if registry.find_source_by_code(element.code) is None:
                findings.append(
                    _finding(
                        "DQ-CON-005",
                        FindingSeverity.WARNING,
                        f"Mapped NAMASTE code {element.code} not found in registry",
                        code_id=element.code,
                    )
                )
            for target in element.target:
                if registry.find_target_by_code(target.code) is None:
                    findings.append(
                        _finding(
                            "DQ-CON-005",
                            FindingSeverity.WARNING,
                            f"Mapped ICD-11 code {target.code} not found in registry",
                            code_id=target.code,
                        )
                    )
    return findings


def _finding(
    rule_id: str,
    severity: FindingSeverity,
    message: str,
    *,
    problem_id: str | None = None,
    code_id: str | None = None,
) -> QualityFinding:
    return QualityFinding(
        rule_id=rule_id,
        category=FindingCategory.CONTAINMENT,
        severity=severity,
        message=message,
        problem_id=problem_id,
        code_id=code_id,
    )
