"""Data-quality findings and their aggregate report.

Findings never block synthesis. They make lenient behaviour (dropped
references, onset after recording) visible so the caller can decide
whether to surface or aggregate them.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, Field


class FindingSeverity(StrEnum):
    """Severity classification for data-quality findings.

    ERROR: The problem cannot be synthesized (e.g. unknown severity value).
    WARNING: Synthesized, but with a defect worth reviewing.
    NOTICE: Informational.
    """

    ERROR = "ERROR"
    WARNING = "WARNING"
    NOTICE = "NOTICE"


class FindingCategory(StrEnum):
    VOCABULARY = "VOCABULARY"
    REFERENCE = "REFERENCE"
    CHRONOLOGY = "CHRONOLOGY"
    COMPLETENESS = "COMPLETENESS"
    IDENTITY = "IDENTITY"
    CONTAINMENT = "CONTAINMENT"


class QualityFinding(BaseModel):
    """One data-quality observation about a problem entry or a bundle."""

    rule_id: str = Field(..., description="Stable check identifier (e.g., 'DQ-REF-001')")
    category: FindingCategory
    severity: FindingSeverity
    message: str
    problem_id: str | None = Field(default=None, description="Problem entry concerned, if any")
    code_id: str | None = Field(default=None, description="Registry id or code concerned, if any")


class QualityReport(BaseModel):
    """Aggregated findings with per-severity counts."""

    findings: list[QualityFinding] = Field(default_factory=list)
    problems_checked: int = Field(default=0, ge=0)
    error_count: int = Field(default=0, ge=0)
    warning_count: int = Field(default=0, ge=0)
    notice_count: int = Field(default=0, ge=0)

    @classmethod
    def from_findings(
        cls, findings: Iterable[QualityFinding], problems_checked: int = 0
    ) -> QualityReport:
        items = list(findings)
        return cls(
            findings=items,
            problems_checked=problems_checked,
            error_count=sum(1 for f in items if f.severity == FindingSeverity.ERROR),
            warning_count=sum(1 for f in items if f.severity == FindingSeverity.WARNING),
            notice_count=sum(1 for f in items if f.severity == FindingSeverity.NOTICE),
        )

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def by_rule(self, rule_id: str) -> list[QualityFinding]:
        return [f for f in self.findings if f.rule_id == rule_id]
