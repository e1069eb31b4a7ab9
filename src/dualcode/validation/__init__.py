"""Data-quality and referential containment checks.

Re-exports for convenient imports:
    from dualcode.validation import check_problem_entries, verify_collection_references
"""

from dualcode.validation.containment import verify_collection_references
from dualcode.validation.quality import check_problem_entries, check_problem_entry
from dualcode.validation.report import (
    FindingCategory,
    FindingSeverity,
    QualityFinding,
    QualityReport,
)

__all__ = [
    "check_problem_entries",
    "check_problem_entry",
    "verify_collection_references",
    "FindingCategory",
    "FindingSeverity",
    "QualityFinding",
    "QualityReport",
]
