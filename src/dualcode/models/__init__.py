"""Pydantic data models shared across all dualcode components.

All models are re-exported here for convenient imports:
    from dualcode.models import SourceCode, TargetCode, ProblemEntry, Bundle
"""

from dualcode.models.codes import SourceCode, SourceSystem, TargetCode, TargetModule
from dualcode.models.problems import (
    ClinicalStatus,
    DanglingReference,
    ProblemEntry,
    Severity,
)
from dualcode.models.fhir import (
    Bundle,
    BundleEntry,
    CodeableConcept,
    CodeSystem,
    CodeSystemConcept,
    Coding,
    ConceptMap,
    ConceptMapGroup,
    ConceptMapTarget,
    Condition,
)
from dualcode.models.selection import SelectionState

__all__ = [
    # codes
    "SourceSystem",
    "TargetModule",
    "SourceCode",
    "TargetCode",
    # problems
    "ClinicalStatus",
    "Severity",
    "ProblemEntry",
    "DanglingReference",
    # fhir documents
    "Coding",
    "CodeableConcept",
    "CodeSystemConcept",
    "CodeSystem",
    "ConceptMapTarget",
    "ConceptMapGroup",
    "ConceptMap",
    "Condition",
    "BundleEntry",
    "Bundle",
    # selection
    "SelectionState",
]
