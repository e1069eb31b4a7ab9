"""Ephemeral code selection held by the caller while a problem is being coded.

The selection is never persisted by dualcode. It starts empty, is mutated
by user actions, and is cleared after a successful commit or an explicit
reset.
"""

from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field

from dualcode.errors import IncompleteSelection
from dualcode.models.codes import SourceCode, TargetCode
from dualcode.models.problems import ProblemEntry

DEFAULT_PATIENT_ID = "PATIENT-001"


class SelectionState(BaseModel):
    """Currently selected NAMASTE code and ICD-11 codes.

    Target codes keep insertion order and are deduplicated by registry id.
    """

    selected_source: SourceCode | None = Field(default=None)
    selected_targets: list[TargetCode] = Field(default_factory=list)

    def select_source(self, code: SourceCode) -> None:
        self.selected_source = code

    def clear_source(self) -> None:
        self.selected_source = None

    def add_target(self, code: TargetCode) -> bool:
        """Append a target code unless one with the same id is already selected.

        Returns:
            True if the code was added, False if it was a duplicate.
        """
        if any(t.id == code.id for t in self.selected_targets):
            return False
        self.selected_targets.append(code)
        return True

    def remove_target(self, code_id: str) -> bool:
        """Drop the target with the given registry id. Returns False if absent."""
        before = len(self.selected_targets)
        self.selected_targets = [t for t in self.selected_targets if t.id != code_id]
        return len(self.selected_targets) != before

    def clear(self) -> None:
        self.selected_source = None
        self.selected_targets = []

    def is_empty(self) -> bool:
        return self.selected_source is None and not self.selected_targets

    def can_map(self) -> bool:
        """True when a mapping document can be built from this selection."""
        return self.selected_source is not None and len(self.selected_targets) > 0

    def commit(
        self,
        *,
        clinical_status: str,
        severity: str,
        patient_id: str | None = None,
        onset_date: date | None = None,
        recorded_date: date | None = None,
        clinical_notes: str | None = None,
        entry_id: str | None = None,
        clinic_id: str | None = None,
    ) -> ProblemEntry:
        """Turn the selection into a ProblemEntry and clear it.

        The selection is left untouched if anything fails.

        Raises:
            IncompleteSelection: No source code or no target codes selected.
            UnknownVocabularyValue: Severity or clinical status is not legal.
        """
        from dualcode.transforms.recoding import clinical_status_code, severity_code

        if self.selected_source is None:
            raise IncompleteSelection("No NAMASTE code selected")
        if not self.selected_targets:
            raise IncompleteSelection("No ICD-11 codes selected")

        clinical_status_code(clinical_status)
        severity_code(severity)

        entry = ProblemEntry(
            id=entry_id or str(uuid.uuid4()),
            patient_id=patient_id or DEFAULT_PATIENT_ID,
            clinic_id=clinic_id,
            source_code_id=self.selected_source.id,
            target_code_ids=[t.id for t in self.selected_targets],
            clinical_status=clinical_status,
            severity=severity,
            onset_date=onset_date,
            recorded_date=recorded_date,
            clinical_notes=clinical_notes,
        )
        self.clear()
        return entry
