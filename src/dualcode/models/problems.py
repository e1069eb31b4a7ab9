"""Problem entry model: one dual-coded clinical assertion.

A ProblemEntry points at registry codes by storage id only. The ids are
weak references: resolving them is the synthesizer's job and an id that
no longer exists in the snapshot degrades to an omitted coding, not a
crash.

Severity and clinical status are kept as the raw vocabulary strings read
from storage. The recoding tables in ``dualcode.transforms.recoding`` are
the single place that accepts or rejects them.
"""

from __future__ import annotations

from datetime import date
from enum import StrEnum
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ClinicalStatus(StrEnum):
    """Condition clinical status (HL7 condition-clinical subset)."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    RESOLVED = "resolved"


class Severity(StrEnum):
    """Problem severity as recorded by the clinician."""

    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class ProblemEntry(BaseModel):
    """A clinical problem coded with one NAMASTE code and zero or more ICD-11 codes."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Problem entry identifier")
    patient_id: str = Field(..., min_length=1, description="Patient the problem belongs to")
    clinic_id: str | None = Field(default=None, description="Owning clinic, if known")
    source_code_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("source_code_id", "namaste_code_id"),
        description="Registry id of the NAMASTE code",
    )
    target_code_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("target_code_ids", "icd11_code_ids"),
        description="Registry ids of the ICD-11 codes, in the order they were selected",
    )
    clinical_status: str = Field(..., description="active, inactive or resolved")
    severity: str = Field(..., description="mild, moderate or severe")
    onset_date: date | None = Field(default=None, description="Date the problem began")
    recorded_date: date | None = Field(
        default=None,
        description="Date the problem was recorded; synthesis time is used when absent",
    )
    clinical_notes: str | None = Field(default=None, description="Free-text notes")

    @field_validator("clinic_id", "source_code_id", "clinical_notes", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("target_code_ids", mode="before")
    @classmethod
    def _none_to_empty(cls, v: object) -> object:
        return [] if v is None else v

    @field_validator("onset_date", "recorded_date", mode="before")
    @classmethod
    def _parse_storage_date(cls, v: object) -> object:
        # Storage may hand back "" for unset dates or a full timestamp.
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return None
            if "T" in v:
                return v.split("T", 1)[0]
        return v

    @property
    def onset_after_recorded(self) -> bool:
        """True when both dates are present and onset is later than recording."""
        if self.onset_date is None or self.recorded_date is None:
            return False
        return self.onset_date > self.recorded_date


class DanglingReference(BaseModel):
    """A problem's code id that is absent from the registry snapshot."""

    model_config = ConfigDict(frozen=True)

    problem_id: str = Field(..., description="Problem entry holding the reference")
    kind: Literal["source", "target"] = Field(..., description="Which code slot was unresolved")
    code_id: str = Field(..., description="The unresolved registry id")
