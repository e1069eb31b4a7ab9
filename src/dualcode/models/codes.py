"""Code registry records for the two coding systems.

SourceCode holds a NAMASTE concept (Ayurveda, Siddha or Unani);
TargetCode holds an ICD-11 concept from either the Traditional Medicine
Module 2 or the biomedical chapters. Each side may list the other
system's codes as plain code strings. These are lookup keys, never
object references.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SourceSystem(StrEnum):
    """The three disjoint NAMASTE vocabularies."""

    AYURVEDA = "AYURVEDA"
    SIDDHA = "SIDDHA"
    UNANI = "UNANI"


class TargetModule(StrEnum):
    """ICD-11 module a target code belongs to."""

    TM2 = "TM2"
    BIOMEDICINE = "BIOMEDICINE"


def _none_to_empty_list(value: object) -> object:
    return [] if value is None else value


class SourceCode(BaseModel):
    """A NAMASTE code as loaded from the registry snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Storage identifier (e.g., 'nam-001')")
    code: str = Field(..., min_length=1, description="NAMASTE code (e.g., 'AYU.RESP.001')")
    display: str = Field(..., description="Display name (e.g., 'Kasa (Cough)')")
    system: SourceSystem = Field(..., description="Traditional medicine system")
    description: str = Field(default="", description="Clinical description of the concept")
    mapped_target_codes: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("mapped_target_codes", "icd11_mappings", "icd11Mappings"),
        description="ICD-11 code strings this concept is cross-referenced to",
    )

    @field_validator("system", mode="before")
    @classmethod
    def _uppercase_system(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("mapped_target_codes", mode="before")
    @classmethod
    def _none_mappings(cls, v: object) -> object:
        return _none_to_empty_list(v)


class TargetCode(BaseModel):
    """An ICD-11 code as loaded from the registry snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1, description="Storage identifier (e.g., 'icd-001')")
    code: str = Field(..., min_length=1, description="ICD-11 code (e.g., 'TM40.00')")
    display: str = Field(..., description="Display name")
    module: TargetModule = Field(..., description="ICD-11 module (TM2 or BIOMEDICINE)")
    description: str = Field(default="", description="Clinical description of the concept")
    mapped_source_codes: list[str] | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "mapped_source_codes", "namaste_mappings", "namasteMapping", "namaste_mapping"
        ),
        description="NAMASTE code strings cross-referenced to this code, if any",
    )

    @field_validator("module", mode="before")
    @classmethod
    def _uppercase_module(cls, v: object) -> object:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v: object) -> object:
        return "" if v is None else v
