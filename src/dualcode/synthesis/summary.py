"""Resource counts for a collection bundle, as shown to the user before export."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dualcode.models.fhir import Bundle


class CollectionSummary(BaseModel):
    """How many of each resource a bundle carries."""

    code_systems: int = Field(default=0, ge=0)
    concept_maps: int = Field(default=0, ge=0)
    conditions: int = Field(default=0, ge=0)
    omitted_references: int = Field(
        default=0, ge=0, description="Problem code ids dropped as unresolvable"
    )

    @property
    def total_entries(self) -> int:
        return self.code_systems + self.concept_maps + self.conditions


def summarize_collection(bundle: Bundle) -> CollectionSummary:
    return CollectionSummary(
        code_systems=len(bundle.resources_of("CodeSystem")),
        concept_maps=len(bundle.resources_of("ConceptMap")),
        conditions=len(bundle.resources_of("Condition")),
        omitted_references=bundle.omitted_reference_count,
    )
