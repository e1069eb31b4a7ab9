"""FHIR R4 document shapes produced by the synthesizer.

Only the subset of CodeSystem, ConceptMap, Condition and Bundle that
dualcode emits is modelled. Python attribute names are snake_case; the
serialized form uses the FHIR camelCase names via aliases, and field
declaration order is the canonical output order.

The system URIs below are part of the exchange contract; downstream
systems match on them, so they are constants rather than settings.
"""

from __future__ import annotations

from datetime import date
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from dualcode.models.problems import DanglingReference

# Coding system URIs
SOURCE_SYSTEM_URI = "http://terminology.mohfw.gov.in/fhir/CodeSystem/namaste"
TARGET_SYSTEM_URI = "http://id.who.int/icd/release/11/2023-01"
CONCEPT_MAP_URL = "http://terminology.mohfw.gov.in/fhir/ConceptMap/namaste-to-icd11"
SNOMED_SYSTEM_URI = "http://snomed.info/sct"
CLINICAL_STATUS_SYSTEM_URI = "http://terminology.hl7.org/CodeSystem/condition-clinical"
DESIGNATION_USAGE_URI = "http://terminology.hl7.org/CodeSystem/designation-usage"
BUNDLE_IDENTIFIER_SYSTEM_URI = "http://mohfw.gov.in/fhir/bundle-identifier"

# Systems a Condition.code coding may point at
KNOWN_CODING_SYSTEMS: frozenset[str] = frozenset({SOURCE_SYSTEM_URI, TARGET_SYSTEM_URI})

# Fixed resource ids
CODE_SYSTEM_ID = "namaste-terminology"
CONCEPT_MAP_ID = "namaste-to-icd11-map"
BUNDLE_ID = "namaste-icd11-bundle"


class FHIRModel(BaseModel):
    """Base for all emitted FHIR elements."""

    model_config = ConfigDict(populate_by_name=True)

    def to_fhir(self) -> dict[str, Any]:
        """Serialize to a FHIR JSON-compatible dict (camelCase, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Coding(FHIRModel):
    """A {system, code, display} triple."""

    system: str
    code: str
    display: str


class CodeableConcept(FHIRModel):
    coding: list[Coding] = Field(default_factory=list)


class DesignationUse(FHIRModel):
    system: str = DESIGNATION_USAGE_URI
    code: str = "display"


class Designation(FHIRModel):
    use: DesignationUse = Field(default_factory=DesignationUse)
    value: str


class ConceptProperty(FHIRModel):
    code: str
    value_string: str = Field(..., alias="valueString")


class CodeSystemConcept(FHIRModel):
    """One concept entry of the NAMASTE CodeSystem."""

    code: str
    display: str
    definition: str
    designation: list[Designation] = Field(default_factory=list)
    property: list[ConceptProperty] = Field(default_factory=list)


class CodeSystem(FHIRModel):
    """Code registry document for the NAMASTE vocabulary."""

    resource_type: Literal["CodeSystem"] = Field(default="CodeSystem", alias="resourceType")
    id: str = CODE_SYSTEM_ID
    url: str = SOURCE_SYSTEM_URI
    version: str
    name: str
    title: str
    status: str = "active"
    date: str = Field(..., description="Generation timestamp (non-semantic)")
    publisher: str
    description: str
    content: str = "complete"
    count: int = 0
    concept: list[CodeSystemConcept] = Field(default_factory=list)


class ConceptMapTarget(FHIRModel):
    code: str
    display: str
    equivalence: Literal["equivalent"] = "equivalent"
    comment: str


class ConceptMapElement(FHIRModel):
    code: str
    display: str
    target: list[ConceptMapTarget] = Field(default_factory=list)


class ConceptMapGroup(FHIRModel):
    source: str = SOURCE_SYSTEM_URI
    target: str = TARGET_SYSTEM_URI
    element: list[ConceptMapElement] = Field(default_factory=list)


class ConceptMap(FHIRModel):
    """Mapping document from one NAMASTE code to one or more ICD-11 codes."""

    resource_type: Literal["ConceptMap"] = Field(default="ConceptMap", alias="resourceType")
    id: str = CONCEPT_MAP_ID
    url: str = CONCEPT_MAP_URL
    version: str
    name: str
    title: str
    status: str = "active"
    date: str = Field(..., description="Generation timestamp (non-semantic)")
    publisher: str
    description: str
    source_uri: str = Field(default=SOURCE_SYSTEM_URI, alias="sourceUri")
    target_uri: str = Field(default=TARGET_SYSTEM_URI, alias="targetUri")
    group: list[ConceptMapGroup] = Field(default_factory=list)


class Reference(FHIRModel):
    reference: str


class Annotation(FHIRModel):
    text: str


class Condition(FHIRModel):
    """Problem record for one ProblemEntry."""

    resource_type: Literal["Condition"] = Field(default="Condition", alias="resourceType")
    id: str
    clinical_status: CodeableConcept = Field(..., alias="clinicalStatus")
    severity: CodeableConcept
    code: CodeableConcept
    subject: Reference
    onset_date: date | None = Field(default=None, alias="onsetDate")
    recorded_date: date = Field(..., alias="recordedDate")
    note: list[Annotation] | None = None


class Meta(FHIRModel):
    last_updated: str = Field(..., alias="lastUpdated")


class Identifier(FHIRModel):
    system: str = BUNDLE_IDENTIFIER_SYSTEM_URI
    value: str


Resource = Annotated[CodeSystem | ConceptMap | Condition, Field(discriminator="resource_type")]


class BundleEntry(FHIRModel):
    full_url: str = Field(..., alias="fullUrl")
    resource: Resource


class Bundle(FHIRModel):
    """Collection document: CodeSystem, optional ConceptMap, then one Condition per problem.

    ``dangling_references`` records every problem code id that could not
    be resolved in the registry snapshot. It is audit data only and is
    not part of the serialized document.
    """

    resource_type: Literal["Bundle"] = Field(default="Bundle", alias="resourceType")
    id: str = BUNDLE_ID
    meta: Meta
    identifier: Identifier
    type: Literal["collection"] = "collection"
    timestamp: str = Field(..., description="Generation timestamp (non-semantic)")
    entry: list[BundleEntry] = Field(default_factory=list)

    _dangling_references: list[DanglingReference] = PrivateAttr(default_factory=list)

    @property
    def dangling_references(self) -> list[DanglingReference]:
        return list(self._dangling_references)

    @property
    def omitted_reference_count(self) -> int:
        """Number of problem code references left out of the codings."""
        return len(self._dangling_references)

    def resources_of(self, resource_type: str) -> list[CodeSystem | ConceptMap | Condition]:
        """Return entry resources of one type, in bundle order."""
        return [e.resource for e in self.entry if e.resource.resource_type == resource_type]


def full_url_for(resource: CodeSystem | ConceptMap | Condition) -> str:
    """Stable bundle-local fullUrl for a resource."""
    return f"{resource.resource_type}/{resource.id}"
