"""Code registry document (FHIR CodeSystem) for the selected NAMASTE code."""

from __future__ import annotations

from dualcode.config import DocumentSettings
from dualcode.models.codes import SourceCode
from dualcode.models.fhir import CodeSystem, CodeSystemConcept, ConceptProperty, Designation
from dualcode.synthesis.generation import GenerationContext, resolve_generation


def build_code_registry_document(
    selected_source: SourceCode | None = None,
    *,
    settings: DocumentSettings | None = None,
    generation: GenerationContext | None = None,
) -> CodeSystem:
    """Build the NAMASTE CodeSystem for the current selection.

    With no selected code the concept list is empty, which is still a
    valid document. Otherwise exactly one concept is emitted.

    Args:
        selected_source: The selected NAMASTE code, if any.
        settings: Publisher/title metadata. Defaults to DocumentSettings().
        generation: Clock and id source. Defaults to the system clock.

    Returns:
        A freshly built CodeSystem.
    """
    settings = settings or DocumentSettings()
    generation = resolve_generation(generation)

    concepts = [concept_for(selected_source)] if selected_source is not None else []

    return CodeSystem(
        version=settings.version,
        name=settings.code_system_name,
        title=settings.code_system_title,
        date=generation.timestamp(),
        publisher=settings.publisher,
        description=settings.code_system_description,
        count=len(concepts),
        concept=concepts,
    )


def concept_for(source: SourceCode) -> CodeSystemConcept:
    """CodeSystem concept entry for one NAMASTE code.

    The definition falls back to the display name when the code has no
    description.
    """
    return CodeSystemConcept(
        code=source.code,
        display=source.display,
        definition=source.description or source.display,
        designation=[Designation(value=source.display)],
        property=[ConceptProperty(code="system", value_string=source.system.value)],
    )
