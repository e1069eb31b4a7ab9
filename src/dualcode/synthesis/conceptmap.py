"""Mapping document (FHIR ConceptMap) from a NAMASTE code to ICD-11 codes."""

from __future__ import annotations

from collections.abc import Sequence

from dualcode.config import DocumentSettings
from dualcode.models.codes import SourceCode, TargetCode
from dualcode.models.fhir import ConceptMap, ConceptMapElement, ConceptMapGroup, ConceptMapTarget
from dualcode.synthesis.generation import GenerationContext, resolve_generation


def build_mapping_document(
    selected_source: SourceCode | None,
    selected_targets: Sequence[TargetCode],
    *,
    settings: DocumentSettings | None = None,
    generation: GenerationContext | None = None,
) -> ConceptMap | None:
    """Build the ConceptMap for the current selection.

    Returns None unless a source code and at least one target code are
    selected. There is nothing to map otherwise, and an empty group
    list would be a misleading document. Callers treat None as "nothing
    to show", not as a failure.

    Target entries keep the order of ``selected_targets``.
    """
    if selected_source is None or not selected_targets:
        return None

    settings = settings or DocumentSettings()
    generation = resolve_generation(generation)

    targets = [
        ConceptMapTarget(
            code=target.code,
            display=target.display,
            comment=f"Mapped from {selected_source.system.value} to {target.module.value}",
        )
        for target in selected_targets
    ]
    element = ConceptMapElement(
        code=selected_source.code,
        display=selected_source.display,
        target=targets,
    )

    return ConceptMap(
        version=settings.version,
        name=settings.concept_map_name,
        title=settings.concept_map_title,
        date=generation.timestamp(),
        publisher=settings.publisher,
        description=settings.concept_map_description,
        group=[ConceptMapGroup(element=[element])],
    )
