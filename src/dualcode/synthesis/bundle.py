"""Collection document (FHIR Bundle) assembly.

The bundle holds, in this order: the CodeSystem, the ConceptMap when one
exists for the selection, then one Condition per problem entry in the
order the caller supplied. Problem code ids are resolved through the
registry snapshot passed in; ids that do not resolve are left out of the
Condition's codings and recorded on ``Bundle.dangling_references``.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from dualcode.config import DocumentSettings
from dualcode.models.codes import SourceCode, TargetCode
from dualcode.models.fhir import (
    SOURCE_SYSTEM_URI,
    TARGET_SYSTEM_URI,
    Annotation,
    Bundle,
    BundleEntry,
    CodeableConcept,
    Coding,
    Condition,
    Identifier,
    Meta,
    Reference,
    full_url_for,
)
from dualcode.models.problems import DanglingReference, ProblemEntry
from dualcode.reference.registry import CodeRegistry
from dualcode.synthesis.codesystem import build_code_registry_document
from dualcode.synthesis.conceptmap import build_mapping_document
from dualcode.synthesis.generation import GenerationContext, resolve_generation
from dualcode.transforms.recoding import translate_clinical_status, translate_severity


def build_collection_document(
    selected_source: SourceCode | None,
    selected_targets: Sequence[TargetCode],
    problems: Sequence[ProblemEntry],
    *,
    registry: CodeRegistry,
    settings: DocumentSettings | None = None,
    generation: GenerationContext | None = None,
) -> Bundle:
    """Build the collection Bundle for the selection and problem list.

    Never returns None: an empty selection and no problems still yields
    a bundle holding an empty CodeSystem.

    Args:
        selected_source: Currently selected NAMASTE code, if any.
        selected_targets: Currently selected ICD-11 codes, in selection order.
        problems: Problem entries, already scoped and ordered by the caller.
        registry: Snapshot used to resolve problem code ids.
        settings: Publisher/title metadata.
        generation: Clock and id source.

    Returns:
        The Bundle. ``bundle.dangling_references`` lists unresolved ids.

    Raises:
        UnknownVocabularyValue: A problem has an illegal severity or
            clinical status. No partial bundle is returned.
    """
    settings = settings or DocumentSettings()
    generation = resolve_generation(generation)

    code_system = build_code_registry_document(
        selected_source, settings=settings, generation=generation
    )
    concept_map = build_mapping_document(
        selected_source, selected_targets, settings=settings, generation=generation
    )

    resources: list = [code_system]
    if concept_map is not None:
        resources.append(concept_map)

    dangling: list[DanglingReference] = []
    for problem in problems:
        condition, missing = build_problem_record(problem, registry, generation)
        resources.append(condition)
        dangling.extend(missing)

    stamp = generation.timestamp()
    bundle = Bundle(
        meta=Meta(last_updated=stamp),
        identifier=Identifier(value=f"{settings.bundle_identifier_prefix}{generation.new_id()}"),
        timestamp=stamp,
        entry=[BundleEntry(full_url=full_url_for(r), resource=r) for r in resources],
    )
    bundle._dangling_references = dangling

    logger.debug(
        "Built bundle: concept map {}, {} conditions, {} omitted references",
        "present" if concept_map is not None else "omitted",
        len(problems),
        len(dangling),
    )
    return bundle


def build_problem_record(
    problem: ProblemEntry,
    registry: CodeRegistry,
    generation: GenerationContext | None = None,
) -> tuple[Condition, list[DanglingReference]]:
    """Build the Condition for one problem entry.

    Codings are the NAMASTE code first, then each ICD-11 code in the
    entry's order. Unresolvable ids are skipped and returned.

    Returns:
        Tuple of (Condition, dangling references for this problem).
    """
    generation = resolve_generation(generation)

    severity = translate_severity(problem.severity)
    clinical_status = translate_clinical_status(problem.clinical_status)

    codings: list[Coding] = []
    dangling: list[DanglingReference] = []

    if problem.source_code_id is not None:
        source = registry.find_source_by_id(problem.source_code_id)
        if source is None:
            dangling.append(
                DanglingReference(
                    problem_id=problem.id, kind="source", code_id=problem.source_code_id
                )
            )
        else:
            codings.append(
                Coding(system=SOURCE_SYSTEM_URI, code=source.code, display=source.display)
            )

    for target_id in problem.target_code_ids:
        target = registry.find_target_by_id(target_id)
        if target is None:
            dangling.append(
                DanglingReference(problem_id=problem.id, kind="target", code_id=target_id)
            )
            continue
        codings.append(Coding(system=TARGET_SYSTEM_URI, code=target.code, display=target.display))

    condition = Condition(
        id=problem.id,
        clinical_status=CodeableConcept(coding=[clinical_status]),
        severity=CodeableConcept(coding=[severity]),
        code=CodeableConcept(coding=codings),
        subject=Reference(reference=f"Patient/{problem.patient_id}"),
        onset_date=problem.onset_date,
        recorded_date=problem.recorded_date or generation.today(),
        note=[Annotation(text=problem.clinical_notes)] if problem.clinical_notes else None,
    )
    return condition, dangling
