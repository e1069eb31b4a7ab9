"""Document synthesis: CodeSystem, ConceptMap and Bundle builders.

Every builder is a pure projection of its inputs plus an injected
GenerationContext, with no hidden state and no I/O.

Re-exports for convenient imports:
    from dualcode.synthesis import (
        build_code_registry_document,
        build_mapping_document,
        build_collection_document,
    )
"""

from dualcode.synthesis.bundle import build_collection_document, build_problem_record
from dualcode.synthesis.codesystem import build_code_registry_document
from dualcode.synthesis.conceptmap import build_mapping_document
from dualcode.synthesis.generation import (
    FixedClock,
    GenerationContext,
    SequentialIds,
    SystemClock,
    semantic_dump,
)
from dualcode.synthesis.summary import CollectionSummary, summarize_collection

__all__ = [
    # builders
    "build_code_registry_document",
    "build_mapping_document",
    "build_collection_document",
    "build_problem_record",
    # generation metadata
    "GenerationContext",
    "SystemClock",
    "FixedClock",
    "SequentialIds",
    "semantic_dump",
    # summary
    "CollectionSummary",
    "summarize_collection",
]
