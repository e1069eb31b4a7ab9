"""Export adapters for synthesized documents.

Re-exports for convenient imports:
    from dualcode.export import to_canonical_json, export_artifact
"""

from dualcode.export.exporters import (
    ARTIFACT_NAMES,
    artifact_name,
    export_all,
    export_artifact,
    export_mapping_to_excel,
    export_to_json,
    to_canonical_json,
)

__all__ = [
    "ARTIFACT_NAMES",
    "artifact_name",
    "to_canonical_json",
    "export_to_json",
    "export_artifact",
    "export_all",
    "export_mapping_to_excel",
]
