"""Registry snapshot lookup and loaders.

Re-exports for convenient imports:
    from dualcode.reference import CodeRegistry, load_registry_snapshot
"""

from dualcode.reference.loader import (
    load_problem_entries,
    load_registry_from_csv,
    load_registry_snapshot,
    parse_code_array,
)
from dualcode.reference.registry import CodeRegistry

__all__ = [
    "CodeRegistry",
    "load_registry_snapshot",
    "load_registry_from_csv",
    "load_problem_entries",
    "parse_code_array",
]
