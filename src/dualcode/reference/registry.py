"""Read-only registry snapshot of NAMASTE and ICD-11 codes.

The snapshot is loaded once and indexed by id and by code. Nothing in
dualcode mutates it; a fresh snapshot is built whenever storage changes.
Problem entries resolve their code ids through these indexes, so a stale
id yields None instead of a dangling object.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from dualcode.errors import RegistryLoadError
from dualcode.models.codes import SourceCode, TargetCode


class CodeRegistry:
    """Queryable interface over one registry snapshot.

    Builds id and code indexes for both vocabularies at init. All lookups
    are dict hits and return None when the key is unknown.
    """

    def __init__(
        self,
        sources: Iterable[SourceCode] = (),
        targets: Iterable[TargetCode] = (),
    ) -> None:
        self._sources: tuple[SourceCode, ...] = tuple(sources)
        self._targets: tuple[TargetCode, ...] = tuple(targets)

        self._source_by_id = _index(self._sources, "id", "NAMASTE")
        self._source_by_code = _index(self._sources, "code", "NAMASTE")
        self._target_by_id = _index(self._targets, "id", "ICD-11")
        self._target_by_code = _index(self._targets, "code", "ICD-11")

        logger.debug(
            "Indexed registry snapshot: {} NAMASTE codes, {} ICD-11 codes",
            len(self._sources),
            len(self._targets),
        )

    @property
    def sources(self) -> tuple[SourceCode, ...]:
        """NAMASTE codes in snapshot order."""
        return self._sources

    @property
    def targets(self) -> tuple[TargetCode, ...]:
        """ICD-11 codes in snapshot order."""
        return self._targets

    def __len__(self) -> int:
        return len(self._sources) + len(self._targets)

    def is_empty(self) -> bool:
        return not self._sources and not self._targets

    def find_source_by_code(self, code: str) -> SourceCode | None:
        return self._source_by_code.get(code)

    def find_target_by_code(self, code: str) -> TargetCode | None:
        return self._target_by_code.get(code)

    def find_source_by_id(self, code_id: str) -> SourceCode | None:
        return self._source_by_id.get(code_id)

    def find_target_by_id(self, code_id: str) -> TargetCode | None:
        return self._target_by_id.get(code_id)

    def mapped_targets_for(self, source: SourceCode) -> list[TargetCode]:
        """Resolve a NAMASTE code's ICD-11 cross-references.

        Code strings that are not in the snapshot are skipped. Order
        follows the source code's own mapping list.
        """
        resolved: list[TargetCode] = []
        for code in source.mapped_target_codes:
            target = self._target_by_code.get(code)
            if target is not None:
                resolved.append(target)
        return resolved

    def mapped_sources_for(self, target: TargetCode) -> list[SourceCode]:
        """Resolve an ICD-11 code's NAMASTE cross-references, if it lists any."""
        if not target.mapped_source_codes:
            return []
        return [
            s
            for code in target.mapped_source_codes
            if (s := self._source_by_code.get(code)) is not None
        ]


def _index(
    records: tuple[SourceCode, ...] | tuple[TargetCode, ...],
    key: str,
    vocabulary: str,
) -> dict:
    index: dict = {}
    for record in records:
        value = getattr(record, key)
        if value in index:
            msg = f"Duplicate {vocabulary} {key} {value!r} in registry snapshot"
            raise RegistryLoadError(msg)
        index[value] = record
    return index
