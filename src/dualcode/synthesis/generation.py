"""Generation metadata: the clock and id source behind document timestamps.

Every builder takes a GenerationContext. Production code uses the
system clock and random UUIDs; tests inject FixedClock and SequentialIds
so whole documents compare equal. ``semantic_dump`` strips the
generation fields for comparisons across real-clock calls.
"""

from __future__ import annotations

import copy
import itertools
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Any, Protocol

from dualcode.models.fhir import Bundle, CodeSystem, ConceptMap


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Current UTC time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class FixedClock:
    """Always returns the same instant. Naive datetimes are taken as UTC."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=UTC)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant


def random_ids() -> str:
    return str(uuid.uuid4())


class SequentialIds:
    """Deterministic id factory: ``<prefix>1``, ``<prefix>2``, ..."""

    def __init__(self, prefix: str = "gen-") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}{next(self._counter)}"


@dataclass
class GenerationContext:
    """Clock and id generator shared by one synthesis pass."""

    clock: Clock = field(default_factory=SystemClock)
    id_factory: Callable[[], str] = random_ids

    def timestamp(self) -> str:
        """ISO 8601 UTC timestamp with millisecond precision and a Z suffix."""
        instant = self.clock.now().astimezone(UTC)
        return instant.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    def today(self) -> date:
        return self.clock.now().astimezone(UTC).date()

    def new_id(self) -> str:
        return self.id_factory()


def resolve_generation(generation: GenerationContext | None) -> GenerationContext:
    return generation if generation is not None else GenerationContext()


# Top-level fields that carry generation metadata, per resource type
_NON_SEMANTIC_FIELDS: dict[str, tuple[str, ...]] = {
    "CodeSystem": ("date",),
    "ConceptMap": ("date",),
    "Bundle": ("meta", "identifier", "timestamp"),
}


def semantic_dump(doc: CodeSystem | ConceptMap | Bundle | None) -> dict[str, Any] | None:
    """Serialize a document with its generation metadata removed.

    Nested resources inside a Bundle are stripped too. Two calls of the
    same builder with identical inputs produce equal semantic dumps.
    """
    if doc is None:
        return None
    return _strip(doc.to_fhir())


def _strip(resource: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(resource)
    for name in _NON_SEMANTIC_FIELDS.get(out.get("resourceType", ""), ()):
        out.pop(name, None)
    for entry in out.get("entry", []):
        entry["resource"] = _strip(entry["resource"])
    return out
