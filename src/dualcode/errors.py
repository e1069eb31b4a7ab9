"""Exception types raised by the dualcode core.

Library code raises these; only the CLI catches them and turns them
into an error message and a non-zero exit code.
"""

from __future__ import annotations

from collections.abc import Iterable


class DualCodeError(Exception):
    """Base class for all dualcode errors."""


class UnknownVocabularyValue(DualCodeError, ValueError):
    """A severity or clinical-status value outside its enumerated domain.

    Raised by the recoding tables instead of guessing a default, so a
    misleading external code is never emitted.
    """

    def __init__(self, field: str, value: object, allowed: Iterable[str]) -> None:
        self.field = field
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"Unknown {field} value {value!r}; expected one of: {', '.join(self.allowed)}"
        )


class RegistryLoadError(DualCodeError):
    """A registry snapshot or problem-entry file could not be loaded."""


class IncompleteSelection(DualCodeError):
    """A selection cannot be committed as a problem entry."""
