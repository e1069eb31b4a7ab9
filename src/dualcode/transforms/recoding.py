"""Recoding tables for problem severity and clinical status.

Severity is recoded to fixed SNOMED CT qualifier values; clinical status
is already drawn from the HL7 condition-clinical vocabulary and passes
through unchanged. Both fail closed: a value outside the table raises
UnknownVocabularyValue rather than falling back to a default.
"""

from __future__ import annotations

from dualcode.errors import UnknownVocabularyValue
from dualcode.models.fhir import CLINICAL_STATUS_SYSTEM_URI, SNOMED_SYSTEM_URI, Coding
from dualcode.models.problems import ClinicalStatus, Severity

# --- Severity (SNOMED CT) ---

SEVERITY_CODES: dict[str, str] = {
    Severity.MILD: "255604002",
    Severity.MODERATE: "6736007",
    Severity.SEVERE: "24484000",
}

# --- Clinical status (condition-clinical) ---

CLINICAL_STATUSES: frozenset[str] = frozenset(s.value for s in ClinicalStatus)


def severity_code(value: object) -> str:
    """Return the SNOMED CT code for a severity value.

    Args:
        value: Raw severity string. Only 'mild', 'moderate' and 'severe'
            are accepted; matching is exact.

    Returns:
        The SNOMED CT concept id.

    Raises:
        UnknownVocabularyValue: For any other value.
    """
    if isinstance(value, str) and value in SEVERITY_CODES:
        return SEVERITY_CODES[value]
    raise UnknownVocabularyValue("severity", value, [s.value for s in Severity])


def translate_severity(value: object) -> Coding:
    """Build the severity coding for a problem record."""
    code = severity_code(value)
    return Coding(system=SNOMED_SYSTEM_URI, code=code, display=Severity(value).value)


def clinical_status_code(value: object) -> str:
    """Return the clinical status unchanged after checking it is legal.

    Raises:
        UnknownVocabularyValue: If the value is not active, inactive or resolved.
    """
    if isinstance(value, str) and value in CLINICAL_STATUSES:
        return ClinicalStatus(value).value
    raise UnknownVocabularyValue("clinical_status", value, [s.value for s in ClinicalStatus])


def translate_clinical_status(value: object) -> Coding:
    """Build the clinical status coding for a problem record."""
    code = clinical_status_code(value)
    return Coding(system=CLINICAL_STATUS_SYSTEM_URI, code=code, display=code)
