"""Controlled-vocabulary recoding for problem records.

Re-exports for convenient imports:
    from dualcode.transforms import translate_severity, translate_clinical_status
"""

from dualcode.transforms.recoding import (
    CLINICAL_STATUSES,
    SEVERITY_CODES,
    clinical_status_code,
    severity_code,
    translate_clinical_status,
    translate_severity,
)

__all__ = [
    "SEVERITY_CODES",
    "CLINICAL_STATUSES",
    "severity_code",
    "clinical_status_code",
    "translate_severity",
    "translate_clinical_status",
]
