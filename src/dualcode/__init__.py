"""Dual-coding of NAMASTE and ICD-11 problems into FHIR R4 documents."""

__version__ = "0.1.0"
