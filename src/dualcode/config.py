"""Document settings for the FHIR synthesizer.

Descriptive metadata (publisher, titles, versions) can be overridden from
a JSON file; the defaults are the published NAMASTE values. Coding
system URIs are not settings: they live as constants in
``dualcode.models.fhir`` because receiving systems match on them.
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dualcode.errors import DualCodeError

SETTINGS_ENV_VAR = "DUALCODE_SETTINGS"


class DocumentSettings(BaseModel):
    """Metadata stamped on every generated document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    publisher: str = Field(default="Ministry of AYUSH, Government of India")
    version: str = Field(default="1.0.0", description="Business version of CodeSystem/ConceptMap")

    code_system_name: str = Field(default="NAMASTETerminology")
    code_system_title: str = Field(
        default="NAMASTE - National Medical Terminologies for AYUSH Systems"
    )
    code_system_description: str = Field(
        default=(
            "Comprehensive terminology system for traditional Indian medicine systems "
            "including Ayurveda, Siddha, and Unani"
        )
    )

    concept_map_name: str = Field(default="NAMASTEToICD11Map")
    concept_map_title: str = Field(default="NAMASTE to ICD-11 Concept Mapping")
    concept_map_description: str = Field(
        default=(
            "Mapping between NAMASTE traditional medicine codes and ICD-11 classification"
        )
    )

    bundle_identifier_prefix: str = Field(
        default="ayush-bundle-", description="Prefix of the Bundle.identifier value"
    )


def load_settings(path: str | Path | None = None) -> DocumentSettings:
    """Load document settings.

    Resolution order: explicit ``path``, then the ``DUALCODE_SETTINGS``
    environment variable, then built-in defaults.

    Raises:
        FileNotFoundError: If an explicit or env-provided path does not exist.
        DualCodeError: If the file is not valid settings JSON.
    """
    if path is None:
        env_path = os.environ.get(SETTINGS_ENV_VAR)
        if not env_path:
            return DocumentSettings()
        path = env_path

    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    try:
        with open(settings_path, encoding="utf-8") as f:
            data = json.load(f)
        settings = DocumentSettings.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        msg = f"Invalid settings file {settings_path}: {e}"
        raise DualCodeError(msg) from e

    logger.info("Loaded document settings from {}", settings_path)
    return settings
