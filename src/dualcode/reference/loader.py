"""Loaders for registry snapshots and problem-entry lists.

Snapshots are storage exports: either one JSON document holding both
code tables, or one CSV file per table. There is no network access; callers
fetch the export and hand dualcode the files.

Usage:
    from dualcode.reference import load_registry_snapshot, load_problem_entries

    registry = load_registry_snapshot("snapshot.json")
    problems = load_problem_entries("problems.json")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, TypeVar

import pandas as pd
from loguru import logger
from pydantic import BaseModel, ValidationError

from dualcode.errors import RegistryLoadError
from dualcode.models.codes import SourceCode, TargetCode
from dualcode.models.problems import ProblemEntry
from dualcode.reference.registry import CodeRegistry

# Table names used by the storage layer, with accepted fallbacks
_SOURCE_KEYS = ("namaste_codes", "sources")
_TARGET_KEYS = ("icd11_codes", "targets")
_PROBLEM_KEYS = ("problem_entries", "problems")

# Columns holding code-string arrays in CSV exports
_ARRAY_COLUMNS = ("icd11_mappings", "namaste_mappings", "icd11_code_ids")

T = TypeVar("T", bound=BaseModel)


def load_registry_snapshot(path: str | Path) -> CodeRegistry:
    """Load a JSON registry snapshot.

    Expected shape::

        {"namaste_codes": [{...}, ...], "icd11_codes": [{...}, ...]}

    Args:
        path: Path to the JSON snapshot.

    Returns:
        An indexed CodeRegistry.

    Raises:
        FileNotFoundError: If the file does not exist.
        RegistryLoadError: If the JSON is malformed or a row fails validation.
    """
    raw = _read_json(path)
    if not isinstance(raw, dict):
        msg = f"Registry snapshot {path} must be a JSON object"
        raise RegistryLoadError(msg)

    source_rows = _first_present(raw, _SOURCE_KEYS)
    target_rows = _first_present(raw, _TARGET_KEYS)

    sources = _build_records(SourceCode, source_rows, "NAMASTE code")
    targets = _build_records(TargetCode, target_rows, "ICD-11 code")

    logger.info(
        "Loaded registry snapshot {}: {} NAMASTE codes, {} ICD-11 codes",
        Path(path).name,
        len(sources),
        len(targets),
    )
    return CodeRegistry(sources, targets)


def load_registry_from_csv(
    source_csv: str | Path,
    target_csv: str | Path,
) -> CodeRegistry:
    """Load a registry snapshot from per-table CSV exports.

    Array columns (``icd11_mappings``, ``namaste_mappings``) may hold a
    Postgres array literal (``{TM40.00,CA80.2}``), a JSON array, or a
    semicolon-separated list.
    """
    sources = _build_records(SourceCode, _read_csv_rows(source_csv), "NAMASTE code")
    targets = _build_records(TargetCode, _read_csv_rows(target_csv), "ICD-11 code")
    logger.info(
        "Loaded registry CSV export: {} NAMASTE codes, {} ICD-11 codes",
        len(sources),
        len(targets),
    )
    return CodeRegistry(sources, targets)


def load_problem_entries(path: str | Path) -> list[ProblemEntry]:
    """Load problem entries from JSON, preserving file order.

    Accepts either a bare list or ``{"problem_entries": [...]}``.
    """
    raw = _read_json(path)
    rows = raw if isinstance(raw, list) else _first_present(raw, _PROBLEM_KEYS)
    problems = _build_records(ProblemEntry, rows, "problem entry")
    logger.info("Loaded {} problem entries from {}", len(problems), Path(path).name)
    return problems


def parse_code_array(value: object) -> list[str]:
    """Parse a code-string array cell from a CSV export.

    Returns an empty list for blank cells.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [str(v) for v in value]
    text = str(value).strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"Malformed JSON array {text!r}"
            raise RegistryLoadError(msg) from e
        return [str(v) for v in parsed]
    if text.startswith("{") and text.endswith("}"):
        text = text[1:-1]
        return [part.strip().strip('"') for part in text.split(",") if part.strip()]
    return [part.strip() for part in text.split(";") if part.strip()]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_json(path: str | Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        msg = f"Invalid JSON in {path}: {e}"
        raise RegistryLoadError(msg) from e


def _read_csv_rows(path: str | Path) -> list[dict[str, Any]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    rows: list[dict[str, Any]] = df.to_dict(orient="records")
    for row in rows:
        for col in _ARRAY_COLUMNS:
            if col in row:
                row[col] = parse_code_array(row[col])
        if "namaste_mappings" in row and not row["namaste_mappings"]:
            # An empty cell means "no cross-references", stored as null
            row["namaste_mappings"] = None
    return rows


def _first_present(raw: dict[str, Any], keys: tuple[str, ...]) -> list[Any]:
    for key in keys:
        if key in raw:
            rows = raw[key]
            if rows is None:
                return []
            if not isinstance(rows, list):
                msg = f"'{key}' must be a list, got {type(rows).__name__}"
                raise RegistryLoadError(msg)
            return rows
    return []


def _build_records(model: type[T], rows: list[Any], label: str) -> list[T]:
    records: list[T] = []
    for i, row in enumerate(rows):
        try:
            records.append(model.model_validate(row))
        except ValidationError as e:
            msg = f"Invalid {label} at index {i}: {e}"
            raise RegistryLoadError(msg) from e
    return records
