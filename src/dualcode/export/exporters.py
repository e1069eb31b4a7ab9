"""Export synthesized documents to JSON artifacts and Excel.

Provides:
- to_canonical_json: the canonical text form (FHIR field names, 2-space indent)
- export_to_json / export_artifact: write a document to a file
- export_all: write every available artifact of a synthesis pass
- export_mapping_to_excel: openpyxl workbook of a ConceptMap for reviewer hand-off
  with 2 sheets (Mapping, Summary) and fills by ICD-11 module.
"""

from __future__ import annotations

from pathlib import Path

from loguru import logger
from openpyxl import Workbook
from openpyxl.formatting.rule import FormulaRule
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from dualcode.models.fhir import Bundle, CodeSystem, ConceptMap

Document = CodeSystem | ConceptMap | Bundle

# Fixed artifact names, one per document type
ARTIFACT_NAMES: dict[str, str] = {
    "CodeSystem": "namaste-codesystem.json",
    "ConceptMap": "namaste-icd11-conceptmap.json",
    "Bundle": "fhir-bundle.json",
}


def to_canonical_json(doc: Document) -> str:
    """Serialize a document to its canonical JSON text.

    Field names are the FHIR names, nulls are omitted, field order is
    the model declaration order, and non-ASCII text is kept as-is.
    """
    return doc.model_dump_json(indent=2, by_alias=True, exclude_none=True)


def artifact_name(doc: Document) -> str:
    """File name a document is exported under."""
    return ARTIFACT_NAMES[doc.resource_type]


def export_to_json(doc: Document | None, output_path: Path) -> Path:
    """Write a document's canonical JSON to a file.

    Args:
        doc: The document to export.
        output_path: File path to write.

    Returns:
        The path written.

    Raises:
        ValueError: If ``doc`` is None (e.g. no mapping for the selection).
    """
    if doc is None:
        msg = "Nothing to export: no document was generated for the current selection"
        raise ValueError(msg)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(to_canonical_json(doc) + "\n", encoding="utf-8")
    logger.info("Exported {type} to JSON: {path}", type=doc.resource_type, path=output_path)
    return output_path


def export_artifact(doc: Document | None, output_dir: Path) -> Path:
    """Write a document into ``output_dir`` under its fixed artifact name."""
    if doc is None:
        msg = "Nothing to export: no document was generated for the current selection"
        raise ValueError(msg)
    return export_to_json(doc, output_dir / artifact_name(doc))


def export_all(
    code_system: CodeSystem,
    concept_map: ConceptMap | None,
    bundle: Bundle,
    output_dir: Path,
) -> list[Path]:
    """Write all artifacts of one synthesis pass. A missing ConceptMap is skipped."""
    written = [export_artifact(code_system, output_dir)]
    if concept_map is not None:
        written.append(export_artifact(concept_map, output_dir))
    else:
        logger.info("No ConceptMap for the current selection; skipping its artifact")
    written.append(export_artifact(bundle, output_dir))
    return written


def export_mapping_to_excel(concept_map: ConceptMap | None, output_path: Path) -> Path:
    """Export a ConceptMap to an Excel workbook with 2 sheets.

    Sheet 1 - Mapping: one row per target with the source code repeated,
        filled by ICD-11 module (TM2 green, biomedicine blue).
    Sheet 2 - Summary: ConceptMap metadata and counts.

    Raises:
        ValueError: If ``concept_map`` is None.
    """
    if concept_map is None:
        msg = "Nothing to export: no ConceptMap was generated for the current selection"
        raise ValueError(msg)

    output_path.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()

    # --- Sheet 1: Mapping ---
    ws_mapping = wb.active
    ws_mapping.title = "Mapping"  # type: ignore[union-attr]
    _write_mapping_sheet(ws_mapping, concept_map)  # type: ignore[arg-type]

    # --- Sheet 2: Summary ---
    ws_summary = wb.create_sheet("Summary")
    _write_summary_sheet(ws_summary, concept_map)

    wb.save(output_path)
    logger.info("Exported ConceptMap to Excel: {path}", path=output_path)
    return output_path


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

MAPPING_HEADERS = [
    "Row #",
    "NAMASTE Code",
    "NAMASTE Display",
    "ICD-11 Code",
    "ICD-11 Display",
    "Equivalence",
    "Comment",
]

_HEADER_FONT = Font(bold=True)
_TM2_FILL = PatternFill(start_color="C6EFCE", end_color="C6EFCE", fill_type="solid")
_BIOMEDICINE_FILL = PatternFill(start_color="DDEBF7", end_color="DDEBF7", fill_type="solid")

_COL_WIDTHS = {
    "Row #": 7,
    "NAMASTE Code": 16,
    "NAMASTE Display": 35,
    "ICD-11 Code": 14,
    "ICD-11 Display": 45,
    "Equivalence": 13,
    "Comment": 40,
}


def _mapping_rows(concept_map: ConceptMap) -> list[tuple[str, str, str, str, str, str]]:
    rows = []
    for group in concept_map.group:
        for element in group.element:
            for target in element.target:
                rows.append(
                    (
                        element.code,
                        element.display,
                        target.code,
                        target.display,
                        target.equivalence,
                        target.comment,
                    )
                )
    return rows


def _write_mapping_sheet(ws: object, concept_map: ConceptMap) -> None:
    """Populate the Mapping sheet."""
    for col_idx, header in enumerate(MAPPING_HEADERS, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)  # type: ignore[union-attr]
        cell.font = _HEADER_FONT
        col_letter = get_column_letter(col_idx)
        ws.column_dimensions[col_letter].width = _COL_WIDTHS.get(header, 15)  # type: ignore[union-attr]

    rows = _mapping_rows(concept_map)
    for row_idx, values in enumerate(rows, start=1):
        data_row = row_idx + 1  # +1 for header
        ws.cell(row=data_row, column=1, value=row_idx)  # type: ignore[union-attr]
        for col_idx, value in enumerate(values, start=2):
            ws.cell(row=data_row, column=col_idx, value=value)  # type: ignore[union-attr]

    if not rows:
        return

    last_col = get_column_letter(len(MAPPING_HEADERS))
    last_row = len(rows) + 1
    ws.auto_filter.ref = f"A1:{last_col}{last_row}"  # type: ignore[union-attr]

    # Fill whole rows by module, keyed on the Comment column ("... to TM2")
    comment_col = get_column_letter(MAPPING_HEADERS.index("Comment") + 1)
    range_str = f"A2:{last_col}{last_row}"
    ws.conditional_formatting.add(  # type: ignore[union-attr]
        range_str,
        FormulaRule(formula=[f'RIGHT(${comment_col}2,3)="TM2"'], fill=_TM2_FILL),
    )
    ws.conditional_formatting.add(  # type: ignore[union-attr]
        range_str,
        FormulaRule(formula=[f'RIGHT(${comment_col}2,11)="BIOMEDICINE"'], fill=_BIOMEDICINE_FILL),
    )


def _write_summary_sheet(ws: object, concept_map: ConceptMap) -> None:
    """Populate the Summary sheet."""
    label_font = Font(bold=True)
    wrap_align = Alignment(wrap_text=True)

    ws.column_dimensions["A"].width = 22  # type: ignore[union-attr]
    ws.column_dimensions["B"].width = 60  # type: ignore[union-attr]

    rows = _mapping_rows(concept_map)
    summary: list[tuple[str, str | int]] = [
        ("Name", concept_map.name),
        ("Title", concept_map.title),
        ("URL", concept_map.url),
        ("Version", concept_map.version),
        ("Publisher", concept_map.publisher),
        ("Generated", concept_map.date),
        ("", ""),
        ("Source System", concept_map.source_uri),
        ("Target System", concept_map.target_uri),
        ("Source Codes", len({r[0] for r in rows})),
        ("Target Codes", len(rows)),
        ("TM2 Targets", sum(1 for r in rows if r[5].endswith("TM2"))),
        ("Biomedicine Targets", sum(1 for r in rows if r[5].endswith("BIOMEDICINE"))),
    ]

    for row_idx, (label, value) in enumerate(summary, start=1):
        label_cell = ws.cell(row=row_idx, column=1, value=label)  # type: ignore[union-attr]
        label_cell.font = label_font
        value_cell = ws.cell(row=row_idx, column=2, value=value)  # type: ignore[union-attr]
        value_cell.alignment = wrap_align
