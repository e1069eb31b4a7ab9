"""dualcode CLI application entry point.

Provides commands for browsing a registry snapshot, synthesizing the
NAMASTE CodeSystem, the NAMASTE -> ICD-11 ConceptMap and the collection
Bundle, checking problem-entry data quality, and exporting artifacts.

Usage:
    dualcode codes <snapshot>
    dualcode codesystem <snapshot> --source AYU.RESP.001
    dualcode conceptmap <snapshot> --source AYU.RESP.001 --target TM40.00
    dualcode bundle <snapshot> --problems problems.json
    dualcode check <snapshot> --problems problems.json
    dualcode export <snapshot> <output-dir>
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from dualcode.config import DocumentSettings
from dualcode.models.problems import ProblemEntry
from dualcode.models.selection import SelectionState
from dualcode.reference.registry import CodeRegistry

app = typer.Typer(
    name="dualcode",
    help="Dual-code NAMASTE and ICD-11 problems and emit FHIR R4 documents.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

SnapshotArg = Annotated[
    Path,
    typer.Argument(help="Registry snapshot: JSON file with namaste_codes and icd11_codes"),
]
SourceOpt = Annotated[
    str | None,
    typer.Option("--source", "-s", help="Selected NAMASTE code (e.g., AYU.RESP.001)"),
]
TargetOpt = Annotated[
    list[str] | None,
    typer.Option("--target", "-t", help="Selected ICD-11 code; repeat for several"),
]
ProblemsOpt = Annotated[
    Path | None,
    typer.Option("--problems", "-p", help="JSON file of problem entries"),
]
SettingsOpt = Annotated[
    Path | None,
    typer.Option("--settings", help="JSON document settings (or set DUALCODE_SETTINGS)"),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Show debug logging on stderr"),
    ] = False,
) -> None:
    """Configure logging for all commands."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command()
def version() -> None:
    """Show the current version."""
    from dualcode import __version__

    console.print(f"dualcode {__version__}")


@app.command()
def codes(
    snapshot: SnapshotArg,
    mapped: Annotated[
        bool,
        typer.Option("--mapped", "-m", help="Show resolved cross-system mappings"),
    ] = False,
) -> None:
    """List the NAMASTE and ICD-11 codes in a registry snapshot."""
    from dualcode.cli.display import display_code_tables

    registry = _load_registry(snapshot)
    display_code_tables(registry, console, show_mapped=mapped)


@app.command()
def codesystem(
    snapshot: SnapshotArg,
    source: SourceOpt = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the CodeSystem JSON to this file"),
    ] = None,
    settings_path: SettingsOpt = None,
) -> None:
    """Build the NAMASTE CodeSystem for the selected code.

    With no --source the CodeSystem has an empty concept list.
    """
    from dualcode.synthesis import build_code_registry_document

    registry = _load_registry(snapshot)
    settings = _load_settings(settings_path)
    selection = _build_selection(registry, source, None)

    doc = build_code_registry_document(selection.selected_source, settings=settings)
    _emit(doc, output)


@app.command()
def conceptmap(
    snapshot: SnapshotArg,
    source: SourceOpt = None,
    target: TargetOpt = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the ConceptMap JSON to this file"),
    ] = None,
    xlsx: Annotated[
        Path | None,
        typer.Option("--xlsx", help="Also write the mapping table as an Excel workbook"),
    ] = None,
    settings_path: SettingsOpt = None,
) -> None:
    """Build the NAMASTE -> ICD-11 ConceptMap for the selected codes.

    Needs one --source and at least one --target; otherwise there is
    nothing to map and no document is produced.
    """
    from dualcode.cli.display import display_concept_map
    from dualcode.export import export_mapping_to_excel
    from dualcode.synthesis import build_mapping_document

    registry = _load_registry(snapshot)
    settings = _load_settings(settings_path)
    selection = _build_selection(registry, source, target)

    doc = build_mapping_document(
        selection.selected_source, selection.selected_targets, settings=settings
    )
    if doc is None:
        console.print(
            "[yellow]No ConceptMap: select both a NAMASTE code (--source) "
            "and at least one ICD-11 code (--target).[/yellow]"
        )
        return

    if output is not None:
        display_concept_map(doc, console)
    _emit(doc, output)

    if xlsx is not None:
        export_mapping_to_excel(doc, xlsx)
        status_console = console if output is not None else err_console
        status_console.print(f"[green]Mapping table written to {xlsx}[/green]")


@app.command()
def bundle(
    snapshot: SnapshotArg,
    problems_path: ProblemsOpt = None,
    source: SourceOpt = None,
    target: TargetOpt = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the Bundle JSON to this file"),
    ] = None,
    settings_path: SettingsOpt = None,
) -> None:
    """Build the collection Bundle: CodeSystem, ConceptMap and one Condition per problem."""
    from dualcode.cli.display import display_collection_summary, display_quality_report
    from dualcode.errors import UnknownVocabularyValue
    from dualcode.synthesis import build_collection_document, summarize_collection
    from dualcode.validation import verify_collection_references

    registry = _load_registry(snapshot)
    settings = _load_settings(settings_path)
    selection = _build_selection(registry, source, target)
    problems = _load_problems(problems_path)

    try:
        doc = build_collection_document(
            selection.selected_source,
            selection.selected_targets,
            problems,
            registry=registry,
            settings=settings,
        )
    except UnknownVocabularyValue as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    for ref in doc.dangling_references:
        logger.warning(
            "Problem {} references unknown {} code id {}", ref.problem_id, ref.kind, ref.code_id
        )

    summary_console = console if output is not None else err_console
    display_collection_summary(summarize_collection(doc), summary_console)
    display_quality_report(verify_collection_references(doc, registry), summary_console)
    _emit(doc, output)


@app.command()
def check(
    snapshot: SnapshotArg,
    problems_path: Annotated[
        Path,
        typer.Option("--problems", "-p", help="JSON file of problem entries"),
    ],
) -> None:
    """Check problem entries for unknown vocabulary, dangling ids and date order.

    Exits with code 1 when any ERROR finding is present.
    """
    from dualcode.cli.display import display_quality_report
    from dualcode.validation import check_problem_entries

    registry = _load_registry(snapshot)
    problems = _load_problems(problems_path)

    report = check_problem_entries(problems, registry)
    display_quality_report(report, console)
    if report.has_errors:
        raise typer.Exit(code=1)


@app.command()
def export(
    snapshot: SnapshotArg,
    output_dir: Annotated[
        Path,
        typer.Argument(help="Directory to write the artifacts into"),
    ],
    problems_path: ProblemsOpt = None,
    source: SourceOpt = None,
    target: TargetOpt = None,
    xlsx: Annotated[
        bool,
        typer.Option("--xlsx", help="Also write the ConceptMap as namaste-icd11-mapping.xlsx"),
    ] = False,
    settings_path: SettingsOpt = None,
) -> None:
    """Write every available artifact under its fixed file name.

    Writes namaste-codesystem.json and fhir-bundle.json, plus
    namaste-icd11-conceptmap.json when the selection can be mapped.
    """
    from dualcode.errors import UnknownVocabularyValue
    from dualcode.export import export_all, export_mapping_to_excel
    from dualcode.synthesis import (
        GenerationContext,
        build_code_registry_document,
        build_collection_document,
        build_mapping_document,
    )

    registry = _load_registry(snapshot)
    settings = _load_settings(settings_path)
    selection = _build_selection(registry, source, target)
    problems = _load_problems(problems_path)

    generation = GenerationContext()
    code_system = build_code_registry_document(
        selection.selected_source, settings=settings, generation=generation
    )
    concept_map = build_mapping_document(
        selection.selected_source,
        selection.selected_targets,
        settings=settings,
        generation=generation,
    )
    try:
        doc = build_collection_document(
            selection.selected_source,
            selection.selected_targets,
            problems,
            registry=registry,
            settings=settings,
            generation=generation,
        )
    except UnknownVocabularyValue as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e

    written = export_all(code_system, concept_map, doc, output_dir)
    if xlsx and concept_map is not None:
        written.append(export_mapping_to_excel(concept_map, output_dir / "namaste-icd11-mapping.xlsx"))

    for path in written:
        console.print(f"[green]Wrote {path}[/green]")
    if concept_map is None:
        console.print("[yellow]ConceptMap skipped: nothing selected to map.[/yellow]")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_registry(snapshot: Path) -> CodeRegistry:
    from dualcode.errors import RegistryLoadError
    from dualcode.reference import load_registry_snapshot

    try:
        return load_registry_snapshot(snapshot)
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] Snapshot not found: {snapshot}")
        raise typer.Exit(code=1) from e
    except RegistryLoadError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _load_problems(path: Path | None) -> list[ProblemEntry]:
    from dualcode.errors import RegistryLoadError
    from dualcode.reference import load_problem_entries

    if path is None:
        return []
    try:
        return load_problem_entries(path)
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] Problems file not found: {path}")
        raise typer.Exit(code=1) from e
    except RegistryLoadError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _load_settings(path: Path | None) -> DocumentSettings:
    from dualcode.config import load_settings
    from dualcode.errors import DualCodeError

    try:
        return load_settings(path)
    except (FileNotFoundError, DualCodeError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from e


def _build_selection(
    registry: CodeRegistry,
    source: str | None,
    targets: list[str] | None,
) -> SelectionState:
    """Resolve code strings from the command line into a SelectionState."""
    selection = SelectionState()

    if source is not None:
        found = registry.find_source_by_code(source)
        if found is None:
            console.print(f"[bold red]Error:[/bold red] NAMASTE code '{source}' not found.")
            raise typer.Exit(code=1)
        selection.select_source(found)

    for code in targets or []:
        found_target = registry.find_target_by_code(code)
        if found_target is None:
            console.print(f"[bold red]Error:[/bold red] ICD-11 code '{code}' not found.")
            raise typer.Exit(code=1)
        if not selection.add_target(found_target):
            logger.debug("Ignoring duplicate ICD-11 selection {}", code)

    return selection


def _emit(doc, output: Path | None) -> None:
    """Write a document to ``output``, or print its JSON to stdout."""
    from dualcode.export import export_to_json, to_canonical_json

    if output is None:
        typer.echo(to_canonical_json(doc))
        return
    export_to_json(doc, output)
    console.print(f"[green]{doc.resource_type} written to {output}[/green]")
