"""Rich display helpers for terminal output.

Provides formatted display functions for registry code tables, concept
maps, bundle summaries and data-quality reports using Rich tables.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from dualcode.models.fhir import ConceptMap
from dualcode.reference.registry import CodeRegistry
from dualcode.synthesis.summary import CollectionSummary
from dualcode.validation.report import FindingSeverity, QualityReport

_SEVERITY_STYLES = {
    FindingSeverity.ERROR: "bold red",
    FindingSeverity.WARNING: "yellow",
    FindingSeverity.NOTICE: "dim",
}

_SYSTEM_STYLES = {
    "AYURVEDA": "green",
    "SIDDHA": "magenta",
    "UNANI": "cyan",
}


def display_code_tables(
    registry: CodeRegistry, console: Console, *, show_mapped: bool = False
) -> None:
    """Print the NAMASTE and ICD-11 codes of a registry snapshot.

    Args:
        registry: The loaded snapshot.
        console: Rich Console for output.
        show_mapped: Add a column with resolved cross-references.
    """
    src = Table(title="NAMASTE Codes", show_lines=False)
    src.add_column("Code", style="bold cyan", no_wrap=True)
    src.add_column("Display")
    src.add_column("System")
    if show_mapped:
        src.add_column("ICD-11 Mappings", style="dim")

    for code in registry.sources:
        row: list[str | Text] = [
            code.code,
            code.display,
            Text(code.system.value, style=_SYSTEM_STYLES.get(code.system.value, "")),
        ]
        if show_mapped:
            row.append(", ".join(t.code for t in registry.mapped_targets_for(code)) or "-")
        src.add_row(*row)

    tgt = Table(title="ICD-11 Codes", show_lines=False)
    tgt.add_column("Code", style="bold cyan", no_wrap=True)
    tgt.add_column("Display")
    tgt.add_column("Module")
    if show_mapped:
        tgt.add_column("NAMASTE Mappings", style="dim")

    for code in registry.targets:
        module_style = "green" if code.module.value == "TM2" else "blue"
        row = [code.code, code.display, Text(code.module.value, style=module_style)]
        if show_mapped:
            row.append(", ".join(s.code for s in registry.mapped_sources_for(code)) or "-")
        tgt.add_row(*row)

    console.print(src)
    console.print(tgt)
    console.print(
        f"\n[bold]{len(registry.sources)}[/bold] NAMASTE codes, "
        f"[bold]{len(registry.targets)}[/bold] ICD-11 codes"
    )


def display_concept_map(concept_map: ConceptMap, console: Console) -> None:
    """Print the targets of a ConceptMap as a table."""
    table = Table(title=concept_map.title, show_lines=True)
    table.add_column("NAMASTE", style="bold cyan", no_wrap=True)
    table.add_column("ICD-11", style="bold", no_wrap=True)
    table.add_column("Display")
    table.add_column("Equivalence", style="green")
    table.add_column("Comment", style="dim")

    for group in concept_map.group:
        for element in group.element:
            for target in element.target:
                table.add_row(
                    element.code,
                    target.code,
                    target.display,
                    target.equivalence,
                    target.comment,
                )
    console.print(table)


def display_collection_summary(summary: CollectionSummary, console: Console) -> None:
    """Print resource counts for a Bundle."""
    table = Table(title="Bundle Summary")
    table.add_column("Resource", style="bold")
    table.add_column("Count", justify="right")

    table.add_row("CodeSystem", str(summary.code_systems))
    table.add_row("ConceptMap", str(summary.concept_maps))
    table.add_row("Condition", str(summary.conditions))
    console.print(table)

    if summary.omitted_references:
        console.print(
            f"[yellow]{summary.omitted_references} unresolved code reference(s) "
            "omitted from Condition codings[/yellow]"
        )


def display_quality_report(report: QualityReport, console: Console) -> None:
    """Print a data-quality report with findings sorted by severity."""
    console.print(
        f"[bold]{report.problems_checked}[/bold] problems checked: "
        f"[bold red]{report.error_count}[/bold red] errors, "
        f"[yellow]{report.warning_count}[/yellow] warnings, "
        f"{report.notice_count} notices"
    )
    if not report.findings:
        console.print("[green]No findings.[/green]")
        return

    order = {FindingSeverity.ERROR: 0, FindingSeverity.WARNING: 1, FindingSeverity.NOTICE: 2}
    table = Table(title="Data Quality Findings", show_lines=True)
    table.add_column("Rule", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Problem", style="cyan")
    table.add_column("Message")

    for f in sorted(report.findings, key=lambda x: order[x.severity]):
        table.add_row(
            f.rule_id,
            Text(f.severity.value, style=_SEVERITY_STYLES[f.severity]),
            f.problem_id or "-",
            f.message,
        )
    console.print(table)
