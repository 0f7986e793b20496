"""Rich table builders for each command."""

from __future__ import annotations

from rich.table import Table

from chart_importer.core.version_selector import ChartSelection
from chart_importer.models import Outcome
from chart_importer.models.report import ImportReport, PhaseResult
from chart_importer.output.themes import styled_outcome


def upload_results_table(report: ImportReport) -> Table:
    table = Table(title="Chart Uploads", expand=True)
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Version", style="bold")
    table.add_column("Outcome", no_wrap=True)
    table.add_column("App ID", style="cyan", no_wrap=True)
    table.add_column("Reason", style="dim", max_width=60)

    for r in report.results:
        table.add_row(r.chart, r.version, styled_outcome(r.outcome), r.app_id or "-", r.reason)
    return table


def phase_table(phases: list[PhaseResult]) -> Table:
    table = Table(title="Publish Phases")
    table.add_column("Phase", justify="right", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Updated", justify="right")

    for p in phases:
        table.add_row(f"{p.phase}/4", p.name, str(p.updated))
    return table


def plan_table(selections: list[ChartSelection]) -> Table:
    table = Table(title="Import Plan", expand=True)
    table.add_column("Chart", style="magenta", no_wrap=True)
    table.add_column("Upload", style="green")
    table.add_column("Skipped", style="dim")
    table.add_column("Not evaluated", justify="right", style="dim")

    for s in selections:
        table.add_row(
            s.chart,
            ", ".join(item.entry.version for item in s.selected) or "-",
            ", ".join(item.entry.version for item in s.skipped) or "-",
            str(s.truncated),
        )
    return table


def summary_line(report: ImportReport) -> str:
    counts = report.counts()
    parts = []
    for outcome in Outcome:
        n = counts[outcome]
        if n:
            parts.append(f"{n} {styled_outcome(outcome)}")
    return ", ".join(parts) if parts else "[dim]nothing to upload[/dim]"
