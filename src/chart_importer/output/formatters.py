"""Table / JSON / YAML output dispatch."""

from __future__ import annotations

import json
from typing import Any

import yaml
from rich.console import Console

from chart_importer.core.version_selector import ChartSelection
from chart_importer.models.report import ImportReport

console = Console()


def _report_to_dict(report: ImportReport) -> dict[str, Any]:
    return {
        "results": [
            {
                "chart": r.chart,
                "version": r.version,
                "outcome": r.outcome.value,
                "app_id": r.app_id,
                "reason": r.reason,
            }
            for r in report.results
        ],
        "phases": [
            {"phase": p.phase, "name": p.name, "updated": p.updated}
            for p in report.phases
        ],
        "summary": {o.value: n for o, n in report.counts().items()},
    }


def _plan_to_dict(selections: list[ChartSelection]) -> list[dict[str, Any]]:
    return [
        {
            "chart": s.chart,
            "upload": [item.entry.version for item in s.selected],
            "skipped": [item.entry.version for item in s.skipped],
            "not_evaluated": s.truncated,
        }
        for s in selections
    ]


def output_report(report: ImportReport, fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(_report_to_dict(report), indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(_report_to_dict(report), default_flow_style=False, sort_keys=False))
    else:
        from chart_importer.output.tables import phase_table, summary_line, upload_results_table
        console.print(upload_results_table(report))
        if report.phases:
            console.print(phase_table(report.phases))
        console.print(f"\nImport complete: {summary_line(report)}")


def output_plan(selections: list[ChartSelection], fmt: str) -> None:
    if fmt == "json":
        console.print_json(json.dumps(_plan_to_dict(selections), indent=2))
    elif fmt == "yaml":
        console.print(yaml.dump(_plan_to_dict(selections), default_flow_style=False, sort_keys=False))
    else:
        from chart_importer.output.tables import plan_table
        console.print(plan_table(selections))
