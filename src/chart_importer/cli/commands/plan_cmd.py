"""chart-import plan - Show which chart versions would be uploaded."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from chart_importer.cli.options import (
    AllVersionsOption,
    ExactGroupsOption,
    MaxVersionsOption,
    OutputOption,
    RepoOption,
    build_settings,
)
from chart_importer.core.importer import build_session, plan_import
from chart_importer.core.index_fetcher import fetch_index
from chart_importer.errors import ImporterError
from chart_importer.output.formatters import output_plan

logger = logging.getLogger(__name__)

app = typer.Typer()


@app.callback(invoke_without_command=True)
def plan(
    repo: Optional[str] = RepoOption,
    max_versions: Optional[int] = MaxVersionsOption,
    all_versions: bool = AllVersionsOption,
    exact_groups: bool = ExactGroupsOption,
    output: str = OutputOption,
) -> None:
    """Apply the retention policy to a repository index without uploading."""
    try:
        settings = build_settings(
            repo_url=repo,
            max_versions=max_versions,
            latest_patch_only=False if all_versions else None,
            exact_minor_groups=True if exact_groups else None,
        )
        settings.validate(need_server=False)
        with build_session() as session:
            index = fetch_index(session, settings.repo_url, timeout=settings.request_timeout)
    except ImporterError as e:
        logger.error("Plan failed: %s", e)
        raise typer.Exit(code=1)

    output_plan(plan_import(settings, index), output)
