"""chart-import import - Upload charts and publish them."""

from __future__ import annotations

import logging
from typing import Optional

import typer
from kubernetes.config import ConfigException

from chart_importer.cli.options import (
    AllVersionsOption,
    ContextOption,
    ExactGroupsOption,
    MaxVersionsOption,
    MirrorOption,
    OutputOption,
    PasswordOption,
    RepoOption,
    ServerOption,
    TokenOption,
    UsernameOption,
    build_settings,
)
from chart_importer.core.importer import build_session, run_import
from chart_importer.core.k8s_client import K8sClient
from chart_importer.errors import ImporterError
from chart_importer.output.formatters import output_report

logger = logging.getLogger(__name__)

app = typer.Typer()


@app.callback(invoke_without_command=True)
def import_charts(
    server: Optional[str] = ServerOption,
    repo: Optional[str] = RepoOption,
    token: Optional[str] = TokenOption,
    username: Optional[str] = UsernameOption,
    password: Optional[str] = PasswordOption,
    context: Optional[str] = ContextOption,
    max_versions: Optional[int] = MaxVersionsOption,
    all_versions: bool = AllVersionsOption,
    exact_groups: bool = ExactGroupsOption,
    mirror: Optional[str] = MirrorOption,
    interval: Optional[float] = typer.Option(
        None, "--interval", help="Seconds to wait after each upload call",
    ),
    output: str = OutputOption,
) -> None:
    """Upload every selected chart version, then publish the imported apps."""
    try:
        settings = build_settings(
            server_url=server,
            repo_url=repo,
            token=token,
            username=username,
            password=password,
            kube_context=context,
            max_versions=max_versions,
            latest_patch_only=False if all_versions else None,
            exact_minor_groups=True if exact_groups else None,
            mirror_prefix=mirror,
            upload_interval=interval,
        )
        settings.validate()
        with build_session() as session:
            k8s = K8sClient(context=settings.kube_context, request_timeout=settings.request_timeout)
            report = run_import(settings, session, k8s)
    except (ImporterError, ConfigException) as e:
        logger.error("Import aborted: %s", e)
        partial = getattr(e, "report", None)
        if partial is not None and partial.results:
            logger.error("%d version(s) were handled before the abort", len(partial.results))
            output_report(partial, output)
        raise typer.Exit(code=1)

    output_report(report, output)
