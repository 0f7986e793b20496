"""chart-import publish - Publish already imported applications."""

from __future__ import annotations

import logging
from typing import Optional

import typer
from kubernetes.config import ConfigException
from rich.console import Console

from chart_importer.cli.options import ContextOption, build_settings
from chart_importer.core.k8s_client import K8sClient
from chart_importer.core.reconciler import ResourceReconciler
from chart_importer.errors import ImporterError
from chart_importer.output.tables import phase_table

logger = logging.getLogger(__name__)

app = typer.Typer()
console = Console()


@app.callback(invoke_without_command=True)
def publish(
    context: Optional[str] = ContextOption,
    mark: Optional[str] = typer.Option(None, "--mark", help="Category label value of imported apps"),
) -> None:
    """Run the four publish phases over apps still carrying the import marker.

    Useful after an import aborted between uploading and publishing.
    """
    try:
        settings = build_settings(kube_context=context, mark=mark)
        k8s = K8sClient(context=settings.kube_context, request_timeout=settings.request_timeout)
        k8s.connect()
        phases = ResourceReconciler(k8s, settings.marker_selector).run()
    except (ImporterError, ConfigException) as e:
        logger.error("Publish aborted: %s", e)
        raise typer.Exit(code=1)

    console.print(phase_table(phases))
