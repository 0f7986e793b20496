"""End-to-end import run: index -> selection -> upload -> publish."""

from __future__ import annotations

import logging
from typing import Callable

import requests

from chart_importer.config.settings import Settings
from chart_importer.core.chart_uploader import ChartUploader
from chart_importer.core.index_fetcher import fetch_index
from chart_importer.core.k8s_client import K8sClient
from chart_importer.core.reconciler import ResourceReconciler
from chart_importer.core.version_selector import ChartSelection, select_versions
from chart_importer.errors import AppStoreNotFoundError
from chart_importer.models.index import RepositoryIndex
from chart_importer.models.report import ImportReport

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def build_session() -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = "chart-importer"
    return session


def plan_import(settings: Settings, index: RepositoryIndex) -> list[ChartSelection]:
    """Apply the retention policy to every chart, in index order."""
    return [
        select_versions(
            chart,
            entries,
            max_allowed=settings.max_versions,
            latest_patch_only=settings.latest_patch_only,
            exact_minor_groups=settings.exact_minor_groups,
        )
        for chart, entries in index.entries.items()
    ]


def upload_index(
    settings: Settings,
    index: RepositoryIndex,
    uploader: ChartUploader,
    on_progress: ProgressCallback | None = None,
) -> ImportReport:
    """Upload the selected versions of every chart.

    AppStoreNotFoundError propagates and ends the run, carrying the
    partial report; every other failure is recorded in the report.
    """
    report = ImportReport()
    selections = plan_import(settings, index)
    total = len(selections)
    for i, selection in enumerate(selections, 1):
        if on_progress:
            on_progress(i, total, selection.chart)
        try:
            report.extend(uploader.upload_chart(selection))
        except AppStoreNotFoundError as e:
            report.extend(e.results)
            e.report = report
            raise
    logger.info(
        "Uploaded %d version(s), %d failure(s)", report.uploaded, len(report.failures),
    )
    return report


def run_import(
    settings: Settings,
    session: requests.Session,
    k8s: K8sClient,
    uploader: ChartUploader | None = None,
    reconciler: ResourceReconciler | None = None,
    on_progress: ProgressCallback | None = None,
) -> ImportReport:
    """Run the full import.  Fatal failures raise; per-item ones are reported."""
    logger.info("Starting to upload to %s", settings.server_url)
    k8s.connect()
    logger.info("Cluster client initialized successfully")

    uploader = uploader or ChartUploader(settings, session)
    index = fetch_index(session, settings.repo_url, timeout=settings.request_timeout)
    report = upload_index(settings, index, uploader, on_progress=on_progress)

    reconciler = reconciler or ResourceReconciler(k8s, settings.marker_selector)
    report.phases = reconciler.run()
    return report
