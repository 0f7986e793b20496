"""Publish imported applications: status and label transitions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

import urllib3
from kubernetes.client import ApiException

from chart_importer.config.settings import (
    APP_ID_LABEL,
    APP_STORE_LABEL,
    CATEGORY_LABEL,
    UNCATEGORIZED,
)
from chart_importer.core.k8s_client import APPLICATION_VERSIONS, APPLICATIONS, K8sClient
from chart_importer.errors import ReconcileError
from chart_importer.models.report import PhaseResult
from chart_importer.utils.unstructured import get_labels, get_name, set_labels, set_nested_field

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

# API errors and transport failures (refused connections, exhausted retries)
_CLUSTER_ERRORS = (ApiException, urllib3.exceptions.HTTPError)


def _reason(e: Exception) -> str:
    if isinstance(e, ApiException):
        return str(e.reason)
    return str(e)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def rfc3339(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class ResourceReconciler:
    """Moves marker-labelled applications from "imported" to "published".

    The four phases run strictly in order and each one lists the marker
    applications afresh.  The first list or update error aborts with
    ReconcileError; earlier phases are not undone.
    """

    def __init__(self, k8s: K8sClient, marker_selector: str, clock: Clock = _utc_now):
        self.k8s = k8s
        self.marker_selector = marker_selector
        self.clock = clock

    def run(self) -> list[PhaseResult]:
        phases = [
            (1, "updateAppStatus", self.update_app_status),
            (2, "updateAppLabel store", lambda: self.update_app_labels(2, {APP_STORE_LABEL: "true"})),
            (3, "updateVersionStatus", self.update_version_status),
            (4, "updateAppLabel categoryName", lambda: self.update_app_labels(4, {CATEGORY_LABEL: UNCATEGORIZED})),
        ]
        results: list[PhaseResult] = []
        for number, name, fn in phases:
            updated = fn()
            logger.info("[%d/4] %s completed successfully (%d updated)", number, name, updated)
            results.append(PhaseResult(phase=number, name=name, updated=updated))
        return results

    def _marked_apps(self, phase: int) -> list[dict]:
        try:
            return self.k8s.list_applications(self.marker_selector)
        except _CLUSTER_ERRORS as e:
            raise ReconcileError(phase, f"failed to list apps: {_reason(e)}") from e

    def update_app_status(self) -> int:
        items = self._marked_apps(1)
        for item in items:
            set_nested_field(item, "active", "status", "state")
            set_nested_field(item, rfc3339(self.clock()), "status", "updateTime")
            try:
                self.k8s.replace_status(APPLICATIONS, item)
            except _CLUSTER_ERRORS as e:
                raise ReconcileError(1, f"failed to update status for app {get_name(item)}: {_reason(e)}") from e
        return len(items)

    def update_app_labels(self, phase: int, labels: dict[str, str]) -> int:
        items = self._marked_apps(phase)
        for item in items:
            merged = get_labels(item)
            merged.update(labels)
            set_labels(item, merged)
            try:
                self.k8s.replace(APPLICATIONS, item)
            except _CLUSTER_ERRORS as e:
                raise ReconcileError(phase, f"failed to update labels for app {get_name(item)}: {_reason(e)}") from e
        return len(items)

    def update_version_status(self) -> int:
        updated = 0
        for app in self._marked_apps(3):
            app_name = get_name(app)
            try:
                versions = self.k8s.list_application_versions(f"{APP_ID_LABEL}={app_name}")
            except _CLUSTER_ERRORS as e:
                raise ReconcileError(3, f"failed to list versions for app {app_name}: {_reason(e)}") from e

            for version in versions:
                set_nested_field(version, rfc3339(self.clock()), "status", "updated")
                set_nested_field(version, "admin", "status", "userName")
                set_nested_field(version, "active", "status", "state")
                try:
                    self.k8s.replace_status(APPLICATION_VERSIONS, version)
                except _CLUSTER_ERRORS as e:
                    raise ReconcileError(
                        3, f"failed to update version status for app {app_name}: {_reason(e)}"
                    ) from e
                updated += 1
        return updated
