"""Shared fixtures: settings, HTTP responses and an in-memory cluster."""

from __future__ import annotations

import copy
import json
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest
import requests
from kubernetes.client import ApiException

from chart_importer.config.settings import APP_ID_LABEL, CATEGORY_LABEL, Settings
from chart_importer.core.k8s_client import APPLICATION_VERSIONS, APPLICATIONS
from chart_importer.core.rate_limiter import FixedIntervalLimiter
from chart_importer.models.index import ChartVersionEntry

FIXED_NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep CHART_IMPORT_* variables from the host out of the tests."""
    for key in list(os.environ):
        if key.startswith("CHART_IMPORT_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        server_url="https://ks.example.com",
        repo_url="https://charts.example.com/stable",
        token="t0ken",
        username="",
        password="",
        token_file=tmp_path / "missing-token",
        upload_interval=0.0,
        mirror_prefix="",
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def limiter(sleeps: list[float]) -> FixedIntervalLimiter:
    return FixedIntervalLimiter(0.2, sleep=sleeps.append)


def make_response(status: int = 200, body=None, content: bytes | None = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.url = "https://test.invalid/"
    if content is None:
        content = json.dumps(body if body is not None else {}).encode("utf-8")
    resp._content = content
    return resp


def make_entries(chart: str, *versions: str) -> list[ChartVersionEntry]:
    return [
        ChartVersionEntry(
            name=chart,
            version=v,
            urls=[f"https://charts.example.com/stable/{chart}-{v}.tgz"],
        )
        for v in versions
    ]


def make_app(name: str, category: str = "openpitrix-import", **extra) -> dict:
    obj = {
        "apiVersion": "application.kubesphere.io/v2",
        "kind": "Application",
        "metadata": {"name": name, "labels": {CATEGORY_LABEL: category}},
        "spec": {"appType": "helm"},
    }
    obj.update(extra)
    return obj


def make_version(name: str, app: str) -> dict:
    return {
        "apiVersion": "application.kubesphere.io/v2",
        "kind": "ApplicationVersion",
        "metadata": {"name": name, "labels": {APP_ID_LABEL: app}},
        "spec": {"versionName": name},
    }


class FakeK8s:
    """In-memory stand-in for K8sClient with label-selector filtering.

    Status updates only touch ``status``; plain updates keep the stored
    ``status``, mirroring the status subresource.
    """

    def __init__(self, apps: list[dict] | None = None, versions: list[dict] | None = None):
        self.store: dict[str, dict[str, dict]] = {
            APPLICATIONS: {a["metadata"]["name"]: copy.deepcopy(a) for a in apps or []},
            APPLICATION_VERSIONS: {v["metadata"]["name"]: copy.deepcopy(v) for v in versions or []},
        }
        self.connected = False
        self.fail_replace: set[str] = set()
        self.fail_list = False
        self.calls: list[tuple[str, str, str]] = []

    def connect(self) -> None:
        self.connected = True

    def _select(self, plural: str, selector: str) -> list[dict]:
        if self.fail_list:
            raise ApiException(status=500, reason="list failed")
        key, _, value = selector.partition("=")
        return [
            copy.deepcopy(obj)
            for obj in self.store[plural].values()
            if (obj["metadata"].get("labels") or {}).get(key) == value
        ]

    def list_applications(self, label_selector: str) -> list[dict]:
        return self._select(APPLICATIONS, label_selector)

    def list_application_versions(self, label_selector: str) -> list[dict]:
        return self._select(APPLICATION_VERSIONS, label_selector)

    def replace(self, plural: str, obj: dict) -> dict:
        name = obj["metadata"]["name"]
        self.calls.append(("replace", plural, name))
        if name in self.fail_replace:
            raise ApiException(status=409, reason="conflict")
        stored = self.store[plural][name]
        updated = copy.deepcopy(obj)
        if "status" in stored:
            updated["status"] = stored["status"]
        else:
            updated.pop("status", None)
        self.store[plural][name] = updated
        return copy.deepcopy(updated)

    def replace_status(self, plural: str, obj: dict) -> dict:
        name = obj["metadata"]["name"]
        self.calls.append(("replace_status", plural, name))
        if name in self.fail_replace:
            raise ApiException(status=409, reason="conflict")
        self.store[plural][name]["status"] = copy.deepcopy(obj.get("status"))
        return copy.deepcopy(self.store[plural][name])

    def app(self, name: str) -> dict:
        return self.store[APPLICATIONS][name]

    def version(self, name: str) -> dict:
        return self.store[APPLICATION_VERSIONS][name]


@pytest.fixture
def fake_k8s() -> FakeK8s:
    return FakeK8s(
        apps=[make_app("nginx-abc"), make_app("redis-def"), make_app("manual", category="databases")],
        versions=[
            make_version("nginx-abc-1", "nginx-abc"),
            make_version("nginx-abc-2", "nginx-abc"),
            make_version("redis-def-1", "redis-def"),
            make_version("manual-1", "manual"),
        ],
    )
