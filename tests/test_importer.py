"""Tests for the end-to-end import run."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests
from conftest import FIXED_NOW, FakeK8s, make_app, make_response

from chart_importer.config.settings import CATEGORY_LABEL, UNCATEGORIZED, Settings
from chart_importer.core.chart_uploader import ChartUploader
from chart_importer.core.importer import plan_import, run_import
from chart_importer.core.index_fetcher import parse_index
from chart_importer.core.rate_limiter import FixedIntervalLimiter
from chart_importer.core.reconciler import ResourceReconciler
from chart_importer.errors import AppStoreNotFoundError, IndexFetchError
from chart_importer.models import Outcome

APPS = "https://ks.example.com/kapis/application.kubesphere.io/v2/apps"

INDEX_YAML = b"""
entries:
  nginx:
    - {name: nginx, version: "1.3.0", urls: [charts/nginx-1.3.0.tgz]}
    - {name: nginx, version: "1.2.3", urls: [charts/nginx-1.2.3.tgz]}
    - {name: nginx, version: "1.2.2", urls: [charts/nginx-1.2.2.tgz]}
  redis:
    - {name: redis, version: "7.0.1", urls: [charts/redis-7.0.1.tgz]}
"""


@pytest.fixture
def session() -> MagicMock:
    session = MagicMock(spec=requests.Session)

    def get(url, timeout=None):
        if url.endswith("/index.yaml"):
            return make_response(200, content=INDEX_YAML)
        return make_response(200, content=b"tgz")

    session.get.side_effect = get
    return session


@pytest.fixture
def k8s() -> FakeK8s:
    # Resources the app store creates once uploads succeed
    return FakeK8s(apps=[make_app("nginx-1"), make_app("redis-1")])


@pytest.fixture
def uploader(settings: Settings, session: MagicMock) -> ChartUploader:
    return ChartUploader(settings, session, limiter=FixedIntervalLimiter(0))


@pytest.fixture
def reconciler(settings: Settings, k8s: FakeK8s) -> ResourceReconciler:
    return ResourceReconciler(k8s, settings.marker_selector, clock=lambda: FIXED_NOW)


class TestPlanImport:
    def test_selection_per_chart_in_index_order(self, settings: Settings) -> None:
        index = parse_index(INDEX_YAML, base_url=settings.repo_url)
        selections = plan_import(settings, index)

        assert [s.chart for s in selections] == ["nginx", "redis"]
        assert [i.entry.version for i in selections[0].selected] == ["1.3.0", "1.2.3"]
        assert [i.entry.version for i in selections[0].skipped] == ["1.2.2"]

    def test_respects_max_versions(self, settings: Settings) -> None:
        settings.max_versions = 1
        index = parse_index(INDEX_YAML)
        selections = plan_import(settings, index)
        assert [i.entry.version for i in selections[0].selected] == ["1.3.0"]


class TestRunImport:
    def test_full_run(
        self,
        settings: Settings,
        session: MagicMock,
        k8s: FakeK8s,
        uploader: ChartUploader,
        reconciler: ResourceReconciler,
    ) -> None:
        session.post.side_effect = [
            make_response(200, {"appName": "nginx-1"}),
            make_response(200, {"appName": "nginx-1"}),
            make_response(200, {"appName": "redis-1"}),
        ]

        report = run_import(settings, session, k8s, uploader=uploader, reconciler=reconciler)

        assert k8s.connected
        assert [c.args[0] for c in session.post.call_args_list] == [
            APPS,
            f"{APPS}/nginx-1/versions",
            APPS,
        ]
        assert [(r.chart, r.version, r.outcome) for r in report.results] == [
            ("nginx", "1.3.0", Outcome.CREATED),
            ("nginx", "1.2.3", Outcome.ATTACHED),
            ("nginx", "1.2.2", Outcome.SKIPPED),
            ("redis", "7.0.1", Outcome.CREATED),
        ]
        assert report.uploaded == 3
        assert [p.phase for p in report.phases] == [1, 2, 3, 4]
        assert k8s.app("nginx-1")["metadata"]["labels"][CATEGORY_LABEL] == UNCATEGORIZED

    def test_downloads_use_resolved_chart_urls(
        self, settings: Settings, session: MagicMock, k8s: FakeK8s,
        uploader: ChartUploader, reconciler: ResourceReconciler,
    ) -> None:
        session.post.return_value = make_response(200, {"appName": "nginx-1"})

        run_import(settings, session, k8s, uploader=uploader, reconciler=reconciler)

        urls = [c.args[0] for c in session.get.call_args_list]
        assert urls[0] == "https://charts.example.com/stable/index.yaml"
        assert "https://charts.example.com/stable/charts/nginx-1.3.0.tgz" in urls

    def test_per_item_failures_do_not_stop_the_run(
        self, settings: Settings, session: MagicMock, k8s: FakeK8s,
        uploader: ChartUploader, reconciler: ResourceReconciler,
    ) -> None:
        session.post.side_effect = [
            make_response(500, {}),
            make_response(200, {"appName": "redis-1"}),
        ]

        report = run_import(settings, session, k8s, uploader=uploader, reconciler=reconciler)

        assert [r.outcome for r in report.failures] == [Outcome.FAILED, Outcome.DROPPED]
        assert report.counts()[Outcome.CREATED] == 1
        assert len(report.phases) == 4

    def test_404_aborts_before_publishing(
        self, settings: Settings, session: MagicMock, k8s: FakeK8s, uploader: ChartUploader,
    ) -> None:
        session.post.return_value = make_response(404, {})
        reconciler = MagicMock(spec=ResourceReconciler)

        with pytest.raises(AppStoreNotFoundError):
            run_import(settings, session, k8s, uploader=uploader, reconciler=reconciler)

        assert session.post.call_count == 1
        reconciler.run.assert_not_called()

    def test_404_keeps_partial_report(
        self, settings: Settings, session: MagicMock, k8s: FakeK8s, uploader: ChartUploader,
    ) -> None:
        session.post.side_effect = [
            make_response(200, {"appName": "nginx-1"}),
            make_response(200, {"appName": "nginx-1"}),
            make_response(404, {}),
        ]

        with pytest.raises(AppStoreNotFoundError) as exc:
            run_import(settings, session, k8s, uploader=uploader)

        report = exc.value.report
        assert report is not None
        assert [(r.chart, r.version, r.outcome) for r in report.results] == [
            ("nginx", "1.3.0", Outcome.CREATED),
            ("nginx", "1.2.3", Outcome.ATTACHED),
            ("nginx", "1.2.2", Outcome.SKIPPED),
        ]
        assert report.phases == []

    def test_index_failure_aborts_before_uploading(
        self, settings: Settings, session: MagicMock, k8s: FakeK8s, uploader: ChartUploader,
    ) -> None:
        session.get.side_effect = requests.ConnectionError("no route to host")

        with pytest.raises(IndexFetchError):
            run_import(settings, session, k8s, uploader=uploader)

        session.post.assert_not_called()
