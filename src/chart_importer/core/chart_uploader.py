"""Chart package download and upload to the KubeSphere app store."""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

import requests
from requests.auth import AuthBase, HTTPBasicAuth

from chart_importer.config.settings import Settings
from chart_importer.core.rate_limiter import FixedIntervalLimiter
from chart_importer.core.version_selector import ChartSelection
from chart_importer.errors import AppStoreNotFoundError, ConfigError, UploadError
from chart_importer.models import Outcome
from chart_importer.models.index import SelectedEntry, UploadRequest
from chart_importer.models.report import UploadResult
from chart_importer.utils.encoding import encode_package

logger = logging.getLogger(__name__)


class BearerAuth(AuthBase):
    def __init__(self, token: str):
        self.token = token

    def __call__(self, r: requests.PreparedRequest) -> requests.PreparedRequest:
        r.headers["Authorization"] = f"Bearer {self.token}"
        return r


def build_auth(settings: Settings) -> AuthBase:
    """Basic auth when both username and password are set, else a bearer token.

    Without an explicit token the service-account token file is read.
    """
    if settings.username and settings.password:
        return HTTPBasicAuth(settings.username, settings.password)
    token = settings.token
    if not token:
        try:
            token = settings.token_file.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise ConfigError(
                f"no credentials configured and token file {settings.token_file} is unreadable: {e}"
            ) from e
    if not token:
        raise ConfigError(f"token file {settings.token_file} is empty")
    return BearerAuth(token)


class ChartUploader:
    """Uploads the selected versions of one chart at a time."""

    def __init__(
        self,
        settings: Settings,
        session: requests.Session,
        limiter: FixedIntervalLimiter | None = None,
        auth: AuthBase | None = None,
    ):
        self.settings = settings
        self.session = session
        self.limiter = limiter or FixedIntervalLimiter(settings.upload_interval)
        self.auth = auth if auth is not None else build_auth(settings)

    def rewrite_url(self, url: str) -> str:
        """Route downloads from slow hosts through the configured mirror."""
        prefix = self.settings.mirror_prefix
        if not prefix:
            return url
        host = urlsplit(url).hostname or ""
        if host in self.settings.slow_hosts:
            return prefix.rstrip("/") + "/" + url
        return url

    def fetch_chart(self, url: str) -> bytes:
        resp = self.session.get(url, timeout=self.settings.request_timeout)
        resp.raise_for_status()
        return resp.content

    def post(self, url: str, request: UploadRequest) -> dict:
        """POST an upload request and return the decoded response body.

        404 raises AppStoreNotFoundError; any other failure raises UploadError.
        """
        try:
            resp = self.session.post(
                url,
                json=request.to_dict(),
                auth=self.auth,
                headers={"Content-Type": "application/json"},
                timeout=self.settings.request_timeout,
            )
        except requests.RequestException as e:
            raise UploadError(f"request to {url} failed: {e}") from e

        if resp.status_code == 404:
            raise AppStoreNotFoundError(
                f"{url} returned 404, please check if the app store manager is installed"
            )
        if resp.status_code != 200:
            raise UploadError(
                f"failed to post app, status code: {resp.status_code}",
                status_code=resp.status_code,
            )
        try:
            body = resp.json()
        except ValueError as e:
            raise UploadError(f"failed to decode response body: {e}") from e
        if not isinstance(body, dict):
            raise UploadError("response body is not a JSON object")
        return body

    def create_app(self, request: UploadRequest) -> str:
        body = self.post(self.settings.apps_endpoint, request)
        app_id = body.get("appName")
        if not app_id or not isinstance(app_id, str):
            raise UploadError("response carries no appName")
        return app_id

    def create_version(self, app_id: str, request: UploadRequest) -> None:
        self.post(self.settings.versions_endpoint(app_id), request)

    def upload_chart(self, selection: ChartSelection) -> list[UploadResult]:
        """Upload every selected entry of one chart, in index order.

        Raw index 0 creates the application; all later entries attach to
        the identifier it returned.  Without that identifier later entries
        are dropped.  On a 404 the results gathered so far ride on the
        raised AppStoreNotFoundError.
        """
        chart = selection.chart
        ordered: list[tuple[int, UploadResult]] = [
            (s.raw_index, UploadResult(chart, s.entry.version, Outcome.SKIPPED, reason="not the latest patch"))
            for s in selection.skipped
        ]
        app_id = ""

        try:
            for item in selection.selected:
                result = self._upload_entry(chart, item, app_id)
                if item.raw_index == 0:
                    app_id = result.app_id if result.ok else ""
                ordered.append((item.raw_index, result))
        except AppStoreNotFoundError as e:
            e.results = _in_index_order(ordered)
            raise

        return _in_index_order(ordered)

    def _upload_entry(self, chart: str, item: SelectedEntry, app_id: str) -> UploadResult:
        entry = item.entry
        first = item.raw_index == 0

        if not first and not app_id:
            logger.error("Skipping version %s for app %s due to missing appID", entry.version, chart)
            return UploadResult(chart, entry.version, Outcome.DROPPED, reason="missing application id")

        url = self.rewrite_url(entry.download_url)
        try:
            data = self.fetch_chart(url)
        except requests.RequestException as e:
            logger.error("Failed to fetch chart %s:%s from %s: %s", chart, entry.version, url, e)
            return UploadResult(chart, entry.version, Outcome.FAILED, reason=f"download failed: {e}")

        request = UploadRequest(package=encode_package(data), category_name=self.settings.mark)
        try:
            if first:
                new_id = self.create_app(request)
                logger.info("App %s:%s posted successfully as %s", chart, entry.version, new_id)
                result = UploadResult(chart, entry.version, Outcome.CREATED, app_id=new_id)
            else:
                self.create_version(app_id, request)
                logger.info("App version %s:%s posted successfully", chart, entry.version)
                result = UploadResult(chart, entry.version, Outcome.ATTACHED, app_id=app_id)
        except UploadError as e:
            what = "app" if first else "app version"
            logger.error("Failed to post %s %s:%s: %s", what, chart, entry.version, e)
            result = UploadResult(chart, entry.version, Outcome.FAILED, reason=str(e))

        self.limiter.pause()
        return result


def _in_index_order(ordered: list[tuple[int, UploadResult]]) -> list[UploadResult]:
    return [result for _, result in sorted(ordered, key=lambda pair: pair[0])]

