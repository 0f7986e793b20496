"""Exception types raised across the importer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chart_importer.models.report import ImportReport, UploadResult


class ImporterError(Exception):
    """Base class for all importer failures."""


class ConfigError(ImporterError):
    """Missing or invalid configuration, including absent credentials."""


class IndexFetchError(ImporterError):
    """The repository index could not be fetched or decoded."""


class UploadError(ImporterError):
    """A single upload failed; the run continues with the next entry."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AppStoreNotFoundError(ImporterError):
    """The application-management endpoint answered 404.

    ``results`` holds the entries of the current chart handled before the
    abort; ``report`` is filled in with everything uploaded so far once the
    error leaves the import loop.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.results: list[UploadResult] = []
        self.report: ImportReport | None = None


class ReconcileError(ImporterError):
    """A publish phase failed while listing or updating a resource."""

    def __init__(self, phase: int, message: str):
        super().__init__(f"[{phase}/4] {message}")
        self.phase = phase
