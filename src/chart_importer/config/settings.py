"""Run configuration and defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from chart_importer.errors import ConfigError

API_GROUP = "application.kubesphere.io"
API_VERSION = "v2"

CATEGORY_LABEL = f"{API_GROUP}/app-category-name"
APP_ID_LABEL = f"{API_GROUP}/app-id"
APP_STORE_LABEL = f"{API_GROUP}/app-store"
UNCATEGORIZED = "kubesphere-app-uncategorized"

SERVICE_ACCOUNT_TOKEN = Path("/var/run/secrets/kubernetes.io/serviceaccount/token")

_ENV_PREFIX = "CHART_IMPORT_"


def _env(name: str, default: str = "") -> str:
    return os.environ.get(_ENV_PREFIX + name, default)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(_ENV_PREFIX + name, "")
    if not raw:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(_ENV_PREFIX + name, "")
    try:
        return int(raw) if raw else default
    except ValueError:
        raise ConfigError(f"{_ENV_PREFIX}{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(_ENV_PREFIX + name, "")
    try:
        return float(raw) if raw else default
    except ValueError:
        raise ConfigError(f"{_ENV_PREFIX}{name} must be a number, got {raw!r}") from None


def _default_slow_hosts() -> list[str]:
    raw = _env("SLOW_HOSTS")
    if raw:
        return [h.strip() for h in raw.split(",") if h.strip()]
    return ["github.com", "raw.githubusercontent.com", "objects.githubusercontent.com"]


@dataclass
class Settings:
    server_url: str = field(default_factory=lambda: _env("SERVER"))
    repo_url: str = field(default_factory=lambda: _env("REPO"))
    token: str = field(default_factory=lambda: _env("TOKEN"))
    username: str = field(default_factory=lambda: _env("USERNAME"))
    password: str = field(default_factory=lambda: _env("PASSWORD"))
    token_file: Path = field(
        default_factory=lambda: Path(_env("TOKEN_FILE", str(SERVICE_ACCOUNT_TOKEN)))
    )
    mark: str = field(default_factory=lambda: _env("MARK", "openpitrix-import"))
    latest_patch_only: bool = field(default_factory=lambda: _env_bool("LATEST_PATCH_ONLY", True))
    max_versions: int = field(default_factory=lambda: _env_int("MAX_VERSIONS", 5))
    # Equality instead of substring containment for the minor-group boundary
    exact_minor_groups: bool = field(default_factory=lambda: _env_bool("EXACT_MINOR_GROUPS", False))
    upload_interval: float = field(default_factory=lambda: _env_float("UPLOAD_INTERVAL", 0.2))
    request_timeout: float = field(default_factory=lambda: _env_float("REQUEST_TIMEOUT", 30.0))
    mirror_prefix: str = field(default_factory=lambda: _env("MIRROR_PREFIX"))
    slow_hosts: list[str] = field(default_factory=_default_slow_hosts)
    kube_context: str | None = field(default_factory=lambda: _env("KUBE_CONTEXT") or None)

    def validate(self, need_server: bool = True, need_repo: bool = True) -> None:
        """Raise ConfigError when a required value is missing."""
        if need_server and not self.server_url:
            raise ConfigError("server URL is required (--server or CHART_IMPORT_SERVER)")
        if need_repo and not self.repo_url:
            raise ConfigError("repository URL is required (--repo or CHART_IMPORT_REPO)")
        if self.upload_interval < 0:
            raise ConfigError("upload interval must not be negative")

    @property
    def apps_endpoint(self) -> str:
        return f"{self.server_url.rstrip('/')}/kapis/{API_GROUP}/{API_VERSION}/apps"

    def versions_endpoint(self, app_id: str) -> str:
        return f"{self.apps_endpoint}/{app_id}/versions"

    @property
    def marker_selector(self) -> str:
        return f"{CATEGORY_LABEL}={self.mark}"
