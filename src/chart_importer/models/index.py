"""Repository index models."""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import urljoin


@dataclass
class ChartVersionEntry:
    name: str
    version: str
    urls: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict, base_url: str = "") -> ChartVersionEntry:
        urls = [str(u) for u in d.get("urls") or []]
        if base_url:
            # Helm allows chart URLs relative to the repository root
            base = base_url.rstrip("/") + "/"
            urls = [urljoin(base, u) for u in urls]
        return cls(
            name=str(d.get("name", "")),
            version=str(d.get("version", "")),
            urls=urls,
        )

    @property
    def download_url(self) -> str:
        return self.urls[0]


@dataclass
class RepositoryIndex:
    """Chart name -> version entries, in document order."""

    entries: dict[str, list[ChartVersionEntry]] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.entries)

    def charts(self) -> list[str]:
        return list(self.entries)


@dataclass
class SelectedEntry:
    raw_index: int
    entry: ChartVersionEntry


@dataclass
class UploadRequest:
    package: str
    category_name: str
    repo_name: str = "upload"
    workspace: str = ""
    app_type: str = "helm"

    def to_dict(self) -> dict[str, str]:
        return {
            "repoName": self.repo_name,
            "package": self.package,
            "categoryName": self.category_name,
            "workspace": self.workspace,
            "appType": self.app_type,
        }
