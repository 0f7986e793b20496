"""Shared CLI options."""

from __future__ import annotations

from dataclasses import fields
from typing import Any

import typer

from chart_importer.config.settings import Settings

OutputOption = typer.Option("table", "--output", "-o", help="Output format: table, json, yaml")
ServerOption = typer.Option(None, "--server", help="KubeSphere server URL")
RepoOption = typer.Option(None, "--repo", help="Helm repository URL (index.yaml is appended)")
TokenOption = typer.Option(None, "--token", help="Bearer token (default: service-account token)")
UsernameOption = typer.Option(None, "--username", "-u", help="Basic auth username")
PasswordOption = typer.Option(None, "--password", "-p", help="Basic auth password")
ContextOption = typer.Option(None, "--context", help="Kubernetes context name")
MaxVersionsOption = typer.Option(
    None, "--max-versions", help="Maximum versions uploaded per chart (0 = unlimited)",
)
AllVersionsOption = typer.Option(
    False, "--all-versions", help="Disable the latest-patch retention policy",
)
MirrorOption = typer.Option(
    None, "--mirror", help="Prefix used to proxy downloads from slow hosts",
)
ExactGroupsOption = typer.Option(
    False, "--exact-groups", help="Group versions by exact minor prefix",
)


def build_settings(**overrides: Any) -> Settings:
    """Environment-backed defaults with CLI values applied on top.

    ``None`` means "not given on the command line".
    """
    settings = Settings()
    known = {f.name for f in fields(Settings)}
    for key, value in overrides.items():
        if key not in known:
            raise ValueError(f"unknown setting {key!r}")
        if value is not None:
            setattr(settings, key, value)
    return settings
