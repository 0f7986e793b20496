"""Data models for the chart importer."""

from __future__ import annotations

import enum


class Outcome(enum.Enum):
    CREATED = "created"
    ATTACHED = "attached"
    SKIPPED = "skipped"
    FAILED = "failed"
    DROPPED = "dropped"
