"""Per-item upload results and the end-of-run report."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field

from chart_importer.models import Outcome


@dataclass
class UploadResult:
    chart: str
    version: str
    outcome: Outcome
    reason: str = ""
    app_id: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome in (Outcome.CREATED, Outcome.ATTACHED)


@dataclass
class PhaseResult:
    phase: int
    name: str
    updated: int = 0


@dataclass
class ImportReport:
    results: list[UploadResult] = field(default_factory=list)
    phases: list[PhaseResult] = field(default_factory=list)

    def extend(self, results: list[UploadResult]) -> None:
        self.results.extend(results)

    def counts(self) -> dict[Outcome, int]:
        counter = Counter(r.outcome for r in self.results)
        return {o: counter.get(o, 0) for o in Outcome}

    @property
    def uploaded(self) -> int:
        return sum(1 for r in self.results if r.ok)

    @property
    def failures(self) -> list[UploadResult]:
        return [r for r in self.results if r.outcome in (Outcome.FAILED, Outcome.DROPPED)]
