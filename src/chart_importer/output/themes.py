"""Outcome color map."""

from chart_importer.models import Outcome

OUTCOME_COLORS: dict[Outcome, str] = {
    Outcome.CREATED: "green",
    Outcome.ATTACHED: "green",
    Outcome.SKIPPED: "dim",
    Outcome.FAILED: "red bold",
    Outcome.DROPPED: "yellow",
}


def styled_outcome(outcome: Outcome) -> str:
    color = OUTCOME_COLORS.get(outcome, "white")
    return f"[{color}]{outcome.value}[/{color}]"
