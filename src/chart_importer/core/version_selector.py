"""Latest-patch retention policy and per-chart version cap."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from packaging.version import Version

from chart_importer.models.index import ChartVersionEntry, SelectedEntry
from chart_importer.utils.version_compare import parse_version, patch_is_newer, split_version

logger = logging.getLogger(__name__)


@dataclass
class VersionSelectionState:
    max_allowed: int
    last_xy: str = ""
    latest_z: Version | None = None
    skipped: set[str] = field(default_factory=set)
    kept: int = 0


@dataclass
class ChartSelection:
    chart: str
    selected: list[SelectedEntry] = field(default_factory=list)
    skipped: list[SelectedEntry] = field(default_factory=list)
    # Entries never evaluated because the cap was reached
    truncated: int = 0


def _same_group(xy: str, last_xy: str, exact: bool) -> bool:
    if exact:
        return xy == last_xy
    # Containment, not equality: "1.1" counts as the same group as "1.11".
    return xy in last_xy


def mark_skipped(
    entries: list[ChartVersionEntry],
    exact_minor_groups: bool = False,
    state: VersionSelectionState | None = None,
) -> set[str]:
    """Pass 1: return the version strings that are not the latest patch of their run.

    Entries are walked in index order.  A patch is kept only when it is
    higher than every earlier patch in the same run of minor prefixes.
    """
    state = state or VersionSelectionState(max_allowed=0)
    for entry in entries:
        xy, z = split_version(entry.version)
        if not _same_group(xy, state.last_xy, exact_minor_groups):
            state.latest_z = None
        if patch_is_newer(z, state.latest_z):
            state.latest_z = parse_version(z)
        else:
            state.skipped.add(entry.version)
        state.last_xy = xy
    return state.skipped


def select_versions(
    chart: str,
    entries: list[ChartVersionEntry],
    max_allowed: int,
    latest_patch_only: bool = True,
    exact_minor_groups: bool = False,
) -> ChartSelection:
    """Pass 2: apply the skip set and the cap, keeping each entry's raw index.

    ``max_allowed <= 0`` disables the cap.  Once the cap is exceeded the
    remaining entries of the chart are not evaluated at all.
    """
    state = VersionSelectionState(max_allowed=max_allowed)
    if latest_patch_only:
        mark_skipped(entries, exact_minor_groups=exact_minor_groups, state=state)

    selection = ChartSelection(chart=chart)
    for idx, entry in enumerate(entries):
        if latest_patch_only and entry.version in state.skipped:
            logger.debug("Skipping %s:%s, not the latest patch", chart, entry.version)
            selection.skipped.append(SelectedEntry(raw_index=idx, entry=entry))
            continue
        state.kept += 1
        if 0 < state.max_allowed < state.kept:
            selection.truncated = len(entries) - idx
            logger.debug(
                "Reached %d version(s) for %s, ignoring %d remaining entries",
                state.max_allowed, chart, selection.truncated,
            )
            break
        selection.selected.append(SelectedEntry(raw_index=idx, entry=entry))
    return selection
