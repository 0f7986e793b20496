"""Version string helpers for the latest-patch retention policy."""

from __future__ import annotations

from packaging.version import Version, InvalidVersion


def parse_version(v: str) -> Version | None:
    """Parse a version string, returning None on failure."""
    try:
        return Version(v)
    except InvalidVersion:
        # Try stripping leading 'v'
        if v.startswith("v"):
            try:
                return Version(v[1:])
            except InvalidVersion:
                pass
    return None


def split_version(v: str) -> tuple[str, str]:
    """Split ``X.Y.Z`` into the minor prefix ``X.Y`` and the patch ``Z``.

    Only the last dot-separated segment counts as the patch, so
    ``1.2.3-rc.1`` splits into ``1.2.3-rc`` and ``1``.  A version without
    dots has an empty prefix.
    """
    prefix, _, patch = v.rpartition(".")
    return prefix, patch


def patch_is_newer(patch: str, latest: Version | None) -> bool:
    """Return True if ``patch`` is above the latest patch seen so far.

    ``latest`` is None at the start of a minor group, in which case any
    patch counts as newer.  Unparseable patches never count as newer once a
    group has a latest patch.
    """
    if latest is None:
        return True
    parsed = parse_version(patch)
    if parsed is None:
        return False
    return parsed > latest
