"""Base64 helpers for chart package payloads."""

from __future__ import annotations

import base64


def encode_package(data: bytes) -> str:
    """Encode raw ``.tgz`` bytes for the upload request body."""
    return base64.b64encode(data).decode("ascii")


def decode_package(data: str) -> bytes:
    """Inverse of :func:`encode_package` (for tests)."""
    return base64.b64decode(data.encode("ascii"))
