"""Parsing of the comma-separated instance list."""

from __future__ import annotations


def parse_instances(raw: str) -> list[str]:
    """Split `raw` on commas, trim each piece and drop the empty ones.

    Order of the surviving entries is preserved: `"a, ,b,,c "` -> `["a", "b", "c"]`.
    """

    return [piece.strip() for piece in raw.split(",") if piece.strip()]
