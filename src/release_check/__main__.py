"""Permite `python -m release_check ...`."""

from __future__ import annotations

from release_check.cli.main import run

if __name__ == "__main__":
    run()
