"""Tidy Calendar application package."""

from __future__ import annotations

__all__ = ["main"]


def main() -> int:
    from .cli import main as cli_main

    return cli_main()
