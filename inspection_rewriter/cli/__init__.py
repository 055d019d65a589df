"""Command line interface (``python -m inspection_rewriter.cli``)."""

from __future__ import annotations

__all__ = ["main"]


def main(argv: list[str] | None = None) -> int:
    # __main__ はここで遅延 import (-m 実行時の二重 import を避ける)
    from .__main__ import main as _main

    return _main(argv)
