from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the inspection report rewriter.

These are the typed domain view of config/rewrite.yml. Column indices are
0-based everywhere (A=0, B=1, ...); the loader converts spreadsheet letters.
"""

__all__ = [
    "ColumnLayout",
    "RewriteConfig",
    "DEFAULT_TARGET_COLUMNS",
    "DEFAULT_OUTPUT_SUFFIX",
]

DEFAULT_TARGET_COLUMNS: tuple[int, ...] = (4, 5, 6)  # E, F, G
DEFAULT_OUTPUT_SUFFIX = "_Gerado"


@dataclass(frozen=True)
class ColumnLayout:
    """Fixed columns of the inspection report.

    The description column decides angular vs. linear rows, the two tolerance
    columns define the band (possibly merged vertically over several rows).
    """
    description: int = 1  # B
    upper: int = 2  # C (上限公差)
    lower: int = 3  # D (下限公差)


@dataclass(frozen=True)
class RewriteConfig:
    """Root configuration object for a batch rewrite run."""
    source_directory: str  # .xlsx 探索ディレクトリ
    output_directory: str  # 出力先 (無ければ作成)
    target_columns: tuple[int, ...] = DEFAULT_TARGET_COLUMNS
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    seed: int | None = None  # None = 実行ごとに異なる乱数
    layout: ColumnLayout = field(default_factory=ColumnLayout)
