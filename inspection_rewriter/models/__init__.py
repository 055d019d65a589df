"""Domain models for the inspection report rewriter.

This package contains the value objects shared by the rewriting engine, the
batch orchestrator and the CLI.
"""

from .config_models import ColumnLayout, RewriteConfig
from .processing_stats import ProcessingStats
from .tolerance_window import ToleranceWindow

__all__ = [
    # Configuration models
    "ColumnLayout",
    "RewriteConfig",
    # Processing models
    "ProcessingStats",
    "ToleranceWindow",
]
