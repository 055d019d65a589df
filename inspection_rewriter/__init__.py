"""Inspection report rewriter.

Rewrites measured values of dimensional-inspection workbooks so that every
value keeps its in-spec / out-of-spec status against the row's tolerance band.
"""

__version__ = "0.1.0"
