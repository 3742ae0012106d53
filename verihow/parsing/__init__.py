"""
Model response parsing.

Components:
- extraction: sentinel fields -> typed results, executive summary split
- markup: restricted markup dialect -> node sequence
"""

from .extraction import (
    build_analysis_result,
    extract_ai_detection,
    extract_credibility,
    split_executive_summary,
)
from .markup import nodes_to_dicts, parse_inline, parse_markup

__all__ = [
    "build_analysis_result",
    "extract_ai_detection",
    "extract_credibility",
    "split_executive_summary",
    "nodes_to_dicts",
    "parse_inline",
    "parse_markup",
]
