"""External collaborators: AI narrative analysis."""

from .analysis import (
    ComparisonAnalyst,
    AIAnalysis,
    AnalysisError,
    ReconciliationStatus,
    build_analysis_prompt,
    parse_analysis,
)

__all__ = [
    "ComparisonAnalyst",
    "AIAnalysis",
    "AnalysisError",
    "ReconciliationStatus",
    "build_analysis_prompt",
    "parse_analysis",
]
