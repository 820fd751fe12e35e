"""
Insight Recon - reconcile two spreadsheet exports and explain the differences.
"""

__version__ = "1.0.0"

from .core.comparator import (
    ComparisonResult,
    DatasetComparator,
    ModifiedRecord,
    Change,
    Summary,
    compare_datasets,
)
from .config.manager import ConfigManager, ReconciliationConfig, AnalysisConfig, OutputConfig
from .adapters.file_reader import UniversalFileReader, Dataset
from .adapters.excel_exporter import WorkbookExporter
from .services.analysis import ComparisonAnalyst, AIAnalysis
from .storage.history import HistoryStore, HistoryItem
from .utils.logger import get_logger

__all__ = [
    "ComparisonResult",
    "DatasetComparator",
    "ModifiedRecord",
    "Change",
    "Summary",
    "compare_datasets",
    "ConfigManager",
    "ReconciliationConfig",
    "AnalysisConfig",
    "OutputConfig",
    "UniversalFileReader",
    "Dataset",
    "WorkbookExporter",
    "ComparisonAnalyst",
    "AIAnalysis",
    "HistoryStore",
    "HistoryItem",
    "get_logger",
]
