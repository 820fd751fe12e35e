"""File-format adapters: dataset reading and workbook export."""

from .file_reader import UniversalFileReader, Dataset, FileReadError, frame_to_dataset
from .excel_exporter import (
    WorkbookExporter,
    ExportError,
    SheetNames,
    FINANCIAL_SHEETS,
    GENERIC_SHEETS,
    CHANGE_LOG_COLUMN,
    flatten_modified,
)

__all__ = [
    "UniversalFileReader",
    "Dataset",
    "FileReadError",
    "frame_to_dataset",
    "WorkbookExporter",
    "ExportError",
    "SheetNames",
    "FINANCIAL_SHEETS",
    "GENERIC_SHEETS",
    "CHANGE_LOG_COLUMN",
    "flatten_modified",
]
