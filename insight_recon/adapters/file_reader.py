"""
Universal file reader.
Single responsibility: turn spreadsheet and CSV exports into row collections.
"""

import math
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from ..utils.converters import infer_scalar
from ..utils.logger import get_logger
from ..utils.text_normalizer import normalize_cell_text, normalize_header


logger = get_logger()

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls", ".parquet")

# Try different encodings in order of likelihood
CSV_ENCODINGS = ["utf-8", "utf-8-sig", "cp1252", "latin-1"]


class FileReadError(Exception):
    """Exception raised when a dataset file cannot be read."""
    pass


@dataclass
class Dataset:
    """A parsed file: its display name, rows and header row."""

    name: str
    rows: List[Dict[str, Any]] = field(default_factory=list)
    headers: List[str] = field(default_factory=list)

    @property
    def stem(self) -> str:
        return Path(self.name).stem


def _to_cell(value: Any, infer_types: bool = False) -> Any:
    """
    Convert a pandas cell into a spreadsheet scalar.

    With infer_types, text cells that hold a plain number become int or
    float one cell at a time, independent of the rest of the column.

    Returns None for blank cells, which the caller drops from the row.
    """
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if value is pd.NaT or value is pd.NA:
        return None
    if isinstance(value, pd.Timestamp):
        return value.isoformat()
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if hasattr(value, "item") and not isinstance(value, (str, bytes)):
        # numpy scalar
        return _to_cell(value.item())
    if isinstance(value, str):
        text = normalize_cell_text(value)
        if not text:
            return None
        return infer_scalar(text) if infer_types else text
    return value


def frame_to_dataset(df: pd.DataFrame, name: str,
                     infer_types: bool = False) -> Dataset:
    """
    Convert a DataFrame into a Dataset.

    Blank cells are left out of each row, so they read as absent.

    Args:
        df: Parsed sheet
        name: Display name (usually the file name)
        infer_types: Type text cells individually (for all-text CSV frames)

    Returns:
        Dataset with headers in file order
    """
    headers = [normalize_header(col) for col in df.columns]
    df = df.copy()
    df.columns = headers

    rows = []
    for record in df.to_dict("records"):
        row = {}
        for column, value in record.items():
            cell = _to_cell(value, infer_types)
            if cell is not None:
                row[column] = cell
        rows.append(row)

    return Dataset(name=name, rows=rows, headers=headers)


class UniversalFileReader:
    """
    Handles reading of CSV, Excel and Parquet exports.
    """

    def read_excel(self, file_path: Path, sheet_name: Union[int, str] = 0) -> pd.DataFrame:
        """
        Read Excel file.

        Args:
            file_path: Path to Excel file
            sheet_name: Sheet to read (first sheet by default)

        Returns:
            DataFrame
        """
        logger.info("file_reader.excel.reading",
                    file=str(file_path),
                    sheet=sheet_name)

        df = pd.read_excel(file_path, sheet_name=sheet_name)

        logger.info("file_reader.excel.loaded",
                    rows=len(df),
                    columns=len(df.columns))

        return df

    def read_csv(self, file_path: Path) -> pd.DataFrame:
        """
        Read CSV file with automatic encoding detection.

        Every cell is read as text so that pandas does not pick one type per
        column; cells are typed later, one at a time. Literal "NA" or "null"
        text is kept.

        Args:
            file_path: Path to CSV file

        Returns:
            DataFrame
        """
        logger.info("file_reader.csv.reading", file=str(file_path))

        df = None
        successful_encoding = None

        for encoding in CSV_ENCODINGS:
            try:
                df = pd.read_csv(file_path, encoding=encoding,
                                 dtype=str, keep_default_na=False)
                successful_encoding = encoding
                break
            except (UnicodeDecodeError, UnicodeError):
                continue

        if df is None:
            raise FileReadError(
                f"[FILE READ ERROR] Could not decode '{file_path}' with any of "
                f"{', '.join(CSV_ENCODINGS)}. Suggestion: re-export the file as UTF-8 CSV."
            )

        logger.info("file_reader.csv.loaded",
                    rows=len(df),
                    columns=len(df.columns),
                    encoding=successful_encoding)

        return df

    def read_parquet(self, file_path: Path) -> pd.DataFrame:
        """
        Read Parquet file.

        Args:
            file_path: Path to Parquet file

        Returns:
            DataFrame
        """
        logger.info("file_reader.parquet.reading", file=str(file_path))

        df = pd.read_parquet(file_path)

        logger.info("file_reader.parquet.loaded",
                    rows=len(df),
                    columns=len(df.columns))

        return df

    def read(self, file_path: Path, sheet_name: Union[int, str] = 0) -> Dataset:
        """
        Read any supported file type into a Dataset.

        Args:
            file_path: Path to file
            sheet_name: Excel sheet to read

        Returns:
            Dataset

        Raises:
            FileNotFoundError: If the file does not exist
            FileReadError: If the type is unsupported or parsing fails
        """
        file_path = Path(file_path)

        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        suffix = file_path.suffix.lower()
        if suffix not in SUPPORTED_EXTENSIONS:
            raise FileReadError(
                f"[FILE READ ERROR] Unsupported file type: {suffix}. "
                f"Suggestion: use one of {', '.join(SUPPORTED_EXTENSIONS)}."
            )

        try:
            if suffix in (".xlsx", ".xls"):
                df = self.read_excel(file_path, sheet_name)
            elif suffix == ".csv":
                df = self.read_csv(file_path)
            else:
                df = self.read_parquet(file_path)
        except FileReadError:
            raise
        except pd.errors.EmptyDataError as e:
            raise FileReadError(
                f"[FILE READ ERROR] '{file_path.name}' is empty. "
                f"Suggestion: make sure the export has a header row."
            ) from e
        except (ValueError, OSError, zipfile.BadZipFile, pd.errors.ParserError) as e:
            logger.error("file_reader.failed", file=str(file_path), error=str(e))
            raise FileReadError(
                f"[FILE READ ERROR] Error parsing {file_path.name}: {e}. "
                f"Suggestion: ensure it is a valid Excel or CSV file."
            ) from e

        dataset = frame_to_dataset(df, file_path.name, infer_types=suffix == ".csv")

        logger.info("file_reader.dataset.ready",
                    name=dataset.name,
                    rows=len(dataset.rows),
                    headers=len(dataset.headers))

        return dataset
