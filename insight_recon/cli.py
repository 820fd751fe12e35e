"""
Insight Recon - command-line entry point.
Reconcile two spreadsheet exports and explain the differences.
"""

import argparse
import sys
import traceback
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from . import __version__
from .adapters.excel_exporter import ExportError, WorkbookExporter
from .adapters.file_reader import FileReadError, UniversalFileReader
from .config.manager import ConfigManager, create_sample_config
from .core.comparator import ComparisonResult, DatasetComparator
from .core.identity import SCOPED
from .services.analysis import AIAnalysis, AnalysisError, ComparisonAnalyst
from .storage.history import HistoryError, HistoryItem, HistoryStore
from .ui.report import ResultRenderer
from .utils.logger import get_logger


logger = get_logger()


@dataclass
class RunOutcome:
    """What one pipeline run produced."""

    result: Optional[ComparisonResult] = None
    analysis: Optional[AIAnalysis] = None
    export_path: Optional[Path] = None
    errors: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result is not None


class ReconciliationPipeline:
    """
    Main pipeline orchestrator: read, compare, render, analyze, record, export.
    """

    def __init__(self, config_manager: ConfigManager,
                 renderer: Optional[ResultRenderer] = None,
                 analyst: Optional[ComparisonAnalyst] = None,
                 reader: Optional[UniversalFileReader] = None,
                 exporter: Optional[WorkbookExporter] = None,
                 history: Optional[HistoryStore] = None):
        """
        Initialize pipeline.

        Args:
            config_manager: Loaded configuration
            renderer: Terminal renderer
            analyst: AI analysis collaborator
            reader: Dataset file reader
            exporter: Audit workbook exporter
            history: History store
        """
        self.config_manager = config_manager
        output = config_manager.output

        self.renderer = renderer or ResultRenderer()
        self.analyst = analyst or ComparisonAnalyst(config_manager.analysis)
        self.reader = reader or UniversalFileReader()
        self.exporter = exporter or WorkbookExporter(Path(output.export_dir))
        self.history = history or HistoryStore(Path(output.history_dir),
                                               limit=output.history_limit)

    def _build_comparator(self) -> DatasetComparator:
        cfg = self.config_manager.reconciliation
        return DatasetComparator(
            financial=cfg.financial,
            id_fields=cfg.id_fields or None,
            ordinal_policy=cfg.ordinal_keys,
            amount_keywords=cfg.amount_keywords,
        )

    def run(self, file_a: Path, file_b: Path, use_ai: bool = True,
            export: bool = False, output_path: Optional[Path] = None,
            sheet_name=0) -> RunOutcome:
        """
        Run the complete pipeline for two files.

        Collaborator failures (AI, history, export) are reported and recorded
        in the outcome; they never discard the computed result.

        Args:
            file_a: Base file
            file_b: Comparison file
            use_ai: Request an AI analysis
            export: Write the audit workbook
            output_path: Explicit workbook path
            sheet_name: Excel sheet to read from both files

        Returns:
            Run outcome
        """
        outcome = RunOutcome()

        try:
            dataset_a = self.reader.read(file_a, sheet_name)
            dataset_b = self.reader.read(file_b, sheet_name)
        except (FileReadError, FileNotFoundError) as e:
            logger.error("pipeline.read_failed", error=str(e))
            self.renderer.log_error(str(e))
            outcome.errors.append(str(e))
            return outcome

        columns = self.config_manager.reconciliation.columns or dataset_a.headers

        logger.info("pipeline.comparing",
                    file_a=dataset_a.name,
                    file_b=dataset_b.name,
                    columns=len(columns))

        result = self._build_comparator().compare(dataset_a.rows, dataset_b.rows, columns)
        outcome.result = result

        self.renderer.show_header(dataset_a.name, dataset_b.name)
        self.renderer.show_summary(result)
        self.renderer.show_modified(result)

        if use_ai and self.config_manager.analysis.enabled:
            self._analyze(outcome, dataset_a.name, dataset_b.name)

        if export:
            try:
                outcome.export_path = self.exporter.export(
                    result, dataset_b.name,
                    file_name_a=dataset_a.name,
                    file_name_b=dataset_b.name,
                    output_path=output_path,
                )
                self.renderer.log_success(f"Audit report written: {outcome.export_path}")
            except ExportError as e:
                self.renderer.log_error(str(e))
                outcome.errors.append(str(e))

        return outcome

    def _analyze(self, outcome: RunOutcome, name_a: str, name_b: str):
        try:
            analysis = self.analyst.analyze(outcome.result, name_a, name_b)
        except AnalysisError as e:
            self.renderer.log_warning(f"Failed to generate AI analysis: {e}")
            outcome.errors.append(str(e))
            return

        outcome.analysis = analysis
        self.renderer.show_analysis(analysis)

        try:
            self.history.add(HistoryItem.create(name_a, name_b, outcome.result, analysis))
        except HistoryError as e:
            self.renderer.log_warning(str(e))
            outcome.errors.append(str(e))

    def run_history(self, show: Optional[str] = None, delete: Optional[str] = None,
                    clear: bool = False) -> bool:
        """
        List, show, delete or clear saved comparisons.

        Returns:
            True if the requested entry existed (always True for list/clear)
        """
        if clear:
            self.history.clear()
            self.renderer.log_success("History cleared")
            return True

        if delete:
            if self.history.delete(delete):
                self.renderer.log_success(f"Deleted {delete}")
                return True
            self.renderer.log_error(f"No history entry matches '{delete}'")
            return False

        if show:
            item = self.history.get(show)
            if item is None:
                self.renderer.log_error(f"No history entry matches '{show}'")
                return False
            try:
                result = item.to_result()
                analysis = item.to_analysis()
            except (ValueError, TypeError, AttributeError) as e:
                logger.error("history.entry_invalid", id=item.id, error=str(e))
                self.renderer.log_error(f"History entry {item.id[:8]} is unreadable: {e}")
                return False
            self.renderer.show_header(item.file_name_a, item.file_name_b)
            self.renderer.show_summary(result)
            self.renderer.show_analysis(analysis)
            return True

        self.renderer.show_history(self.history.load())
        return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="insight-recon",
        description="Insight Recon - reconcile two spreadsheet exports"
    )
    parser.add_argument(
        "--config", "-c",
        help="Configuration file (default: recon.yaml when present)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--create-sample",
        action="store_true",
        help="Create sample configuration file"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"Insight Recon v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    compare = subparsers.add_parser("compare", help="Compare two files")
    compare.add_argument("file_a", help="Base file (CSV, Excel or Parquet)")
    compare.add_argument("file_b", help="Comparison file")
    mode = compare.add_mutually_exclusive_group()
    mode.add_argument("--financial", action="store_true",
                      help="Financial mode: invoice identifiers, totals and variance")
    mode.add_argument("--generic", action="store_true",
                      help="Generic mode: counts only")
    compare.add_argument("--columns",
                         help="Comma-separated columns to compare (default: header of file A)")
    compare.add_argument("--sheet", default=0,
                         help="Excel sheet name or index (default: first sheet)")
    compare.add_argument("--scoped-ordinals", action="store_true",
                         help="Never match rows without identifiers across files")
    compare.add_argument("--no-ai", action="store_true",
                         help="Skip the AI analysis")
    compare.add_argument("--export", action="store_true",
                         help="Write the audit workbook")
    compare.add_argument("--output", "-o",
                         help="Audit workbook path (implies --export)")

    history = subparsers.add_parser("history", help="Show saved comparisons")
    action = history.add_mutually_exclusive_group()
    action.add_argument("--show", metavar="ID", help="Show one entry")
    action.add_argument("--delete", metavar="ID", help="Delete one entry")
    action.add_argument("--clear", action="store_true", help="Delete all entries")

    return parser


def _load_config(args) -> ConfigManager:
    if args.config:
        manager = ConfigManager(Path(args.config))
        manager.load()
        return manager

    manager = ConfigManager()
    if manager.config_path.exists():
        manager.load()
    return manager


def _apply_overrides(manager: ConfigManager, args):
    cfg = manager.reconciliation
    if args.financial:
        cfg.mode = "financial"
    elif args.generic:
        cfg.mode = "generic"
    if args.columns:
        cfg.columns = [c.strip() for c in args.columns.split(",") if c.strip()]
    if args.scoped_ordinals:
        cfg.ordinal_keys = SCOPED


def _sheet_arg(value):
    return int(value) if isinstance(value, str) and value.isdigit() else value


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.create_sample:
        path = create_sample_config(Path("recon_sample.yaml"))
        print(f"Sample configuration created: {path}")
        return 0

    if not args.command:
        parser.print_help()
        return 1

    try:
        manager = _load_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Use --create-sample to create a sample configuration", file=sys.stderr)
        return 1

    output = manager.output
    get_logger().configure(level="DEBUG" if args.verbose else output.log_level,
                           log_file=Path(output.log_file) if output.log_file else None)

    pipeline = ReconciliationPipeline(manager)

    if args.command == "history":
        ok = pipeline.run_history(show=args.show, delete=args.delete, clear=args.clear)
        return 0 if ok else 1

    _apply_overrides(manager, args)

    try:
        outcome = pipeline.run(
            Path(args.file_a),
            Path(args.file_b),
            use_ai=not args.no_ai,
            export=args.export or bool(args.output),
            output_path=Path(args.output) if args.output else None,
            sheet_name=_sheet_arg(args.sheet),
        )
    except Exception as e:
        logger.error("pipeline.failed",
                     error=str(e),
                     traceback=traceback.format_exc())
        pipeline.renderer.log_error(f"Pipeline failed: {e}")
        return 1

    return 0 if outcome.succeeded else 1


if __name__ == "__main__":
    sys.exit(main())
