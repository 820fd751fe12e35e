"""
Structured logging utility.
Single responsibility: provide consistent event logging across the application.
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional
import json


LEVELS = {
    "DEBUG": 10,
    "INFO": 20,
    "WARN": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}


def _level_value(level: str) -> int:
    """
    Resolve a level name to its numeric threshold.

    Args:
        level: Level name (case-insensitive, WARNING accepted for WARN)

    Returns:
        Numeric level

    Raises:
        ValueError: If level name is unknown
    """
    name = level.upper()
    if name == "WARNING":
        name = "WARN"
    if name not in LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    return LEVELS[name]


class StructuredLogger:
    """
    Structured logger emitting dotted event names with keyword context.

    Console output is human readable (stderr); file output is JSON lines.
    """

    def __init__(self, name: str = "insight-recon",
                 log_file: Optional[Path] = None,
                 level: str = "INFO"):
        """
        Initialize logger.

        Args:
            name: Logger name
            log_file: Optional file path for JSON-lines logging
            level: Minimum level written to the console
        """
        self.name = name
        self.log_file = Path(log_file) if log_file else None
        self.threshold = _level_value(level)

    def configure(self, level: Optional[str] = None,
                  log_file: Optional[Path] = None):
        """
        Reconfigure threshold and file sink in place.

        Args:
            level: New minimum level
            log_file: New JSON-lines file
        """
        if level:
            self.threshold = _level_value(level)
        if log_file:
            self.log_file = Path(log_file)
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

    def _format_message(self, level: str, message: str, /,
                       **kwargs) -> Dict[str, Any]:
        """
        Format log message with metadata.

        Args:
            level: Log level (INFO, DEBUG, ERROR, etc.)
            message: Log message
            **kwargs: Additional context fields

        Returns:
            Formatted log entry
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "level": level,
            "logger": self.name,
            "message": message
        }

        if kwargs:
            entry["context"] = kwargs

        return entry

    def _output(self, entry: Dict[str, Any]):
        """
        Output log entry to console and optionally file.

        Args:
            entry: Log entry dictionary
        """
        # File sink records everything, console honours the threshold
        if self.log_file:
            with open(self.log_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, default=str) + "\n")

        if LEVELS[entry["level"]] < self.threshold:
            return

        timestamp = entry["timestamp"].split("T")[1][:8]
        level = entry["level"]
        msg = entry["message"]

        print(f"[{timestamp}] {level:5} | {msg}", file=sys.stderr)

        if "context" in entry:
            for key, value in entry["context"].items():
                print(f"  {key}={value}", file=sys.stderr)

    def info(self, message: str, /, **kwargs):
        """Log info message."""
        self._output(self._format_message("INFO", message, **kwargs))

    def debug(self, message: str, /, **kwargs):
        """Log debug message."""
        self._output(self._format_message("DEBUG", message, **kwargs))

    def warning(self, message: str, /, **kwargs):
        """Log warning message."""
        self._output(self._format_message("WARN", message, **kwargs))

    def error(self, message: str, /, **kwargs):
        """Log error message."""
        self._output(self._format_message("ERROR", message, **kwargs))

    def critical(self, message: str, /, **kwargs):
        """Log critical message."""
        self._output(self._format_message("CRITICAL", message, **kwargs))


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "insight-recon") -> StructuredLogger:
    """
    Get or create logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = StructuredLogger(name)
    return _logger
