"""
Configuration management.
Single responsibility: load, validate, and manage configuration.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict

from ..core.amounts import AMOUNT_KEYWORDS
from ..core.identity import ORDINAL_POLICIES, POSITIONAL
from ..utils.logger import LEVELS, get_logger


logger = get_logger()

MODES = ("generic", "financial")


@dataclass
class ReconciliationConfig:
    """Configuration for the comparison engine."""

    mode: str = "generic"
    id_fields: List[str] = field(default_factory=list)  # empty means mode defaults
    amount_keywords: List[str] = field(default_factory=lambda: list(AMOUNT_KEYWORDS))
    ordinal_keys: str = POSITIONAL
    columns: List[str] = field(default_factory=list)  # empty means header row of file A

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}. Expected one of {', '.join(MODES)}")
        if self.ordinal_keys not in ORDINAL_POLICIES:
            raise ValueError(f"Unknown ordinal_keys policy: {self.ordinal_keys}")
        if not self.amount_keywords:
            raise ValueError("amount_keywords must not be empty")

    @property
    def financial(self) -> bool:
        return self.mode == "financial"


@dataclass
class AnalysisConfig:
    """Configuration for the AI analysis collaborator."""

    enabled: bool = True
    model: str = "claude-sonnet-4-5"
    sample_size: int = 5
    max_tokens: int = 2048
    timeout: float = 60.0
    api_key_env: str = "ANTHROPIC_API_KEY"

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.sample_size < 0:
            raise ValueError("sample_size must be zero or positive")
        if self.max_tokens <= 0:
            raise ValueError("max_tokens must be positive")


@dataclass
class OutputConfig:
    """Configuration for exports, history and logging."""

    export_dir: str = "data/reports"
    history_dir: str = "data/history"
    history_limit: int = 10
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        level = self.log_level.upper()
        if level not in LEVELS and level != "WARNING":
            raise ValueError(f"Unknown log_level: {self.log_level}")


class ConfigManager:
    """
    Manage application configuration.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager.

        Args:
            config_path: Path to configuration file
        """
        self.config_path = Path(config_path or "recon.yaml")
        self.config: Dict[str, Any] = {}
        self.reconciliation = ReconciliationConfig()
        self.analysis = AnalysisConfig()
        self.output = OutputConfig()

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid YAML or a section holds invalid values
        """
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config not found: {self.config_path}")

        logger.info("config.loading", file=str(self.config_path))

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error("config.parse_failed", file=str(self.config_path), error=str(e))
            raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ValueError(
                f"Invalid configuration in {self.config_path}: expected a mapping of sections"
            )
        self.config = loaded

        self.reconciliation = self._parse_section("reconciliation", ReconciliationConfig)
        self.analysis = self._parse_section("analysis", AnalysisConfig)
        self.output = self._parse_section("output", OutputConfig)

        logger.info("config.loaded",
                    mode=self.reconciliation.mode,
                    analysis=self.analysis.enabled)

        return self.config

    def _parse_section(self, name: str, section_cls):
        """
        Build a section dataclass from the loaded mapping.

        Unknown keys are logged and ignored.
        """
        raw = self.config.get(name) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Invalid '{name}' configuration: expected a mapping")
        known = section_cls.__dataclass_fields__
        unknown = sorted(set(raw) - set(known))
        if unknown:
            logger.warning("config.unknown_keys", section=name, keys=unknown)
        try:
            return section_cls(**{k: v for k, v in raw.items() if k in known})
        except (TypeError, ValueError) as e:
            logger.error("config.section.invalid", section=name, error=str(e))
            raise ValueError(f"Invalid '{name}' configuration: {e}") from e

    def save(self, path: Optional[Path] = None):
        """
        Save configuration to file.

        Args:
            path: Output path (uses original path if not specified)
        """
        output_path = Path(path or self.config_path)

        logger.info("config.saving", file=str(output_path))

        config_dict = {
            "reconciliation": asdict(self.reconciliation),
            "analysis": asdict(self.analysis),
            "output": asdict(self.output),
        }

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info("config.saved", file=str(output_path))


SAMPLE_CONFIG = """# Insight Recon Configuration
# ===========================

reconciliation:
  # generic: identifiers id/ID/email/Email/code/Code, counts only
  # financial: invoice identifiers first, plus amount totals and variance
  mode: "financial"
  id_fields: []          # Empty means the mode defaults
  ordinal_keys: "positional"  # or "scoped": id-less rows never match across files
  columns: []            # Empty means the header row of file A
  amount_keywords: ["amount", "total", "balance", "price", "paid", "invoice_amount", "sum", "amt"]

analysis:
  enabled: true
  model: "claude-sonnet-4-5"
  sample_size: 5
  max_tokens: 2048
  timeout: 60
  api_key_env: "ANTHROPIC_API_KEY"

output:
  export_dir: "data/reports"
  history_dir: "data/history"
  history_limit: 10
  log_level: "INFO"
  log_file: null
"""


def create_sample_config(output_path: Path) -> Path:
    """
    Write a sample configuration file.

    Args:
        output_path: Where to save the config

    Returns:
        The written path
    """
    output_path = Path(output_path)
    output_path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    logger.info("config.sample_created", file=str(output_path))
    return output_path
