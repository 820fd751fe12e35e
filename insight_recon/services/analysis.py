"""
AI narrative analysis of a comparison.
Single responsibility: prompt a text-generation model and parse its structured reply.
"""

import json
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

import anthropic

from ..config.manager import AnalysisConfig
from ..core.comparator import ComparisonResult
from ..utils.logger import get_logger


logger = get_logger()


class AnalysisError(Exception):
    """Exception raised when the AI analysis cannot be produced."""
    pass


class ReconciliationStatus(str, Enum):
    """Overall verdict on a financial reconciliation."""

    BALANCED = "Balanced"
    DISCREPANCY_FOUND = "Discrepancy Found"
    CRITICAL_MISMATCH = "Critical Mismatch"


@dataclass(frozen=True)
class AIAnalysis:
    """Narrative analysis returned by the model."""

    overview: str
    key_insights: Tuple[str, ...] = ()
    anomalies: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()
    reconciliation_status: Optional[ReconciliationStatus] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "overview": self.overview,
            "keyInsights": list(self.key_insights),
            "anomalies": list(self.anomalies),
            "recommendations": list(self.recommendations),
        }
        if self.reconciliation_status is not None:
            data["reconciliationStatus"] = self.reconciliation_status.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AIAnalysis":
        """
        Build an analysis from the model's JSON object.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        overview = data.get("overview")
        if not isinstance(overview, str):
            raise ValueError("'overview' must be a string")

        lists = {}
        for key in ("keyInsights", "anomalies", "recommendations"):
            items = data.get(key)
            if not isinstance(items, list):
                raise ValueError(f"'{key}' must be a list of strings")
            lists[key] = tuple(str(item) for item in items)

        status = data.get("reconciliationStatus")
        return cls(
            overview=overview,
            key_insights=lists["keyInsights"],
            anomalies=lists["anomalies"],
            recommendations=lists["recommendations"],
            reconciliation_status=ReconciliationStatus(status) if status else None,
        )


SYSTEM_PROMPT = (
    "You are a meticulous data reconciliation analyst. "
    "Reply with a single JSON object and nothing else."
)

RESPONSE_SCHEMA = """{
  "overview": "A summary of the differences.",
  "keyInsights": ["Significant findings."],
  "anomalies": ["Suspicious or unexpected changes."],
  "recommendations": ["Actionable next steps based on the comparison."]%(status)s
}"""

STATUS_FIELD = (
    ',\n  "reconciliationStatus": "One of: Balanced, Discrepancy Found, Critical Mismatch"'
)


def _to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=str)


def build_analysis_prompt(result: ComparisonResult, file_name_a: str,
                          file_name_b: str, sample_size: int = 5) -> str:
    """
    Render the analysis prompt for a comparison.

    Args:
        result: Comparison result
        file_name_a: Base file name
        file_name_b: Comparison file name
        sample_size: Number of modified and added records to include

    Returns:
        Prompt text
    """
    summary = result.summary
    lines = [
        f'Analyze the differences between two datasets: "{file_name_a}" (Base) '
        f'and "{file_name_b}" (Comparison).',
        "",
        "Summary of changes:",
        f"- Original row count: {summary.total_a}",
        f"- New row count: {summary.total_b}",
        f"- Rows added: {summary.added_count}",
        f"- Rows removed: {summary.removed_count}",
        f"- Rows modified: {summary.modified_count}",
    ]
    if summary.financial:
        lines += [
            f"- Total amount (Base): {summary.total_amount_a:,.2f}",
            f"- Total amount (Comparison): {summary.total_amount_b:,.2f}",
            f"- Variance: {summary.variance:,.2f}",
        ]

    modified_sample = [record.to_dict() for record in result.modified[:sample_size]]
    added_sample = [dict(row) for row in result.added[:sample_size]]

    lines += [
        "",
        "Structural data:",
        f"- Headers: {', '.join(result.columns)}",
        "",
        f"Sample of modified rows (first {sample_size}):",
        _to_json(modified_sample),
        "",
        f"Sample of added rows (first {sample_size}):",
        _to_json(added_sample),
        "",
        "Task: Provide a high-level executive summary, key insights, potential "
        "anomalies found in the changes, and actionable recommendations.",
        "",
        "Respond with JSON matching this shape:",
        RESPONSE_SCHEMA % {"status": STATUS_FIELD if summary.financial else ""},
    ]
    return "\n".join(lines)


def parse_analysis(text: str) -> AIAnalysis:
    """
    Parse the model reply into an AIAnalysis.

    The first JSON object found in the text is used, so replies wrapped in
    prose or code fences are accepted.

    Args:
        text: Raw model reply

    Returns:
        Parsed analysis

    Raises:
        AnalysisError: If no valid analysis object can be read
    """
    match = re.search(r"\{.*\}", text or "", re.DOTALL)
    if not match:
        raise AnalysisError("[ANALYSIS ERROR] Invalid AI analysis format: no JSON object in reply")
    try:
        data = json.loads(match.group())
        return AIAnalysis.from_dict(data)
    except (json.JSONDecodeError, ValueError) as e:
        logger.error("analysis.parse_failed", error=str(e))
        raise AnalysisError(f"[ANALYSIS ERROR] Invalid AI analysis format: {e}") from e


class ComparisonAnalyst:
    """
    Produce a narrative analysis of a comparison with the Anthropic API.
    """

    def __init__(self, config: Optional[AnalysisConfig] = None, client=None):
        """
        Initialize analyst.

        Args:
            config: Analysis configuration
            client: Pre-built Anthropic client (created lazily if omitted)
        """
        self.config = config or AnalysisConfig()
        self.client = client

    def _get_client(self) -> anthropic.Anthropic:
        if self.client is None:
            api_key = os.environ.get(self.config.api_key_env)
            if not api_key:
                raise AnalysisError(
                    f"[ANALYSIS ERROR] {self.config.api_key_env} is not set. "
                    f"Suggestion: export your API key or run with --no-ai."
                )
            self.client = anthropic.Anthropic(api_key=api_key,
                                              timeout=self.config.timeout)
        return self.client

    def analyze(self, result: ComparisonResult, file_name_a: str,
                file_name_b: str) -> AIAnalysis:
        """
        Request an analysis of a comparison.

        The result is only read; a failure here leaves it intact.

        Args:
            result: Comparison result
            file_name_a: Base file name
            file_name_b: Comparison file name

        Returns:
            Parsed analysis

        Raises:
            AnalysisError: On missing credentials, API failure or a malformed reply
        """
        client = self._get_client()
        prompt = build_analysis_prompt(result, file_name_a, file_name_b,
                                       self.config.sample_size)

        logger.info("analysis.requesting",
                    model=self.config.model,
                    prompt_chars=len(prompt))

        try:
            response = client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            logger.error("analysis.request_failed", error=str(e))
            raise AnalysisError(
                f"[ANALYSIS ERROR] Failed to generate AI analysis: {e}. "
                f"Suggestion: check your API key, quota and network connection."
            ) from e

        text = "".join(
            block.text for block in response.content
            if getattr(block, "type", None) == "text"
        )
        analysis = parse_analysis(text)

        logger.info("analysis.completed",
                    insights=len(analysis.key_insights),
                    anomalies=len(analysis.anomalies),
                    status=analysis.reconciliation_status.value
                    if analysis.reconciliation_status else None)
        return analysis
