"""Validation report export."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from certcheck.validation.results import ValidationResult, ValidationStatus


@dataclass
class ValidationSummary:
    """Counts of validation outcomes for one evaluation."""

    passed: int = 0
    failed: int = 0
    missing: int = 0

    @classmethod
    def from_results(cls, results: dict[str, ValidationResult]) -> "ValidationSummary":
        summary = cls()
        for result in results.values():
            if result.status == ValidationStatus.PASS:
                summary.passed += 1
            elif result.status == ValidationStatus.FAIL:
                summary.failed += 1
            else:
                summary.missing += 1
        return summary

    @property
    def total(self) -> int:
        return self.passed + self.failed + self.missing

    def all_passed(self) -> bool:
        """Check if every field passed; an empty evaluation does not count."""
        return self.total > 0 and self.passed == self.total

    def to_dict(self) -> dict[str, int]:
        return {
            "pass": self.passed,
            "fail": self.failed,
            "missing": self.missing,
            "total": self.total,
        }


def results_to_dict(results: dict[str, ValidationResult]) -> dict[str, dict[str, Any]]:
    """Convert evaluation results to ``{field_key: {status, message?}}``."""
    output: dict[str, dict[str, Any]] = {}
    for field_key, result in results.items():
        entry: dict[str, Any] = {"status": result.status.value}
        if result.message:
            entry["message"] = result.message
        output[field_key] = entry
    return output


def build_report(
    results: dict[str, ValidationResult],
    document_id: str | None = None,
    rule_set_name: str | None = None,
) -> dict[str, Any]:
    """Build a report dictionary with results and summary counts."""
    report: dict[str, Any] = {}
    if document_id:
        report["document_id"] = document_id
    if rule_set_name:
        report["requirement_set"] = rule_set_name
    report["summary"] = ValidationSummary.from_results(results).to_dict()
    report["results"] = results_to_dict(results)
    return report


def export_report_json_string(
    results: dict[str, ValidationResult],
    indent: int = 2,
    **report_fields: Any,
) -> str:
    """Export results to a JSON string.

    Args:
        results: Evaluation results keyed by field
        indent: JSON indentation (default 2)
        **report_fields: document_id / rule_set_name to include

    Returns:
        JSON formatted report
    """
    return json.dumps(build_report(results, **report_fields), indent=indent, ensure_ascii=False)


def export_report_json(
    results: dict[str, ValidationResult],
    output_path: str | Path,
    indent: int = 2,
    **report_fields: Any,
) -> None:
    """Export results to a JSON file.

    Args:
        results: Evaluation results keyed by field
        output_path: Path to output file
        indent: JSON indentation (default 2)
        **report_fields: document_id / rule_set_name to include
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        f.write(export_report_json_string(results, indent=indent, **report_fields))
