"""Export of validation reports."""

from certcheck.export.report import (
    ValidationSummary,
    build_report,
    export_report_json,
    export_report_json_string,
    results_to_dict,
)

__all__ = [
    "ValidationSummary",
    "build_report",
    "export_report_json",
    "export_report_json_string",
    "results_to_dict",
]
