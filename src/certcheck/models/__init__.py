"""Data models for certificates and requirement sets."""

from certcheck.models.certificate import CertificateRecord, CoverageClass, CoverageRecord
from certcheck.models.requirements import (
    ComparisonOperator,
    LogicalOperator,
    Rule,
    RuleSet,
)

__all__ = [
    "CertificateRecord",
    "CoverageClass",
    "CoverageRecord",
    "ComparisonOperator",
    "LogicalOperator",
    "Rule",
    "RuleSet",
]
