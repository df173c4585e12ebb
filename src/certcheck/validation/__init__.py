"""Requirement validation: field registry, comparator and rule evaluation."""

from certcheck.validation.chain import AdvisoryChain, RuleChain
from certcheck.validation.comparator import compare, is_blank, parse_number
from certcheck.validation.evaluator import (
    RuleSetEvaluator,
    create_evaluator,
    describe_outcome,
    evaluate,
    evaluate_rule,
)
from certcheck.validation.fields import (
    FIELD_REGISTRY,
    FieldCategory,
    FieldDescriptor,
    ValueKind,
    iter_fields,
    lookup_value,
    resolve,
    with_value,
)
from certcheck.validation.results import ValidationResult, ValidationStatus

__all__ = [
    # Field registry
    "FIELD_REGISTRY",
    "FieldCategory",
    "FieldDescriptor",
    "ValueKind",
    "iter_fields",
    "lookup_value",
    "resolve",
    "with_value",
    # Comparator
    "compare",
    "is_blank",
    "parse_number",
    # Evaluation
    "AdvisoryChain",
    "RuleChain",
    "RuleSetEvaluator",
    "ValidationResult",
    "ValidationStatus",
    "create_evaluator",
    "describe_outcome",
    "evaluate",
    "evaluate_rule",
]
