"""Evaluation of requirement rules against extracted certificate records."""

from decimal import Decimal

from certcheck.models.certificate import CertificateRecord
from certcheck.models.requirements import ComparisonOperator, Rule, RuleSet
from certcheck.utils.logging import get_logger
from certcheck.validation.chain import AdvisoryChain, RuleChain
from certcheck.validation.comparator import compare, parse_number
from certcheck.validation.fields import lookup_value
from certcheck.validation.results import ValidationResult, ValidationStatus

logger = get_logger("validation.evaluator")

# (pass message template, fail message template) for relational operators
_RELATIONAL_MESSAGES = {
    ComparisonOperator.GREATER_THAN: ("{actual} > {expected}", "Must be greater than {expected}"),
    ComparisonOperator.LESS_THAN: ("{actual} < {expected}", "Must be less than {expected}"),
    ComparisonOperator.GREATER_THAN_OR_EQUAL: ("{actual} >= {expected}", "Must be at least {expected}"),
    ComparisonOperator.LESS_THAN_OR_EQUAL: ("{actual} <= {expected}", "Must be at most {expected}"),
}


def format_number(number: Decimal) -> str:
    """Format a number with thousands separators, e.g. ``2,000,000``."""
    text = f"{number:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def describe_outcome(rule: Rule, actual: str | None, status: ValidationStatus) -> str:
    """Build the human-readable message shown next to a result."""
    if status == ValidationStatus.MISSING:
        return "Field is empty"

    passed = status == ValidationStatus.PASS
    expected = (rule.expected_value or "").strip()
    op = rule.operator

    if op == ComparisonOperator.EQUAL_TO:
        return "Matches requirement" if passed else f"Expected: {expected}"
    if op == ComparisonOperator.NOT_EQUAL_TO:
        return "Does not match" if passed else f"Should not equal: {expected}"
    if op == ComparisonOperator.CONTAINS:
        return "Contains required text" if passed else f"Must contain: {expected}"
    if op == ComparisonOperator.NOT_CONTAINS:
        return "Does not contain text" if passed else f"Must not contain: {expected}"

    actual_num = parse_number(actual)
    expected_num = parse_number(expected)
    if actual_num is None or expected_num is None:
        return "Invalid number format"

    pass_template, fail_template = _RELATIONAL_MESSAGES[op]
    template = pass_template if passed else fail_template
    return template.format(
        actual=format_number(actual_num),
        expected=format_number(expected_num),
    )


class RuleSetEvaluator:
    """Evaluates requirement rules against certificate records.

    Every rule is scored on its own. The result map is keyed by field, so when
    several rules target the same field the last one in the set wins.
    """

    def __init__(self, chain: RuleChain | None = None):
        """Initialize evaluator.

        Args:
            chain: Interpretation of the logical operators between rules
        """
        self.chain = chain or AdvisoryChain()

    def evaluate_rule(self, record: CertificateRecord, rule: Rule) -> ValidationResult:
        """Evaluate a single rule.

        Raises:
            UnknownFieldError: If the rule references an unregistered field
        """
        actual = lookup_value(record, rule.field_key)
        status = compare(actual, rule.expected_value, rule.operator)
        return ValidationResult(
            field_key=rule.field_key,
            status=status,
            message=describe_outcome(rule, actual, status),
            actual_value=actual,
        )

    def evaluate(
        self, record: CertificateRecord, rule_set: RuleSet
    ) -> dict[str, ValidationResult]:
        """Evaluate every rule of a set.

        Args:
            record: Extracted certificate values
            rule_set: Rules to apply, in stored order

        Returns:
            Mapping of field key to the result of the last rule on that field
        """
        results: dict[str, ValidationResult] = {}
        for rule in rule_set.rules:
            result = self.evaluate_rule(record, rule)
            if rule.field_key in results:
                logger.debug(
                    "Rule set %r: %s overrides earlier rule on same field",
                    rule_set.name,
                    rule.describe(),
                )
            results[rule.field_key] = result
            logger.debug("%s -> %s", rule.describe(), result.status.value)
        return results

    def combined_status(
        self, rule_set: RuleSet, results: dict[str, ValidationResult]
    ) -> ValidationStatus | None:
        """Verdict for the whole set according to the configured chain."""
        return self.chain.combine(rule_set, results)


_default_evaluator = RuleSetEvaluator()


def evaluate_rule(record: CertificateRecord, rule: Rule) -> ValidationResult:
    """Evaluate one rule against a record with the default evaluator."""
    return _default_evaluator.evaluate_rule(record, rule)


def evaluate(record: CertificateRecord, rule_set: RuleSet) -> dict[str, ValidationResult]:
    """Evaluate a rule set against a record with the default evaluator."""
    return _default_evaluator.evaluate(record, rule_set)


def create_evaluator(chain: RuleChain | None = None) -> RuleSetEvaluator:
    """Factory function to create a rule set evaluator.

    Returns:
        RuleSetEvaluator instance
    """
    return RuleSetEvaluator(chain=chain)
