"""Tests for rule and rule set evaluation."""

import pytest

from certcheck.core.exceptions import UnknownFieldError
from certcheck.models.requirements import ComparisonOperator, LogicalOperator, Rule, RuleSet
from certcheck.validation.chain import AdvisoryChain, RuleChain
from certcheck.validation.evaluator import (
    RuleSetEvaluator,
    create_evaluator,
    evaluate,
    evaluate_rule,
    format_number,
)
from certcheck.validation.results import ValidationResult, ValidationStatus


def make_rule(field_key, operator, expected="", logic=LogicalOperator.AND):
    return Rule(
        field_key=field_key,
        operator=operator,
        expected_value=expected,
        logical_operator=logic,
    )


class TestFormatNumber:
    def test_integer(self):
        from decimal import Decimal

        assert format_number(Decimal("2000000")) == "2,000,000"

    def test_fraction(self):
        from decimal import Decimal

        assert format_number(Decimal("1234.5")) == "1,234.5"

    def test_trailing_zeros_dropped(self):
        from decimal import Decimal

        assert format_number(Decimal("2000000.00")) == "2,000,000"
        assert format_number(Decimal("1234.50")) == "1,234.5"
        assert format_number(Decimal("2E+6")) == "2,000,000"

    def test_huge_exponent(self):
        from decimal import Decimal

        text = format_number(Decimal("1e5000"))
        assert text.startswith("10,000,")
        assert text.replace(",", "") == "1" + "0" * 5000


class TestEvaluateRule:
    def test_pass_with_numeric_message(self, sample_record):
        rule = make_rule("gl_coverage_limits", ComparisonOperator.GREATER_THAN_OR_EQUAL, "1000000")
        result = evaluate_rule(sample_record, rule)

        assert result.field_key == "gl_coverage_limits"
        assert result.status == ValidationStatus.PASS
        assert result.message == "2,000,000 >= 1,000,000"
        assert result.actual_value == "2,000,000"

    def test_fail_with_numeric_message(self, sample_record):
        rule = make_rule("trailer_coverage_limits", ComparisonOperator.GREATER_THAN_OR_EQUAL, "$100,000")
        result = evaluate_rule(sample_record, rule)

        assert result.status == ValidationStatus.FAIL
        assert result.message == "Must be at least 100,000"

    def test_less_than_messages(self, sample_record):
        passed = evaluate_rule(
            sample_record, make_rule("trailer_deductible", ComparisonOperator.LESS_THAN, "10000")
        )
        failed = evaluate_rule(
            sample_record, make_rule("trailer_deductible", ComparisonOperator.LESS_THAN_OR_EQUAL, "1000")
        )
        assert passed.message == "5,000 < 10,000"
        assert failed.message == "Must be at most 1,000"

    def test_huge_expected_value(self, sample_record):
        rule = make_rule("gl_coverage_limits", ComparisonOperator.LESS_THAN, "1e5000")
        result = evaluate_rule(sample_record, rule)

        assert result.status == ValidationStatus.PASS
        assert result.message.startswith("2,000,000 < 10,000,")

    def test_non_numeric_relational(self, sample_record):
        rule = make_rule("gl_coverage_currency", ComparisonOperator.GREATER_THAN, "100")
        result = evaluate_rule(sample_record, rule)

        assert result.status == ValidationStatus.FAIL
        assert result.message == "Invalid number format"

    def test_equal_to_messages(self, sample_record):
        passed = evaluate_rule(
            sample_record, make_rule("gl_coverage_currency", ComparisonOperator.EQUAL_TO, "cad")
        )
        failed = evaluate_rule(
            sample_record, make_rule("gl_deductible_currency", ComparisonOperator.EQUAL_TO, "USD")
        )
        assert passed.message == "Matches requirement"
        assert failed.status == ValidationStatus.FAIL
        assert failed.message == "Expected: USD"

    def test_contains_messages(self, sample_record):
        passed = evaluate_rule(
            sample_record, make_rule("named_insured", ComparisonOperator.CONTAINS, "Hauling")
        )
        failed = evaluate_rule(
            sample_record, make_rule("named_insured", ComparisonOperator.NOT_CONTAINS, "Freight")
        )
        assert passed.message == "Contains required text"
        assert failed.message == "Must not contain: Freight"

    @pytest.mark.parametrize("operator", list(ComparisonOperator))
    def test_blank_field_is_missing(self, sample_record, operator):
        result = evaluate_rule(sample_record, make_rule("additional_insured", operator, "EDM"))

        assert result.status == ValidationStatus.MISSING
        assert result.message == "Field is empty"

    def test_unknown_field_raises(self, sample_record):
        rule = make_rule("gl_limits", ComparisonOperator.EQUAL_TO, "1")
        with pytest.raises(UnknownFieldError):
            evaluate_rule(sample_record, rule)


class TestEvaluate:
    def test_empty_rule_set(self, sample_record):
        assert evaluate(sample_record, RuleSet(name="Empty")) == {}

    def test_sample_certificate(self, sample_record):
        rule_set = RuleSet(
            name="Carrier minimums",
            rules=[
                make_rule("gl_coverage_limits", ComparisonOperator.GREATER_THAN_OR_EQUAL, "1000000"),
                make_rule("gl_deductible_currency", ComparisonOperator.EQUAL_TO, "USD"),
                make_rule("additional_insured", ComparisonOperator.CONTAINS, "EDM Trailer"),
            ],
        )
        results = evaluate(sample_record, rule_set)

        assert results["gl_coverage_limits"].status == ValidationStatus.PASS
        assert results["gl_deductible_currency"].status == ValidationStatus.FAIL
        assert results["additional_insured"].status == ValidationStatus.MISSING

    def test_results_follow_rule_order(self, sample_record):
        rule_set = RuleSet(
            name="Order",
            rules=[
                make_rule("form_type", ComparisonOperator.CONTAINS, "CSIO"),
                make_rule("named_insured", ComparisonOperator.CONTAINS, "Freight"),
                make_rule("auto_policy_number", ComparisonOperator.EQUAL_TO, "123456"),
            ],
        )
        assert list(evaluate(sample_record, rule_set)) == [
            "form_type",
            "named_insured",
            "auto_policy_number",
        ]

    def test_later_rule_on_same_field_wins(self, sample_record):
        rule_set = RuleSet(
            name="Duplicates",
            rules=[
                make_rule("gl_coverage_limits", ComparisonOperator.GREATER_THAN, "1000000"),
                make_rule("gl_coverage_limits", ComparisonOperator.GREATER_THAN, "5000000"),
            ],
        )
        results = evaluate(sample_record, rule_set)

        assert len(results) == 1
        assert results["gl_coverage_limits"].status == ValidationStatus.FAIL
        assert results["gl_coverage_limits"].message == "Must be greater than 5,000,000"

    def test_logical_operator_does_not_change_scores(self, sample_record):
        rules = [
            make_rule("gl_coverage_limits", ComparisonOperator.GREATER_THAN, "1000000", LogicalOperator.NOT),
            make_rule("gl_deductible", ComparisonOperator.EQUAL_TO, "0", LogicalOperator.OR),
        ]
        results = evaluate(sample_record, RuleSet(name="Logic", rules=rules))

        assert results["gl_coverage_limits"].status == ValidationStatus.PASS
        assert results["gl_deductible"].status == ValidationStatus.PASS

    def test_unknown_field_fails_fast(self, sample_record):
        rule_set = RuleSet(
            name="Stale",
            rules=[
                make_rule("form_type", ComparisonOperator.CONTAINS, "CSIO"),
                make_rule("gl_company", ComparisonOperator.EQUAL_TO, "Intact"),
            ],
        )
        with pytest.raises(UnknownFieldError):
            evaluate(sample_record, rule_set)

    def test_inputs_are_not_modified(self, sample_record):
        rule_set = RuleSet(
            name="Pure",
            rules=[make_rule("gl_deductible", ComparisonOperator.EQUAL_TO, "0")],
        )
        before_record = sample_record.model_dump()
        before_rules = rule_set.model_dump()

        first = evaluate(sample_record, rule_set)
        second = evaluate(sample_record, rule_set)

        assert first == second
        assert sample_record.model_dump() == before_record
        assert rule_set.model_dump() == before_rules


class AllPassChain(RuleChain):
    """Boolean combinator used to check that chains can be swapped in."""

    def combine(self, rule_set, results):
        if all(r.status == ValidationStatus.PASS for r in results.values()):
            return ValidationStatus.PASS
        return ValidationStatus.FAIL


class TestRuleChain:
    @pytest.fixture
    def rule_set(self):
        return RuleSet(
            name="Chain",
            rules=[
                make_rule("gl_coverage_limits", ComparisonOperator.GREATER_THAN_OR_EQUAL, "1000000", LogicalOperator.AND),
                make_rule("gl_deductible_currency", ComparisonOperator.EQUAL_TO, "CAD", LogicalOperator.OR),
                make_rule("additional_insured", ComparisonOperator.CONTAINS, "", LogicalOperator.NOT),
            ],
        )

    def test_connectors(self, rule_set):
        assert AdvisoryChain().connectors(rule_set) == [
            LogicalOperator.AND,
            LogicalOperator.OR,
            None,
        ]

    def test_connectors_empty(self):
        assert AdvisoryChain().connectors(RuleSet(name="Empty")) == []

    def test_describe(self, rule_set):
        assert AdvisoryChain().describe(rule_set) == (
            "gl_coverage_limits >= 1000000 AND "
            "gl_deductible_currency = CAD OR "
            "additional_insured contains"
        )

    def test_advisory_chain_has_no_verdict(self, sample_record, rule_set):
        evaluator = create_evaluator()
        results = evaluator.evaluate(sample_record, rule_set)
        assert evaluator.combined_status(rule_set, results) is None

    def test_substitute_chain(self, sample_record, rule_set):
        evaluator = RuleSetEvaluator(chain=AllPassChain())
        results = evaluator.evaluate(sample_record, rule_set)

        # Per-field results are the same whichever chain is used
        assert results == create_evaluator().evaluate(sample_record, rule_set)
        assert evaluator.combined_status(rule_set, results) == ValidationStatus.FAIL


class TestValidationResult:
    def test_to_dict(self):
        result = ValidationResult(
            field_key="gl_deductible",
            status=ValidationStatus.FAIL,
            message="Expected: 0",
        )
        assert result.to_dict() == {
            "field_key": "gl_deductible",
            "status": "fail",
            "message": "Expected: 0",
        }

    def test_to_dict_without_message(self):
        result = ValidationResult(field_key="form_type", status=ValidationStatus.PASS)
        assert "message" not in result.to_dict()
        assert result.passed
