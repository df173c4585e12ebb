"""Interpretation of the logical operators that link consecutive rules.

Each rule carries an and/or/not connector to the rule after it. Rules are
scored independently; how the connectors are read is delegated to a
``RuleChain`` so that a boolean combinator can replace the advisory one
without touching the rule models.
"""

from abc import ABC, abstractmethod

from certcheck.models.requirements import LogicalOperator, RuleSet
from certcheck.validation.results import ValidationResult, ValidationStatus


class RuleChain(ABC):
    """Reads the connectors between the rules of a set."""

    @abstractmethod
    def combine(
        self, rule_set: RuleSet, results: dict[str, ValidationResult]
    ) -> ValidationStatus | None:
        """Combine per-field results into one verdict, or None for no verdict."""

    def connectors(self, rule_set: RuleSet) -> list[LogicalOperator | None]:
        """Connector following each rule; the last rule has none."""
        last = len(rule_set.rules) - 1
        return [
            rule.logical_operator if i < last else None
            for i, rule in enumerate(rule_set.rules)
        ]

    def describe(self, rule_set: RuleSet) -> str:
        """Render the rules and their connectors as one line."""
        parts: list[str] = []
        for rule, connector in zip(rule_set.rules, self.connectors(rule_set)):
            parts.append(rule.describe())
            if connector is not None:
                parts.append(connector.label)
        return " ".join(parts)


class AdvisoryChain(RuleChain):
    """Connectors are display labels only and never produce a verdict."""

    def combine(
        self, rule_set: RuleSet, results: dict[str, ValidationResult]
    ) -> ValidationStatus | None:
        return None
