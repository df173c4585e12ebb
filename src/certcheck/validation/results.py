"""Validation outcome types."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ValidationStatus(str, Enum):
    """Outcome of checking one field against one rule."""

    PASS = "pass"
    FAIL = "fail"
    MISSING = "missing"


@dataclass
class ValidationResult:
    """Result of evaluating one rule against an extracted record."""

    field_key: str
    status: ValidationStatus
    message: str | None = None
    actual_value: str | None = None

    @property
    def passed(self) -> bool:
        return self.status == ValidationStatus.PASS

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {
            "field_key": self.field_key,
            "status": self.status.value,
        }
        if self.message:
            result["message"] = self.message
        return result
