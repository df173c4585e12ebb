"""Certificate data models for extracted insurance certificate fields."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from certcheck.utils.logging import get_logger

logger = get_logger("models.certificate")


class CoverageClass(str, Enum):
    """Coverage classes tracked on a certificate."""

    GENERAL_LIABILITY = "general_liability"
    AUTO_LIABILITY = "auto_liability"
    TRAILER_LIABILITY = "trailer_liability"

    @property
    def label(self) -> str:
        return _COVERAGE_LABELS[self]

    @classmethod
    def classify(cls, coverage_type: str | None) -> "CoverageClass | None":
        """Map a free-text coverage type to a coverage class."""
        if not coverage_type:
            return None
        text = coverage_type.lower()
        if "trailer" in text:
            return cls.TRAILER_LIABILITY
        if "auto" in text:
            return cls.AUTO_LIABILITY
        if "general" in text:
            return cls.GENERAL_LIABILITY
        return None


_COVERAGE_LABELS = {
    CoverageClass.GENERAL_LIABILITY: "Commercial General Liability",
    CoverageClass.AUTO_LIABILITY: "Automobile Liability",
    CoverageClass.TRAILER_LIABILITY: "Non-Owned Trailer Liability",
}


def _as_text(value: Any) -> str | None:
    """Normalize a payload scalar to a string, keeping absence as None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class CoverageRecord(BaseModel):
    """Values extracted for one coverage class."""

    model_config = ConfigDict(frozen=True)

    insurance_company: str | None = None
    policy_number: str | None = None
    coverage_limit: str | None = None
    coverage_currency: str | None = None
    deductible: str | None = None
    deductible_currency: str | None = None
    effective_date: str | None = None
    expiry_date: str | None = None

    def is_empty(self) -> bool:
        """Check if no value was extracted for this coverage."""
        return all(not (v or "").strip() for v in self.model_dump().values())

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "CoverageRecord":
        """Build from one entry of the extraction payload's coverages list."""
        return cls(
            insurance_company=_as_text(data.get("insurance_company")),
            policy_number=_as_text(data.get("policy_number")),
            coverage_limit=_as_text(data.get("coverage_limit")),
            coverage_currency=_as_text(data.get("coverage_currency")),
            deductible=_as_text(data.get("deductible_limit")),
            deductible_currency=_as_text(data.get("deductible_currency")),
            effective_date=_as_text(data.get("effective_date")),
            expiry_date=_as_text(data.get("expiry_date")),
        )

    def to_payload(self, coverage_type: str) -> dict[str, Any]:
        """Convert to the extraction payload's coverage entry shape."""
        return {
            "type": coverage_type,
            "insurance_company": self.insurance_company,
            "policy_number": self.policy_number,
            "coverage_limit": self.coverage_limit,
            "coverage_currency": self.coverage_currency,
            "deductible_limit": self.deductible,
            "deductible_currency": self.deductible_currency,
            "effective_date": self.effective_date,
            "expiry_date": self.expiry_date,
        }


class CertificateRecord(BaseModel):
    """Structured field values extracted from one certificate document."""

    model_config = ConfigDict(frozen=True)

    # General information
    named_insured: str | None = None
    certificate_holder: str | None = None
    additional_insured: str | None = None
    cancellation_notice_period: str | None = None
    form_type: str | None = None

    # Coverage sub-records
    general_liability: CoverageRecord = Field(default_factory=CoverageRecord)
    auto_liability: CoverageRecord = Field(default_factory=CoverageRecord)
    trailer_liability: CoverageRecord = Field(default_factory=CoverageRecord)

    def coverage(self, coverage_class: CoverageClass) -> CoverageRecord:
        """Get the sub-record for a coverage class."""
        return getattr(self, coverage_class.value)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> "CertificateRecord":
        """Build a record from the extraction JSON payload.

        Coverage entries are matched to a class by their ``type`` text. When
        the same class appears more than once the first entry is kept.
        """
        coverages: dict[str, CoverageRecord] = {}
        for entry in data.get("coverages") or []:
            if not isinstance(entry, dict):
                continue
            coverage_class = CoverageClass.classify(_as_text(entry.get("type")))
            if coverage_class is None:
                logger.warning("Ignoring unrecognized coverage type: %r", entry.get("type"))
                continue
            if coverage_class.value in coverages:
                logger.warning("Duplicate %s coverage ignored", coverage_class.label)
                continue
            coverages[coverage_class.value] = CoverageRecord.from_payload(entry)

        return cls(
            named_insured=_as_text(data.get("named_insured")),
            certificate_holder=_as_text(data.get("certificate_holder")),
            additional_insured=_as_text(data.get("additional_insured")),
            cancellation_notice_period=_as_text(data.get("cancellation_notice_period")),
            form_type=_as_text(data.get("form_type")),
            **coverages,
        )

    def to_payload(self) -> dict[str, Any]:
        """Convert back to the extraction JSON payload shape.

        Coverage classes with no extracted values are left out.
        """
        return {
            "named_insured": self.named_insured,
            "certificate_holder": self.certificate_holder,
            "additional_insured": self.additional_insured,
            "cancellation_notice_period": self.cancellation_notice_period,
            "form_type": self.form_type,
            "coverages": [
                self.coverage(c).to_payload(c.label)
                for c in CoverageClass
                if not self.coverage(c).is_empty()
            ],
        }
