"""Registry of certificate fields that requirement rules can reference.

Each field key maps to a descriptor holding its display label, category,
declared value kind and the slot it is read from in a ``CertificateRecord``.
General fields live on the record itself; coverage fields are named
``{prefix}_{suffix}`` and live on the coverage sub-record selected by the
prefix (``gl``, ``auto`` or ``trailer``).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from certcheck.core.exceptions import UnknownFieldError
from certcheck.models.certificate import CertificateRecord, CoverageClass, CoverageRecord


class FieldCategory(str, Enum):
    """Grouping used when listing fields."""

    GENERAL = "general"
    GENERAL_LIABILITY = "general_liability"
    AUTO_LIABILITY = "auto_liability"
    TRAILER_LIABILITY = "trailer_liability"

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS = {
    FieldCategory.GENERAL: "General",
    FieldCategory.GENERAL_LIABILITY: "Commercial General Liability",
    FieldCategory.AUTO_LIABILITY: "Automobile Liability",
    FieldCategory.TRAILER_LIABILITY: "Non-Owned Trailer Liability",
}


class ValueKind(str, Enum):
    """Declared kind of a field's value."""

    TEXT = "text"
    CURRENCY_AMOUNT = "currency_amount"
    DATE = "date"
    FREE_FORM = "free_form"


@dataclass(frozen=True)
class FieldDescriptor:
    """Static description of one certificate field."""

    key: str
    label: str
    category: FieldCategory
    kind: ValueKind
    slot: str
    coverage: CoverageClass | None = None

    def read(self, record: CertificateRecord) -> str | None:
        """Read this field's raw value from a record."""
        source = record if self.coverage is None else record.coverage(self.coverage)
        return getattr(source, self.slot)

    def write(self, record: CertificateRecord, value: str | None) -> CertificateRecord:
        """Return a copy of the record with this field set to ``value``."""
        if self.coverage is None:
            return record.model_copy(update={self.slot: value})
        coverage = record.coverage(self.coverage).model_copy(update={self.slot: value})
        return record.model_copy(update={self.coverage.value: coverage})


_GENERAL_FIELDS = [
    ("named_insured", "Named Insured", ValueKind.FREE_FORM),
    ("certificate_holder", "Certificate Holder", ValueKind.FREE_FORM),
    ("additional_insured", "Additional Insured", ValueKind.FREE_FORM),
    ("cancellation_notice_period", "Cancellation Notice Period", ValueKind.TEXT),
    ("form_type", "Form Type", ValueKind.TEXT),
]

# (key prefix, label prefix, category, coverage class)
_COVERAGE_PREFIXES = [
    ("gl", "GL", FieldCategory.GENERAL_LIABILITY, CoverageClass.GENERAL_LIABILITY),
    ("auto", "Auto", FieldCategory.AUTO_LIABILITY, CoverageClass.AUTO_LIABILITY),
    ("trailer", "Trailer", FieldCategory.TRAILER_LIABILITY, CoverageClass.TRAILER_LIABILITY),
]

# (key suffix, label suffix, CoverageRecord slot, kind)
_COVERAGE_FIELDS = [
    ("company_name", "Company Name", "insurance_company", ValueKind.TEXT),
    ("policy_number", "Policy Number", "policy_number", ValueKind.TEXT),
    ("coverage_limits", "Coverage Limits", "coverage_limit", ValueKind.CURRENCY_AMOUNT),
    ("coverage_currency", "Coverage Currency", "coverage_currency", ValueKind.TEXT),
    ("deductible", "Deductible", "deductible", ValueKind.CURRENCY_AMOUNT),
    ("deductible_currency", "Deductible Currency", "deductible_currency", ValueKind.TEXT),
    ("effective_date", "Effective Date", "effective_date", ValueKind.DATE),
    ("expiry_date", "Expiry Date", "expiry_date", ValueKind.DATE),
]


def _build_registry() -> dict[str, FieldDescriptor]:
    registry: dict[str, FieldDescriptor] = {}

    for key, label, kind in _GENERAL_FIELDS:
        registry[key] = FieldDescriptor(
            key=key,
            label=label,
            category=FieldCategory.GENERAL,
            kind=kind,
            slot=key,
        )

    for prefix, label_prefix, category, coverage in _COVERAGE_PREFIXES:
        for suffix, label_suffix, slot, kind in _COVERAGE_FIELDS:
            key = f"{prefix}_{suffix}"
            registry[key] = FieldDescriptor(
                key=key,
                label=f"{label_prefix} - {label_suffix}",
                category=category,
                kind=kind,
                slot=slot,
                coverage=coverage,
            )

    return registry


def _check_registry(registry: dict[str, FieldDescriptor]) -> None:
    """Fail at import if any descriptor points at a slot the models lack."""
    for descriptor in registry.values():
        model = CertificateRecord if descriptor.coverage is None else CoverageRecord
        if descriptor.slot not in model.model_fields:
            raise RuntimeError(
                f"Field {descriptor.key!r} maps to unknown slot "
                f"{model.__name__}.{descriptor.slot}"
            )


FIELD_REGISTRY: dict[str, FieldDescriptor] = _build_registry()
_check_registry(FIELD_REGISTRY)


def resolve(field_key: str) -> FieldDescriptor:
    """Get the descriptor for a field key.

    Raises:
        UnknownFieldError: If the key is not registered
    """
    try:
        return FIELD_REGISTRY[field_key]
    except KeyError:
        raise UnknownFieldError(field_key) from None


def lookup_value(record: CertificateRecord, field_key: str) -> str | None:
    """Read the value a field key refers to from a record.

    Returns None when the record has no value for the field. An unknown key
    raises UnknownFieldError rather than reading as absent.
    """
    return resolve(field_key).read(record)


def with_value(record: CertificateRecord, field_key: str, value: str | None) -> CertificateRecord:
    """Copy a record with one field replaced, e.g. after a manual correction.

    Raises:
        UnknownFieldError: If the key is not registered
    """
    return resolve(field_key).write(record, value)


def is_known_field(field_key: str) -> bool:
    return field_key in FIELD_REGISTRY


def iter_fields(category: FieldCategory | None = None) -> Iterator[FieldDescriptor]:
    """Iterate descriptors in display order, optionally for one category."""
    for descriptor in FIELD_REGISTRY.values():
        if category is None or descriptor.category == category:
            yield descriptor


def fields_by_category() -> dict[FieldCategory, list[FieldDescriptor]]:
    grouped: dict[FieldCategory, list[FieldDescriptor]] = {c: [] for c in FieldCategory}
    for descriptor in FIELD_REGISTRY.values():
        grouped[descriptor.category].append(descriptor)
    return grouped
