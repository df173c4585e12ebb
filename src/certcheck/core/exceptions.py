"""Exception types raised by certcheck."""


class CertCheckError(Exception):
    """Base class for certcheck errors."""


class UnknownFieldError(CertCheckError, KeyError):
    """A rule references a field key that is not in the field registry."""

    def __init__(self, field_key: str):
        self.field_key = field_key
        super().__init__(field_key)

    def __str__(self) -> str:
        return f"Unknown certificate field: {self.field_key!r}"


class ExtractionError(CertCheckError):
    """Extraction produced no usable certificate data."""


class NotFoundError(CertCheckError, LookupError):
    """A stored entity does not exist for the requesting owner."""

    def __init__(self, entity: str, ref: str):
        self.entity = entity
        self.ref = ref
        super().__init__(f"{entity} not found: {ref}")
