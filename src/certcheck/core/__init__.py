"""Core modules for certcheck."""

from certcheck.core.config import Config
from certcheck.core.exceptions import (
    CertCheckError,
    ExtractionError,
    NotFoundError,
    UnknownFieldError,
)

__all__ = [
    "Config",
    "CertCheckError",
    "ExtractionError",
    "NotFoundError",
    "UnknownFieldError",
]
