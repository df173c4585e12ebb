"""Certificate extraction: sample payloads, PDF text and LLM parsing."""

from certcheck.extraction.llm_extractor import (
    CertificateExtractionResult,
    CertificateExtractor,
    MockCertificateExtractor,
    create_certificate_extractor,
)
from certcheck.extraction.parser import CertificateParser
from certcheck.extraction.samples import SAMPLE_CERTIFICATES, get_sample_payload

__all__ = [
    "CertificateExtractionResult",
    "CertificateExtractor",
    "CertificateParser",
    "MockCertificateExtractor",
    "SAMPLE_CERTIFICATES",
    "create_certificate_extractor",
    "get_sample_payload",
]
