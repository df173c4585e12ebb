"""Certificate parsing: turn a document into an extracted certificate record."""

from pathlib import Path

from certcheck.core.config import Config
from certcheck.extraction.llm_extractor import (
    CertificateExtractionResult,
    CertificateExtractor,
    MockCertificateExtractor,
    create_certificate_extractor,
)
from certcheck.extraction.samples import get_sample_payload
from certcheck.extraction.text import extract_text
from certcheck.models.certificate import CertificateRecord
from certcheck.utils.logging import get_logger

logger = get_logger("extraction.parser")


class CertificateParser:
    """Produces a CertificateRecord for a certificate document.

    Known sample files are answered from bundled payloads; any other PDF has
    its text layer read and sent to the LLM extractor.
    """

    def __init__(self, config: Config | None = None, use_mock_llm: bool = False):
        self.config = config or Config.load()

        if use_mock_llm:
            self.llm_extractor: CertificateExtractor | MockCertificateExtractor = (
                create_certificate_extractor(use_mock=True)
            )
        else:
            llm_config = self.config.llm.model_dump()
            if llm_config["provider"] == "anthropic" and llm_config["model"] in ["gpt-4o-mini", "gpt-4o"]:
                llm_config["model"] = "claude-3-haiku-20240307"

            self.llm_extractor = CertificateExtractor(
                **llm_config,
                api_key=self.config.get_api_key(),
            )

    def parse(self, document_path: str | Path) -> CertificateExtractionResult:
        """Extract certificate fields from a document.

        Args:
            document_path: Path to the certificate PDF

        Returns:
            CertificateExtractionResult with the extracted record

        Raises:
            ExtractionError: If the document has no usable text or the model
                response cannot be parsed
        """
        document_path = Path(document_path)

        if self.config.extraction.use_sample_payloads:
            payload = get_sample_payload(document_path.name)
            if payload is not None:
                logger.info("Using bundled sample payload for %s", document_path.name)
                return CertificateExtractionResult(
                    record=CertificateRecord.from_payload(payload),
                    model_used="sample",
                )

        text = extract_text(document_path, max_pages=self.config.extraction.max_pages)
        return self.llm_extractor.extract(
            text, max_text_length=self.config.extraction.max_text_length
        )
