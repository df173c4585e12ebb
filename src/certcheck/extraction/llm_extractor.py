"""LLM-based extraction of insurance certificate fields."""

import json
from dataclasses import dataclass, field
from typing import Any, Literal

from certcheck.core.exceptions import ExtractionError
from certcheck.models.certificate import CertificateRecord
from certcheck.utils.logging import get_logger

logger = get_logger("extraction.llm")

SYSTEM_PROMPT = (
    "You are an expert at extracting data from insurance certificates and "
    "covernotes. Always respond with valid JSON only, no other text."
)

EXTRACTION_PROMPT = """Extract the following information from the insurance certificate text below and return it as JSON:
- named_insured: string
- certificate_holder: string
- additional_insured: string
- cancellation_notice_period: string
- form_type: string
- coverages: array of objects with structure:
  {{
    "type": string (e.g., "Commercial General Liability", "Automobile Liability", "Non-Owned Trailer Liability"),
    "insurance_company": string,
    "policy_number": string,
    "coverage_limit": string,
    "coverage_currency": string,
    "deductible_limit": string,
    "deductible_currency": string,
    "effective_date": string (ISO format),
    "expiry_date": string (ISO format)
  }}

Guidelines:
- Copy names and addresses as printed, keeping line breaks between name and address.
- Keep amounts as printed (e.g., "2,000,000"); put the currency code in the currency fields.
- If a field is not present or unclear, use null.

CERTIFICATE TEXT:
{text}

Return ONLY valid JSON, no additional text."""


@dataclass
class CertificateExtractionResult:
    """Result of certificate extraction."""

    record: CertificateRecord = field(default_factory=CertificateRecord)

    # Metadata
    model_used: str = ""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    raw_response: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "record": self.record.to_payload(),
            "model_used": self.model_used,
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
        }


def parse_payload(response: str) -> dict[str, Any]:
    """Parse the JSON object out of an LLM response.

    Raises:
        ExtractionError: If the response is not a JSON object
    """
    response = response.strip()

    # Handle markdown code blocks
    if response.startswith("```"):
        lines = response.split("\n")
        response = "\n".join(lines[1:-1])

    try:
        data = json.loads(response)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Invalid AI response format: {e}") from e

    if not isinstance(data, dict):
        raise ExtractionError("Invalid AI response format: expected a JSON object")
    return data


class CertificateExtractor:
    """Extract certificate fields using an LLM."""

    def __init__(
        self,
        provider: Literal["openai", "anthropic"] = "openai",
        model: str | None = None,
        api_key: str | None = None,
        temperature: float = 0.0,
        max_tokens: int = 2000,
    ):
        """Initialize LLM extractor.

        Args:
            provider: LLM provider ('openai' or 'anthropic')
            model: Model name (default depends on provider)
            api_key: API key (or use environment variable)
            temperature: Sampling temperature
            max_tokens: Maximum tokens in response
        """
        self.provider = provider
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_key = api_key

        if model is None:
            if provider == "openai":
                self.model = "gpt-4o-mini"
            else:
                self.model = "claude-3-haiku-20240307"
        else:
            self.model = model

        self._client = None

    def _get_openai_client(self):
        """Get or create OpenAI client."""
        if self._client is None:
            from openai import OpenAI

            if self.api_key:
                self._client = OpenAI(api_key=self.api_key)
            else:
                self._client = OpenAI()  # Uses OPENAI_API_KEY env var
        return self._client

    def _get_anthropic_client(self):
        """Get or create Anthropic client."""
        if self._client is None:
            from anthropic import Anthropic

            if self.api_key:
                self._client = Anthropic(api_key=self.api_key)
            else:
                self._client = Anthropic()  # Uses ANTHROPIC_API_KEY env var
        return self._client

    def extract(self, text: str, max_text_length: int = 12000) -> CertificateExtractionResult:
        """Extract certificate fields from document text.

        Args:
            text: Certificate text
            max_text_length: Maximum text length to send to LLM

        Returns:
            CertificateExtractionResult with the extracted record

        Raises:
            ExtractionError: If the model does not return a JSON object
        """
        if len(text) > max_text_length:
            text = text[:max_text_length] + "..."

        prompt = EXTRACTION_PROMPT.format(text=text)

        if self.provider == "openai":
            result = self._extract_openai(prompt)
        else:
            result = self._extract_anthropic(prompt)

        logger.info(
            "Extracted certificate with %s (%d prompt / %d completion tokens)",
            result.model_used,
            result.prompt_tokens,
            result.completion_tokens,
        )
        return result

    def _extract_openai(self, prompt: str) -> CertificateExtractionResult:
        """Extract using OpenAI API."""
        client = self._get_openai_client()

        response = client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            response_format={"type": "json_object"},
        )

        raw_response = response.choices[0].message.content or "{}"

        result = self._parse_response(raw_response)
        result.model_used = self.model

        if response.usage:
            result.prompt_tokens = response.usage.prompt_tokens
            result.completion_tokens = response.usage.completion_tokens

        return result

    def _extract_anthropic(self, prompt: str) -> CertificateExtractionResult:
        """Extract using Anthropic API."""
        client = self._get_anthropic_client()

        response = client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": prompt}],
            system=SYSTEM_PROMPT,
        )

        raw_response = response.content[0].text if response.content else "{}"

        result = self._parse_response(raw_response)
        result.model_used = self.model

        if response.usage:
            result.prompt_tokens = response.usage.input_tokens
            result.completion_tokens = response.usage.output_tokens

        return result

    def _parse_response(self, response: str) -> CertificateExtractionResult:
        """Parse LLM response into result object."""
        data = parse_payload(response)
        return CertificateExtractionResult(
            record=CertificateRecord.from_payload(data),
            raw_response=response,
        )


class MockCertificateExtractor:
    """Mock certificate extractor for testing without API calls."""

    def __init__(self, responses: dict[str, dict[str, Any]] | None = None):
        """Initialize mock extractor.

        Args:
            responses: Dict mapping text patterns to extraction payloads
        """
        self.responses = responses or {}
        self.call_count = 0
        self.last_text = ""

    def extract(self, text: str, max_text_length: int = 12000) -> CertificateExtractionResult:
        """Mock extraction.

        Returns:
            Result built from the first payload whose pattern occurs in the
            text, or an empty record
        """
        self.call_count += 1
        self.last_text = text

        for pattern, payload in self.responses.items():
            if pattern in text:
                return CertificateExtractionResult(
                    record=CertificateRecord.from_payload(payload),
                    model_used="mock",
                    raw_response=json.dumps(payload),
                )

        return CertificateExtractionResult(model_used="mock")


def create_certificate_extractor(
    provider: Literal["openai", "anthropic"] = "openai",
    model: str | None = None,
    api_key: str | None = None,
    use_mock: bool = False,
) -> CertificateExtractor | MockCertificateExtractor:
    """Factory function to create a certificate extractor.

    Args:
        provider: LLM provider
        model: Model name
        api_key: API key
        use_mock: Use mock extractor for testing

    Returns:
        CertificateExtractor or MockCertificateExtractor instance
    """
    if use_mock:
        return MockCertificateExtractor()

    return CertificateExtractor(
        provider=provider,
        model=model,
        api_key=api_key,
    )
