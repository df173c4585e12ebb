"""Configuration management for certcheck."""

import os
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Load .env file from current directory or project root
def _find_dotenv() -> Path | None:
    """Find .env file in current directory or parent directories."""
    current = Path.cwd()
    for _ in range(5):  # Check up to 5 levels
        env_file = current / ".env"
        if env_file.exists():
            return env_file
        if current.parent == current:
            break
        current = current.parent
    return None


_env_file = _find_dotenv()
if _env_file:
    load_dotenv(_env_file)


class LLMConfig(BaseModel):
    """LLM-related configuration."""

    provider: Literal["openai", "anthropic"] = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.0
    max_tokens: int = 2000


class ExtractionConfig(BaseModel):
    """Certificate extraction configuration."""

    # Certificates are one or two pages; the rest is usually endorsements
    max_pages: int = 3
    max_text_length: int = 12000
    # Serve the bundled sample payloads for their known file names
    use_sample_payloads: bool = True


class Config(BaseSettings):
    """Main configuration for certcheck.

    Loads settings from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Keys (loaded from environment)
    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    anthropic_api_key: str | None = Field(default=None, validation_alias="ANTHROPIC_API_KEY")

    # Sub-configs
    llm: LLMConfig = Field(default_factory=LLMConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    # Storage
    data_dir: Path = Field(
        default=Path("data/certcheck"),
        validation_alias=AliasChoices("CERTCHECK_DATA_DIR", "data_dir"),
    )

    # Identity used by the CLI when --user is not given
    user_id: str = Field(
        default="local",
        validation_alias=AliasChoices("CERTCHECK_USER", "user_id"),
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_file: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("CERTCHECK_LOG_FILE", "log_file"),
    )

    @property
    def db_path(self) -> Path:
        return self.data_dir / "certcheck.db"

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """Load configuration from file or return defaults.

        API keys are always loaded from environment variables/.env file.
        """
        if path and path.exists():
            import json
            data = json.loads(path.read_text())
            return cls(**data)
        return cls()

    def get_api_key(self, provider: str | None = None) -> str | None:
        """Get API key for the specified or configured provider."""
        provider = provider or self.llm.provider
        if provider == "openai":
            return self.openai_api_key or os.getenv("OPENAI_API_KEY")
        elif provider == "anthropic":
            return self.anthropic_api_key or os.getenv("ANTHROPIC_API_KEY")
        return None
