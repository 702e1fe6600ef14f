# backend/esg_ddq/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from pydantic import field_validator
from typing import List, Optional

from esg_ddq.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # API Keys (at least one LLM provider must be configured)
    openai_api_key: str = ""
    anthropic_api_key: str = ""

    # ===== LLM PROVIDERS =====
    # Which provider serves assessment calls when the caller does not pick one
    llm_primary_provider: str = "openai"
    # Provider used by the evidence gatherer's knowledge search
    research_provider: str = "openai"

    openai_model: str = "gpt-4-turbo-preview"
    anthropic_model: str = "claude-3-5-sonnet-20241022"
    llm_max_tokens: int = 4096
    llm_temperature: float = 0.3
    llm_timeout_seconds: int = 300  # Assessment prompts embed the whole framework; calls can take minutes
    llm_max_retries: int = 2  # SDK-level transport retries only
    llm_max_input_tokens: int = 120_000  # Budget for prompt-size warnings

    # ===== EVIDENCE GATHERING =====
    research_max_tokens: int = 1000
    research_temperature: float = 0.3
    research_delay_seconds: float = 0.5  # Pause between sequential queries in a batch

    # ===== PROMPT ASSEMBLY =====
    ddq_extracted_text_chars: int = 5000
    profile_extraction_chars: int = 20_000
    profile_extraction_max_attempts: int = 2

    # ===== OUTPUT VALIDATION =====
    # Raise SchemaMismatch on rubric violations; when False, violations are only logged
    strict_output_validation: bool = True

    # ===== KNOWLEDGE BASE (Risk Management Framework) =====
    rmf_filename: str = "ESG_RMF.txt"
    rmf_path: Optional[Path] = None  # Explicit location, tried first
    rmf_base_url: str = ""  # e.g. https://assets.example.com -> fetches {base}/ESG_RMF.txt
    rmf_fetch_timeout_seconds: int = 30

    # ===== DOCUMENT UPLOAD =====
    max_file_size_mb: float = 4.5
    parser_timeout_seconds: int = 240

    # Paths
    log_dir: Path = Path("logs")

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]
    @field_validator("cors_origins", mode="before")
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [v]
        return v

    # Environment
    environment: str = "development"  # development, production

    model_config = SettingsConfigDict(
        # backend/.env, one directory up from this file
        env_file=Path(__file__).resolve().parent.parent / ".env",
        case_sensitive=False,
        extra="ignore",
    )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def api_key_for(self, provider: str) -> str:
        """Credential configured for a provider name ("" when absent)."""
        return {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
        }.get(provider, "")

    def available_providers(self) -> List[str]:
        return [name for name in ("openai", "anthropic") if self.api_key_for(name)]

    def require_llm_credentials(self) -> None:
        """Fail before any core work when no LLM provider is usable."""
        if not self.available_providers():
            raise ConfigurationError(
                "API key not configured. Please set OPENAI_API_KEY or ANTHROPIC_API_KEY environment variable."
            )


# Global settings instance
settings = Settings()
