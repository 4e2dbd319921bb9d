"""Application settings and environment configuration."""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
load_dotenv(PROJECT_ROOT / ".env")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    # Anthropic
    anthropic_api_key: str = os.getenv("ANTHROPIC_API_KEY", "")
    default_model: str = os.getenv("NEURO_SCHOLAR_MODEL", "claude-sonnet-4-5-20250929")
    llm_temperature: float = float(os.getenv("NEURO_SCHOLAR_TEMPERATURE", "0.3"))
    llm_max_tokens: int = int(os.getenv("NEURO_SCHOLAR_MAX_TOKENS", "4096"))

    # LangSmith
    langsmith_api_key: str = os.getenv("LANGSMITH_API_KEY", "")
    langsmith_tracing: bool = _env_flag("LANGSMITH_TRACING", "false")
    langsmith_project: str = os.getenv("LANGSMITH_PROJECT", "neuro-scholar")

    # Literature backends
    tavily_api_key: str = os.getenv("TAVILY_API_KEY", "")
    ncbi_api_key: str = os.getenv("NCBI_API_KEY", "")
    semantic_scholar_api_key: str = os.getenv("SEMANTIC_SCHOLAR_API_KEY", "")

    # Secondary bibliographic metadata lookup for the reference list
    enable_citation_validation: bool = _env_flag("ENABLE_CITATION_VALIDATION")

    # Persistence
    database_path: str = os.getenv(
        "NEURO_SCHOLAR_DB", str(PROJECT_ROOT / "data" / "neuro_scholar.db")
    )

    # Search tuning
    http_timeout: float = float(os.getenv("NEURO_SCHOLAR_HTTP_TIMEOUT", "30"))
    max_search_results: int = 20
    min_primary_results: int = 10
    abstract_max_chars: int = 1000

    # Truncation limits
    file_context_chars: int = 2000
    section_preview_chars: int = 500
    report_preview_chars: int = 500

    # Run control
    pause_poll_interval: float = 0.5
    recursion_limit: int = 100

    def __post_init__(self):
        """Configure LangSmith environment variables."""
        if self.langsmith_api_key:
            os.environ["LANGSMITH_API_KEY"] = self.langsmith_api_key
            os.environ["LANGSMITH_TRACING"] = str(self.langsmith_tracing).lower()
            os.environ["LANGSMITH_PROJECT"] = self.langsmith_project

    def validate(self) -> list[str]:
        """Validate required settings are present."""
        errors = []
        if not self.anthropic_api_key:
            errors.append("ANTHROPIC_API_KEY is not set")
        if not self.tavily_api_key:
            errors.append("TAVILY_API_KEY is not set (secondary web search disabled)")
        if self.enable_citation_validation and not self.semantic_scholar_api_key:
            errors.append(
                "ENABLE_CITATION_VALIDATION is on but SEMANTIC_SCHOLAR_API_KEY is not set"
            )
        return errors


# Global settings instance
settings = Settings()
