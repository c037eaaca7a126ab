"""
Configuration management for Resume RAG.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Base paths
ROOT_DIR = Path(__file__).parent.parent.parent
PACKAGE_DIR = ROOT_DIR / "resume_rag"
DATA_DIR = ROOT_DIR / "data"

# Placeholder shipped in sample .env files; treated as "not configured"
OPENAI_KEY_PLACEHOLDER = "YOUR_VALID_OPENAI_API_KEY_HERE"


class DatabaseSettings(BaseSettings):
    """MongoDB database configuration."""

    model_config = SettingsConfigDict(env_prefix="DB_")

    host: str = "localhost"
    port: int = 27017
    name: str = "resume_rag"
    username: str | None = None
    password: str | None = None
    resumes_collection: str = "resumes"
    jobs_collection: str = "jobs"


class AISettings(BaseSettings):
    """Provider selection and shared embedding limits."""

    model_config = SettingsConfigDict(env_prefix="AI_")

    provider: Literal["auto", "openai", "ollama"] = "auto"
    max_length: int = 8000
    cooldown_seconds: float = 60.0


class OpenAISettings(BaseSettings):
    """Hosted OpenAI provider configuration."""

    model_config = SettingsConfigDict(env_prefix="OPENAI_")

    api_key: str | None = None
    embedding_model: str = "text-embedding-ada-002"
    chat_model: str = "gpt-3.5-turbo"
    timeout: float = 30.0
    extraction_chars: int = 4000
    evidence_chars: int = 1000

    @property
    def is_configured(self) -> bool:
        """Whether a usable API key has been supplied."""
        return bool(self.api_key) and self.api_key != OPENAI_KEY_PLACEHOLDER


class OllamaSettings(BaseSettings):
    """Local Ollama provider configuration."""

    model_config = SettingsConfigDict(env_prefix="OLLAMA_")

    url: str = "http://localhost:11434"
    embedding_model: str = "nomic-embed-text"
    chat_model: str = "llama3.2"
    probe_timeout: float = 2.0
    embedding_timeout: float = 30.0
    generation_timeout: float = 60.0
    extraction_chars: int = 3000
    evidence_chars: int = 800

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalise the base URL so endpoint joins stay predictable."""
        return v.rstrip("/")


class RetrievalSettings(BaseSettings):
    """Search, snippet and answer-synthesis limits."""

    model_config = SettingsConfigDict(env_prefix="RETRIEVAL_")

    min_similarity: float = 0.1
    search_limit: int = 10
    ask_limit: int = 5
    max_evidence: int = 5
    snippet_length: int = 200
    context_snippet_length: int = 300
    job_context_limit: int = 3
    job_description_chars: int = 200
    analytics_workers: int = 1


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} | {message}"
    file_path: Path = ROOT_DIR / "logs" / "resume_rag.log"
    rotation: str = "10 MB"
    retention: str = "30 days"
    console_output: bool = True


class AppSettings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    name: str = "Resume RAG"
    version: str = "0.1.0"
    description: str = "Retrieval and matching engine for resumes and job postings"
    debug: bool = False

    # Environment
    environment: Literal["development", "production", "testing"] = "development"

    # Nested settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ai: AISettings = Field(default_factory=AISettings)
    openai: OpenAISettings = Field(default_factory=OpenAISettings)
    ollama: OllamaSettings = Field(default_factory=OllamaSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# Global settings instance (singleton pattern)
_settings: AppSettings | None = None


def get_settings() -> AppSettings:
    """Get or create the global settings instance."""
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reload_settings() -> AppSettings:
    """Force reload settings from environment."""
    global _settings
    _settings = AppSettings()
    return _settings


# Convenience exports
settings = get_settings()
