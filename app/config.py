"""
Configuration settings for the Jurimodelo backend.
Loads environment variables and provides application-wide settings.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Ollama Configuration (generative-text service)
    OLLAMA_BASE_URL: str = "http://localhost:11434"
    OLLAMA_LLM_MODEL: str = "qwen2.5:3b"
    OLLAMA_TIMEOUT: int = 120  # seconds per generation request

    # Agent identity / prompt optimisation calls
    AGENT_IDENTITY_TEMPERATURE: float = 0.7
    AGENT_IDENTITY_MAX_TOKENS: int = 300
    PROMPT_OPTIMIZATION_TEMPERATURE: float = 0.3
    PROMPT_OPTIMIZATION_MAX_TOKENS: int = 2000

    # Template processing
    MIN_DOCUMENT_CHARS: int = 50
    MAX_FILE_SIZE: int = 50 * 1024 * 1024  # 50 MB
    SUPPORTED_FILE_TYPES: List[str] = [".docx"]

    # Legacy processor retry policy (linear backoff)
    LEGACY_MAX_ATTEMPTS: int = 3
    LEGACY_RETRY_DELAY_SECONDS: float = 1.0

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
