"""Configuration management for NutriVibe."""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    environment: str = "development"
    log_level: str = "info"

    # Supabase
    supabase_url: str = ""
    supabase_service_role_key: str = ""

    # LLM (any OpenAI-compatible chat completions endpoint, Groq by default)
    groq_api_key: str = ""
    llm_base_url: str = "https://api.groq.com/openai/v1"
    llm_model: str = "llama-3.3-70b-versatile"
    llm_max_tokens: int = 4000
    llm_temperature: float = 0.1  # low keeps the model on the output format
    llm_timeout_seconds: float = 60.0
    llm_retry_attempts: int = 3
    llm_retry_delay_seconds: float = 1.0
    llm_cost_per_token: float = 0.0000005

    # Usage accounting
    usage_reservation_attempts: int = 5

    # Write each generation to the ai_generations table
    record_generation_history: bool = False

    # API Security
    api_key: str | None = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def llm_configured(self) -> bool:
        """Check if the LLM provider has credentials."""
        return bool(self.groq_api_key)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
