"""Configuration settings for the finance agent."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class FlatSettings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Provider selection
    llm_provider: Literal["claude", "openai", "ollama", "lm_studio"] = Field(
        default="claude", validation_alias="LLM_PROVIDER"
    )

    # LLM API Keys (only the selected provider's key is required)
    anthropic_api_key: SecretStr | None = Field(
        default=None, validation_alias="ANTHROPIC_API_KEY"
    )
    openai_api_key: SecretStr | None = Field(default=None, validation_alias="OPENAI_API_KEY")

    # Model selections
    claude_model: str = Field(default="claude-haiku-4-5", validation_alias="CLAUDE_MODEL")
    gpt_model: str = Field(default="gpt-4o-mini", validation_alias="GPT_MODEL")
    ollama_base_url: str = Field(
        default="http://localhost:11434", validation_alias="OLLAMA_BASE_URL"
    )
    ollama_model: str = Field(default="qwen3:30b", validation_alias="OLLAMA_MODEL")
    lm_studio_base_url: str = Field(
        default="http://localhost:1234/v1", validation_alias="LM_STUDIO_BASE_URL"
    )
    lm_studio_model: str = Field(default="", validation_alias="LM_STUDIO_MODEL")

    # LLM parameters
    llm_max_tokens: int = Field(default=2048, validation_alias="LLM_MAX_TOKENS")
    llm_temperature: float = Field(default=0.2, validation_alias="LLM_TEMPERATURE")

    # Agent loop
    agent_max_iterations: int = Field(default=8, validation_alias="AGENT_MAX_ITERATIONS")
    agent_generation_timeout: float = Field(
        default=60.0, validation_alias="AGENT_GENERATION_TIMEOUT"
    )
    agent_tool_timeout: float = Field(default=15.0, validation_alias="AGENT_TOOL_TIMEOUT")
    company_name: str = Field(default="Ailutions", validation_alias="COMPANY_NAME")

    # Finance document API (RestDomainServices)
    finance_api_url: str = Field(
        default="http://localhost:8000", validation_alias="FINANCE_API_URL"
    )
    finance_api_token: SecretStr | None = Field(
        default=None, validation_alias="FINANCE_API_TOKEN"
    )
    finance_api_timeout: float = Field(default=10.0, validation_alias="FINANCE_API_TIMEOUT")
    finance_api_max_retries: int = Field(default=3, validation_alias="FINANCE_API_MAX_RETRIES")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> FlatSettings:
    """Get cached settings instance."""
    return FlatSettings()
