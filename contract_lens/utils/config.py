"""Configuration management using pydantic-settings"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # API keys - support both Anthropic and Groq
    anthropic_api_key: Optional[str] = Field(default=None, description="Anthropic API key for Claude")
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key for LLM access")

    # LLM provider: 'anthropic' or 'groq'
    llm_provider: str = Field(default="anthropic", description="LLM provider to use")

    log_level: str = Field(default="INFO", description="Logging level")

    # LLM settings
    llm_model_fast: str = Field(default="claude-3-5-haiku-latest", description="Model used for chat answers")
    llm_model_reasoning: str = Field(default="claude-sonnet-4-20250514", description="Model used for risk analysis")
    llm_max_tokens: int = Field(default=4096, description="Max tokens in response")
    llm_timeout_seconds: float = Field(default=60.0, description="Timeout for a single model call")
    analysis_temperature: float = Field(default=0.3, description="Temperature for risk analysis")
    chat_temperature: float = Field(default=0.2, description="Temperature for chat answers")

    # Analysis settings
    max_input_chars: int = Field(default=20000, description="Contract characters forwarded to the model")
    max_upstream_attempts: int = Field(default=2, ge=1, description="Transport attempts per model call")
    max_parse_attempts: int = Field(default=2, ge=1, description="Model calls allowed for unparseable output")
    retry_wait_seconds: float = Field(default=1.0, ge=0, description="Base backoff between transport attempts")

    # Rate limiting
    rate_limit_per_hour: int = Field(default=10, ge=1, description="Analysis requests per caller per window")
    rate_limit_window_seconds: float = Field(default=3600.0, gt=0, description="Rate limit window length")
    rate_limit_sweep_seconds: float = Field(default=300.0, gt=0, description="Interval between stale key sweeps")

    # PDF upload settings
    max_pdf_mb: int = Field(default=5, description="Max upload size in megabytes")
    max_pages: int = Field(default=10, description="Max PDF pages extracted per upload")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


def get_settings() -> Settings:
    """Get application settings"""
    return Settings()
