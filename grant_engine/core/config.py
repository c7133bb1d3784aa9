"""Configuration management for the Grant Readiness Engine."""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file (only if accessible)
try:
    load_dotenv()
except (PermissionError, OSError):
    # In sandboxed environments, .env might not be accessible
    pass


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Supabase configuration (required)
    SUPABASE_URL: str = Field(..., description="Supabase project URL")
    SUPABASE_SERVICE_ROLE_KEY: str = Field(..., description="Supabase service role key")

    # Anthropic configuration (required)
    ANTHROPIC_API_KEY: str = Field(..., description="Anthropic API key for the domain judge")

    # Environment
    GRANT_ENGINE_ENV: str = Field(default="dev", description="Environment: dev, staging, prod")

    # Optional internal-tools key
    ADMIN_API_KEY: str | None = Field(default=None, description="Admin API key for internal tools")

    # Composite readiness (CRE) judge configuration
    CRE_MODEL: str = Field(
        default="claude-sonnet-4-5-20250929", description="Model used to judge domain scores"
    )
    CRE_MAX_TOKENS: int = Field(default=4000, description="Max tokens for the judge response")
    CRE_TEMPERATURE: float = Field(default=0.2, description="Judge sampling temperature")
    CRE_PROMPT_VERSION: str = Field(default="cre_v1", description="Judge prompt version for tracking")

    # Request limits
    MAX_GRANT_SECTION_CHARS: int = Field(
        default=60_000, description="Max characters accepted per grant section"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    return Settings()
