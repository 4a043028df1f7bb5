"""
Application configuration with environment-specific secrets management.

Supported environment files (loaded in order of precedence):
1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
2. .env (fallback)

Required secrets for production:
- DATABASE_URL
- API_KEY
"""
import os
import logging
from pathlib import Path
from typing import Optional, Literal
from pydantic_settings import BaseSettings
from pydantic import ConfigDict

# Get the project root directory (3 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

DEFAULT_DATABASE_URL = "sqlite:///./prop_edge.db"

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment-specific configuration."""

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Allow extra fields from .env
    )

    # Application
    APP_NAME: str = "Prop Edge API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
    SQL_ECHO: bool = False

    # Security
    API_KEY: str = ""

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE: str = "memory"  # "memory" or "redis"
    REDIS_URL: Optional[str] = None  # Required if using Redis storage

    # LLM gateway (OpenAI-compatible chat completions)
    LLM_API_KEY: str = ""
    LLM_BASE_URL: str = "https://ai.gateway.lovable.dev/v1"
    LLM_MODEL: str = "google/gemini-2.5-flash"
    LLM_TIMEOUT: float = 30.0
    LLM_ENHANCE_TOP_N: int = 5

    # Third-party data providers
    SPORTSDATA_API_KEY: str = ""
    THE_ODDS_API_KEY: str = ""
    SPORTSBLAZE_API_KEY: str = ""
    HIGHLIGHTLY_API_KEY: str = ""
    HTTP_TIMEOUT: float = 30.0

    # Edge heuristic tuning
    EDGE_FIRST_HALF_RATIO: float = 0.46
    EDGE_FULL_GAME_BASELINE: float = 200.0
    EDGE_DERIVATIVE_BAND: float = 20.0
    EDGE_DERIVATIVE_THRESHOLD: float = 8.0
    EDGE_COLLEGE_EARLIEST_HOUR: int = 18
    EDGE_COLLEGE_LATEST_HOUR: int = 23
    EDGE_COLLEGE_MIN_VARIANCE: float = 1.5
    EDGE_RESULT_LIMIT: int = 20

    # Player search cache
    PLAYER_SEARCH_CACHE_TTL: int = 600  # 10 minutes
    PLAYER_SEARCH_CACHE_SIZE: int = 256

    # Assistant tool dispatch
    TOOL_MAX_ATTEMPTS: int = 3

    # Scheduler
    SCHEDULER_ENABLED: bool = True

    # CORS - comma-separated string for env var parsing
    CORS_ORIGINS_STR: str = ""  # Environment variable: comma-separated origins

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Get CORS origins with environment-aware defaults."""
        if self.CORS_ORIGINS_STR:
            origins = [o.strip() for o in self.CORS_ORIGINS_STR.split(",") if o.strip()]
            if origins:
                # Reject wildcard in production
                if self.is_production() and "*" in origins:
                    logger.warning(
                        "Wildcard CORS origins (*) are not allowed in production. "
                        "Please set explicit origins in CORS_ORIGINS_STR environment variable."
                    )
                    return []
                return origins

        if self.is_production():
            logger.warning(
                "CORS_ORIGINS_STR not set in production. "
                "Please set CORS_ORIGINS_STR environment variable with explicit origins."
            )
            return []

        # Development defaults to the local web app
        return [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://localhost:8080",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
            "http://127.0.0.1:8080",
        ]

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    def validate_required_secrets(self) -> list[str]:
        """
        Validate that required secrets are set for the current environment.

        Returns:
            List of missing secret names (empty if all present)
        """
        missing = []

        if self.is_production():
            if not self.DATABASE_URL or self.DATABASE_URL == DEFAULT_DATABASE_URL:
                missing.append("DATABASE_URL")
            if not self.API_KEY:
                missing.append("API_KEY")

        # Redis URL is required if using Redis rate limiting
        if self.RATE_LIMIT_ENABLED and self.RATE_LIMIT_STORAGE == "redis" and not self.REDIS_URL:
            missing.append("REDIS_URL")

        return missing


def _load_env_file() -> Path:
    """
    Load the appropriate environment file based on ENVIRONMENT variable.

    Loads in order of precedence:
    1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
    2. .env (fallback)
    """
    environment = os.getenv("ENVIRONMENT", "development")

    env_file = PROJECT_ROOT / f".env.{environment}"
    if env_file.exists():
        logger.info(f"Loading environment from {env_file.name}")
        return env_file

    default_env = PROJECT_ROOT / ".env"
    if default_env.exists():
        logger.info(f"Loading environment from .env (environment: {environment})")
        return default_env

    logger.debug(f"No environment file found for '{environment}' (checked .env.{environment}, .env)")
    return default_env


# Auto-detect and load environment file
_env_file = _load_env_file()


class _SettingsWithEnvFile(Settings):
    model_config = ConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = _SettingsWithEnvFile()


# Validate secrets on startup
missing_secrets = settings.validate_required_secrets()
if missing_secrets:
    logger.warning(f"Missing required secrets for {settings.ENVIRONMENT}: {', '.join(missing_secrets)}")
    if settings.is_production():
        raise ValueError(
            f"Cannot start in production with missing secrets: {', '.join(missing_secrets)}. "
            f"Please set these environment variables in .env.production"
        )
