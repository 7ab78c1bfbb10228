"""
Application configuration.

This module defines the application settings as a Pydantic model whose
defaults come from environment variables (loaded from backend/.env) and
configures logging for the whole service.
"""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
import os
from dotenv import load_dotenv

from savvy_cart.utils.errors import ConfigurationError

# Load .env from backend directory (works regardless of cwd when running uvicorn)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _env_list(name: str, default: List[str]) -> List[str]:
    raw = os.getenv(name)
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """
    Application configuration settings.

    Can be configured via environment variables or the backend/.env file.
    Environment variable names match the field names (e.g., AGGREGATOR_BASE_URL).

    Attributes:
        AGGREGATOR_BASE_URL: Quick-commerce group search endpoint
        SEARCH_LAT: Latitude sent with every product search
        SEARCH_LON: Longitude sent with every product search
        API_TIMEOUT: Request timeout in seconds
        GEMINI_API_KEY: Google Gemini API key (required to start the server)
        LLM_MODEL: Gemini model used by every LLM-backed operation
        DEFAULT_PLATFORMS: Platforms searched when a request names none
        USE_SEMANTIC_MATCHING: Use sentence-transformers for product name similarity
        LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)
    """

    # Aggregator API
    AGGREGATOR_BASE_URL: str = Field(
        default_factory=lambda: os.getenv(
            "AGGREGATOR_BASE_URL",
            "https://qp94doiea4.execute-api.ap-south-1.amazonaws.com/default/qc",
        ),
        description="Base URL for the quick-commerce aggregator API"
    )

    SEARCH_LAT: str = Field(
        default_factory=lambda: os.getenv("SEARCH_LAT", "12.9038"),
        description="Latitude used for product searches"
    )

    SEARCH_LON: str = Field(
        default_factory=lambda: os.getenv("SEARCH_LON", "77.6648"),
        description="Longitude used for product searches"
    )

    API_TIMEOUT: int = Field(
        default_factory=lambda: int(os.getenv("API_TIMEOUT", "10")),
        ge=1,
        le=60,
        description="Aggregator request timeout in seconds"
    )

    # Gemini LLM Configuration
    GEMINI_API_KEY: Optional[str] = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        description="Google Gemini API key"
    )

    LLM_MODEL: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gemini-2.0-flash"),
        description="Gemini model to use for selection, discovery and advice"
    )

    LLM_TEMPERATURE: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for structured LLM calls"
    )

    LLM_MAX_TOKENS: int = Field(
        default=2048,
        ge=256,
        le=16384,
        description="Maximum tokens per LLM response"
    )

    # Shopping Configuration
    DEFAULT_PLATFORMS: List[str] = Field(
        default_factory=lambda: _env_list(
            "DEFAULT_PLATFORMS", ["Swiggy Instamart", "Zepto", "Blinkit"]
        ),
        description="Platforms searched when a request does not name any"
    )

    MAX_INGREDIENTS: int = Field(
        default=50,
        ge=1,
        le=200,
        description="Maximum number of ingredients accepted per price search"
    )

    # Product name similarity
    USE_SEMANTIC_MATCHING: bool = Field(
        default_factory=lambda: os.getenv("USE_SEMANTIC_MATCHING", "false").lower() == "true",
        description="Use sentence-transformers when the LLM equivalency check fails"
    )

    SEMANTIC_MATCH_THRESHOLD: float = Field(
        default=80.0,
        ge=0.0,
        le=100.0,
        description="Minimum similarity (0-100) for two product names to count as similar"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(
        default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"),
        description="Logging level (DEBUG/INFO/WARNING/ERROR)"
    )

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"LOG_LEVEL must be one of: {', '.join(valid_levels)}"
            )
        return v_upper

    @field_validator('AGGREGATOR_BASE_URL')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Ensure URLs are properly formatted."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError("URL must start with http:// or https://")
        return v.rstrip('/')

    def require_llm_credentials(self) -> None:
        """
        Refuse to run without a Gemini key.

        Every pipeline stage except ingredient normalization and cart
        aggregation depends on the LLM, so a missing key is fatal at startup.

        Raises:
            ConfigurationError: If GEMINI_API_KEY is not configured
        """
        if not self.GEMINI_API_KEY or not self.GEMINI_API_KEY.strip():
            raise ConfigurationError(
                "GEMINI_API_KEY is required. Set GEMINI_API_KEY (or GOOGLE_API_KEY) "
                "in your environment or backend/.env file."
            )


# Create global settings instance
settings = Settings()


# Configure logging based on settings
def configure_logging():
    """Configure application logging based on settings."""
    import logging

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured at {settings.LOG_LEVEL} level")
    logger.info(f"Aggregator URL: {settings.AGGREGATOR_BASE_URL}")
    logger.info(f"LLM model: {settings.LLM_MODEL} (key configured: {bool(settings.GEMINI_API_KEY)})")


# Initialize logging on import
configure_logging()
