"""
Centralized configuration for Site Design Advisor
All environment variables and settings are defined here
"""

from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Provides centralized configuration with validation and defaults.
    """

    # ======================
    # Model Configuration
    # ======================
    ANTHROPIC_API_KEY: str = Field(default="", description="Anthropic API key")
    ANTHROPIC_MODEL: str = Field(
        default="claude-sonnet-4-20250514",
        description="Primary Claude model used for design analysis"
    )
    ANTHROPIC_FALLBACK_MODELS: List[str] = Field(
        default=["claude-3-5-haiku-20241022"],
        description="Models tried in order when the primary model fails (JSON list)"
    )
    MAX_TOKENS: int = Field(default=4000, description="Max tokens for Claude response")
    MODEL_TIMEOUT: float = Field(
        default=90.0,
        description="Timeout in seconds for a single model request"
    )
    PROMPT_PREFIX: str = Field(
        default="",
        description="Static text prepended to every analysis prompt"
    )

    # ======================
    # Redis Configuration
    # ======================
    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the recommendation store"
    )
    STORE_KEY_PREFIX: str = Field(
        default="design",
        description="Namespace prefix for every store key"
    )

    # ======================
    # Celery Configuration
    # ======================
    CELERY_BROKER_URL: Optional[str] = Field(
        default=None,
        description="Celery broker URL (defaults to REDIS_URL if not set)"
    )
    CELERY_RESULT_BACKEND: str = Field(
        default="redis://localhost:6379/1",
        description="Celery result backend URL"
    )
    CELERY_RESULT_EXPIRES: int = Field(
        default=86400,  # 24 hours
        description="Time in seconds before task results expire"
    )
    TASK_TIME_LIMIT: int = Field(
        default=300,  # 5 minutes
        description="Hard time limit for tasks in seconds"
    )
    TASK_SOFT_TIME_LIMIT: int = Field(
        default=240,  # 4 minutes
        description="Soft time limit for tasks in seconds"
    )
    WORKER_MAX_TASKS_PER_CHILD: int = Field(
        default=50,
        description="Recycle a worker process after this many analyses"
    )

    # ======================
    # Screenshot Configuration
    # ======================
    SCREENSHOT_PROVIDER: str = Field(
        default="screenshotone",
        description="Screenshot backend: 'screenshotone' or 'playwright'"
    )
    SCREENSHOTONE_ACCESS_KEY: str = Field(
        default="",
        description="ScreenshotOne API access key"
    )
    VIEWPORT_WIDTH: int = Field(
        default=1440,
        description="Browser viewport width"
    )
    VIEWPORT_HEIGHT: int = Field(
        default=900,
        description="Browser viewport height"
    )
    SCREENSHOT_TIMEOUT: int = Field(
        default=60,
        description="Timeout in seconds for capturing a screenshot"
    )
    MAX_SCREENSHOT_DIMENSION: int = Field(
        default=7500,
        description="Maximum screenshot dimension in pixels sent to the model"
    )

    # ======================
    # Storage Configuration
    # ======================
    STORAGE_DIR: str = Field(
        default="./screenshots",
        description="Directory where captured screenshots are stored"
    )
    PUBLIC_BASE_URL: str = Field(
        default="http://localhost:8000/screenshots",
        description="Public URL under which STORAGE_DIR is served"
    )

    # ======================
    # Recommendation Configuration
    # ======================
    REPLACEMENT_STRATEGY: str = Field(
        default="backlog",
        description="Slate refill on downvote: 'backlog' or 'model'"
    )

    # ======================
    # Logging Configuration
    # ======================
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level"
    )

    @property
    def celery_broker(self) -> str:
        """Get Celery broker URL, defaulting to REDIS_URL if not set"""
        return self.CELERY_BROKER_URL or self.REDIS_URL

    @property
    def model_chain(self) -> List[str]:
        """Primary model followed by fallbacks, without duplicates"""
        chain = []
        for model in [self.ANTHROPIC_MODEL, *self.ANTHROPIC_FALLBACK_MODELS]:
            if model and model not in chain:
                chain.append(model)
        return chain

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Allow extra env vars in .env file


# Global settings instance
settings = Settings()


# ======================
# Convenience Functions
# ======================

def uses_model_replacements() -> bool:
    """Check if downvotes request a fresh recommendation from the model"""
    return settings.REPLACEMENT_STRATEGY.lower() == "model"
