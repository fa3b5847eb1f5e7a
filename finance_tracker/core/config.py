"""
Service settings.

Values resolve in increasing priority: field defaults, .env.base,
.env.{ENVIRONMENT}, then process environment variables (case-insensitive).
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV = os.getenv("ENVIRONMENT", "development")


def parse_database_name(mongodb_url: str) -> str:
    """
    Extract the database name from a MongoDB URL.

    "mongodb://host:27017/finance_tracker?retryWrites=true" -> "finance_tracker"
    """
    return mongodb_url.rsplit("/", 1)[-1].split("?", 1)[0]


class Settings(BaseSettings):
    """Settings for MongoDB, JWT verification, OpenRouter and the agent loop."""

    model_config = SettingsConfigDict(
        env_file=[
            ".env.base",
            f".env.{ENV}",
        ],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Literal["development", "test", "production"] = "development"

    # Database connection
    mongodb_url: str = "mongodb://localhost:27017/finance_tracker"

    # Security
    secret_key: str = "dev-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    cors_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # External APIs - LLM (OpenRouter chat completions)
    openrouter_api_key: str = ""
    openrouter_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_model: str = "openai/gpt-4o-mini"
    openrouter_referer: str = "https://your-app-url.example"
    openrouter_app_title: str = "Finance Tracker Agent"
    llm_timeout_seconds: float | None = None  # None = no client-side deadline

    # Agent loop
    agent_max_iterations: int = 4  # Model round trips per turn
    agent_context_limit: int = 30  # Prior non-tool messages resent to the model

    @property
    def database_name(self) -> str:
        """Database name parsed from the MongoDB URL."""
        return parse_database_name(self.mongodb_url)

    @property
    def is_development(self) -> bool:
        """Docs endpoints and auto-reload are enabled."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Running with production settings."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
