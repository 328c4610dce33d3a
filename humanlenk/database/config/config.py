"""
Configuration: Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed application configuration using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- `SECRET_KEY` is required; every other field has a working default.
- `extra="ignore"`: unknown env vars are ignored (not an error).
- Optional integrations (completion service, object storage) are considered
  "not configured" when their key/bucket is left unset.

Usage
-----
from humanlenk.database.config.config import get_settings

settings = get_settings()
app = create_app(settings)

The settings object is built once and handed to the application factory;
request handlers read it from `app.state`, never from a module global.

Security
--------
- Never commit secrets or the `.env` file to source control.
- Prefer runtime environment variables in production (K8s/Secrets Manager/etc.).
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    ENVIRONMENT: str = Field("development", description="Deployment environment (`development`, `test`, `production`).")
    LOG_LEVEL: str = Field("INFO", description="Root log level.")
    LOG_FILE: Optional[str] = Field(None, description="Optional path of a log file; console only when unset.")
    FRONTEND_URL: str = Field("http://localhost:4000", description="Base URL of the frontend client application (CORS origin).")
    RATE_LIMIT: str = Field("100 per 15 minutes", description="Requests allowed per client IP and window.")
    RATE_LIMIT_ENABLED: bool = Field(True, description="Turn per-IP request limiting on or off.")

    DB_DRIVER_NAME: str = Field("postgresql+psycopg2", description="Database driver (e.g., `postgresql+psycopg2`, `sqlite`).")
    DB_USERNAME: Optional[str] = Field(None, description="Database username credential.")
    DB_PASSWORD: Optional[str] = Field(None, description="Database password credential.")
    DB_HOST: Optional[str] = Field(None, description="Hostname or IP address of the database server.")
    DB_PORT: Optional[int] = Field(None, description="Port of the database server.")
    DB_DATABASE_NAME: Optional[str] = Field(None, description="Name of the application’s database (file path for SQLite).")
    DB_AUTO_CREATE: bool = Field(True, description="Create missing tables at application start-up.")

    SECRET_KEY: str = Field(..., description="Secret key for signing access tokens.")
    ALGORITHM: str = Field("HS256", description="JWT signing algorithm.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(7 * 24 * 60, description="Duration (in minutes) before access tokens expire.")
    TOKEN_ISSUER: str = Field("humanlenk-api", description="`iss` claim of issued tokens.")
    TOKEN_AUDIENCE: str = Field("humanlenk-client", description="`aud` claim of issued tokens.")
    BCRYPT_ROUNDS: int = Field(12, description="bcrypt cost factor for password hashing.")

    API_KEY: Optional[str] = Field(None, description="OpenAI API key. When unset the completion service is not configured.")
    OPEN_AI_MODEL: str = Field("gpt-3.5-turbo", description="OpenAI chat model name.")

    AWS_ACCESS_KEY: Optional[str] = Field(None, description="AWS access key ID.")
    AWS_SECRET_KEY: Optional[str] = Field(None, description="AWS secret access key.")
    REGION: str = Field("us-east-1", description="AWS region name (e.g., `eu-central-1`).")
    BUCKET_NAME: Optional[str] = Field(None, description="S3 bucket for uploaded files. When unset storage is not configured.")
    MAX_UPLOAD_BYTES: int = Field(10 * 1024 * 1024, description="Maximum accepted upload size in bytes.")

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Build the settings once per process from the environment / `.env`."""
    return Settings()
