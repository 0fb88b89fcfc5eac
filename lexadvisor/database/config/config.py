"""
Application settings.

Every key can be set in the process environment or in a ``.env`` file in the
working directory (environment wins). ``SECRET_KEY`` and ``COMPLETION_URL``
have no default: importing this module without them fails. Unknown keys are
ignored.

>>> from lexadvisor.database.config.config import settings
>>> settings.BUCKET_NAME
'legal-documents'

Defaults target local development against a SQLite file; production sets the
``DB_*`` keys for PostgreSQL.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of the environment; see the module docstring for lookup order."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    FRONTEND_URL: str = Field("http://localhost:5173", description="Base URL of the frontend client application.")
    DB_DRIVER_NAME: str = Field("sqlite", description="Database driver (e.g., `postgresql+psycopg`, `sqlite`).")
    DB_USERNAME: str | None = Field(None, description="Database username credential.")
    DB_PASSWORD: str | None = Field(None, description="Database password credential.")
    DB_HOST: str | None = Field(None, description="Hostname or IP address of the database server.")
    DB_DATABASE_NAME: str = Field("lexadvisor.db", description="Name of the application's database (file path for SQLite).")
    SECRET_KEY: str = Field(..., description="Secret key for signing access tokens.")
    ALGORITHM: str = Field("HS256", description="Algorithm used for JWT signing.")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(60, description="Duration (in minutes) before access tokens expire.")
    COMPLETION_URL: str = Field(..., description="URL of the streaming legal-chat completion endpoint.")
    COMPLETION_API_KEY: str = Field("", description="Bearer key sent to the completion endpoint.")
    HTTP_TIMEOUT: float = Field(60.0, description="Timeout (seconds) for outbound HTTP calls.")
    STREAM_MAX_DEFERRALS: int = Field(8, description="Chunks an unparseable `data:` line may wait before it is dropped.")
    AWS_ACCESS_KEY: str | None = Field(None, description="AWS access key ID for the document bucket.")
    AWS_SECRET_KEY: str | None = Field(None, description="AWS secret access key for the document bucket.")
    REGION: str = Field("eu-central-1", description="AWS region name.")
    BUCKET_NAME: str = Field("legal-documents", description="Bucket holding uploaded legal document files.")
    INIT_MODE: str = Field("runtime", description="Initialization mode; 'runtime' creates missing tables on startup.")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the application loggers.")


settings = Settings()
"""Defines a Settings object that contains the contents of the .env file"""
