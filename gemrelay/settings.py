from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Relay configuration loaded from environment variables (.env optional)."""

    # General settings
    HOST: str = Field("0.0.0.0", description="Interface the HTTP server binds to")
    PORT: int = Field(3000, description="HTTP port for the relay")
    LOG_LEVEL: str = Field("INFO", description="Stderr log level for Loguru")
    LOG_DIR: str = Field("logs", description="Directory holding the rotating log files")
    LOG_ROTATION: str = Field("10 MB", description="Size or interval at which log files rotate (Loguru syntax)")
    LOG_RETENTION: str = Field("10 days", description="How long rotated log files are kept (Loguru syntax)")

    # Gemini
    GEMINI_API_KEY: str | None = Field(None, description="API key for the Gemini generateContent endpoint")
    GEMINI_MODEL: str = Field("models/gemini-1.5-flash", description="Model the relay forwards requests to")
    GEMINI_BASE_URL: str = Field(
        "https://generativelanguage.googleapis.com/v1beta",
        description="Root URL of the Generative Language REST API",
    )
    MODEL_TIMEOUT: float = Field(60.0, gt=0, description="Upper bound in seconds for a single model call")

    # Uploads
    UPLOAD_DIR: str = Field("uploads", description="Directory where multipart uploads are spooled during a request")

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
        "extra": "ignore",
    }


settings = Settings()
