"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  A ``.env`` file in the working directory is
loaded first so local development does not need exported variables.
Defaults are provided for all fields.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Kids Events API")
    api_version: str = os.getenv("API_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: str = os.getenv("LOG_FILE", "")

    # Location of the document store.  Relative paths are resolved
    # against the project root by the ``db`` module; a leading
    # ``sqlite:///`` is accepted and stripped.
    database_url: str = os.getenv("DATABASE_URL", "kids_events.db")

    # Seconds a connection waits on a locked store before giving up.
    db_timeout: float = float(os.getenv("DB_TIMEOUT", "5.0"))

    # Startup connection attempts and the pause between them.  When all
    # attempts fail the application refuses to start.
    db_connect_retries: int = int(os.getenv("DB_CONNECT_RETRIES", "3"))
    db_retry_delay: float = float(os.getenv("DB_RETRY_DELAY", "1.0"))

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "5000"))

    # Comma‑separated list of allowed origins; ``*`` allows all.
    cors_origins: str = os.getenv("CORS_ORIGINS", "*")

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.
settings = Settings()
