"""Configuration module for the kNODEledge backend."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from knodeledge import __version__

# Load environment variables from the project root .env file.
# Anchored to __file__ so it works regardless of the process CWD.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
load_dotenv(_PROJECT_ROOT / ".env")

# User-level config
_USER_ENV = Path.home() / ".knodeledge" / ".env"
load_dotenv(_USER_ENV)


logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


class KnodeledgeConfig(BaseModel):
    """Configuration for the kNODEledge backend."""

    # Base directory for the project
    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("KNODELEDGE_BASE_DIR", "."))
    )
    # Database configuration
    database_path: Path = Field(
        default_factory=lambda: Path(
            os.getenv("KNODELEDGE_DATABASE_PATH", "data/db/knodeledge.db")
        )
    )
    # When True, documents live in an in-memory SQLite database that is
    # discarded when the process exits (useful for tests and demos).
    in_memory_db: bool = Field(
        default_factory=lambda: _env_flag("KNODELEDGE_IN_MEMORY_DB", "false")
    )
    # Logging configuration
    log_level: str = Field(
        default_factory=lambda: os.getenv("KNODELEDGE_LOG_LEVEL", "INFO").upper()
    )
    log_dir: Optional[Path] = Field(
        default_factory=lambda: (
            Path(os.getenv("KNODELEDGE_LOG_DIR"))
            if os.getenv("KNODELEDGE_LOG_DIR")
            else None
        )
    )
    # Graph children trees deeper than this are rejected before validation
    max_graph_depth: int = Field(
        default_factory=lambda: int(os.getenv("KNODELEDGE_MAX_GRAPH_DEPTH", "64"))
    )
    server_version: str = Field(default=__version__)

    @model_validator(mode="after")
    def _validate_limits(self) -> "KnodeledgeConfig":
        """Validate numeric limits."""
        if self.max_graph_depth < 1:
            raise ValueError("max_graph_depth must be >= 1")
        if self.log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            logger.warning(
                "Unknown log level %r, falling back to INFO", self.log_level
            )
            self.log_level = "INFO"
        return self

    def get_absolute_path(self, path: Path) -> Path:
        """Convert a relative path to an absolute path based on base_dir."""
        if path.is_absolute():
            return path
        return self.base_dir / path

    def get_db_url(self) -> str:
        """Get the database URL for SQLite."""
        if self.in_memory_db:
            return "sqlite://"
        db_path = self.get_absolute_path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        return f"sqlite:///{db_path}"


# Create a global config instance
config = KnodeledgeConfig()
