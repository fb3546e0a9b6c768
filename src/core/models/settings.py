"""
Settings model — runtime knobs for the server and CLI.

Loaded from recoverysim.yml (optional) and then overridden by
environment variables. See src.core.config.loader.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Settings(BaseModel):
    """Server and session settings."""

    host: str = "127.0.0.1"
    port: int = 3001
    environment: str = "production"  # production hides error detail
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    history_limit: int = Field(default=5, ge=0)
    log_level: str | None = None

    @property
    def expose_errors(self) -> bool:
        """Whether 500 responses may carry the exception message."""
        return self.environment.lower() != "production"
