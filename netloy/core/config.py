"""
Process-level settings for netloy.

Provides type-safe settings with environment variable overrides. Signing
credentials may come from the environment (or a ``.env`` file) so they never
have to be typed on a command line that ends up in shell history or CI logs.
"""

from __future__ import annotations

import os
import tempfile
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


def _secret_from_env(name: str) -> SecretStr | None:
    value = os.environ.get(name, "")
    return SecretStr(value) if value else None


class SigningEnvironment(BaseModel):
    """Apple signing and notarization credentials taken from the environment."""

    identity: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("NETLOY_MAC_SIGNING_IDENTITY"),
        description="codesign identity",
    )
    apple_id: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("NETLOY_APPLE_ID"),
        description="Apple ID used by notarytool",
    )
    team_id: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("NETLOY_APPLE_TEAM_ID"),
        description="Apple developer team ID",
    )
    password: SecretStr | None = Field(
        default_factory=lambda: _secret_from_env("NETLOY_APPLE_PASSWORD"),
        description="App-specific password",
    )


class Settings(BaseModel):
    """Root settings for netloy."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    temp_dir: Path = Field(
        default_factory=lambda: Path(tempfile.gettempdir()),
        description="Directory under which the netloy working tree is created",
    )
    config_file_extension: str = Field(default="netloy", description="Configuration file extension")
    signing: SigningEnvironment = Field(default_factory=SigningEnvironment)

    model_config = {"extra": "ignore"}

    @property
    def work_root(self) -> Path:
        """Root of all per-application working directories."""
        return self.temp_dir / "netloy"

    @classmethod
    def from_env(cls) -> Settings:
        """Create settings from environment variables."""
        temp_dir = os.environ.get("NETLOY_TEMP_DIR")
        return cls(
            log_level=os.environ.get("NETLOY_LOG_LEVEL", "INFO").upper(),  # type: ignore
            temp_dir=Path(temp_dir) if temp_dir else Path(tempfile.gettempdir()),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
