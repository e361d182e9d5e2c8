"""
Build request models.

A BuildRequest is the immutable snapshot of what the user asked for on the
command line. The core only reads it; resolving a missing runtime produces a
new request instead of mutating this one.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, SecretStr, field_validator

from ..core.types import FrameworkKind, PackageType


class SigningCredentials(BaseModel):
    """macOS code signing identity and Apple notarization credentials."""

    identity: SecretStr | None = Field(default=None, description="codesign identity")
    apple_id: SecretStr | None = Field(default=None, description="Apple ID (account email)")
    team_id: SecretStr | None = Field(default=None, description="Apple developer team ID")
    password: SecretStr | None = Field(default=None, description="App-specific password")

    model_config = {"frozen": True}

    @staticmethod
    def _reveal(value: SecretStr | None) -> str:
        return value.get_secret_value() if value is not None else ""

    @property
    def identity_value(self) -> str:
        return self._reveal(self.identity)

    @property
    def apple_id_value(self) -> str:
        return self._reveal(self.apple_id)

    @property
    def team_id_value(self) -> str:
        return self._reveal(self.team_id)

    @property
    def password_value(self) -> str:
        return self._reveal(self.password)

    @property
    def has_identity(self) -> bool:
        """Whether a signing identity was supplied."""
        return bool(self.identity_value)

    @property
    def has_notarization_credentials(self) -> bool:
        """Whether the full Apple ID / team ID / password triple was supplied."""
        return bool(self.apple_id_value and self.team_id_value and self.password_value)

    def secrets(self) -> dict[str, str]:
        """Raw secret values keyed by their kind, for the sanitizer."""
        return {
            "apple_id": self.apple_id_value,
            "team_id": self.team_id_value,
            "password": self.password_value,
            "signing_identity": self.identity_value,
        }


class BuildRequest(BaseModel):
    """Immutable snapshot of one packaging invocation."""

    package_type: PackageType
    runtime: str | None = Field(default=None, description="Target runtime identifier (RID)")
    framework: FrameworkKind = Field(default=FrameworkKind.NETCORE)
    publish_configuration: str = Field(default="Release")
    output_path: Path | None = Field(default=None, description="Output directory or file")
    project_path: Path | None = Field(default=None, description="Overrides DotnetProjectPath")
    binary_path: Path | None = Field(default=None, description="Pre-built binaries to package")
    app_version: str | None = Field(default=None, description="Overrides the configured version")
    signing: SigningCredentials = Field(default_factory=SigningCredentials)
    skip_prompts: bool = Field(default=False, description="Answer yes to every confirmation")
    clean: bool = Field(default=False, description="Clean project and working tree")
    verbose: bool = Field(default=False)

    model_config = {"frozen": True}

    @field_validator("runtime")
    @classmethod
    def _normalize_runtime(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip().lower()
        return value or None

    @property
    def runtime_family(self) -> str:
        """OS component of the runtime identifier (win, osx, linux) or empty."""
        if not self.runtime:
            return ""
        return self.runtime.split("-", 1)[0]

    @property
    def is_windows_runtime(self) -> bool:
        return self.runtime_family == "win"
