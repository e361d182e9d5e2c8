"""
Custom exception hierarchy for netloy.

All user-facing failures inherit from NetloyError so the CLI can map them to
exit code 1; anything else (including InternalError) is an internal failure.
Messages placed in these exceptions must already be sanitized when they are
derived from external tool output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

VALIDATION_HEADER = "The following errors were found:"


@dataclass
class NetloyError(Exception):
    """Base exception for all netloy errors."""

    message: str
    context: dict[str, Any] = field(default_factory=dict)
    cause: Exception | None = None

    def __str__(self) -> str:
        ctx = f" | context: {self.context}" if self.context else ""
        cause = f" | caused by: {self.cause}" if self.cause else ""
        return f"{self.message}{ctx}{cause}"


@dataclass
class PlatformMismatchError(NetloyError):
    """Raised when a package type cannot be built for the host/target combination."""

    package_type: str = ""
    runtime: str = ""
    host_os: str = ""

    def __str__(self) -> str:
        return (
            f"Can't create {self.package_type.upper()} package on host '{self.host_os}' "
            f"for runtime '{self.runtime}': {self.message}"
        )


@dataclass
class ValidationError(NetloyError):
    """Raised when required build inputs are missing or malformed.

    Collects every problem so they can be reported at once.
    """

    errors: list[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[str], **context: Any) -> ValidationError:
        """Build an aggregated validation error."""
        message = f"{VALIDATION_HEADER}\n\n" + "\n".join(errors)
        return cls(message=message, context=context, errors=list(errors))

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigurationError(NetloyError):
    """Raised when the .netloy configuration file cannot be loaded or is invalid."""

    errors: list[str] = field(default_factory=list)
    config_path: str = ""

    def __str__(self) -> str:
        if not self.errors:
            return super().__str__()
        return f"{self.message}\n  - " + "\n  - ".join(self.errors)


@dataclass
class RequiredPhaseFailure(NetloyError):
    """Raised when a mandatory build phase fails; remaining phases are aborted."""

    phase: str = ""

    def __str__(self) -> str:
        return f"Phase '{self.phase}' failed: {self.message}"


@dataclass
class OptionalPhaseFailure(NetloyError):
    """Raised inside optional phases; the pipeline logs it as a warning and continues."""

    phase: str = ""

    def __str__(self) -> str:
        return f"Optional phase '{self.phase}' failed: {self.message}"


@dataclass
class NotarizationRejected(NetloyError):
    """Raised when Apple explicitly rejects a notarization request."""

    request_id: str = ""

    def __str__(self) -> str:
        return f"Notarization rejected (request: {self.request_id}): {self.message}"


@dataclass
class CleanupFailure(NetloyError):
    """Raised when the working directory could not be removed."""

    path: str = ""

    def __str__(self) -> str:
        base = super().__str__()
        return f"Failed to clean '{self.path}': {base}"


@dataclass
class ToolNotFoundError(NetloyError):
    """Raised when a required external tool is not available."""

    tool_name: str = ""
    install_hint: str = ""

    def __str__(self) -> str:
        hint = f" Install hint: {self.install_hint}" if self.install_hint else ""
        return f"Tool '{self.tool_name}' not found in PATH.{hint}"


@dataclass
class ToolExecutionError(NetloyError):
    """Raised when an external tool exits with a non-zero status.

    The message carries the tool's sanitized output.
    """

    tool_name: str = ""
    returncode: int = 0

    def __str__(self) -> str:
        return f"{self.tool_name} failed with exit code {self.returncode}: {self.message}"


@dataclass
class OperationCancelled(NetloyError):
    """Raised when the user declines a confirmation prompt."""


@dataclass
class InternalError(Exception):
    """Raised when a caller violates an internal precondition (a programming error)."""

    message: str

    def __str__(self) -> str:
        return f"Internal error: {self.message}"
