"""Core infrastructure components for netloy."""

from .config import Settings, get_settings
from .exceptions import (
    CleanupFailure,
    ConfigurationError,
    InternalError,
    NetloyError,
    NotarizationRejected,
    OperationCancelled,
    OptionalPhaseFailure,
    PlatformMismatchError,
    RequiredPhaseFailure,
    ToolExecutionError,
    ToolNotFoundError,
    ValidationError,
)
from .logging import get_logger, setup_logging
from .types import BuildReport, FrameworkKind, HostOS, PackageType, PhaseResult, PhaseStatus

__all__ = [
    "Settings",
    "get_settings",
    "CleanupFailure",
    "ConfigurationError",
    "InternalError",
    "NetloyError",
    "NotarizationRejected",
    "OptionalPhaseFailure",
    "PlatformMismatchError",
    "RequiredPhaseFailure",
    "OperationCancelled",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ValidationError",
    "get_logger",
    "setup_logging",
    "BuildReport",
    "FrameworkKind",
    "HostOS",
    "PackageType",
    "PhaseResult",
    "PhaseStatus",
]
