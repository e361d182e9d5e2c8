"""
Core type definitions for netloy.

Enumerations shared by every layer plus the result types recorded while a
build pipeline runs.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class PackageType(str, Enum):
    """Distributable formats netloy can produce."""

    EXE = "exe"
    MSI = "msi"
    APP = "app"
    DMG = "dmg"
    APPIMAGE = "appimage"
    DEB = "deb"
    RPM = "rpm"
    FLATPAK = "flatpak"
    PACMAN = "pacman"
    PORTABLE = "portable"

    @property
    def is_macos_bundle(self) -> bool:
        """Whether this format is built from a macOS .app bundle."""
        return self in (PackageType.APP, PackageType.DMG)


class FrameworkKind(str, Enum):
    """Kind of .NET framework the project targets."""

    NETCORE = "netcore"
    NETFRAMEWORK = "netframework"


class HostOS(str, Enum):
    """Operating system netloy runs on."""

    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    UNKNOWN = "unknown"


class LinuxDistro(str, Enum):
    """Linux distribution families relevant to package tooling."""

    DEBIAN = "debian"
    REDHAT = "redhat"
    UNKNOWN = "unknown"


class PhaseStatus(str, Enum):
    """Status of a pipeline phase."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PhaseResult(BaseModel):
    """Result of a single build phase."""

    phase_name: str = Field(description="Name of the build phase")
    required: bool = Field(default=True, description="Whether failure aborts the build")
    status: PhaseStatus = Field(default=PhaseStatus.PENDING)
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: datetime | None = Field(default=None)
    duration_seconds: float = Field(default=0.0)
    error_message: str | None = Field(default=None)

    def _finish(self, status: PhaseStatus) -> None:
        self.status = status
        self.completed_at = datetime.now()
        self.duration_seconds = (self.completed_at - self.started_at).total_seconds()

    def mark_completed(self) -> None:
        """Mark phase as successfully completed."""
        self._finish(PhaseStatus.COMPLETED)

    def mark_failed(self, error: str) -> None:
        """Mark phase as failed."""
        self.error_message = error
        self._finish(PhaseStatus.FAILED)

    def mark_skipped(self, reason: str) -> None:
        """Mark phase as skipped."""
        self.error_message = reason
        self._finish(PhaseStatus.SKIPPED)


class BuildReport(BaseModel):
    """Outcome of one builder run."""

    package_type: PackageType
    runtime: str
    artifact: Path | None = Field(default=None, description="Final distributable path")
    phases: list[PhaseResult] = Field(default_factory=list)

    @property
    def warnings(self) -> list[str]:
        """Messages of optional phases that failed."""
        return [
            p.error_message or p.phase_name
            for p in self.phases
            if p.status == PhaseStatus.FAILED and not p.required
        ]

    def get_phase(self, name: str) -> PhaseResult | None:
        """Get a phase result by name."""
        for phase in self.phases:
            if phase.phase_name == name:
                return phase
        return None
