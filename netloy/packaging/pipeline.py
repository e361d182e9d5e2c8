"""
Phase pipeline shared by every builder.

A builder declares an ordered list of phases; the PhaseRunner executes them
strictly in order. A failing required phase aborts the build, a failing
optional phase is logged as a warning and the build continues.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from ..core.config import Settings, get_settings
from ..core.exceptions import (
    NotarizationRejected,
    OperationCancelled,
    OptionalPhaseFailure,
    RequiredPhaseFailure,
)
from ..core.logging import get_logger
from ..core.types import BuildReport, HostOS, PhaseResult
from ..tools.invoker import ToolInvoker
from ..tools.locator import ToolLocator

if TYPE_CHECKING:
    from .context import BuildContext

logger = get_logger(__name__)

# Raised from phases unchanged; everything else is wrapped
_PASSTHROUGH = (RequiredPhaseFailure, NotarizationRejected, OperationCancelled)


@dataclass
class Phase:
    """One step of a build pipeline."""

    name: str
    func: Callable[[], Awaitable[None]]
    required: bool = True
    skip_if: Callable[[], str | None] | None = None


@dataclass
class BuildServices:
    """Collaborators handed to every builder."""

    locator: ToolLocator
    invoker: ToolInvoker
    settings: Settings = field(default_factory=get_settings)
    confirm: Callable[[str], bool] | None = None

    @property
    def windows_host(self) -> bool:
        return self.locator.host_os == HostOS.WINDOWS


class PhaseRunner:
    """Executes phases in order and records a PhaseResult for each."""

    async def run(self, phases: list[Phase]) -> list[PhaseResult]:
        """Run every phase.

        Raises:
            RequiredPhaseFailure: When a required phase fails; wraps the cause.
            NotarizationRejected: When notarization is explicitly rejected.
            OperationCancelled: When the user declines a prompt.
        """
        results: list[PhaseResult] = []
        total = len(phases)

        for index, phase in enumerate(phases, start=1):
            result = PhaseResult(phase_name=phase.name, required=phase.required)
            results.append(result)

            reason = phase.skip_if() if phase.skip_if else None
            if reason:
                logger.info(f"Phase {index}/{total}: {phase.name} skipped", reason=reason)
                result.mark_skipped(reason)
                continue

            logger.info(f"Phase {index}/{total}: {phase.name}")
            try:
                await phase.func()
            except _PASSTHROUGH as e:
                result.mark_failed(str(e))
                raise
            except Exception as e:
                result.mark_failed(str(e))
                if phase.required:
                    logger.error("Required phase failed", phase=phase.name, error=str(e))
                    raise RequiredPhaseFailure(message=str(e), phase=phase.name, cause=e) from e
                warning = e if isinstance(e, OptionalPhaseFailure) else OptionalPhaseFailure(
                    message=str(e), phase=phase.name, cause=e
                )
                logger.warning("Optional phase failed, continuing", phase=phase.name, error=str(warning))
                continue

            result.mark_completed()
            logger.info("Phase completed", phase=phase.name, duration=f"{result.duration_seconds:.2f}s")

        return results


class Builder(Protocol):
    """Contract implemented by every package builder."""

    context: BuildContext

    def validate(self) -> bool:
        """Check every input; raise ValidationError listing all problems."""
        ...

    async def build(self) -> BuildReport:
        """Run the phase pipeline and return the report."""
        ...

    def clear(self) -> None:
        """Delete the working directory; raise CleanupFailure on error."""
        ...


async def run_pipeline(context: BuildContext, phases: list[Phase]) -> BuildReport:
    """Run ``phases`` and build the report for ``context``."""
    logger.info(
        "Starting build",
        package_type=context.package_type.value,
        runtime=context.runtime,
        phases=len(phases),
    )
    results = await PhaseRunner().run(phases)
    report = BuildReport(
        package_type=context.package_type,
        runtime=context.runtime,
        artifact=context.output_path,
        phases=results,
    )
    logger.info("Build completed", artifact=str(report.artifact), warnings=len(report.warnings))
    return report
