"""
Apple notarization protocol.

submit -> confirm -> staple -> verify. Only an explicit ``Invalid`` answer
from the notary service is fatal besides a failed submission; an unclear
status, a failed staple or a failed validation are warnings.
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import NotarizationRejected, RequiredPhaseFailure
from ..core.logging import get_logger
from ..models.request import SigningCredentials
from ..packaging.steps.archive import ditto_zip
from ..tools.invoker import ToolInvoker
from .parser import NotarizationRequest, NotarizationState, parse_request_id, parse_status

logger = get_logger(__name__)

PHASE_NAME = "notarization"


class Notarizer:
    """Runs the notarization protocol for one artifact."""

    def __init__(
        self,
        invoker: ToolInvoker,
        credentials: SigningCredentials,
        work_dir: Path,
        base_name: str,
        xcrun: str = "xcrun",
        ditto: str = "ditto",
    ) -> None:
        """Initialize the notarizer.

        Args:
            invoker: Tool invoker whose sanitizer knows every credential.
            credentials: Apple ID, team ID and app-specific password.
            work_dir: Directory receiving the submission zip.
            base_name: Application base name, used to name the submission zip.
            xcrun: xcrun executable.
            ditto: ditto executable.
        """
        self.invoker = invoker
        self.credentials = credentials
        self.work_dir = work_dir
        self.base_name = base_name
        self.xcrun = xcrun
        self.ditto = ditto

    def _credential_args(self) -> list[str]:
        return [
            "--apple-id",
            self.credentials.apple_id_value,
            "--team-id",
            self.credentials.team_id_value,
            "--password",
            self.credentials.password_value,
        ]

    async def notarize(self, artifact: Path) -> NotarizationRequest:
        """Submit ``artifact``, confirm the verdict, staple and validate.

        Raises:
            RequiredPhaseFailure: If the submission fails.
            NotarizationRejected: If Apple reports the submission as Invalid.
        """
        request = await self.submit(artifact)
        if request.request_id:
            request.state = await self.confirm(request)
        else:
            logger.warning("No notarization request id found in submit output; status not confirmed")
            request.state = NotarizationState.UNKNOWN

        await self.staple(artifact)
        await self.validate(artifact)
        return request

    async def submit(self, artifact: Path) -> NotarizationRequest:
        if artifact.suffix.lower() == ".dmg":
            payload = artifact
        else:
            payload = self.work_dir / f"{self.base_name}_notarization.zip"
            logger.info("Creating notarization zip", path=str(payload))
            await ditto_zip(self.invoker, self.ditto, artifact, payload)

        logger.info("Submitting for notarization", artifact=payload.name)
        result = await self.invoker.run(
            self.xcrun,
            ["notarytool", "submit", str(payload), *self._credential_args(), "--wait"],
        )
        if not result.succeeded:
            logger.error("Notarization submission failed", output=result.message)
            raise RequiredPhaseFailure(
                message=f"Notarization submission failed: {result.message}",
                phase=PHASE_NAME,
            )

        request = NotarizationRequest(
            artifact=str(artifact),
            request_id=parse_request_id(result.stdout),
            state=NotarizationState.SUBMITTED,
        )
        logger.info("Notarization submitted", request_id=request.request_id)
        return request

    async def confirm(self, request: NotarizationRequest) -> NotarizationState:
        """Query the final state of a submission.

        Raises:
            NotarizationRejected: If the state is Invalid.
        """
        result = await self.invoker.run(
            self.xcrun,
            ["notarytool", "info", request.request_id or "", *self._credential_args()],
        )
        if not result.succeeded:
            logger.warning("Notarization status inconclusive", request_id=request.request_id, output=result.message)
            return NotarizationState.UNKNOWN

        state = parse_status(result.stdout)
        if state == NotarizationState.INVALID:
            logger.error("Notarization rejected", request_id=request.request_id)
            raise NotarizationRejected(
                message=(
                    "Apple rejected the submission. Run 'xcrun notarytool log "
                    f"{request.request_id}' for details"
                ),
                request_id=request.request_id or "",
            )
        if state == NotarizationState.ACCEPTED:
            logger.info("Notarization accepted", request_id=request.request_id)
        else:
            logger.warning("Notarization status inconclusive", request_id=request.request_id)
        return state

    async def staple(self, artifact: Path) -> bool:
        result = await self.invoker.run(self.xcrun, ["stapler", "staple", str(artifact)])
        if not result.succeeded:
            logger.warning("Stapling failed", artifact=artifact.name, output=result.message)
            return False
        logger.info("Notarization ticket stapled", artifact=artifact.name)
        return True

    async def validate(self, artifact: Path) -> bool:
        result = await self.invoker.run(self.xcrun, ["stapler", "validate", str(artifact)])
        if not result.succeeded:
            logger.warning("Staple validation failed", artifact=artifact.name, output=result.message)
            return False
        logger.info("Staple validated", artifact=artifact.name)
        return True
