"""
Code signing with ``codesign``.

Every file inside a bundle is signed before the bundle itself; any signing
failure aborts the build, while a failed verification only warns.
"""

from __future__ import annotations

from pathlib import Path

from ..core.exceptions import ToolExecutionError, ValidationError
from ..core.logging import get_logger
from ..tools.invoker import ToolInvoker

logger = get_logger(__name__)

UNSIGNED_SUFFIXES = frozenset({".plist", ".icns", ".png"})


class CodeSigner:
    """Signs macOS bundles and disk images with a developer identity."""

    def __init__(self, invoker: ToolInvoker, identity: str, codesign: str = "codesign") -> None:
        """Initialize the signer.

        Args:
            invoker: Tool invoker; its sanitizer redacts the identity.
            identity: Signing identity passed to ``--sign``.
            codesign: codesign executable.
        """
        self.invoker = invoker
        self.identity = identity
        self.codesign = codesign

    def arguments(self, path: Path, entitlements: Path | None = None) -> list[str]:
        args = ["--force", "--timestamp", "--options=runtime", "--sign", self.identity]
        if entitlements is not None:
            args += ["--entitlements", str(entitlements)]
        args.append(str(path))
        return args

    async def sign_path(self, path: Path, entitlements: Path | None = None) -> None:
        """Sign one file or bundle.

        Raises:
            ToolExecutionError: If codesign fails.
        """
        result = await self.invoker.run(self.codesign, self.arguments(path, entitlements))
        if not result.succeeded:
            logger.error("Code signing failed", path=str(path), output=result.message)
            raise ToolExecutionError(
                message=f"Failed to sign {path.name}: {result.message}",
                tool_name="codesign",
                returncode=result.returncode,
            )

    async def sign_bundle(self, bundle: Path, entitlements: Path | None) -> None:
        """Sign every eligible file under ``bundle``, then the bundle.

        Raises:
            ValidationError: If no entitlements file is available; nothing is signed.
            ToolExecutionError: If any codesign invocation fails.
        """
        if entitlements is None or not entitlements.is_file():
            raise ValidationError.from_errors(
                [f"Entitlements file is required for code signing but was not found: {entitlements}"]
            )

        files = sorted(
            path
            for path in bundle.rglob("*")
            if path.is_file() and path.suffix.lower() not in UNSIGNED_SUFFIXES
        )
        logger.info("Signing bundle contents", bundle=bundle.name, files=len(files))
        for path in files:
            await self.sign_path(path, entitlements)

        await self.sign_path(bundle, entitlements)
        logger.info("Bundle signed", bundle=bundle.name)
        await self.verify(bundle)

    async def verify(self, path: Path) -> bool:
        """Run ``codesign --verify``; failure is reported as a warning."""
        result = await self.invoker.run(self.codesign, ["--verify", "--verbose", str(path)])
        if not result.succeeded:
            logger.warning("Signature verification failed", path=path.name, output=result.message)
            return False
        logger.info("Signature verified", path=path.name)
        return True
