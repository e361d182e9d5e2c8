"""
External tool invocation.

All packaging tools (dotnet, codesign, xcrun, hdiutil, dpkg-deb, ...) are run
through a ToolInvoker. Output is captured, sanitized and returned as a
ToolResult; classification of failures is left to the calling phase.
"""

from __future__ import annotations

import asyncio
import os
import shlex
import sys
from pathlib import Path

from pydantic import BaseModel, Field

from ..core.logging import get_logger
from .sanitizer import Sanitizer

logger = get_logger(__name__)

COMMAND_NOT_FOUND = 127


class ToolResult(BaseModel):
    """Captured outcome of one external process."""

    tool: str
    returncode: int
    stdout: str = Field(default="", description="Sanitized standard output")
    stderr: str = Field(default="", description="Sanitized standard error")

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def message(self) -> str:
        """Most useful text for an error report: stderr, else stdout."""
        return (self.stderr or self.stdout).strip()


class ToolInvoker:
    """Runs external executables and captures their sanitized output."""

    def __init__(self, sanitizer: Sanitizer | None = None, verbose: bool = False) -> None:
        """Initialize the invoker.

        Args:
            sanitizer: Sanitizer applied to the command line and all captured output.
            verbose: Log standard output of every tool at debug level.
        """
        self.sanitizer = sanitizer or Sanitizer()
        self.verbose = verbose

    async def run(
        self,
        tool: str,
        args: list[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> ToolResult:
        """Run a tool and wait for it to exit.

        Args:
            tool: Executable name or path.
            args: Arguments passed verbatim (no shell).
            cwd: Working directory of the process.
            env: Extra environment variables layered over the current environment.

        Returns:
            ToolResult with sanitized output. A missing executable yields
            returncode 127 rather than an exception.
        """
        cmd = [tool, *args]
        logger.info(
            "Running command",
            command=" ".join(self.sanitizer.sanitize_args(cmd)),
            cwd=str(cwd) if cwd else None,
        )

        process_env = None
        if env:
            process_env = dict(os.environ)
            process_env.update(env)

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
                env=process_env,
            )
        except FileNotFoundError:
            logger.error("Executable not found", tool=tool)
            return ToolResult(
                tool=tool,
                returncode=COMMAND_NOT_FOUND,
                stderr=f"{tool}: command not found",
            )

        raw_stdout, raw_stderr = await process.communicate()
        stdout = self.sanitizer.sanitize(raw_stdout.decode("utf-8", errors="replace"))
        stderr = self.sanitizer.sanitize(raw_stderr.decode("utf-8", errors="replace"))
        returncode = process.returncode if process.returncode is not None else 0

        if self.verbose and stdout.strip():
            logger.debug(f"[{tool}] {stdout.rstrip()}")

        logger.info("Command completed", tool=tool, returncode=returncode)
        return ToolResult(tool=tool, returncode=returncode, stdout=stdout, stderr=stderr)

    async def run_script(
        self,
        script: Path,
        arguments: str = "",
        env: dict[str, str] | None = None,
        cwd: Path | None = None,
    ) -> ToolResult:
        """Run a user script through the platform shell.

        The script runs with ``bash -c`` on POSIX hosts and ``cmd /c`` on
        Windows, with ``env`` (normally the macro environment) exported.
        """
        if sys.platform == "win32":
            command = f'"{script}" {arguments}'.rstrip()
            return await self.run("cmd", ["/c", command], cwd=cwd, env=env)

        command = f"{shlex.quote(str(script))} {arguments}".rstrip()
        return await self.run("bash", ["-c", command], cwd=cwd, env=env)
