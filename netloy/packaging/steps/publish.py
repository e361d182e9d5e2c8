"""
Publish step.

Produces the application binaries in a target directory, either by running
``dotnet publish`` (or MSBuild for .NET Framework projects) or by copying a
pre-built binary directory, then runs the user's post-publish script.
"""

from __future__ import annotations

import os
import re
import shlex
import shutil
from pathlib import Path

from ...core.exceptions import OperationCancelled, ToolExecutionError
from ...core.logging import get_logger
from ...core.types import FrameworkKind, HostOS, PackageType
from ...macro import MacroId
from ...tools.invoker import ToolInvoker, ToolResult
from ...tools.locator import ToolLocator
from ..context import BuildContext
from .templates import read_text, write_text

logger = get_logger(__name__)

PNG_SIZE = re.compile(r"\.(\d+)x\d+$")

_MSBUILD_PLATFORMS = {"win-x64": "x64", "win-x86": "x86", "win-arm64": "ARM64"}

_WINDOWS_TYPES = (PackageType.EXE, PackageType.MSI)
_LINUX_TYPES = (
    PackageType.APPIMAGE,
    PackageType.DEB,
    PackageType.RPM,
    PackageType.FLATPAK,
    PackageType.PACMAN,
)


def check_result(result: ToolResult, action: str) -> ToolResult:
    """Raise ToolExecutionError unless ``result`` succeeded."""
    if not result.succeeded:
        logger.error(f"{action} failed", tool=result.tool, returncode=result.returncode, output=result.message)
        raise ToolExecutionError(
            message=f"{action} failed. {result.message}".strip(),
            tool_name=result.tool,
            returncode=result.returncode,
        )
    return result


def png_size(path: Path) -> int:
    """Pixel width encoded in a ``name.<W>x<H>.png`` file name, or 0."""
    match = PNG_SIZE.search(path.stem)
    return int(match.group(1)) if match else 0


class PublishSteps:
    """Publishing shared by all builders."""

    def __init__(self, context: BuildContext, invoker: ToolInvoker, locator: ToolLocator) -> None:
        self.context = context
        self.invoker = invoker
        self.locator = locator

    async def publish(self, output_dir: Path) -> None:
        """Fill ``output_dir`` with the application binaries.

        Raises:
            OperationCancelled: If the user declines deleting an existing directory.
            ToolExecutionError: If publishing or the post-publish script fails.
        """
        self._prepare_output(output_dir)
        self.context.macros.set_value(MacroId.PUBLISH_OUTPUT_DIRECTORY, str(output_dir))
        self.set_primary_icon()

        request = self.context.request
        if request.binary_path is not None:
            self._copy_binaries(request.binary_path, output_dir)
        elif request.framework == FrameworkKind.NETFRAMEWORK:
            await self._publish_with_msbuild(output_dir)
        else:
            await self._publish_with_dotnet(output_dir)

        await self.run_post_publish_script()
        logger.info("Publish completed", output=str(output_dir))

    def _prepare_output(self, output_dir: Path) -> None:
        if output_dir.exists() and any(output_dir.iterdir()):
            if not self.context.confirm(
                f"Build directory already exists. Directory path: {output_dir}. Do you want to delete it?"
            ):
                raise OperationCancelled(message="Operation cancelled by user")
            logger.info("Deleting existing build directory", path=str(output_dir))
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

    def primary_icon(self) -> Path | None:
        """Icon used for the current package type.

        ``.ico`` for Windows installers, ``.icns`` for macOS bundles, and for
        Linux formats ``.svg`` when present, else the largest ``.png``.
        """
        config = self.context.config
        package_type = self.context.package_type

        if package_type in _WINDOWS_TYPES:
            return config.find_icon(".ico")
        if package_type.is_macos_bundle:
            return config.find_icon(".icns")
        if package_type in _LINUX_TYPES:
            svg = config.find_icon(".svg")
            if svg is not None and svg.is_file():
                return svg
            pngs = config.icons_with_suffix(".png")
            if not pngs:
                logger.warning("There is no PNG primary icon")
                return None
            return max(pngs, key=png_size)
        return None

    def set_primary_icon(self) -> None:
        icon = self.primary_icon()
        if icon is None:
            logger.warning("No primary icon for package type", package_type=self.context.package_type.value)
            return
        if not icon.is_file():
            logger.warning("Primary icon file not found", path=str(icon))
        self.context.macros.set_value(MacroId.PRIMARY_ICON_FILE_NAME, icon.name)
        self.context.macros.set_value(MacroId.PRIMARY_ICON_FILE_PATH, str(icon))

    def _copy_binaries(self, source: Path, output_dir: Path) -> None:
        logger.info("Copying binaries", source=str(source), destination=str(output_dir))
        shutil.copytree(source, output_dir, dirs_exist_ok=True)
        count = sum(1 for p in output_dir.rglob("*") if p.is_file())
        logger.info("Copied binaries", files=count)

    def publish_arguments(self, project: Path, output_dir: Path) -> list[str]:
        """Arguments for ``dotnet publish``."""
        context = self.context
        extra = context.macros.expand(context.config.dotnet_publish_args)
        args = [
            "publish",
            str(project),
            "-c",
            context.request.publish_configuration,
            "-r",
            context.runtime,
            "-o",
            str(output_dir),
            *shlex.split(extra),
        ]

        if context.package_type.is_macos_bundle:
            if "useapphost" not in extra.lower():
                if context.confirm("Add -p:UseAppHost=true to dotnet publish? It is required to sign and notarize the app."):
                    logger.warning("Adding -p:UseAppHost=true for macOS bundle packaging")
                    args.append("-p:UseAppHost=true")
            elif "useapphost=false" in extra.lower():
                logger.warning("DotnetPublishArgs contains UseAppHost=false; signing or notarization may fail")
        return args

    async def _publish_with_dotnet(self, output_dir: Path) -> None:
        project = self.context.resolve_project_path()
        if self.context.request.clean:
            logger.info("Cleaning .NET project", project=str(project))
            check_result(await self.invoker.run("dotnet", ["clean", str(project)]), "dotnet clean")

        logger.info("Building .NET project", project=str(project))
        result = await self.invoker.run("dotnet", self.publish_arguments(project, output_dir))
        check_result(result, "dotnet publish")
        if result.stderr.strip():
            logger.warning("dotnet publish warnings", output=result.stderr.strip())

    async def _publish_with_msbuild(self, output_dir: Path) -> None:
        context = self.context
        project = context.resolve_project_path()
        msbuild = str(self.locator.require("msbuild"))

        if context.request.clean:
            check_result(await self.invoker.run(msbuild, [str(project), "/t:Clean"]), "MSBuild clean")

        platform_target = _MSBUILD_PLATFORMS.get(context.runtime)
        if platform_target is None:
            raise ToolExecutionError(
                message=f"Unsupported runtime for MSBuild: {context.runtime}",
                tool_name="msbuild",
                returncode=-1,
            )
        args = [
            str(project),
            "/t:Build",
            f"/p:Configuration={context.request.publish_configuration}",
            f"/p:OutputPath={output_dir}",
            f"/p:PlatformTarget={platform_target}",
            "/p:Prefer32Bit=false",
            *shlex.split(context.macros.expand(context.config.dotnet_publish_args)),
        ]
        logger.info("Building .NET Framework project with MSBuild", project=str(project))
        check_result(await self.invoker.run(msbuild, args), "MSBuild")

    async def run_post_publish_script(self) -> None:
        """Expand and run the configured post-publish script.

        A non-zero exit status is fatal.
        """
        config = self.context.config
        windows = self.locator.host_os == HostOS.WINDOWS
        script = config.dotnet_post_publish_on_windows if windows else config.dotnet_post_publish

        if script is None:
            logger.debug("No post-publish script configured")
            return
        if not script.is_file():
            logger.warning("Post-publish script not found, skipping", path=str(script))
            return

        logger.info("Running post-publish script", path=str(script))
        content = self.context.macros.expand(await read_text(script))

        blocking = r"\bpause\b" if windows else r"\bread\b"
        if re.search(blocking, content):
            logger.warning("Post-publish script waits for input and may never finish", script=script.name)

        target = self.context.scripts_dir / script.name
        await write_text(target, content if windows else content.replace("\r\n", "\n"))
        if not windows:
            os.chmod(target, 0o755)

        arguments = self.context.macros.expand(config.dotnet_post_publish_arguments)
        result = await self.invoker.run_script(
            target,
            arguments=arguments,
            env=self.context.macros.environment(),
            cwd=config.config_directory,
        )
        if result.stdout.strip():
            logger.info("Post-publish script output", output=result.stdout.strip())
        check_result(result, "Post-publish script")
