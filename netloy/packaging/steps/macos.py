"""
macOS bundle steps.

Lays out ``<FriendlyName>.app/Contents/{MacOS,Resources}``, writes the
bundle metadata and stages disk images. Signing and notarization live in
``netloy.notarization``.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from ...tools.invoker import ToolInvoker
from ...tools.locator import ToolLocator
from ..context import BuildContext
from .publish import check_result
from .templates import materialize

logger = get_logger(__name__)

PKG_INFO = "APPL????"


class MacBundleSteps:
    """Steps shared by the app and dmg builders."""

    def __init__(self, context: BuildContext, invoker: ToolInvoker, locator: ToolLocator) -> None:
        self.context = context
        self.invoker = invoker
        self.locator = locator
        self.entitlements_path: Path | None = None

    @property
    def bundle_dir(self) -> Path:
        return self.context.root_dir / f"{self.context.config.app_friendly_name}.app"

    @property
    def contents_dir(self) -> Path:
        return self.bundle_dir / "Contents"

    @property
    def macos_dir(self) -> Path:
        return self.contents_dir / "MacOS"

    @property
    def resources_dir(self) -> Path:
        return self.contents_dir / "Resources"

    @property
    def main_executable(self) -> Path:
        return self.macos_dir / self.context.app_exec_name

    def validation_errors(self) -> list[str]:
        """Problems that make a bundle impossible to build."""
        config = self.context.config
        errors: list[str] = []
        if config.find_icon(".icns") is None:
            errors.append("No .icns icon file found. macOS package requires an .icns icon file.")
        if config.macos_info_plist is None:
            errors.append("Info.plist file not found: MacOsInfoPlist is not set")
        elif not config.macos_info_plist.is_file():
            errors.append(f"Info.plist file not found: {config.macos_info_plist}")
        if config.macos_entitlements is not None and not config.macos_entitlements.is_file():
            errors.append(f"Entitlements file not found: {config.macos_entitlements}")
        return errors

    async def create_skeleton(self) -> None:
        if self.bundle_dir.exists():
            logger.info("Removing existing app bundle", path=str(self.bundle_dir))
            shutil.rmtree(self.bundle_dir)
        self.macos_dir.mkdir(parents=True)
        self.resources_dir.mkdir(parents=True)
        logger.info("Created app bundle structure", path=str(self.bundle_dir))

    async def copy_icon(self) -> None:
        icon = self.context.config.find_icon(".icns")
        if icon is None or not icon.is_file():
            raise ValidationError.from_errors(
                ["No .icns icon file found. macOS package requires an .icns icon file."]
            )
        target = self.resources_dir / f"{self.context.config.app_base_name}.icns"
        shutil.copyfile(icon, target)
        logger.info("Copied bundle icon", path=str(target))

    async def write_metadata(self) -> None:
        """Write Info.plist and, when configured, the expanded entitlements file."""
        config = self.context.config
        macros = self.context.macros
        plist = self.contents_dir / "Info.plist"

        await materialize(config.macos_info_plist, plist, macros)

        if config.macos_entitlements is not None:
            self.entitlements_path = self.context.root_dir / config.macos_entitlements.name
            await materialize(config.macos_entitlements, self.entitlements_path, macros)
            logger.info("Entitlements prepared", path=str(self.entitlements_path))

    async def write_pkginfo(self) -> None:
        (self.contents_dir / "PkgInfo").write_bytes(PKG_INFO.encode("ascii"))

    async def set_permissions(self) -> None:
        """Make the bundle executable; failures are logged and ignored."""
        steps = (
            (["+x", str(self.main_executable)], "Failed to set execute permission on main executable"),
            (["-R", "a+rx", str(self.bundle_dir)], "Failed to set permissions on app bundle"),
        )
        for args, warning in steps:
            result = await self.invoker.run("chmod", args)
            if not result.succeeded:
                logger.warning(warning, output=result.message)

    async def create_disk_image(self, output: Path) -> Path:
        """Stage the bundle with an Applications link and run ``hdiutil create``.

        Raises:
            ToolExecutionError: If hdiutil fails.
        """
        hdiutil = str(self.locator.require("hdiutil"))
        staging = self.context.root_dir / "dmg"
        if staging.exists():
            shutil.rmtree(staging)
        staging.mkdir(parents=True)

        shutil.copytree(self.bundle_dir, staging / self.bundle_dir.name, symlinks=True)
        os.symlink("/Applications", staging / "Applications")

        if output.exists():
            output.unlink()
        result = await self.invoker.run(
            hdiutil,
            [
                "create",
                "-volname",
                self.context.config.app_friendly_name,
                "-srcfolder",
                str(staging),
                "-ov",
                "-format",
                "UDZO",
                str(output),
            ],
        )
        check_result(result, "hdiutil create")
        logger.info("Created disk image", path=str(output))
        return output

