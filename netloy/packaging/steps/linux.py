"""
Linux filesystem layout shared by the deb, rpm, pacman, AppImage and Flatpak builders.

Every format stages a ``usr/`` tree with the desktop entry, AppStream
metadata, hicolor icons and an optional launcher script under some base
directory; only the base directory and the install location differ.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from ...core.logging import get_logger
from ...core.types import PackageType
from ...macro import MacroId
from ...metadata.templates import DESKTOP_TEMPLATE
from ..context import BuildContext
from .publish import png_size
from .templates import materialize, render, write_text

logger = get_logger(__name__)

DESKTOP_EXTENSION = ".desktop"
METAINFO_EXTENSION = ".appdata.xml"

ICON_SIZES = (16, 24, 32, 48, 64, 96, 128, 256, 512, 1024)

LINUX_ARCHITECTURES: dict[PackageType, dict[str, str]] = {
    PackageType.DEB: {"linux-x64": "amd64", "linux-arm64": "arm64", "linux-x86": "i386", "linux-arm": "armhf"},
    PackageType.RPM: {"linux-x64": "x86_64", "linux-arm64": "aarch64", "linux-x86": "i686", "linux-arm": "armhfp"},
    PackageType.PACMAN: {"linux-x64": "x86_64", "linux-arm64": "aarch64", "linux-x86": "i686", "linux-arm": "armv7h"},
    PackageType.APPIMAGE: {"linux-x64": "x86_64", "linux-arm64": "aarch64", "linux-x86": "i686", "linux-arm": "armhf"},
    PackageType.FLATPAK: {"linux-x64": "x86_64", "linux-arm64": "aarch64", "linux-x86": "i386", "linux-arm": "arm"},
}


def linux_architecture(package_type: PackageType, runtime: str) -> str:
    """Architecture name a Linux package format uses for ``runtime``.

    Unknown runtimes fall back to the x64 name of the format.

    Raises:
        ValueError: If ``package_type`` is not a Linux format.
    """
    mapping = LINUX_ARCHITECTURES.get(package_type)
    if mapping is None:
        raise ValueError(f"Unknown Linux package format: {package_type.value}")
    return mapping.get(runtime.lower(), mapping["linux-x64"])


def make_executable(path: Path) -> None:
    path.chmod(path.stat().st_mode | 0o111)


class LinuxLayoutSteps:
    """Populates ``<base>/<prefix>`` for one Linux build."""

    def __init__(self, context: BuildContext, base_dir: Path, install_exec: str, prefix: str = "usr") -> None:
        """Initialize the layout and publish the Linux macros.

        Args:
            context: Build context.
            base_dir: Directory that receives the prefix tree.
            install_exec: Absolute path of the executable once installed.
            prefix: Tree below ``base_dir`` holding ``bin`` and ``share``; empty for Flatpak.
        """
        self.context = context
        self.base_dir = base_dir
        self.install_exec = install_exec

        self.usr_dir = base_dir / prefix if prefix else base_dir
        self.bin_dir = self.usr_dir / "bin"
        self.share_dir = self.usr_dir / "share"
        self.applications_dir = self.share_dir / "applications"
        self.metainfo_dir = self.share_dir / "metainfo"
        self.icons_dir = self.share_dir / "icons" / "hicolor"
        self.pixmaps_dir = self.share_dir / "pixmaps"

        app_id = context.config.app_id
        self.desktop_path = self.applications_dir / f"{app_id}{DESKTOP_EXTENSION}"
        self.metainfo_path = self.metainfo_dir / f"{app_id}{METAINFO_EXTENSION}"

        self.architecture = linux_architecture(context.package_type, context.runtime)
        context.macros.set_value(MacroId.INSTALL_EXEC, install_exec)
        context.macros.set_value(MacroId.PACKAGE_ARCH, self.architecture)

    @property
    def launcher_path(self) -> Path | None:
        command = self.context.config.start_command
        return self.bin_dir / command if command else None

    def create_directories(self) -> None:
        for directory in (self.bin_dir, self.applications_dir, self.metainfo_dir, self.pixmaps_dir):
            directory.mkdir(parents=True, exist_ok=True)
        for size in ICON_SIZES:
            (self.icons_dir / f"{size}x{size}" / "apps").mkdir(parents=True, exist_ok=True)
        (self.icons_dir / "scalable" / "apps").mkdir(parents=True, exist_ok=True)

    async def write_desktop_file(self, destination: Path | None = None) -> Path:
        """Materialize the desktop entry with LF line endings.

        The configured DesktopFile is used when set, else the built-in entry.
        """
        destination = destination or self.desktop_path
        source = self.context.config.desktop_file
        if source is not None and source.is_file():
            await materialize(source, destination, self.context.macros, normalize_newlines=True)
        else:
            await render(DESKTOP_TEMPLATE, destination, self.context.macros)
        logger.info("Desktop file written", path=str(destination))
        return destination

    async def write_metainfo_file(self) -> Path | None:
        source = self.context.config.meta_file
        if source is None or not source.is_file():
            logger.info("MetaInfo file not provided, skipping")
            return None
        await materialize(source, self.metainfo_path, self.context.macros, normalize_newlines=True)
        logger.info("MetaInfo file written", path=str(self.metainfo_path))
        return self.metainfo_path

    def copy_icons(self, include_pixmaps: bool = True) -> None:
        """Copy PNG icons into hicolor size directories and the SVG into ``scalable``."""
        config = self.context.config
        app_id = config.app_id
        pngs = [icon for icon in config.icons_with_suffix(".png") if icon.is_file()]

        for icon in pngs:
            size = png_size(icon)
            if size not in ICON_SIZES:
                logger.warning("Unable to determine icon size, skipping", icon=icon.name)
                continue
            target = self.icons_dir / f"{size}x{size}" / "apps" / f"{app_id}.png"
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(icon, target)

        svg = config.find_icon(".svg")
        if svg is not None and svg.is_file():
            shutil.copyfile(svg, self.icons_dir / "scalable" / "apps" / f"{app_id}.svg")
            logger.info("SVG icon copied to scalable directory")

        if include_pixmaps and pngs:
            largest = max(pngs, key=png_size)
            shutil.copyfile(largest, self.pixmaps_dir / f"{app_id}.png")

    async def write_launcher(self) -> Path | None:
        """Write ``usr/bin/<StartCommand>`` that execs the installed binary."""
        launcher = self.launcher_path
        if launcher is None:
            logger.info("No start command configured, skipping launcher script")
            return None

        content = (
            "#!/bin/bash\n"
            f"# Launcher script for {self.context.config.app_base_name}\n"
            "\n"
            f'exec {self.install_exec} "$@"\n'
        )
        await write_text(launcher, content)
        make_executable(launcher)
        logger.info("Launcher script created", path=str(launcher))
        return launcher

    def copy_license(self, destination: Path) -> None:
        license_file = self.context.config.app_license_file
        if license_file is None:
            return
        if not license_file.is_file():
            logger.warning("License file not found, skipping", path=str(license_file))
            return
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(license_file, destination)

    async def populate(self, include_pixmaps: bool = True) -> None:
        """Create the tree and write every shared file."""
        self.create_directories()
        await self.write_desktop_file()
        await self.write_metainfo_file()
        self.copy_icons(include_pixmaps=include_pixmaps)
        await self.write_launcher()


def set_tree_permissions(root: Path, executables: list[Path], skip: Path | None = None) -> None:
    """755 directories, 644 files, 755 for ``executables``.

    Failures are logged as warnings.
    """
    for dirpath, _dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        try:
            current.chmod(0o755)
            for name in filenames:
                path = current / name
                if skip is not None and path.is_relative_to(skip):
                    continue
                if not path.is_symlink():
                    path.chmod(0o644)
        except OSError as e:
            logger.warning("Failed to set permissions", path=dirpath, error=str(e))

    for path in executables:
        try:
            path.chmod(0o755)
        except OSError as e:
            logger.warning("Failed to set executable permission", path=str(path), error=str(e))


def published_executables(publish_dir: Path, exec_name: str) -> list[Path]:
    """Main executable plus extension-less files and shared objects under ``publish_dir``."""
    found: list[Path] = []
    main = publish_dir / exec_name
    if main.is_file():
        found.append(main)
    for path in publish_dir.rglob("*"):
        if path.is_file() and not path.is_symlink() and path.suffix.lower() in ("", ".so") and path not in found:
            found.append(path)
    return found
