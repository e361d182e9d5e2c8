"""
Per-build working state.

A BuildContext is created when a builder is constructed. It owns the
working directory tree, the output location and name, the parsed version
and the global macros shared by every package type.
"""

from __future__ import annotations

import platform
import shutil
from collections.abc import Callable
from pathlib import Path

from ..core.config import Settings, get_settings
from ..core.exceptions import CleanupFailure, OperationCancelled, ValidationError
from ..core.logging import get_logger
from ..core.types import HostOS, PackageType
from ..macro import MacroId, MacroTable
from ..metadata.appstream import changelog_xml, description_xml
from ..models.configuration import AppConfiguration
from ..models.request import BuildRequest
from ..tools.locator import ToolLocator

logger = get_logger(__name__)

OUTPUT_EXTENSIONS: dict[PackageType, str] = {
    PackageType.EXE: ".exe",
    PackageType.MSI: ".msi",
    PackageType.APP: ".app.zip",
    PackageType.DMG: ".dmg",
    PackageType.APPIMAGE: ".AppImage",
    PackageType.DEB: ".deb",
    PackageType.RPM: ".rpm",
    PackageType.FLATPAK: ".flatpak",
    PackageType.PACMAN: ".pkg.tar.zst",
}


def split_version(version_release: str) -> tuple[str, str]:
    """Split ``1.2.3[4]`` into ``("1.2.3", "4")``; the release defaults to ``1``."""
    if "[" not in version_release:
        return version_release.replace("]", ""), "1"
    version, _, rest = version_release.partition("[")
    release = rest.split("]", 1)[0].strip()
    return version, release or "1"


def portable_extension(windows_host: bool) -> str:
    return ".zip" if windows_host else ".tar.gz"


def _always_yes(_question: str) -> bool:
    return True


class BuildContext:
    """Directories, names and macros of one build."""

    def __init__(
        self,
        request: BuildRequest,
        config: AppConfiguration,
        settings: Settings | None = None,
        confirm: Callable[[str], bool] | None = None,
        windows_host: bool | None = None,
    ) -> None:
        """Create the context and its working tree.

        The root working directory is deleted and recreated.

        Args:
            request: Build request with a resolved runtime.
            config: Loaded application configuration.
            settings: Process settings; decides where the working tree lives.
            confirm: Yes/no prompt used for destructive actions. Ignored when the
                request skips prompts.
            windows_host: Override of host detection for the portable extension.
        """
        self.request = request
        self.config = config
        self.settings = settings or get_settings()
        self.confirm = _always_yes if request.skip_prompts or confirm is None else confirm
        self.windows_host = ToolLocator().host_os == HostOS.WINDOWS if windows_host is None else windows_host

        self.temp_root = self.settings.work_root / config.app_base_name
        self.root_dir = self.temp_root / request.package_type.value
        self.icons_dir = self.temp_root / "icons"
        self.scripts_dir = self.temp_root / "scripts"

        version, release = split_version(config.app_version_release)
        self.app_version = request.app_version or version
        self.package_release = release

        self.output_dir = self._output_directory()
        self.output_name = self._output_name()
        self.app_exec_name = (
            f"{config.app_base_name}.exe" if request.is_windows_runtime else config.app_base_name
        )

        self.macros = MacroTable(request.package_type)
        self._create_directories()
        self._stage_icons()
        self._set_global_macros()

    @property
    def package_type(self) -> PackageType:
        return self.request.package_type

    @property
    def runtime(self) -> str:
        return self.request.runtime or ""

    @property
    def output_path(self) -> Path:
        """Full path of the final artifact."""
        return self.output_dir / self.output_name

    def _requested_output(self) -> Path | None:
        path = self.request.output_path
        if path is None or path.is_absolute():
            return path
        return (self.config.output_directory or self.config.config_directory) / path

    def _output_directory(self) -> Path:
        path = self._requested_output()
        if path is None:
            return self.config.output_directory or self.config.config_directory
        return path if path.is_dir() else path.parent

    def _output_name(self) -> str:
        path = self._requested_output()
        if path is not None and path.name and not path.is_dir():
            return path.name

        if self.package_type == PackageType.PORTABLE:
            ext = portable_extension(self.windows_host)
        else:
            ext = OUTPUT_EXTENSIONS[self.package_type]
        return f"{self.config.package_name}.{self.app_version}-{self.package_release}.{self.runtime}{ext}"

    def _create_directories(self) -> None:
        if self.root_dir.exists():
            shutil.rmtree(self.root_dir)
        self.root_dir.mkdir(parents=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.icons_dir.mkdir(parents=True, exist_ok=True)
        self.scripts_dir.mkdir(parents=True, exist_ok=True)

    def _stage_icons(self) -> None:
        """Copy configured icons into the icons directory under canonical names.

        ``config.icons`` is rewritten in place to point at the staged copies,
        e.g. ``logo.32x32.png`` becomes ``<AppBaseName>.32x32.png``.
        """
        if self.config.auto_generate_icons:
            logger.warning("AutoGenerateIcons is set but icon resizing is not performed; using icons as given")

        staged: list[Path] = []
        for icon in self.config.icons:
            if not icon.is_file():
                logger.warning("Icon not found, skipping", path=str(icon))
                continue
            suffix = icon.suffix.lower()
            if suffix == ".png":
                size = icon.stem.rsplit(".", 1)[-1]
                target = self.icons_dir / f"{self.config.app_base_name}.{size}{suffix}"
            else:
                target = self.icons_dir / f"{self.config.app_base_name}{suffix}"
            if icon.resolve() != target.resolve():
                shutil.copyfile(icon, target)
            staged.append(target)
        self.config.icons = staged

    def _set_global_macros(self) -> None:
        config = self.config
        m = self.macros
        m.set_value(MacroId.CONF_FILE_DIRECTORY, str(config.config_directory))
        m.set_value(MacroId.APP_BASE_NAME, config.app_base_name)
        m.set_value(MacroId.APP_FRIENDLY_NAME, config.app_friendly_name)
        m.set_value(MacroId.APP_ID, config.app_id)
        m.set_value(MacroId.APP_SHORT_SUMMARY, config.app_short_summary)
        m.set_value(MacroId.APP_LICENSE_ID, config.app_license_id)
        m.set_value(MacroId.APP_EXEC_NAME, self.app_exec_name)
        m.set_value(MacroId.PUBLISHER_NAME, config.publisher_name)
        m.set_value(MacroId.PUBLISHER_ID, config.publisher_id or config.app_id)
        m.set_value(MacroId.PUBLISHER_COPYRIGHT, config.publisher_copyright)
        m.set_value(MacroId.PUBLISHER_LINK_NAME, config.publisher_link_name)
        m.set_value(MacroId.PUBLISHER_LINK_URL, config.publisher_link_url)
        m.set_value(MacroId.PUBLISHER_EMAIL, config.publisher_email)
        m.set_value(MacroId.DESKTOP_NODISPLAY, str(config.desktop_no_display).lower())
        m.set_value(MacroId.DESKTOP_INTEGRATE, str(not config.desktop_no_display).lower())
        m.set_value(MacroId.DESKTOP_TERMINAL, str(config.desktop_terminal).lower())
        m.set_value(MacroId.PRIME_CATEGORY, config.prime_category)
        m.set_value(MacroId.APP_VERSION, self.app_version)
        m.set_value(MacroId.PACKAGE_RELEASE, self.package_release)
        m.set_value(MacroId.PACKAGE_TYPE, self.package_type.value)
        m.set_value(MacroId.DOTNET_RUNTIME, f"{platform.system()} {platform.release()}".strip())
        m.set_value(MacroId.PACKAGE_ARCH, self.runtime)
        m.set_value(MacroId.APPSTREAM_DESCRIPTION_XML, description_xml(config.app_description))
        m.set_value(MacroId.APPSTREAM_CHANGELOG_XML, changelog_xml(config.app_change_file))

    def resolve_project_path(self) -> Path:
        """Project file to publish: the request override, else DotnetProjectPath.

        A directory is searched for a single ``*.csproj``; with several the
        user is asked whether to take the first one.

        Raises:
            ValidationError: If no project file can be found.
            OperationCancelled: If the user declines the first of several projects.
        """
        path = self.request.project_path or self.config.dotnet_project_path
        if path is None:
            raise ValidationError.from_errors(
                ["Project path is not defined. Set DotnetProjectPath or pass --project"]
            )
        if not path.is_absolute():
            base = Path.cwd() if self.request.project_path else self.config.config_directory
            path = base / path
        path = path.resolve()

        if path.is_file():
            return path
        if not path.is_dir():
            raise ValidationError.from_errors([f"Project file not found. File path: {path}"])

        projects = sorted(path.glob("*.csproj"))
        if not projects:
            raise ValidationError.from_errors([f"No project file found in the specified directory: {path}"])
        if len(projects) > 1:
            logger.warning("Multiple project files found", directory=str(path))
            if not self.confirm("Multiple project files found. Do you want to use the first one?"):
                raise OperationCancelled(message="Operation cancelled by user")
            logger.info("Using first project file", project=str(projects[0]))
        return projects[0]

    def clear(self) -> None:
        """Delete the root working directory.

        Raises:
            CleanupFailure: If the directory could not be removed.
        """
        if not self.root_dir.exists():
            return
        logger.info("Cleaning build artifacts", path=str(self.root_dir))
        try:
            shutil.rmtree(self.root_dir)
        except OSError as e:
            raise CleanupFailure(message=str(e), path=str(self.root_dir), cause=e) from e
