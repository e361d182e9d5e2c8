"""
Loader for ``.netloy`` configuration files.

The file format is a flat list of ``Key = value`` lines. Lines starting with
``#`` are comments and values may span lines when wrapped in triple quotes::

    AppBaseName = HelloWorld
    AppDescription = \"\"\"
        First paragraph.

        * a list item
    \"\"\"

Keys are matched case-insensitively against the PascalCase aliases of
AppConfiguration.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from .. import __version__
from ..core.exceptions import ConfigurationError, OperationCancelled
from ..core.logging import get_logger
from ..models.configuration import AppConfiguration

logger = get_logger(__name__)

CONFIG_EXTENSION = ".netloy"
TRIPLE_QUOTE = '"""'

APP_ID_PATTERN = re.compile(r"^[a-z][a-z0-9]*(\.[a-z][a-z0-9]*)+$")
VERSION_PATTERN = re.compile(r"^\d+\.\d+\.\d+(\[\d+\])?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
PNG_NAME_PATTERN = re.compile(r"^.+\.(\d+)x(\d+)$")

ICON_EXTENSIONS = (".svg", ".ico", ".icns", ".png")

# File paths validated for existence when set
_OPTIONAL_FILES = (
    "app_license_file",
    "app_change_file",
    "desktop_file",
    "meta_file",
    "dotnet_post_publish",
    "dotnet_post_publish_on_windows",
    "macos_info_plist",
    "macos_entitlements",
    "setup_uninstall_script",
    "exe_wizard_image_file",
    "exe_wizard_small_image_file",
    "msi_ui_banner",
    "msi_ui_dialog",
)


def parse_entries(text: str) -> dict[str, str]:
    """Parse configuration text into a ``key -> raw value`` mapping.

    Later keys override earlier ones. Lines without ``=`` are skipped with a
    warning.
    """
    entries: dict[str, str] = {}
    buffer: list[str] = []
    current_key: str | None = None

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()

        if current_key is not None:
            if TRIPLE_QUOTE in line:
                buffer.append(line[: line.index(TRIPLE_QUOTE)])
                entries[current_key] = "\n".join(buffer).strip()
                buffer = []
                current_key = None
            else:
                buffer.append(line)
            continue

        if not line or line.startswith("#"):
            continue

        key, sep, value = line.partition("=")
        if not sep:
            logger.warning("Invalid configuration line, no '=' separator", line=number)
            continue
        key = key.strip()
        value = value.strip()

        if value.startswith(TRIPLE_QUOTE):
            if value.endswith(TRIPLE_QUOTE) and len(value) > 6:
                entries[key] = value[3:-3].strip()
            else:
                current_key = key
                rest = value[3:].strip()
                if rest:
                    buffer.append(rest)
        else:
            entries[key] = value

    if current_key is not None:
        logger.warning("Unterminated multi-line value", key=current_key)
        entries[current_key] = "\n".join(buffer).strip()

    logger.debug("Parsed configuration entries", count=len(entries))
    return entries


def _is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


class ConfigurationLoader:
    """Finds, parses and validates a .netloy file."""

    def __init__(
        self,
        skip_prompts: bool = False,
        confirm: Callable[[str], bool] | None = None,
        cwd: Path | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            skip_prompts: Answer yes to every question.
            confirm: Asks the user a yes/no question. Required unless skip_prompts is set.
            cwd: Directory searched for a configuration file; defaults to the process cwd.
        """
        self.skip_prompts = skip_prompts
        self._confirm = confirm
        self.cwd = cwd or Path.cwd()

    def _ask(self, question: str) -> bool:
        if self.skip_prompts or self._confirm is None:
            return True
        return self._confirm(question)

    def locate(self, config_path: Path | None = None) -> Path:
        """Resolve the configuration file to load.

        Raises:
            ConfigurationError: If no file exists at the given path or none is
                found in the working directory.
        """
        if config_path is not None:
            path = config_path if config_path.is_absolute() else self.cwd / config_path
            if not path.is_file():
                raise ConfigurationError(
                    message=f"Configuration file not found at specified path: {config_path}",
                    config_path=str(config_path),
                )
            return path.resolve()

        candidates = sorted(self.cwd.glob(f"*{CONFIG_EXTENSION}"))
        if not candidates:
            raise ConfigurationError(
                message=(
                    f"No {CONFIG_EXTENSION} configuration file found in current directory: {self.cwd}\n"
                    "Create one with 'netloy new conf' or specify it with --config-path"
                ),
            )
        if len(candidates) > 1:
            logger.warning(
                "Multiple configuration files found",
                using=candidates[0].name,
                hint="Use --config-path to choose one",
            )
        return candidates[0].resolve()

    def load(
        self,
        config_path: Path | None = None,
        project_path: Path | None = None,
        output_path: Path | None = None,
    ) -> AppConfiguration:
        """Load and validate the configuration.

        Args:
            config_path: Explicit configuration file, else one is searched.
            project_path: Project path given on the command line; makes DotnetProjectPath optional.
            output_path: Output path given on the command line; makes PackageName optional.

        Raises:
            ConfigurationError: With every validation problem found.
        """
        path = self.locate(config_path)
        logger.info("Loading configuration", path=str(path))

        entries = parse_entries(path.read_text(encoding="utf-8-sig"))
        config = self._map(entries, path.parent)
        self._validate(config, project_path=project_path, output_path=output_path)

        logger.info("Configuration loaded", app_id=config.app_id, version=config.app_version_release)
        return config

    def _map(self, entries: dict[str, str], directory: Path) -> AppConfiguration:
        lowered = {key.lower(): value for key, value in entries.items()}
        data: dict[str, Any] = {"config_directory": directory}

        for name, field in AppConfiguration.model_fields.items():
            if field.alias is None:
                continue
            raw = lowered.get(field.alias.lower())
            if raw is None:
                continue
            if field.annotation is bool:
                data[name] = raw.strip().lower() == "true"
            elif "Path" in str(field.annotation):
                data[name] = self._resolve(raw, directory)
            else:
                data[name] = raw

        return AppConfiguration.model_validate(data)

    @staticmethod
    def _resolve(raw: str, directory: Path) -> Path | None:
        value = raw.strip().replace("\\", "/")
        if not value:
            return None
        path = Path(value).expanduser()
        return path if path.is_absolute() else directory / path

    def _validate(
        self,
        config: AppConfiguration,
        project_path: Path | None,
        output_path: Path | None,
    ) -> None:
        errors: list[str] = []

        for key in ("AppBaseName", "AppFriendlyName", "AppShortSummary", "AppDescription", "AppLicenseId", "PublisherName"):
            if not getattr(config, _attr(key)):
                errors.append(f"{key} is required")

        if not config.app_id:
            errors.append("AppId is required")
        elif not APP_ID_PATTERN.match(config.app_id):
            errors.append(f"AppId '{config.app_id}' doesn't follow reverse domain notation (e.g., com.example.app)")

        if not config.app_version_release:
            errors.append("AppVersionRelease is required")
        elif not VERSION_PATTERN.match(config.app_version_release):
            errors.append(
                f"Invalid AppVersionRelease format: '{config.app_version_release}'. "
                "Expected format: 1.0.0 or 1.0.0[1]"
            )

        if config.publisher_id and not APP_ID_PATTERN.match(config.publisher_id):
            errors.append(
                f"PublisherId '{config.publisher_id}' doesn't follow reverse domain notation (e.g., com.example.app)"
            )

        if config.publisher_link_url:
            if not config.publisher_link_name:
                errors.append("PublisherLinkName is required")
            if not _is_url(config.publisher_link_url):
                errors.append(f"PublisherLinkUrl '{config.publisher_link_url}' is not a valid URL")

        if config.publisher_email and not EMAIL_PATTERN.match(config.publisher_email):
            logger.warning("Invalid PublisherEmail", email=config.publisher_email)

        errors.extend(self._collect_icons(config))

        for name in _OPTIONAL_FILES:
            path = getattr(config, name)
            if path is not None and not path.is_file():
                errors.append(f"{AppConfiguration.model_fields[name].alias} file not found: {path}")

        if config.dotnet_project_path is None and project_path is None:
            logger.debug("No DotnetProjectPath configured")
        elif config.dotnet_project_path is not None and not config.dotnet_project_path.exists() and project_path is None:
            errors.append(f"DotnetProjectPath not found: {config.dotnet_project_path}")

        if not config.package_name and output_path is None:
            errors.append("PackageName is required")

        if config.output_directory is None:
            errors.append("OutputDirectory is required")
        elif not config.output_directory.is_dir():
            if not self._ask(f"Directory not found: {config.output_directory}. Do you want to create it?"):
                raise OperationCancelled(message="Operation cancelled by user")
            logger.info("Creating output directory", path=str(config.output_directory))
            config.output_directory.mkdir(parents=True, exist_ok=True)

        try:
            float(config.setup_min_windows_version)
        except ValueError:
            if not self._ask("SetupMinWindowsVersion is not a valid version number. Continue with 10?"):
                raise OperationCancelled(message="Operation cancelled by user") from None
            logger.warning("SetupMinWindowsVersion is not a number, using 10", value=config.setup_min_windows_version)
            config.setup_min_windows_version = "10"

        if config.config_version and config.config_version != __version__:
            logger.warning(
                "Configuration version differs from tool version",
                config_version=config.config_version,
                tool_version=__version__,
            )

        if errors:
            raise ConfigurationError(message="Configuration validation failed:", errors=errors)

    @staticmethod
    def _collect_icons(config: AppConfiguration) -> list[str]:
        """Resolve IconFiles into ``config.icons`` and report bad entries."""
        errors: list[str] = []
        names = [part.strip() for part in re.split(r"[\n;]", config.icon_files) if part.strip()]
        if not names:
            return ["IconFiles is required"]

        icons: list[Path] = []
        for name in names:
            path = ConfigurationLoader._resolve(name, config.config_directory)
            if path is None or not path.is_file():
                errors.append(f"Couldn't find icon. Icon path: {path}")
                continue
            suffix = path.suffix.lower()
            if suffix not in ICON_EXTENSIONS:
                errors.append(f"Only SVG, ICO, ICNS and PNG icon formats are supported. File path: {path}")
                continue
            if suffix == ".png":
                match = PNG_NAME_PATTERN.match(path.stem)
                if match is None:
                    errors.append(
                        f"PNG icon file name should be in the format: <name>.<width>x<height>.png. File path: {path}"
                    )
                    continue
                if match.group(1) != match.group(2):
                    errors.append(f"PNG icon size should be square. Correct format: <name>.<size>x<size>.png. File path: {path}")
                    continue
            icons.append(path)

        if not icons and not errors:
            errors.append("No valid icon files specified")
        config.icons = icons
        return errors


def _attr(alias: str) -> str:
    """Attribute name of a PascalCase configuration key."""
    for name, field in AppConfiguration.model_fields.items():
        if field.alias == alias:
            return name
    raise KeyError(alias)


def default_configuration() -> str:
    """Content of a starter .netloy file."""
    return f'''\
########################################
# APP PREAMBLE
########################################

# Base name of the main executable, without directory or extension.
AppBaseName = MyApp
AppFriendlyName = My Application
# Reverse DNS identifier; keep it stable for the lifetime of the software.
AppId = com.example.myapp
# VERSION[RELEASE]; the release defaults to 1 when omitted.
AppVersionRelease = 1.0.0[1]
AppShortSummary = A brief description of your application
# Paragraphs are separated by an empty line; "* ", "+ " or "- " start list items.
AppDescription = """
    A detailed description of your application.
    You can use multiple lines here.
"""
# SPDX identifier such as MIT, GPL-3.0-or-later or LicenseRef-Proprietary.
AppLicenseId = MIT
AppLicenseFile =
# Changelog with headings "+ Version 1.0.0; 2025-01-31" and items "- change".
AppChangeFile =

########################################
# PUBLISHER
########################################

PublisherName = Your Name or Company
# Defaults to AppId when empty.
PublisherId =
PublisherCopyright = Copyright (C) Your Company
PublisherLinkName = Home Page
PublisherLinkUrl = https://example.com
PublisherEmail = contact@example.com

########################################
# DESKTOP INTEGRATION
########################################

DesktopNoDisplay = false
DesktopTerminal = false
# Custom desktop entry; it must contain Exec=${{INSTALL_EXEC}}.
DesktopFile =
StartCommand =
# Freedesktop main category: AudioVideo, Development, Game, Graphics, Network, Office, Utility...
PrimeCategory = Utility
MetaFile =
# One path per line; PNG names carry their size: name.32x32.png
IconFiles = """
"""
AutoGenerateIcons = false

########################################
# DOTNET PUBLISH
########################################

DotnetProjectPath =
DotnetPublishArgs = -p:Version=${{APP_VERSION}} --self-contained true -p:DebugType=None -p:DebugSymbols=false
DotnetPostPublish =
DotnetPostPublishOnWindows =
DotnetPostPublishArguments =

########################################
# PACKAGE OUTPUT
########################################

PackageName = MyApp
OutputDirectory = Deploy/OUT

########################################
# APPIMAGE / FLATPAK / RPM / DEBIAN
########################################

AppImageArgs =
FlatpakPlatformRuntime = org.freedesktop.Platform
FlatpakPlatformSdk = org.freedesktop.Sdk
FlatpakPlatformVersion = 23.08
FlatpakFinishArgs = """
    --socket=wayland
    --socket=x11
    --filesystem=host
    --share=network
"""
FlatpakBuilderArgs =
RpmAutoReq = false
RpmAutoProv = true
RpmRequires = """
    krb5-libs
    libicu
    openssl-libs
    zlib
"""
DebianRecommends = """
    libc6
    libgcc1
    libgssapi-krb5-2
    libicu
    libssl
    zlib1g
"""

########################################
# MACOS
########################################

MacOsInfoPlist =
MacOsEntitlements =

########################################
# WINDOWS SETUP
########################################

SetupGroupName =
SetupAdminInstall = false
SetupCommandPrompt =
SetupMinWindowsVersion = 10
SetupSignTool =
SetupUninstallScript =
MsiUpgradeCode =

########################################
# CONFIGURATION
########################################

ConfigVersion = {__version__}
'''
