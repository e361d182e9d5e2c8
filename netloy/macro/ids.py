"""
Macro identifiers.

The member order is the expansion order. Each identifier owns exactly one
placeholder pattern, ``${NAME}``.
"""

from __future__ import annotations

from enum import Enum


class MacroId(str, Enum):
    """Closed set of macro identifiers."""

    CONF_FILE_DIRECTORY = "CONF_FILE_DIRECTORY"
    APP_BASE_NAME = "APP_BASE_NAME"
    APP_FRIENDLY_NAME = "APP_FRIENDLY_NAME"
    APP_ID = "APP_ID"
    APP_SHORT_SUMMARY = "APP_SHORT_SUMMARY"
    APP_LICENSE_ID = "APP_LICENSE_ID"
    APP_EXEC_NAME = "APP_EXEC_NAME"
    PUBLISHER_NAME = "PUBLISHER_NAME"
    PUBLISHER_ID = "PUBLISHER_ID"
    PUBLISHER_COPYRIGHT = "PUBLISHER_COPYRIGHT"
    PUBLISHER_LINK_NAME = "PUBLISHER_LINK_NAME"
    PUBLISHER_LINK_URL = "PUBLISHER_LINK_URL"
    PUBLISHER_EMAIL = "PUBLISHER_EMAIL"
    DESKTOP_NODISPLAY = "DESKTOP_NODISPLAY"
    DESKTOP_INTEGRATE = "DESKTOP_INTEGRATE"
    DESKTOP_TERMINAL = "DESKTOP_TERMINAL"
    PRIME_CATEGORY = "PRIME_CATEGORY"
    APP_VERSION = "APP_VERSION"
    PACKAGE_RELEASE = "PACKAGE_RELEASE"
    PACKAGE_TYPE = "PACKAGE_TYPE"
    DOTNET_RUNTIME = "DOTNET_RUNTIME"
    PACKAGE_ARCH = "PACKAGE_ARCH"
    PUBLISH_OUTPUT_DIRECTORY = "PUBLISH_OUTPUT_DIRECTORY"
    APPSTREAM_DESCRIPTION_XML = "APPSTREAM_DESCRIPTION_XML"
    APPSTREAM_CHANGELOG_XML = "APPSTREAM_CHANGELOG_XML"
    PRIMARY_ICON_FILE_NAME = "PRIMARY_ICON_FILE_NAME"
    PRIMARY_ICON_FILE_PATH = "PRIMARY_ICON_FILE_PATH"
    INSTALL_EXEC = "INSTALL_EXEC"

    @property
    def placeholder(self) -> str:
        """Literal text replaced by expansion, e.g. ``${APP_ID}``."""
        return "${" + self.value + "}"

    @property
    def description(self) -> str:
        return MACRO_DESCRIPTIONS[self]


MACRO_DESCRIPTIONS: dict[MacroId, str] = {
    MacroId.CONF_FILE_DIRECTORY: "Directory containing the .netloy configuration file",
    MacroId.APP_BASE_NAME: "Base name of the application executable",
    MacroId.APP_FRIENDLY_NAME: "Human readable application name",
    MacroId.APP_ID: "Reverse-DNS application identifier",
    MacroId.APP_SHORT_SUMMARY: "One line application summary",
    MacroId.APP_LICENSE_ID: "SPDX license identifier",
    MacroId.APP_EXEC_NAME: "Executable file name (with .exe on Windows runtimes)",
    MacroId.PUBLISHER_NAME: "Publisher or author name",
    MacroId.PUBLISHER_ID: "Publisher identifier (defaults to APP_ID)",
    MacroId.PUBLISHER_COPYRIGHT: "Copyright statement",
    MacroId.PUBLISHER_LINK_NAME: "Publisher website title",
    MacroId.PUBLISHER_LINK_URL: "Publisher website URL",
    MacroId.PUBLISHER_EMAIL: "Publisher contact email",
    MacroId.DESKTOP_NODISPLAY: "true when the desktop entry is hidden",
    MacroId.DESKTOP_INTEGRATE: "Inverse of DESKTOP_NODISPLAY",
    MacroId.DESKTOP_TERMINAL: "true when the application runs in a terminal",
    MacroId.PRIME_CATEGORY: "Primary category (macOS bundles get the LSApplicationCategoryType form)",
    MacroId.APP_VERSION: "Application version without release suffix",
    MacroId.PACKAGE_RELEASE: "Package release number",
    MacroId.PACKAGE_TYPE: "Package type being built (lowercase)",
    MacroId.DOTNET_RUNTIME: "Runtime description of the build host",
    MacroId.PACKAGE_ARCH: "Target runtime identifier or format specific architecture",
    MacroId.PUBLISH_OUTPUT_DIRECTORY: "Directory the publish step wrote binaries to",
    MacroId.APPSTREAM_DESCRIPTION_XML: "AppDescription rendered as AppStream XML",
    MacroId.APPSTREAM_CHANGELOG_XML: "AppChangeFile rendered as AppStream releases",
    MacroId.PRIMARY_ICON_FILE_NAME: "File name of the icon chosen for this package type",
    MacroId.PRIMARY_ICON_FILE_PATH: "Full path of the icon chosen for this package type",
    MacroId.INSTALL_EXEC: "Installed path of the executable (Linux formats)",
}
