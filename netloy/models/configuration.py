"""
Application configuration model.

Mirrors the keys of a ``.netloy`` file. Attribute names are snake_case, the
aliases are the PascalCase keys used in the file. The configuration loader
owns construction; builders only read it, except for ``icons`` which the icon
step may normalize in place.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class AppConfiguration(BaseModel):
    """Declarative application metadata read from a .netloy file."""

    # APP PREAMBLE
    app_base_name: str = Field(default="", alias="AppBaseName", description="Executable base name")
    app_friendly_name: str = Field(default="", alias="AppFriendlyName")
    app_id: str = Field(default="", alias="AppId", description="Reverse-DNS application id")
    app_version_release: str = Field(default="", alias="AppVersionRelease", description="1.0.0 or 1.0.0[1]")
    app_short_summary: str = Field(default="", alias="AppShortSummary")
    app_description: str = Field(default="", alias="AppDescription")
    app_license_id: str = Field(default="", alias="AppLicenseId")
    app_license_file: Path | None = Field(default=None, alias="AppLicenseFile")
    app_change_file: Path | None = Field(default=None, alias="AppChangeFile")

    # PUBLISHER
    publisher_name: str = Field(default="", alias="PublisherName")
    publisher_id: str = Field(default="", alias="PublisherId")
    publisher_copyright: str = Field(default="", alias="PublisherCopyright")
    publisher_link_name: str = Field(default="", alias="PublisherLinkName")
    publisher_link_url: str = Field(default="", alias="PublisherLinkUrl")
    publisher_email: str = Field(default="", alias="PublisherEmail")

    # DESKTOP INTEGRATION
    desktop_no_display: bool = Field(default=False, alias="DesktopNoDisplay")
    desktop_terminal: bool = Field(default=False, alias="DesktopTerminal")
    desktop_file: Path | None = Field(default=None, alias="DesktopFile")
    start_command: str = Field(default="", alias="StartCommand")
    prime_category: str = Field(default="", alias="PrimeCategory")
    meta_file: Path | None = Field(default=None, alias="MetaFile")
    icon_files: str = Field(default="", alias="IconFiles", description="Newline separated icon paths")
    auto_generate_icons: bool = Field(default=False, alias="AutoGenerateIcons")

    # DOTNET PUBLISH
    dotnet_project_path: Path | None = Field(default=None, alias="DotnetProjectPath")
    dotnet_publish_args: str = Field(default="", alias="DotnetPublishArgs")
    dotnet_post_publish: Path | None = Field(default=None, alias="DotnetPostPublish")
    dotnet_post_publish_on_windows: Path | None = Field(default=None, alias="DotnetPostPublishOnWindows")
    dotnet_post_publish_arguments: str = Field(default="", alias="DotnetPostPublishArguments")

    # PACKAGE OUTPUT
    package_name: str = Field(default="", alias="PackageName")
    output_directory: Path | None = Field(default=None, alias="OutputDirectory")

    # APPIMAGE / FLATPAK / RPM / DEBIAN
    app_image_args: str = Field(default="", alias="AppImageArgs")
    flatpak_platform_runtime: str = Field(default="org.freedesktop.Platform", alias="FlatpakPlatformRuntime")
    flatpak_platform_sdk: str = Field(default="org.freedesktop.Sdk", alias="FlatpakPlatformSdk")
    flatpak_platform_version: str = Field(default="23.08", alias="FlatpakPlatformVersion")
    flatpak_finish_args: str = Field(default="", alias="FlatpakFinishArgs")
    flatpak_builder_args: str = Field(default="", alias="FlatpakBuilderArgs")
    rpm_auto_req: bool = Field(default=False, alias="RpmAutoReq")
    rpm_auto_prov: bool = Field(default=True, alias="RpmAutoProv")
    rpm_requires: str = Field(default="", alias="RpmRequires")
    debian_recommends: str = Field(default="", alias="DebianRecommends")

    # MACOS
    macos_info_plist: Path | None = Field(default=None, alias="MacOsInfoPlist")
    macos_entitlements: Path | None = Field(default=None, alias="MacOsEntitlements")

    # WINDOWS SETUP
    setup_group_name: str = Field(default="", alias="SetupGroupName")
    setup_admin_install: bool = Field(default=False, alias="SetupAdminInstall")
    setup_command_prompt: str = Field(default="", alias="SetupCommandPrompt")
    setup_min_windows_version: str = Field(default="10", alias="SetupMinWindowsVersion")
    setup_sign_tool: str = Field(default="", alias="SetupSignTool")
    setup_uninstall_script: Path | None = Field(default=None, alias="SetupUninstallScript")
    setup_password_encryption: str = Field(default="", alias="SetupPasswordEncryption")
    setup_close_applications: bool = Field(default=True, alias="SetupCloseApplications")
    setup_restart_if_needed: bool = Field(default=False, alias="SetupRestartIfNeeded")
    setup_start_on_windows_startup: bool = Field(default=False, alias="SetupStartOnWindowsStartup")
    setup_uninstall_display_name: str = Field(default="", alias="SetupUninstallDisplayName")
    exe_version_info_company: str = Field(default="", alias="ExeVersionInfoCompany")
    exe_version_info_description: str = Field(default="", alias="ExeVersionInfoDescription")
    exe_wizard_image_file: Path | None = Field(default=None, alias="ExeWizardImageFile")
    exe_wizard_small_image_file: Path | None = Field(default=None, alias="ExeWizardSmallImageFile")
    msi_upgrade_code: str = Field(default="", alias="MsiUpgradeCode")
    msi_ui_banner: Path | None = Field(default=None, alias="MsiUiBanner")
    msi_ui_dialog: Path | None = Field(default=None, alias="MsiUiDialog")
    associate_files: bool = Field(default=False, alias="AssociateFiles")
    file_extension: str = Field(default="", alias="FileExtension")
    context_menu_integration: bool = Field(default=False, alias="ContextMenuIntegration")
    context_menu_text: str = Field(default="", alias="ContextMenuText")

    # CONFIGURATION
    config_version: str = Field(default="", alias="ConfigVersion")

    # Resolved at load time, not read from the file
    config_directory: Path = Field(default_factory=Path.cwd, exclude=True)
    icons: list[Path] = Field(default_factory=list, exclude=True, description="Resolved icon paths")

    model_config = {"populate_by_name": True, "extra": "ignore"}

    def find_icon(self, suffix: str) -> Path | None:
        """First configured icon with the given extension (case-insensitive)."""
        suffix = suffix.lower()
        for icon in self.icons:
            if icon.suffix.lower() == suffix:
                return icon
        return None

    def icons_with_suffix(self, suffix: str) -> list[Path]:
        suffix = suffix.lower()
        return [icon for icon in self.icons if icon.suffix.lower() == suffix]
