"""
Windows installer builders.

``exe`` compiles a generated Inno Setup script with ``iscc``; ``msi``
builds a generated WiX v4 source with ``wix build``.
"""

from __future__ import annotations

import hashlib
import re
import uuid
import xml.etree.ElementTree as ET
from pathlib import Path

from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from ...core.types import BuildReport
from ...models.configuration import AppConfiguration
from ...models.request import BuildRequest
from ...tools.locator import INSTALL_HINTS
from ..context import BuildContext
from ..pipeline import BuildServices, Phase, run_pipeline
from ..steps.publish import PublishSteps, check_result
from ..steps.templates import write_text

logger = get_logger(__name__)

PROMPT_BAT = "CommandPrompt.bat"
WIX_NAMESPACE = "http://wixtoolset.org/schemas/v4/wxs"
XML_DECLARATION = '<?xml version="1.0" encoding="utf-8"?>\n'

_ID_UNSAFE = re.compile(r"[^0-9A-Za-z.]")


def package_arch(runtime: str) -> str:
    """``x64``, ``x86`` or ``arm64`` from a ``win-*`` runtime identifier."""
    return runtime.split("-", 1)[-1] if "-" in runtime else "x64"


def escape_bat(command: str) -> str:
    """Escape cmd.exe metacharacters; ``%`` is dropped."""
    for char in ("^", "\\", "&", "|", "<", ">"):
        command = command.replace(char, f"^{char}")
    return command.replace("%", "")


def upgrade_code(config: AppConfiguration) -> str:
    """MsiUpgradeCode, else a GUID derived from the MD5 of AppId."""
    if config.msi_upgrade_code:
        return config.msi_upgrade_code.strip("{}").upper()
    digest = hashlib.md5(config.app_id.encode("utf-8")).digest()
    return str(uuid.UUID(bytes_le=digest)).upper()


def file_extension(config: AppConfiguration) -> str:
    ext = config.file_extension
    return ext if ext.startswith(".") else f".{ext}"


class WindowsBuild:
    """Collaborators shared by the exe and msi builders."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices, tool: str) -> None:
        self.context = BuildContext(
            request, config, services.settings, services.confirm, windows_host=services.windows_host
        )
        self.services = services
        self.tool = tool
        self.publisher = PublishSteps(self.context, services.invoker, services.locator)
        self.publish_dir = self.context.root_dir / "publish"

    def common_errors(self) -> list[str]:
        config = self.context.config
        errors: list[str] = []
        if not self.services.locator.is_available(self.tool):
            errors.append(f"{self.tool} not found. {INSTALL_HINTS.get(self.tool, '')}".strip())
        icon = config.find_icon(".ico")
        if icon is None or not icon.is_file():
            errors.append(
                "Couldn't find icon file. The ico file is required for building "
                f"{self.context.package_type.value.upper()} package."
            )
        if (config.associate_files or config.context_menu_integration) and not config.setup_admin_install:
            errors.append(
                "You must set SetupAdminInstall to true if you want to associate files or add context menu items."
            )
        return errors

    def raise_if_errors(self, errors: list[str]) -> bool:
        if errors:
            logger.error("Validation failed", errors=errors)
            raise ValidationError.from_errors(errors)
        return True

    async def publish(self) -> None:
        await self.publisher.publish(self.publish_dir)

    @property
    def primary_icon(self) -> Path:
        icon = self.context.config.find_icon(".ico")
        if icon is None:
            raise ValidationError.from_errors(["Couldn't find .ico icon file."])
        return icon


class ExeBuilder:
    """Builds a setup executable with Inno Setup."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.windows = WindowsBuild(request, config, services, "iscc")
        self.context = self.windows.context
        self.script_path = self.context.root_dir / f"{config.app_base_name}.iss"

    def validate(self) -> bool:
        config = self.context.config
        errors = self.windows.common_errors()
        checks = (
            (config.exe_wizard_image_file, ".bmp", "Setup wizard image file not found"),
            (config.exe_wizard_small_image_file, ".bmp", "Setup wizard small image file not found"),
            (config.setup_uninstall_script, ".bat", "Setup uninstall script file not found"),
        )
        for path, suffix, message in checks:
            if path is not None and (not path.is_file() or path.suffix.lower() != suffix):
                errors.append(f"{message}. File path: {path}")
        return self.windows.raise_if_errors(errors)

    async def write_helper_scripts(self) -> None:
        """Start command and command prompt batch files next to the binaries."""
        config = self.context.config
        exec_name = self.context.app_exec_name
        publish_dir = self.windows.publish_dir

        if config.start_command and config.start_command.lower() != exec_name.lower():
            await write_text(publish_dir / f"{config.start_command}.bat", f"start {exec_name} %*")

        if config.setup_command_prompt:
            title = escape_bat(config.setup_command_prompt)
            command = escape_bat(config.start_command or config.app_base_name)
            copyright_echo = f" & echo {escape_bat(config.publisher_copyright)}" if config.publisher_copyright else ""
            script = (
                f'start cmd /k "cd /D %userprofile% & title {title} & echo {command} '
                f'{self.context.app_version}{copyright_echo} & set path=%path%;%~dp0"'
            )
            await write_text(publish_dir / PROMPT_BAT, script)

    def setup_section(self, icon: Path) -> list[str]:
        context = self.context
        config = context.config
        group = config.setup_group_name
        arch = package_arch(context.runtime)
        lines = [
            "[Setup]",
            f"AppName={config.app_friendly_name}",
            f"AppId={config.app_id}",
            f"AppVersion={context.app_version}",
            f"AppVerName={config.app_friendly_name} {context.app_version}",
            f"VersionInfoVersion={context.app_version}",
            f"OutputDir={context.output_dir}",
            f"OutputBaseFilename={Path(context.output_name).stem}",
            f"AppPublisher={config.publisher_name}",
            f"AppCopyright={config.publisher_copyright}",
            f"AppPublisherURL={config.publisher_link_url}",
        ]
        if config.app_change_file is not None:
            lines.append(f"InfoBeforeFile={config.app_change_file}")
        if config.app_license_file is not None:
            lines.append(f"LicenseFile={config.app_license_file}")
        lines += [
            f"SetupIconFile={icon}",
            "AllowNoIcons=yes",
            f"MinVersion={config.setup_min_windows_version}",
            f"DefaultDirName={{autopf}}\\{group or config.app_base_name}",
            f"DefaultGroupName={group or config.app_friendly_name}",
            "Compression=lzma2/max",
            "SolidCompression=yes",
        ]
        if config.setup_password_encryption:
            lines.append(f"Password={config.setup_password_encryption}")
        if config.exe_wizard_image_file is not None:
            lines.append(f"WizardImageFile={config.exe_wizard_image_file}")
        if config.exe_wizard_small_image_file is not None:
            lines.append(f"WizardSmallImageFile={config.exe_wizard_small_image_file}")
        lines.append(f"CloseApplications={'yes' if config.setup_close_applications else 'no'}")
        if config.setup_restart_if_needed:
            lines.append("RestartIfNeededByRun=yes")
        if config.setup_uninstall_display_name:
            lines.append(f"UninstallDisplayName={config.setup_uninstall_display_name}")
        if config.exe_version_info_company:
            lines.append(f"VersionInfoCompany={config.exe_version_info_company}")
        if config.exe_version_info_description:
            lines.append(f"VersionInfoDescription={config.exe_version_info_description}")
        if config.associate_files and config.file_extension:
            lines.append("ChangesAssociations=yes")
        if arch in ("x64", "arm64"):
            lines.append(f"ArchitecturesAllowed={arch}")
            lines.append(f"ArchitecturesInstallIn64BitMode={arch}")
        lines.append(f"PrivilegesRequired={'admin' if config.setup_admin_install else 'lowest'}")
        lines.append(f"UninstallDisplayIcon={{app}}\\{icon.name}")
        if config.setup_sign_tool:
            lines.append(f"SignTool={config.setup_sign_tool}")
        return lines

    def files_section(self, icon: Path) -> list[str]:
        config = self.context.config
        publish_dir = self.windows.publish_dir
        flags = "Flags: ignoreversion recursesubdirs createallsubdirs"
        lines = ["[Files]", f'Source: "{publish_dir}\\*.exe"; DestDir: "{{app}}"; {flags} signonce;']
        top_level = [p for p in publish_dir.iterdir() if p.is_file()] if publish_dir.is_dir() else []
        if any(p.suffix.lower() == ".dll" for p in top_level):
            lines.append(f'Source: "{publish_dir}\\*.dll"; DestDir: "{{app}}"; {flags} signonce;')
        if any(p.suffix.lower() not in (".exe", ".dll") for p in top_level):
            lines.append(f'Source: "{publish_dir}\\*"; Excludes: "*.exe,*.dll"; DestDir: "{{app}}"; {flags};')
        lines.append(f'Source: "{icon}"; DestDir: "{{app}}"; {flags};')
        if config.setup_uninstall_script is not None:
            lines.append(f'Source: "{config.setup_uninstall_script}"; DestDir: "{{app}}"; {flags};')
        return lines

    def tasks_section(self) -> list[str]:
        config = self.context.config
        lines = ["[Tasks]"]
        if not config.desktop_no_display:
            lines.append(
                'Name: "desktopicon"; Description: "Create a &Desktop Icon"; '
                'GroupDescription: "Additional icons:"; Flags: unchecked'
            )
        lines.append(
            'Name: "quicklaunchicon"; Description: "Create a &Quick Launch icon"; '
            'GroupDescription: "Additional icons:"; Flags: unchecked'
        )
        startup_flags = "" if config.setup_start_on_windows_startup else "; Flags: unchecked"
        lines.append(
            f'Name: "startup"; Description: "Run {config.app_friendly_name} at Windows startup"; '
            f'GroupDescription: "Additional options:"{startup_flags}'
        )
        if config.associate_files and config.file_extension:
            lines.append(
                f'Name: "associatefiles"; Description: "Associate {config.file_extension} files with '
                f'{config.app_friendly_name}"; GroupDescription: "File associations:"; Flags: unchecked'
            )
        if config.context_menu_integration:
            lines.append(
                'Name: "contextmenu"; Description: "Add to context menu"; '
                'GroupDescription: "Integration:"; Flags: unchecked'
            )
        return lines

    def registry_section(self, icon: Path) -> list[str]:
        config = self.context.config
        exec_name = self.context.app_exec_name
        command = f'"""{{app}}\\{exec_name}"" ""%1"""'
        lines = ["[Registry]"]
        if config.associate_files and config.file_extension:
            prog_id = f"{config.app_base_name}File"
            lines += [
                f'Root: HKCR; Subkey: "{file_extension(config)}"; ValueType: string; ValueName: ""; '
                f'ValueData: "{prog_id}"; Flags: uninsdeletevalue; Tasks: associatefiles',
                f'Root: HKCR; Subkey: "{prog_id}"; ValueType: string; ValueName: ""; '
                f'ValueData: "{config.app_friendly_name} File"; Flags: uninsdeletekey; Tasks: associatefiles',
                f'Root: HKCR; Subkey: "{prog_id}\\DefaultIcon"; ValueType: string; ValueName: ""; '
                f'ValueData: "{{app}}\\{icon.name},0"; Tasks: associatefiles',
                f'Root: HKCR; Subkey: "{prog_id}\\shell\\open\\command"; ValueType: string; ValueName: ""; '
                f"ValueData: {command}; Tasks: associatefiles",
            ]
        if config.context_menu_integration:
            text = config.context_menu_text or f"Open with {config.app_friendly_name}"
            key = f"*\\shell\\{config.app_base_name}"
            lines += [
                f'Root: HKCR; Subkey: "{key}"; ValueType: string; ValueName: ""; ValueData: "{text}"; '
                "Flags: uninsdeletekey; Tasks: contextmenu",
                f'Root: HKCR; Subkey: "{key}\\command"; ValueType: string; ValueName: ""; '
                f"ValueData: {command}; Tasks: contextmenu",
                f'Root: HKCR; Subkey: "{key}"; ValueType: string; ValueName: "Icon"; '
                f'ValueData: "{{app}}\\{icon.name},0"; Tasks: contextmenu',
            ]
        return lines

    def icons_section(self, icon: Path) -> list[str]:
        config = self.context.config
        name = config.app_friendly_name
        target = f'Filename: "{{app}}\\{self.context.app_exec_name}"; IconFilename: "{{app}}\\{icon.name}"'
        lines = [
            "[Icons]",
            f'Name: "{{userappdata}}\\Microsoft\\Internet Explorer\\Quick Launch\\{name}"; {target}; '
            "Tasks: quicklaunchicon",
        ]
        if not config.desktop_no_display:
            lines.append(f'Name: "{{group}}\\{name}"; {target}')
            lines.append(f'Name: "{{userdesktop}}\\{name}"; {target}; Tasks: desktopicon')
        lines.append(f'Name: "{{userstartup}}\\{name}"; {target}; Tasks: startup')
        lines.append(f'Name: "{{group}}\\Uninstall {name}"; Filename: "{{uninstallexe}}"')
        if config.setup_command_prompt:
            lines.append(
                f'Name: "{{group}}\\{config.setup_command_prompt}"; Filename: "{{app}}\\{PROMPT_BAT}"; '
                f'IconFilename: "{{app}}\\{icon.name}"'
            )
        if config.publisher_link_name and config.publisher_link_url:
            lines.append(f'Name: "{{group}}\\{config.publisher_link_name}"; Filename: "{config.publisher_link_url}"')
        return lines

    def run_sections(self) -> list[str]:
        config = self.context.config
        lines = ["[Run]"]
        if not config.desktop_no_display:
            lines.append(
                f'Filename: "{{app}}\\{self.context.app_exec_name}"; Description: Start Application Now; '
                "Flags: postinstall nowait skipifsilent"
            )
        lines += [
            "",
            "[InstallDelete]",
            'Type: filesandordirs; Name: "{app}\\*";',
            'Type: filesandordirs; Name: "{group}\\*";',
            "",
            "[UninstallRun]",
        ]
        if config.setup_uninstall_script is not None:
            lines.append(
                f'Filename: "{{app}}\\{config.setup_uninstall_script.name}"; Flags: runhidden waituntilterminated'
            )
        lines += ["", "[UninstallDelete]", 'Type: dirifempty; Name: "{app}"']
        return lines

    def script_content(self) -> str:
        icon = self.windows.primary_icon
        sections = [
            self.setup_section(icon),
            ["[Languages]", 'Name: "english"; MessagesFile: "compiler:Default.isl"'],
            self.files_section(icon),
            self.tasks_section(),
            self.registry_section(icon),
            self.icons_section(icon),
            self.run_sections(),
        ]
        return "\r\n\r\n".join("\r\n".join(section) for section in sections) + "\r\n"

    async def write_script(self) -> None:
        await write_text(self.script_path, self.script_content())
        logger.info("Inno Setup script generated", path=str(self.script_path))

    async def compile(self) -> None:
        iscc = str(self.windows.services.locator.require("iscc"))
        result = await self.windows.services.invoker.run(
            iscc, [f"/O{self.context.output_dir}", str(self.script_path)]
        )
        check_result(result, "Inno Setup compilation")
        logger.info("Setup executable built", path=str(self.context.output_path))

    def phases(self) -> list[Phase]:
        return [
            Phase("publish", self.windows.publish),
            Phase("write helper scripts", self.write_helper_scripts),
            Phase("write setup script", self.write_script),
            Phase("compile setup", self.compile),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()


def _wix(tag: str) -> str:
    return f"{{{WIX_NAMESPACE}}}{tag}"


def _sub(parent: ET.Element, tag: str, **attributes: str) -> ET.Element:
    return ET.SubElement(parent, _wix(tag), attributes)


def wix_id(value: str) -> str:
    return _ID_UNSAFE.sub("_", value)


class MsiBuilder:
    """Builds an MSI with the WiX v4 toolset."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.windows = WindowsBuild(request, config, services, "wix")
        self.context = self.windows.context
        self.source_path = self.context.root_dir / f"{config.app_base_name}.wxs"

    def validate(self) -> bool:
        config = self.context.config
        errors = self.windows.common_errors()
        if config.msi_ui_banner is not None and not config.msi_ui_banner.is_file():
            errors.append(f"MSI UI banner file not found: {config.msi_ui_banner}")
        if config.msi_ui_dialog is not None and not config.msi_ui_dialog.is_file():
            errors.append(f"MSI UI dialog file not found: {config.msi_ui_dialog}")
        if config.msi_upgrade_code:
            try:
                uuid.UUID(config.msi_upgrade_code)
            except ValueError:
                errors.append(f"Invalid MsiUpgradeCode: {config.msi_upgrade_code}. Must be a valid GUID.")
        return self.windows.raise_if_errors(errors)

    @property
    def registry_key(self) -> str:
        config = self.context.config
        return f"Software\\{config.publisher_name}\\{config.app_base_name}"

    def _key_path_value(self, component: ET.Element, name: str) -> None:
        _sub(component, "RegistryValue", Root="HKCU", Key=self.registry_key, Name=name,
             Type="integer", Value="1", KeyPath="yes")

    def package_element(self, wix: ET.Element) -> None:
        config = self.context.config
        package = _sub(
            wix,
            "Package",
            Name=config.app_friendly_name,
            Manufacturer=config.publisher_name,
            Version=self.context.app_version,
            UpgradeCode=upgrade_code(config),
            Language="1033",
            Scope="perMachine" if config.setup_admin_install else "perUser",
        )
        _sub(package, "MajorUpgrade",
             DowngradeErrorMessage="A newer version of [ProductName] is already installed.",
             AllowSameVersionUpgrades="yes")
        _sub(package, "MediaTemplate", EmbedCab="yes")
        _sub(package, "Icon", Id="AppIcon", SourceFile=str(self.windows.primary_icon))
        _sub(package, "Property", Id="ARPPRODUCTICON", Value="AppIcon")
        if config.publisher_link_url:
            _sub(package, "Property", Id="ARPHELPLINK", Value=config.publisher_link_url)
        if config.app_short_summary:
            _sub(package, "Property", Id="ARPCOMMENTS", Value=config.app_short_summary)

        standard = _sub(
            package,
            "StandardDirectory",
            Id="ProgramFiles64Folder" if config.setup_admin_install else "LocalAppDataFolder",
        )
        _sub(standard, "Directory", Id="INSTALLFOLDER", Name=config.setup_group_name or config.app_base_name)

        feature = _sub(package, "Feature", Id="MainFeature", Title=config.app_friendly_name, Level="1")
        if config.app_short_summary:
            feature.set("Description", config.app_short_summary)
        _sub(feature, "ComponentGroupRef", Id="MainComponents")
        _sub(feature, "ComponentGroupRef", Id="ApplicationFiles")
        if config.associate_files or config.context_menu_integration:
            _sub(feature, "ComponentGroupRef", Id="RegistryComponents")
        if config.start_command:
            path_feature = _sub(feature, "Feature", Id="PathFeature", Title="Add to PATH",
                                Description=f"Add {config.app_friendly_name} to system PATH", Level="1000")
            _sub(path_feature, "ComponentGroupRef", Id="PathComponents")

        if config.msi_ui_banner is not None:
            _sub(package, "WixVariable", Id="WixUIBannerBmp", Value=str(config.msi_ui_banner))
        if config.msi_ui_dialog is not None:
            _sub(package, "WixVariable", Id="WixUIDialogBmp", Value=str(config.msi_ui_dialog))

    def main_components(self, wix: ET.Element) -> None:
        config = self.context.config
        exec_name = self.context.app_exec_name
        fragment = _sub(wix, "Fragment")
        group = _sub(fragment, "ComponentGroup", Id="MainComponents", Directory="INSTALLFOLDER")
        main = _sub(group, "Component", Id="MainExecutable", Guid="*")
        _sub(main, "File", Id="MainExeFile", Source=str(self.windows.publish_dir / exec_name), KeyPath="yes")

        if not config.desktop_no_display:
            shortcuts = _sub(group, "Component", Id="ApplicationShortcuts", Guid="*")
            for shortcut_id, directory in (("StartMenuShortcut", "ProgramMenuFolder"), ("DesktopShortcut", "DesktopFolder")):
                _sub(shortcuts, "Shortcut", Id=shortcut_id, Name=config.app_friendly_name,
                     Target=f"[INSTALLFOLDER]{exec_name}", WorkingDirectory="INSTALLFOLDER",
                     Icon="AppIcon", Directory=directory)
            _sub(shortcuts, "RemoveFolder", Id="RemoveProgramMenuFolder", Directory="ProgramMenuFolder", On="uninstall")
            self._key_path_value(shortcuts, "installed")

        _sub(fragment, "StandardDirectory", Id="ProgramMenuFolder")
        _sub(fragment, "StandardDirectory", Id="DesktopFolder")

    def application_files(self, wix: ET.Element) -> None:
        exec_name = self.context.app_exec_name.lower()
        fragment = _sub(wix, "Fragment")
        group = _sub(fragment, "ComponentGroup", Id="ApplicationFiles", Directory="INSTALLFOLDER")
        files = sorted(
            p for p in self.windows.publish_dir.rglob("*") if p.is_file() and p.name.lower() != exec_name
        )
        for index, path in enumerate(files):
            stem = wix_id(path.stem)
            relative = path.parent.relative_to(self.windows.publish_dir)
            component = _sub(group, "Component", Id=f"File_{stem}_{index}", Guid="*")
            if relative.parts:
                component.set("Subdirectory", str(relative).replace("/", "\\"))
            _sub(component, "File", Id=f"F_{stem}_{index}", Source=str(path), KeyPath="yes")

    def registry_components(self, wix: ET.Element) -> None:
        config = self.context.config
        command = f'"[INSTALLFOLDER]{self.context.app_exec_name}" "%1"'
        fragment = _sub(wix, "Fragment")
        group = _sub(fragment, "ComponentGroup", Id="RegistryComponents", Directory="INSTALLFOLDER")

        if config.associate_files and config.file_extension:
            prog_id = f"{config.app_base_name}File"
            component = _sub(group, "Component", Id="FileAssociation", Guid="*")
            for key, value in (
                (file_extension(config), prog_id),
                (prog_id, f"{config.app_friendly_name} File"),
                (f"{prog_id}\\shell\\open\\command", command),
            ):
                registry_key = _sub(component, "RegistryKey", Root="HKCR", Key=key)
                _sub(registry_key, "RegistryValue", Type="string", Value=value)
            self._key_path_value(component, "FileAssoc")

        if config.context_menu_integration:
            text = config.context_menu_text or f"Open with {config.app_friendly_name}"
            component = _sub(group, "Component", Id="ContextMenu", Guid="*")
            for key, value in (
                (f"*\\shell\\{config.app_base_name}", text),
                (f"*\\shell\\{config.app_base_name}\\command", command),
            ):
                registry_key = _sub(component, "RegistryKey", Root="HKCR", Key=key)
                _sub(registry_key, "RegistryValue", Type="string", Value=value)
            self._key_path_value(component, "ContextMenu")

    def path_components(self, wix: ET.Element) -> None:
        config = self.context.config
        fragment = _sub(wix, "Fragment")
        group = _sub(fragment, "ComponentGroup", Id="PathComponents", Directory="INSTALLFOLDER")
        component = _sub(group, "Component", Id="PathEnvironment", Guid="*")
        _sub(component, "Environment", Id="PATH_Main", Name="PATH", Value="[INSTALLFOLDER]", Permanent="no",
             Part="last", Action="set", System="yes" if config.setup_admin_install else "no")
        self._key_path_value(component, "PathAdded")

    def source_content(self) -> str:
        config = self.context.config
        ET.register_namespace("", WIX_NAMESPACE)
        wix = ET.Element(_wix("Wix"))
        self.package_element(wix)
        self.main_components(wix)
        self.application_files(wix)
        if config.associate_files or config.context_menu_integration:
            self.registry_components(wix)
        if config.start_command:
            self.path_components(wix)
        ET.indent(wix)
        return XML_DECLARATION + ET.tostring(wix, encoding="unicode") + "\n"

    async def write_source(self) -> None:
        await write_text(self.source_path, self.source_content())
        logger.info("WiX source generated", path=str(self.source_path))

    async def compile(self) -> None:
        wix = str(self.windows.services.locator.require("wix"))
        args = [
            "build",
            "-arch",
            package_arch(self.context.runtime),
            str(self.source_path),
            "-o",
            str(self.context.output_path),
        ]
        check_result(await self.windows.services.invoker.run(wix, args), "WiX build")
        logger.info("MSI built", path=str(self.context.output_path))

    def phases(self) -> list[Phase]:
        return [
            Phase("publish", self.windows.publish),
            Phase("write WiX source", self.write_source),
            Phase("build MSI", self.compile),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()
