"""Unit tests for the exe and msi builders."""

import re
import xml.etree.ElementTree as ET

import pytest

from netloy.core.exceptions import ValidationError
from netloy.core.types import HostOS, PackageType
from netloy.packaging.builders import ExeBuilder, MsiBuilder
from netloy.packaging.builders.windows import WIX_NAMESPACE, escape_bat, package_arch, upgrade_code, wix_id

NS = {"wix": WIX_NAMESPACE}
GUID = re.compile(r"^[0-9A-F]{8}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{12}$")


@pytest.fixture
def windows_binaries(temp_dir):
    """A published win-x64 application."""
    path = temp_dir / "winbin"
    (path / "runtimes" / "win-x64" / "native").mkdir(parents=True)
    (path / "HelloWorld.exe").write_bytes(b"MZ")
    (path / "HelloWorld.dll").write_bytes(b"MZ")
    (path / "appsettings.json").write_text("{}")
    (path / "runtimes" / "win-x64" / "native" / "e_sqlite3.dll").write_bytes(b"MZ")
    return path


@pytest.fixture
def make_windows_builder(make_request, app_config, make_services, windows_binaries):
    def _make(builder_class, package_type, runtime="win-x64", **services):
        request = make_request(package_type, runtime, binary_path=windows_binaries)
        return builder_class(request, app_config, make_services(host_os=HostOS.WINDOWS, **services))

    return _make


class TestHelpers:
    """Tests for Windows naming helpers."""

    @pytest.mark.parametrize(
        "runtime,expected",
        [("win-x64", "x64"), ("win-x86", "x86"), ("win-arm64", "arm64"), ("win", "x64")],
    )
    def test_package_arch(self, runtime, expected):
        assert package_arch(runtime) == expected

    def test_escape_bat(self):
        assert escape_bat("a & b | c") == "a ^& b ^| c"
        assert escape_bat("<in> ^x") == "^<in^> ^^x"
        assert escape_bat("100% done") == "100 done"

    def test_upgrade_code_is_derived_from_app_id(self, app_config):
        code = upgrade_code(app_config)
        assert GUID.match(code)
        assert upgrade_code(app_config) == code

        app_config.app_id = "com.example.other"
        assert upgrade_code(app_config) != code

    def test_upgrade_code_configured(self, app_config):
        app_config.msi_upgrade_code = "{0c5e4a3b-1f7d-4a8e-9b2c-3d4e5f6a7b8c}"
        assert upgrade_code(app_config) == "0C5E4A3B-1F7D-4A8E-9B2C-3D4E5F6A7B8C"

    def test_wix_id(self):
        assert wix_id("Microsoft.Extensions-Logging v2") == "Microsoft.Extensions_Logging_v2"


@pytest.mark.asyncio
class TestExeBuilder:
    """Tests for ExeBuilder."""

    async def test_validate(self, make_windows_builder):
        assert make_windows_builder(ExeBuilder, PackageType.EXE).validate()

    async def test_validate_collects_errors(self, make_windows_builder, app_config, icon_files, temp_dir):
        app_config.icons = [icon_files[".icns"]]
        app_config.associate_files = True
        app_config.setup_uninstall_script = temp_dir / "uninstall.sh"
        builder = make_windows_builder(ExeBuilder, PackageType.EXE, missing=("iscc",))

        with pytest.raises(ValidationError) as exc_info:
            builder.validate()

        errors = exc_info.value.errors
        assert len(errors) == 4
        assert errors[0].startswith("iscc not found")
        assert errors[1].startswith("Couldn't find icon file")
        assert "SetupAdminInstall" in errors[2]
        assert "uninstall script" in errors[3]

    async def test_script_content(self, make_windows_builder, app_config):
        app_config.setup_admin_install = True
        app_config.associate_files = True
        app_config.file_extension = "hello"
        app_config.setup_command_prompt = "Hello Prompt"
        builder = make_windows_builder(ExeBuilder, PackageType.EXE)
        await builder.windows.publish()

        script = builder.script_content()
        lines = script.split("\r\n")

        assert lines[0] == "[Setup]"
        assert "AppId=com.example.helloworld" in lines
        assert "AppVersion=1.2.3" in lines
        assert "OutputBaseFilename=helloworld.1.2.3-4.win-x64" in lines
        assert "ArchitecturesInstallIn64BitMode=x64" in lines
        assert "PrivilegesRequired=admin" in lines
        assert "ChangesAssociations=yes" in lines
        assert "UninstallDisplayIcon={app}\\HelloWorld.ico" in lines
        assert any(line.startswith('Source: "') and "*.dll" in line for line in lines)
        assert any(line.startswith('Root: HKCR; Subkey: ".hello"') for line in lines)
        assert any("CommandPrompt.bat" in line for line in lines)
        assert "\n" not in script.replace("\r\n", "")

    async def test_build(self, make_windows_builder, app_config, fake_invoker):
        app_config.start_command = "hello"
        app_config.setup_command_prompt = "Hello & Co"
        builder = make_windows_builder(ExeBuilder, PackageType.EXE)

        report = await builder.build()

        publish_dir = builder.windows.publish_dir
        assert (publish_dir / "hello.bat").read_text() == "start HelloWorld.exe %*"
        prompt = (publish_dir / "CommandPrompt.bat").read_text()
        assert "title Hello ^& Co" in prompt
        assert "echo hello 1.2.3" in prompt
        assert builder.script_path.read_bytes().startswith(b"[Setup]\r\n")
        assert fake_invoker.commands("iscc") == [
            ["iscc", f"/O{builder.context.output_dir}", str(builder.script_path)]
        ]
        assert report.artifact.name == "helloworld.1.2.3-4.win-x64.exe"

    async def test_no_start_script_when_command_matches_executable(self, make_windows_builder, app_config):
        app_config.start_command = "helloworld.exe"
        builder = make_windows_builder(ExeBuilder, PackageType.EXE)
        await builder.windows.publish()
        await builder.write_helper_scripts()
        assert not list(builder.windows.publish_dir.glob("*.bat"))


@pytest.mark.asyncio
class TestMsiBuilder:
    """Tests for MsiBuilder."""

    async def test_validate_rejects_bad_upgrade_code(self, make_windows_builder, app_config):
        app_config.msi_upgrade_code = "not-a-guid"
        with pytest.raises(ValidationError, match="Invalid MsiUpgradeCode"):
            make_windows_builder(MsiBuilder, PackageType.MSI).validate()

    async def test_source_content(self, make_windows_builder, app_config):
        app_config.start_command = "hello"
        builder = make_windows_builder(MsiBuilder, PackageType.MSI)
        await builder.windows.publish()

        content = builder.source_content()
        root = ET.fromstring(content)

        assert content.startswith("<?xml")
        package = root.find("wix:Package", NS)
        assert package.get("Name") == "Hello World"
        assert package.get("Version") == "1.2.3"
        assert package.get("Scope") == "perUser"
        assert package.get("UpgradeCode") == upgrade_code(app_config)
        assert package.find("wix:StandardDirectory", NS).get("Id") == "LocalAppDataFolder"
        assert package.find(".//wix:Directory[@Id='INSTALLFOLDER']", NS).get("Name") == "HelloWorld"
        assert package.find(".//wix:Feature[@Id='PathFeature']", NS) is not None

        main = root.find(".//wix:File[@Id='MainExeFile']", NS)
        assert main.get("Source").endswith("HelloWorld.exe")
        files = root.findall(".//wix:ComponentGroup[@Id='ApplicationFiles']/wix:Component", NS)
        assert [c.get("Id") for c in files] == [
            "File_HelloWorld_0",
            "File_appsettings_1",
            "File_e_sqlite3_2",
        ]
        assert files[2].get("Subdirectory") == "runtimes\\win-x64\\native"
        assert root.find(".//wix:Environment[@Name='PATH']", NS).get("System") == "no"
        assert root.find(".//wix:ComponentGroup[@Id='RegistryComponents']", NS) is None

    async def test_registry_components(self, make_windows_builder, app_config):
        app_config.setup_admin_install = True
        app_config.context_menu_integration = True
        builder = make_windows_builder(MsiBuilder, PackageType.MSI)
        await builder.windows.publish()

        root = ET.fromstring(builder.source_content())

        assert root.find("wix:Package", NS).get("Scope") == "perMachine"
        menu = root.find(".//wix:Component[@Id='ContextMenu']", NS)
        keys = [key.get("Key") for key in menu.findall("wix:RegistryKey", NS)]
        assert keys == ["*\\shell\\HelloWorld", "*\\shell\\HelloWorld\\command"]
        assert menu.find("wix:RegistryKey/wix:RegistryValue", NS).get("Value") == "Open with Hello World"

    async def test_build(self, make_windows_builder, fake_invoker):
        builder = make_windows_builder(MsiBuilder, PackageType.MSI, runtime="win-arm64")

        report = await builder.build()

        assert builder.source_path.is_file()
        assert fake_invoker.commands("wix") == [
            ["wix", "build", "-arch", "arm64", str(builder.source_path), "-o", str(report.artifact)]
        ]
        assert report.artifact.name == "helloworld.1.2.3-4.win-arm64.msi"
