"""Unit tests for the .netloy configuration loader and starter files."""

import pytest

from netloy import __version__
from netloy.configuration import ConfigurationLoader, default_configuration, parse_entries
from netloy.core.exceptions import ConfigurationError, OperationCancelled
from netloy.metadata.templates import NewFileType, create_template_files

VALID_CONFIG = '''\
# Hello World
AppBaseName = HelloWorld
AppFriendlyName = Hello World
AppId = com.example.helloworld
AppVersionRelease = 1.2.3[4]
AppShortSummary = Says hello
AppDescription = """
    First paragraph.

    * item
"""
AppLicenseId = MIT
PublisherName = Example Ltd
PublisherLinkName = Home Page
PublisherLinkUrl = https://example.com
publisheremail = dev@example.com
DesktopNoDisplay = TRUE
IconFiles = """
    icons/logo.svg
    icons/logo.32x32.png
"""
PackageName = helloworld
OutputDirectory = out
'''


def write_config(directory, text=VALID_CONFIG, name="app.netloy"):
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestParseEntries:
    """Tests for parse_entries."""

    def test_simple_values(self):
        entries = parse_entries("AppBaseName = HelloWorld\n  PackageName=hello  \nEmpty =\n")
        assert entries == {"AppBaseName": "HelloWorld", "PackageName": "hello", "Empty": ""}

    def test_comments_and_invalid_lines(self):
        entries = parse_entries("# AppId = ignored\nnot a setting\nAppId = com.example.app\n")
        assert entries == {"AppId": "com.example.app"}

    def test_later_keys_override(self):
        assert parse_entries("AppId = a.b\nAppId = c.d\n") == {"AppId": "c.d"}

    def test_value_keeps_equals_sign(self):
        assert parse_entries("DotnetPublishArgs = -p:A=1 -p:B=2")["DotnetPublishArgs"] == "-p:A=1 -p:B=2"

    def test_multi_line_value(self):
        entries = parse_entries('AppDescription = """\n    First.\n\n    * item\n"""\nAppId = a.b\n')
        assert entries == {"AppDescription": "First.\n\n* item", "AppId": "a.b"}

    def test_multi_line_value_starting_on_key_line(self):
        entries = parse_entries('RpmRequires = """libicu\n    zlib"""\n')
        assert entries["RpmRequires"] == "libicu\nzlib"

    def test_single_line_triple_quoted(self):
        assert parse_entries('AppShortSummary = """Says hello"""')["AppShortSummary"] == "Says hello"

    def test_unterminated_multi_line_value(self):
        assert parse_entries('AppDescription = """\n  dangling\n')["AppDescription"] == "dangling"


class TestConfigurationLoader:
    """Tests for ConfigurationLoader."""

    def test_load(self, temp_dir, icon_files):
        write_config(temp_dir)
        loader = ConfigurationLoader(skip_prompts=True, cwd=temp_dir)

        config = loader.load()

        base = temp_dir.resolve()
        assert config.app_base_name == "HelloWorld"
        assert config.app_description == "First paragraph.\n\n* item"
        assert config.publisher_email == "dev@example.com"
        assert config.desktop_no_display is True
        assert config.config_directory == base
        assert config.icons == [base / "icons" / "logo.svg", base / "icons" / "logo.32x32.png"]
        assert config.output_directory == base / "out"
        assert config.output_directory.is_dir()

    def test_explicit_relative_path(self, temp_dir, icon_files):
        (temp_dir / "conf").mkdir()
        write_config(temp_dir / "conf", VALID_CONFIG.replace("icons/", "../icons/"), name="other.netloy")
        loader = ConfigurationLoader(skip_prompts=True, cwd=temp_dir)

        config = loader.load(config_path=temp_dir / "conf" / "other.netloy")

        assert config.config_directory == (temp_dir / "conf").resolve()
        assert len(config.icons) == 2

    def test_locate_missing_explicit_path(self, temp_dir):
        with pytest.raises(ConfigurationError, match="not found at specified path"):
            ConfigurationLoader(cwd=temp_dir).locate(temp_dir / "missing.netloy")

    def test_locate_nothing_in_directory(self, temp_dir):
        with pytest.raises(ConfigurationError, match="No .netloy configuration file found"):
            ConfigurationLoader(cwd=temp_dir).locate()

    def test_locate_takes_first_of_several(self, temp_dir):
        write_config(temp_dir, name="b.netloy")
        write_config(temp_dir, name="a.netloy")
        assert ConfigurationLoader(cwd=temp_dir).locate().name == "a.netloy"

    def test_validation_errors_are_aggregated(self, temp_dir, icon_files):
        text = (
            VALID_CONFIG.replace("com.example.helloworld", "Com.Example")
            .replace("1.2.3[4]", "1.2")
            .replace("icons/logo.32x32.png", "icons/missing.png")
            .replace("PublisherName = Example Ltd\n", "")
        )
        write_config(temp_dir, text)

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(skip_prompts=True, cwd=temp_dir).load()

        errors = exc_info.value.errors
        assert "PublisherName is required" in errors
        assert any(e.startswith("AppId 'Com.Example'") for e in errors)
        assert any(e.startswith("Invalid AppVersionRelease format: '1.2'") for e in errors)
        assert any(e.startswith("Couldn't find icon") for e in errors)
        assert "  - PublisherName is required" in str(exc_info.value)

    def test_png_names_must_carry_a_square_size(self, temp_dir):
        icons = temp_dir / "icons"
        icons.mkdir()
        (icons / "logo.png").write_bytes(b"png")
        (icons / "logo.32x16.png").write_bytes(b"png")
        text = VALID_CONFIG.replace("icons/logo.svg\n    icons/logo.32x32.png", "icons/logo.png\n    icons/logo.32x16.png")
        write_config(temp_dir, text)

        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(skip_prompts=True, cwd=temp_dir).load()

        errors = exc_info.value.errors
        assert any(e.startswith("PNG icon file name should be in the format") for e in errors)
        assert any(e.startswith("PNG icon size should be square") for e in errors)

    def test_missing_optional_file_is_reported(self, temp_dir, icon_files):
        write_config(temp_dir, VALID_CONFIG + "AppLicenseFile = LICENSE.txt\n")
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(skip_prompts=True, cwd=temp_dir).load()
        assert exc_info.value.errors == [f"AppLicenseFile file not found: {temp_dir.resolve() / 'LICENSE.txt'}"]

    def test_package_name_optional_with_output_path(self, temp_dir, icon_files):
        write_config(temp_dir, VALID_CONFIG.replace("PackageName = helloworld\n", ""))
        loader = ConfigurationLoader(skip_prompts=True, cwd=temp_dir)

        with pytest.raises(ConfigurationError, match="PackageName is required"):
            loader.load()
        assert loader.load(output_path=temp_dir / "app.deb").package_name == ""

    def test_declined_output_directory_creation(self, temp_dir, icon_files):
        write_config(temp_dir)
        questions = []

        def decline(question):
            questions.append(question)
            return False

        with pytest.raises(OperationCancelled):
            ConfigurationLoader(confirm=decline, cwd=temp_dir).load()
        assert questions[0].startswith("Directory not found")
        assert not (temp_dir / "out").exists()

    def test_invalid_min_windows_version_falls_back(self, temp_dir, icon_files):
        write_config(temp_dir, VALID_CONFIG + "SetupMinWindowsVersion = ten\n")
        config = ConfigurationLoader(skip_prompts=True, cwd=temp_dir).load()
        assert config.setup_min_windows_version == "10"


class TestDefaultConfiguration:
    """Tests for the starter configuration."""

    def test_parses(self):
        entries = parse_entries(default_configuration())
        assert entries["AppId"] == "com.example.myapp"
        assert entries["AppVersionRelease"] == "1.0.0[1]"
        assert entries["RpmRequires"] == "krb5-libs\nlibicu\nopenssl-libs\nzlib"
        assert entries["IconFiles"] == ""
        assert "${APP_VERSION}" in entries["DotnetPublishArgs"]
        assert entries["ConfigVersion"] == __version__

    def test_only_icons_are_missing(self, temp_dir):
        write_config(temp_dir, default_configuration())
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigurationLoader(skip_prompts=True, cwd=temp_dir).load()
        assert exc_info.value.errors == ["IconFiles is required"]


class TestCreateTemplateFiles:
    """Tests for create_template_files."""

    def test_all(self, temp_dir):
        written = create_template_files(NewFileType.ALL, temp_dir / "new", name="hello")
        assert sorted(p.name for p in written) == [
            "hello.desktop",
            "hello.entitlements",
            "hello.metainfo.xml",
            "hello.netloy",
            "hello.plist",
        ]
        assert "AppBaseName = MyApp" in (temp_dir / "new" / "hello.netloy").read_text()

    def test_declined_overwrite(self, temp_dir):
        create_template_files(NewFileType.CONF, temp_dir)
        with pytest.raises(OperationCancelled):
            create_template_files(NewFileType.CONF, temp_dir, confirm=lambda question: False)

    def test_declined_overwrite_of_all_skips_files(self, temp_dir):
        create_template_files(NewFileType.DESKTOP, temp_dir)
        written = create_template_files(NewFileType.ALL, temp_dir, confirm=lambda question: False)
        assert len(written) == 4
        assert temp_dir / "app.desktop" not in written
