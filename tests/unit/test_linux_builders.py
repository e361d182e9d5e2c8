"""Unit tests for the Linux and portable builders."""

import os
import platform
import tarfile
from pathlib import Path

import pytest
import yaml

from netloy.core.exceptions import RequiredPhaseFailure, ValidationError
from netloy.core.types import HostOS, PackageType, PhaseStatus
from netloy.packaging.builders import (
    AppImageBuilder,
    DebBuilder,
    FlatpakBuilder,
    PacmanBuilder,
    PortableBuilder,
    RpmBuilder,
)
from netloy.packaging.builders.linux import debian_section, package_slug, split_list
from netloy.packaging.steps.linux import linux_architecture, published_executables


@pytest.fixture
def make_builder(make_request, app_config, make_services):
    def _make(builder_class, package_type, host_os=HostOS.LINUX, **overrides):
        return builder_class(make_request(package_type, **overrides), app_config, make_services(host_os))

    return _make


class TestHelpers:
    """Tests for Linux naming helpers."""

    @pytest.mark.parametrize(
        "package_type,runtime,expected",
        [
            (PackageType.DEB, "linux-x64", "amd64"),
            (PackageType.DEB, "linux-arm", "armhf"),
            (PackageType.RPM, "linux-arm64", "aarch64"),
            (PackageType.PACMAN, "linux-arm", "armv7h"),
            (PackageType.APPIMAGE, "linux-arm", "armhf"),
            (PackageType.FLATPAK, "linux-x86", "i386"),
            (PackageType.DEB, "linux-musl-x64", "amd64"),
        ],
    )
    def test_linux_architecture(self, package_type, runtime, expected):
        assert linux_architecture(package_type, runtime) == expected

    def test_linux_architecture_rejects_other_formats(self):
        with pytest.raises(ValueError):
            linux_architecture(PackageType.PORTABLE, "linux-x64")

    def test_split_list(self):
        assert split_list("libicu72, libssl3;zlib1g\n\n  curl ") == ["libicu72", "libssl3", "zlib1g", "curl"]
        assert split_list("") == []

    def test_debian_section(self):
        assert debian_section("Utility") == "utils"
        assert debian_section("Game") == "games"
        assert debian_section("Unknown") == "misc"

    def test_package_slug(self):
        assert package_slug("Hello_World App") == "hello-world-app"

    def test_published_executables(self, binaries):
        found = published_executables(binaries, "HelloWorld")
        assert found[0] == binaries / "HelloWorld"
        assert binaries / "libnative.so" in found
        assert binaries / "HelloWorld.dll" not in found


@pytest.mark.asyncio
class TestDebBuilder:
    """Tests for DebBuilder."""

    async def test_validate_reports_missing_tool(self, make_request, app_config, make_services):
        builder = DebBuilder(make_request(), app_config, make_services(missing=("dpkg-deb",)))
        with pytest.raises(ValidationError) as exc_info:
            builder.validate()
        assert any("dpkg-deb not found" in error for error in exc_info.value.errors)

    async def test_validate_reports_missing_desktop_file(self, make_builder, app_config, temp_dir):
        app_config.desktop_file = temp_dir / "missing.desktop"
        with pytest.raises(ValidationError, match="Desktop file not found"):
            make_builder(DebBuilder, PackageType.DEB).validate()

    async def test_build(self, make_builder, fake_invoker):
        builder = make_builder(DebBuilder, PackageType.DEB)
        assert builder.validate()

        report = await builder.build()

        root = builder.context.root_dir
        assert report.artifact.name == "helloworld.1.2.3-4.linux-x64.deb"
        assert [p.status for p in report.phases] == [PhaseStatus.COMPLETED] * 6
        assert fake_invoker.commands("dpkg-deb") == [
            ["dpkg-deb", "--root-owner-group", "--build", str(root), str(report.artifact)]
        ]
        assert (root / "opt" / "com.example.helloworld" / "HelloWorld").is_file()

        desktop = (root / "usr/share/applications/com.example.helloworld.desktop").read_text()
        assert "Exec=/opt/com.example.helloworld/HelloWorld\n" in desktop
        assert "Name=Hello World\n" in desktop
        assert "Categories=Utility;" in desktop

        hicolor = root / "usr/share/icons/hicolor"
        assert (hicolor / "32x32/apps/com.example.helloworld.png").is_file()
        assert (hicolor / "256x256/apps/com.example.helloworld.png").is_file()
        assert (hicolor / "scalable/apps/com.example.helloworld.svg").is_file()
        assert (root / "usr/share/pixmaps/com.example.helloworld.png").is_file()

        control = (root / "DEBIAN" / "control").read_text()
        assert control.startswith("Package: helloworld\nVersion: 1.2.3-4\nArchitecture: amd64\n")

    async def test_control_content(self, make_builder, app_config):
        app_config.debian_recommends = "libicu72\nlibssl3"
        builder = make_builder(DebBuilder, PackageType.DEB)

        lines = builder.control_content().splitlines()

        assert "Maintainer: dev@example.com" in lines
        assert "Section: multiverse/utils" in lines
        assert "Homepage: https://example.com" in lines
        assert "Recommends: libicu72, libssl3" in lines
        description = lines.index("Description: Says hello")
        assert lines[description + 1 : description + 5] == [
            " A friendly application.",
            " .",
            " * Greets",
            " * Waves",
        ]
        assert builder.control_content().endswith("\n\n")

    async def test_launcher_script(self, make_builder, app_config):
        app_config.start_command = "helloworld"
        builder = make_builder(DebBuilder, PackageType.DEB)

        await builder.build()

        launcher = builder.context.root_dir / "usr" / "bin" / "helloworld"
        assert launcher.read_text().endswith('exec /opt/com.example.helloworld/HelloWorld "$@"\n')
        assert os.access(launcher, os.X_OK)

    async def test_packaging_failure_aborts(self, make_builder, fake_invoker):
        fake_invoker.respond("dpkg-deb", returncode=2, stderr="dpkg-deb: error: control file invalid")
        builder = make_builder(DebBuilder, PackageType.DEB)

        with pytest.raises(RequiredPhaseFailure, match="control file invalid"):
            await builder.build()


@pytest.mark.asyncio
class TestRpmBuilder:
    """Tests for RpmBuilder."""

    async def test_spec_content(self, make_builder, app_config, temp_dir):
        license_file = temp_dir / "LICENSE"
        license_file.write_text("MIT License")
        app_config.app_license_file = license_file
        app_config.rpm_requires = "libicu, openssl-libs"
        builder = make_builder(RpmBuilder, PackageType.RPM)
        await builder.create_structure()
        await builder.publish()
        await builder.write_files()

        spec = builder.spec_content()

        assert "Name: helloworld\nVersion: 1.2.3\nRelease: 4\n" in spec
        assert "BuildArch: x86_64" in spec
        assert "Requires: libicu\nRequires: openssl-libs" in spec
        assert "AutoReq: no\nAutoProv: yes" in spec
        assert '"/opt/com.example.helloworld/HelloWorld"' in spec
        assert '"/usr/share/applications/com.example.helloworld.desktop"' in spec
        assert "%license /opt/com.example.helloworld/LICENSE" in spec
        assert "%post\n" in spec

    async def test_build_copies_rpm(self, make_builder, fake_invoker):
        builder = make_builder(RpmBuilder, PackageType.RPM)
        rpm_dir = builder.rpmbuild_dir / "RPMS" / "x86_64"

        def produce(args):
            rpm_dir.mkdir(parents=True, exist_ok=True)
            (rpm_dir / "helloworld-1.2.3-4.x86_64.rpm").write_bytes(b"rpm")

        fake_invoker.respond("rpmbuild", side_effect=produce)

        report = await builder.build()

        assert report.artifact.read_bytes() == b"rpm"
        call = fake_invoker.commands("rpmbuild")[0]
        assert call[1:3] == ["-bb", str(builder.spec_path)]
        assert f"--buildroot={builder.structure_dir}" in call
        assert "SOURCE_DATE_EPOCH" in fake_invoker.envs[-1]

    async def test_validate_on_redhat(self, make_request, app_config, make_services):
        builder = RpmBuilder(make_request(PackageType.RPM, "linux-arm64"), app_config, make_services())
        assert builder.validate()

    async def test_validate_hint_follows_distro(self, make_request, app_config, make_services):
        services = make_services(missing=("rpmbuild",), os_release="ID=ubuntu\nID_LIKE=debian\n")
        builder = RpmBuilder(make_request(PackageType.RPM), app_config, services)

        with pytest.raises(ValidationError) as exc_info:
            builder.validate()
        assert exc_info.value.errors == [
            "rpmbuild not found. Please install it:",
            "On Ubuntu/Debian: sudo apt-get install rpm",
        ]

    async def test_validate_rejects_arm_on_debian(self, make_request, app_config, make_services):
        services = make_services(os_release="ID=debian\n")
        builder = RpmBuilder(make_request(PackageType.RPM, "linux-arm"), app_config, services)

        with pytest.raises(ValidationError, match="ARM RPM packages on Debian-based"):
            builder.validate()

    async def test_validate_rejects_unknown_distro(self, make_request, app_config, make_services):
        services = make_services(os_release="ID=arch\n")
        builder = RpmBuilder(make_request(PackageType.RPM), app_config, services)

        with pytest.raises(ValidationError) as exc_info:
            builder.validate()
        assert "Unsupported Linux distribution for RPM packaging." in exc_info.value.errors
        assert "Detected distribution type: unknown" in exc_info.value.errors

    async def test_missing_rpm_fails(self, make_builder):
        builder = make_builder(RpmBuilder, PackageType.RPM)
        with pytest.raises(RequiredPhaseFailure, match="Generated RPM file not found"):
            await builder.build()


@pytest.mark.asyncio
class TestPacmanBuilder:
    """Tests for PacmanBuilder."""

    async def test_pkgbuild_content(self, make_builder, app_config):
        app_config.start_command = "helloworld"
        builder = make_builder(PacmanBuilder, PackageType.PACMAN, app_version="1.2.3-beta")

        content = builder.pkgbuild_content()

        assert "pkgver=1.2.3_beta\n" in content
        assert "pkgrel=4\n" in content
        assert "arch=('x86_64')" in content
        assert "license=('MIT')" in content
        assert 'chmod +x "${pkgdir}/opt/com.example.helloworld/HelloWorld"' in content
        assert 'chmod +x "${pkgdir}/usr/bin/helloworld"' in content

    async def test_build(self, make_builder, fake_invoker):
        builder = make_builder(PacmanBuilder, PackageType.PACMAN)
        root = builder.context.root_dir
        fake_invoker.respond(
            "makepkg",
            side_effect=lambda args: (root / "helloworld-1.2.3-4-x86_64.pkg.tar.zst").write_bytes(b"zst"),
        )

        report = await builder.build()

        assert report.artifact.name == "helloworld.1.2.3-4.linux-x64.pkg.tar.zst"
        assert report.artifact.read_bytes() == b"zst"
        assert fake_invoker.envs[-1]["PKGDEST"] == str(root)
        assert (root / "PKGBUILD").is_file()


@pytest.mark.asyncio
class TestAppImageBuilder:
    """Tests for AppImageBuilder."""

    async def test_validate_requires_png_or_svg(self, make_builder, app_config, icon_files):
        app_config.icons = [icon_files[".ico"]]
        with pytest.raises(ValidationError, match="AppImage requires"):
            make_builder(AppImageBuilder, PackageType.APPIMAGE).validate()

    async def test_build(self, make_builder, fake_invoker):
        builder = make_builder(AppImageBuilder, PackageType.APPIMAGE)
        fake_invoker.respond("appimagetool", side_effect=lambda args: Path(args[-1]).write_bytes(b"ELF"))

        report = await builder.build()

        app_dir = builder.app_dir
        assert (app_dir / "usr" / "bin" / "HelloWorld").is_file()
        assert (app_dir / "com.example.helloworld.desktop").is_file()
        assert "Exec=HelloWorld\n" in (app_dir / "com.example.helloworld.desktop").read_text()
        assert os.readlink(app_dir / ".DirIcon") == "com.example.helloworld.svg"
        assert 'exec "$HERE/usr/bin/HelloWorld" "$@"' in (app_dir / "AppRun").read_text()
        assert os.access(app_dir / "AppRun", os.X_OK)
        assert not (app_dir / "usr" / "share" / "pixmaps" / "com.example.helloworld.png").exists()

        assert fake_invoker.commands("appimagetool")[0][1:] == [str(app_dir), str(report.artifact)]
        assert fake_invoker.envs[-1] == {"ARCH": "x86_64"}
        assert os.access(report.artifact, os.X_OK)


@pytest.mark.asyncio
class TestFlatpakBuilder:
    """Tests for FlatpakBuilder."""

    async def test_validate_requires_platform(self, make_builder, app_config):
        app_config.flatpak_platform_runtime = ""
        with pytest.raises(ValidationError, match="FlatpakPlatformRuntime not configured"):
            make_builder(FlatpakBuilder, PackageType.FLATPAK).validate()

    async def test_manifest(self, make_builder, app_config):
        app_config.flatpak_finish_args = "--socket=wayland --filesystem=home"
        builder = make_builder(FlatpakBuilder, PackageType.FLATPAK)

        manifest = builder.manifest()

        assert manifest["app-id"] == "com.example.helloworld"
        assert manifest["runtime"] == "org.freedesktop.Platform"
        assert manifest["runtime-version"] == "23.08"
        assert manifest["command"] == "HelloWorld"
        assert manifest["finish-args"] == ["--socket=wayland", "--filesystem=home"]
        assert manifest["modules"][0]["sources"] == [{"type": "dir", "path": "files"}]

    async def test_build(self, make_builder, fake_invoker):
        builder = make_builder(FlatpakBuilder, PackageType.FLATPAK)

        report = await builder.build()

        assert (builder.files_dir / "bin" / "HelloWorld").is_file()
        assert "Exec=/app/bin/HelloWorld\n" in builder.layout.desktop_path.read_text()
        written = yaml.safe_load(builder.manifest_path.read_text())
        assert written == builder.manifest()
        assert "finish-args" not in written

        flatpak_builder = fake_invoker.commands("flatpak-builder")[0]
        assert "--arch=x86_64" in flatpak_builder
        assert flatpak_builder[-1] == str(builder.manifest_path)
        assert fake_invoker.commands("flatpak")[0] == [
            "flatpak",
            "build-bundle",
            str(builder.repo_dir),
            str(report.artifact),
            "com.example.helloworld",
            "--arch=x86_64",
            "--branch=master",
        ]


@pytest.mark.asyncio
@pytest.mark.skipif(platform.system() == "Windows", reason="POSIX file modes")
class TestPortableBuilder:
    """Tests for PortableBuilder."""

    async def test_build_tar_gz(self, make_builder):
        builder = make_builder(PortableBuilder, PackageType.PORTABLE)

        report = await builder.build()

        assert report.artifact.name == "helloworld.1.2.3-4.linux-x64.tar.gz"
        with tarfile.open(report.artifact) as archive:
            members = {member.name: member for member in archive.getmembers()}
        assert set(members) == {"HelloWorld", "HelloWorld.dll", "libnative.so", "appsettings.json"}
        assert members["HelloWorld"].mode & 0o111 == 0o111
        assert members["appsettings.json"].mode & 0o555 == 0o555

    async def test_windows_host_comes_from_locator(self, make_builder):
        builder = make_builder(PortableBuilder, PackageType.PORTABLE, host_os=HostOS.WINDOWS)

        assert builder.context.windows_host
        assert builder.context.output_name == "helloworld.1.2.3-4.linux-x64.zip"
        assert builder.permissions_skip_reason() == "Windows host"

    async def test_linux_host_comes_from_locator(self, make_builder):
        builder = make_builder(PortableBuilder, PackageType.PORTABLE)
        assert not builder.context.windows_host
        assert builder.permissions_skip_reason() is None
