"""
Linux builders: deb, rpm, pacman, AppImage and Flatpak.

Each builder composes PublishSteps with a LinuxLayoutSteps rooted where its
format expects the installed tree, writes its format's metadata and runs
the format's packaging tool.
"""

from __future__ import annotations

import re
import shlex
import shutil
import time
from pathlib import Path

import yaml

from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from ...core.types import BuildReport, LinuxDistro
from ...models.configuration import AppConfiguration
from ...models.request import BuildRequest
from ...tools.invoker import ToolInvoker
from ...tools.locator import INSTALL_HINTS
from ..context import BuildContext
from ..pipeline import BuildServices, Phase, run_pipeline
from ..steps.linux import LinuxLayoutSteps, make_executable, published_executables, set_tree_permissions
from ..steps.publish import PublishSteps, check_result
from ..steps.templates import write_text

logger = get_logger(__name__)

RPMBUILD_HINTS: dict[LinuxDistro, tuple[str, ...]] = {
    LinuxDistro.REDHAT: (
        "On Fedora/RHEL/CentOS: sudo dnf install rpm-build",
        "On openSUSE: sudo zypper install rpm-build",
    ),
    LinuxDistro.DEBIAN: ("On Ubuntu/Debian: sudo apt-get install rpm",),
}

DEBIAN_SECTIONS: dict[str, str] = {
    "audiovideo": "sound",
    "audio": "sound",
    "video": "video",
    "development": "devel",
    "education": "education",
    "game": "games",
    "graphics": "graphics",
    "network": "net",
    "office": "text",
    "science": "science",
    "settings": "utils",
    "system": "admin",
    "utility": "utils",
}

FLATPAK_BRANCH = "master"

_LIST_SEPARATORS = re.compile(r"[\r\n,;]+")


def package_slug(name: str) -> str:
    """Lowercase package name with spaces and underscores turned into dashes."""
    return name.lower().replace(" ", "-").replace("_", "-").strip("-")


def split_list(value: str) -> list[str]:
    """Entries of a newline, comma or semicolon separated setting."""
    return [item.strip() for item in _LIST_SEPARATORS.split(value) if item.strip()]


def debian_section(category: str) -> str:
    return DEBIAN_SECTIONS.get(category.strip().lower(), "misc")


def installed_size_kib(root: Path, exclude: Path) -> int:
    total = sum(
        path.stat().st_size
        for path in root.rglob("*")
        if path.is_file() and not path.is_symlink() and not path.is_relative_to(exclude)
    )
    return total // 1024 + 1


class LinuxBuild:
    """Collaborators shared by every Linux builder."""

    def __init__(
        self,
        request: BuildRequest,
        config: AppConfiguration,
        services: BuildServices,
        tools: tuple[str, ...],
    ) -> None:
        self.context = BuildContext(
            request, config, services.settings, services.confirm, windows_host=services.windows_host
        )
        self.services = services
        self.tools = tools
        self.publisher = PublishSteps(self.context, services.invoker, services.locator)

    @property
    def invoker(self) -> ToolInvoker:
        return self.services.invoker

    def tool(self, name: str) -> str:
        return str(self.services.locator.require(name))

    def validation_errors(self) -> list[str]:
        config = self.context.config
        errors: list[str] = []
        for tool in self.tools:
            if not self.services.locator.is_available(tool):
                errors.append(f"{tool} not found. {INSTALL_HINTS.get(tool, f'Install {tool} and add to PATH')}")
        if config.desktop_file is not None and not config.desktop_file.is_file():
            errors.append(f"Desktop file not found: {config.desktop_file}")
        if config.meta_file is not None and not config.meta_file.is_file():
            logger.warning("MetaInfo file not found; it is optional but recommended", path=str(config.meta_file))
        if not config.icons:
            logger.warning("No icons configured; at least one icon is recommended")
        return errors

    def validate(self, extra_errors: list[str] | None = None) -> bool:
        errors = self.validation_errors() + (extra_errors or [])
        if errors:
            logger.error("Validation failed", errors=errors)
            raise ValidationError.from_errors(errors)
        return True


class DebBuilder:
    """Builds a Debian package with ``dpkg-deb``."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.linux = LinuxBuild(request, config, services, ("dpkg-deb",))
        self.context = self.linux.context
        root = self.context.root_dir

        self.package_name = package_slug(config.package_name)
        self.debian_dir = root / "DEBIAN"
        self.install_dir = root / "opt" / config.app_id
        self.layout = LinuxLayoutSteps(
            self.context, root, f"/opt/{config.app_id}/{self.context.app_exec_name}"
        )
        self.doc_dir = self.layout.share_dir / "doc" / self.package_name

    def validate(self) -> bool:
        return self.linux.validate()

    async def create_structure(self) -> None:
        self.debian_dir.mkdir(parents=True, exist_ok=True)
        self.install_dir.mkdir(parents=True, exist_ok=True)
        self.doc_dir.mkdir(parents=True, exist_ok=True)
        self.layout.create_directories()

    async def publish(self) -> None:
        await self.linux.publisher.publish(self.install_dir)

    async def write_files(self) -> None:
        await self.layout.populate(include_pixmaps=True)
        self.layout.copy_license(self.doc_dir / "copyright")

    def control_content(self) -> str:
        context = self.context
        config = context.config
        lines = [
            f"Package: {self.package_name}",
            f"Version: {context.app_version}-{context.package_release}",
            f"Architecture: {self.layout.architecture}",
            f"Maintainer: {config.publisher_email}",
            f"Section: multiverse/{debian_section(config.prime_category)}",
            "Priority: optional",
            f"Installed-Size: {installed_size_kib(context.root_dir, self.debian_dir)}",
        ]
        if config.publisher_link_url:
            lines.append(f"Homepage: {config.publisher_link_url}")
        lines.append(f"Description: {config.app_short_summary}")
        if config.app_description:
            for line in config.app_description.splitlines():
                line = line.strip()
                lines.append(f" {line}" if line else " .")
        lines.append(f"License: {config.app_license_id}")
        lines.append(f"Vendor: {config.publisher_name}")
        recommends = split_list(config.debian_recommends)
        if recommends:
            lines.append(f"Recommends: {', '.join(recommends)}")
        return "\n".join(lines) + "\n\n"

    async def write_control(self) -> None:
        path = self.debian_dir / "control"
        await write_text(path, self.control_content())
        logger.info("Control file generated", path=str(path))

    async def set_permissions(self) -> None:
        executables = published_executables(self.install_dir, self.context.app_exec_name)
        if self.layout.launcher_path is not None and self.layout.launcher_path.is_file():
            executables.append(self.layout.launcher_path)
        for script in ("preinst", "postinst", "prerm", "postrm"):
            if (self.debian_dir / script).is_file():
                executables.append(self.debian_dir / script)
        set_tree_permissions(self.context.root_dir, executables, skip=self.debian_dir)

    async def package(self) -> None:
        args = ["--root-owner-group"]
        if self.context.request.verbose:
            args.append("--verbose")
        args += ["--build", str(self.context.root_dir), str(self.context.output_path)]
        check_result(await self.linux.invoker.run(self.linux.tool("dpkg-deb"), args), "dpkg-deb")

    def phases(self) -> list[Phase]:
        return [
            Phase("create structure", self.create_structure),
            Phase("publish", self.publish),
            Phase("write desktop files", self.write_files),
            Phase("write control file", self.write_control),
            Phase("set permissions", self.set_permissions, required=False),
            Phase("build package", self.package),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()


RPM_SCRIPTLETS = """\
%post
if [ -x /usr/bin/update-desktop-database ]; then
  /usr/bin/update-desktop-database -q /usr/share/applications 2>/dev/null || :
fi
if [ -x /usr/bin/gtk-update-icon-cache ]; then
  /usr/bin/gtk-update-icon-cache -q /usr/share/icons/hicolor 2>/dev/null || :
fi

%postun
if [ -x /usr/bin/update-desktop-database ]; then
  /usr/bin/update-desktop-database -q /usr/share/applications 2>/dev/null || :
fi
if [ $1 -eq 0 ]; then
  if [ -x /usr/bin/gtk-update-icon-cache ]; then
    /usr/bin/gtk-update-icon-cache -q /usr/share/icons/hicolor 2>/dev/null || :
  fi
fi
"""


class RpmBuilder:
    """Builds an RPM with ``rpmbuild -bb`` from a prepared build root."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.linux = LinuxBuild(request, config, services, ())
        self.context = self.linux.context
        root = self.context.root_dir

        self.package_name = package_slug(config.package_name)
        self.structure_dir = root / "structure"
        self.install_dir = self.structure_dir / "opt" / config.app_id
        self.rpmbuild_dir = root / "rpmbuild"
        self.spec_path = root / f"{self.package_name}.spec"
        self.layout = LinuxLayoutSteps(
            self.context, self.structure_dir, f"/opt/{config.app_id}/{self.context.app_exec_name}"
        )

    def distro_errors(self) -> list[str]:
        """rpmbuild problems for the detected distribution family."""
        locator = self.linux.services.locator
        distro = locator.linux_distro
        if distro not in RPMBUILD_HINTS:
            return [
                "Unsupported Linux distribution for RPM packaging.",
                "RPM packages can only be built on Debian-based or RPM-based distributions.",
                f"Detected distribution type: {distro.value}",
            ]
        if distro == LinuxDistro.DEBIAN and "arm" in self.context.runtime.lower():
            return [
                "Building ARM RPM packages on Debian-based distributions is not supported.",
                "Build them on an RPM-based distribution (Fedora/RHEL/openSUSE) or use linux-x64.",
            ]
        if not locator.is_available("rpmbuild"):
            return ["rpmbuild not found. Please install it:", *RPMBUILD_HINTS[distro]]
        logger.info("Using rpmbuild", distro=distro.value)
        return []

    def validate(self) -> bool:
        return self.linux.validate(self.distro_errors())

    async def create_structure(self) -> None:
        self.install_dir.mkdir(parents=True, exist_ok=True)
        self.rpmbuild_dir.mkdir(parents=True, exist_ok=True)
        self.layout.create_directories()

    async def publish(self) -> None:
        await self.linux.publisher.publish(self.install_dir)

    async def write_files(self) -> None:
        await self.layout.populate(include_pixmaps=True)
        license_file = self.context.config.app_license_file
        if license_file is not None:
            self.layout.copy_license(self.install_dir / license_file.name)

    def installed_files(self) -> list[str]:
        return sorted(
            "/" + path.relative_to(self.structure_dir).as_posix()
            for path in self.structure_dir.rglob("*")
            if path.is_file() or path.is_symlink()
        )

    def spec_content(self) -> str:
        context = self.context
        config = context.config
        lines = [
            f"Name: {self.package_name}",
            f"Version: {context.app_version}",
            f"Release: {context.package_release}",
            f"Summary: {config.app_short_summary}",
            f"License: {config.app_license_id or 'Proprietary'}",
            f"BuildArch: {self.layout.architecture}",
        ]
        if config.publisher_link_url:
            lines.append(f"URL: {config.publisher_link_url}")
        if config.publisher_name:
            lines.append(f"Vendor: {config.publisher_name}")
        lines += [f"Requires: {req}" for req in split_list(config.rpm_requires)]
        lines += [
            f"AutoReq: {'yes' if config.rpm_auto_req else 'no'}",
            f"AutoProv: {'yes' if config.rpm_auto_prov else 'no'}",
            "",
            "%description",
            config.app_description or config.app_short_summary,
            "",
            "%files",
            "%defattr(-, root, root, -)",
        ]
        license_name = config.app_license_file.name.lower() if config.app_license_file else None
        for file in self.installed_files():
            name = Path(file).name.lower()
            if name == license_name or Path(name).stem in ("license", "licence"):
                lines.append(f"%license {file}")
            else:
                lines.append(f'"{file}"')
        return "\n".join(lines) + "\n\n" + RPM_SCRIPTLETS

    async def write_spec(self) -> None:
        await write_text(self.spec_path, self.spec_content())
        logger.info("Spec file generated", path=str(self.spec_path))

    async def set_permissions(self) -> None:
        executables = published_executables(self.install_dir, self.context.app_exec_name)
        if self.layout.launcher_path is not None and self.layout.launcher_path.is_file():
            executables.append(self.layout.launcher_path)
        set_tree_permissions(self.structure_dir, executables)

    async def package(self) -> None:
        args = [
            "-bb",
            str(self.spec_path),
            "--define",
            f"_topdir {self.rpmbuild_dir}",
            f"--buildroot={self.structure_dir}",
            "--define",
            f"_rpmdir {self.rpmbuild_dir / 'RPMS'}",
            "--define",
            "_build_id_links none",
            "--noclean",
        ]
        if self.context.request.verbose:
            args.append("--verbose")
        result = await self.linux.invoker.run(
            self.linux.tool("rpmbuild"),
            args,
            cwd=self.context.root_dir,
            env={"SOURCE_DATE_EPOCH": str(int(time.time()))},
        )
        check_result(result, "rpmbuild")

        built = sorted((self.rpmbuild_dir / "RPMS" / self.layout.architecture).glob("*.rpm"))
        if not built:
            raise FileNotFoundError("Generated RPM file not found")
        shutil.copyfile(built[0], self.context.output_path)
        logger.info("RPM package built", path=str(self.context.output_path))

    def phases(self) -> list[Phase]:
        return [
            Phase("create structure", self.create_structure),
            Phase("publish", self.publish),
            Phase("write desktop files", self.write_files),
            Phase("set permissions", self.set_permissions, required=False),
            Phase("write spec file", self.write_spec),
            Phase("build package", self.package),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()


class PacmanBuilder:
    """Builds an Arch Linux package with ``makepkg`` from a PKGBUILD."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.linux = LinuxBuild(request, config, services, ("makepkg",))
        self.context = self.linux.context
        root = self.context.root_dir

        self.package_name = package_slug(config.package_name)
        self.structure_dir = root / "structure"
        self.install_dir = self.structure_dir / "opt" / config.app_id
        self.pkgbuild_path = root / "PKGBUILD"
        self.layout = LinuxLayoutSteps(
            self.context, self.structure_dir, f"/opt/{config.app_id}/{self.context.app_exec_name}"
        )

    @property
    def package_version(self) -> str:
        # pacman versions cannot contain dashes
        return self.context.app_version.replace("-", "_")

    def validate(self) -> bool:
        return self.linux.validate()

    async def create_structure(self) -> None:
        self.install_dir.mkdir(parents=True, exist_ok=True)
        self.layout.create_directories()

    async def publish(self) -> None:
        await self.linux.publisher.publish(self.install_dir)

    async def write_files(self) -> None:
        await self.layout.populate(include_pixmaps=True)
        self.layout.copy_license(
            self.layout.share_dir / "licenses" / self.package_name / "LICENSE"
        )

    def pkgbuild_content(self) -> str:
        context = self.context
        config = context.config
        lines = [
            f"# Maintainer: {config.publisher_name} <{config.publisher_email}>",
            "",
            f"pkgname={self.package_name}",
            f"pkgver={self.package_version}",
            f"pkgrel={context.package_release}",
            f'pkgdesc="{config.app_short_summary}"',
            f"arch=('{self.layout.architecture}')",
            f'url="{config.publisher_link_url}"',
            f"license=('{config.app_license_id or 'custom'}')",
            "options=('!strip')",
            "",
            "source=()",
            "sha256sums=()",
            "",
            "package() {",
            '  cp -r "${startdir}/structure/"* "${pkgdir}/"',
            f'  chmod +x "${{pkgdir}}{self.layout.install_exec}"',
        ]
        if config.start_command:
            lines.append(f'  chmod +x "${{pkgdir}}/usr/bin/{config.start_command}"')
        lines.append("}")
        return "\n".join(lines) + "\n"

    async def write_pkgbuild(self) -> None:
        await write_text(self.pkgbuild_path, self.pkgbuild_content())
        logger.info("PKGBUILD generated", path=str(self.pkgbuild_path))

    async def package(self) -> None:
        args = ["--nodeps", "--skipinteg", "--skippgpcheck", "--skipchecksums", "--ignorearch", "--force"]
        if self.context.request.verbose:
            args.append("--nocolor")
        result = await self.linux.invoker.run(
            self.linux.tool("makepkg"),
            args,
            cwd=self.context.root_dir,
            env={"SOURCE_DATE_EPOCH": str(int(time.time())), "PKGDEST": str(self.context.root_dir)},
        )
        check_result(result, "makepkg")

        root = self.context.root_dir
        expected = f"{self.package_name}-{self.package_version}-{self.context.package_release}-{self.layout.architecture}.pkg.tar.zst"
        built = sorted(root.glob(expected)) or sorted(root.glob(f"{self.package_name}-*.pkg.tar.zst"))
        if not built:
            raise FileNotFoundError(f"Generated package not found in {root}")
        shutil.copyfile(built[0], self.context.output_path)
        logger.info("Pacman package built", path=str(self.context.output_path))

    def phases(self) -> list[Phase]:
        return [
            Phase("create structure", self.create_structure),
            Phase("publish", self.publish),
            Phase("write desktop files", self.write_files),
            Phase("write PKGBUILD", self.write_pkgbuild),
            Phase("build package", self.package),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()


APP_RUN_TEMPLATE = """\
#!/bin/sh
HERE="$(dirname "$(readlink -f "$0")")"
export PATH="$HERE/usr/bin:$PATH"
exec "$HERE/usr/bin/{exec_name}" "$@"
"""


class AppImageBuilder:
    """Builds an AppImage from an AppDir with ``appimagetool``."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.linux = LinuxBuild(request, config, services, ("appimagetool",))
        self.context = self.linux.context
        self.app_dir = self.context.root_dir / f"{config.app_base_name}.AppDir"
        self.layout = LinuxLayoutSteps(self.context, self.app_dir, self.context.app_exec_name)

    def validate(self) -> bool:
        extra: list[str] = []
        if not self.context.config.icons_with_suffix(".png") and self.context.config.find_icon(".svg") is None:
            extra.append("AppImage requires at least one .png or .svg icon.")
        return self.linux.validate(extra)

    async def create_structure(self) -> None:
        self.layout.create_directories()

    async def publish(self) -> None:
        await self.linux.publisher.publish(self.layout.bin_dir)

    async def write_files(self) -> None:
        layout = self.layout
        await layout.write_desktop_file()
        await layout.write_metainfo_file()
        layout.copy_icons(include_pixmaps=False)

        app_id = self.context.config.app_id
        shutil.copyfile(layout.desktop_path, self.app_dir / layout.desktop_path.name)

        icon = self.linux.publisher.primary_icon()
        if icon is not None and icon.is_file():
            root_icon = self.app_dir / f"{app_id}{icon.suffix.lower()}"
            shutil.copyfile(icon, root_icon)
            (self.app_dir / ".DirIcon").unlink(missing_ok=True)
            (self.app_dir / ".DirIcon").symlink_to(root_icon.name)

        app_run = self.app_dir / "AppRun"
        await write_text(app_run, APP_RUN_TEMPLATE.format(exec_name=self.context.app_exec_name))
        make_executable(app_run)

    async def package(self) -> None:
        macros = self.context.macros
        args = [
            *shlex.split(macros.expand(self.context.config.app_image_args)),
            str(self.app_dir),
            str(self.context.output_path),
        ]
        result = await self.linux.invoker.run(
            self.linux.tool("appimagetool"),
            args,
            env={"ARCH": self.layout.architecture},
        )
        check_result(result, "appimagetool")
        make_executable(self.context.output_path)
        logger.info("AppImage built", path=str(self.context.output_path))

    def phases(self) -> list[Phase]:
        return [
            Phase("create AppDir", self.create_structure),
            Phase("publish", self.publish),
            Phase("write AppDir files", self.write_files),
            Phase("build AppImage", self.package),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()


class FlatpakBuilder:
    """Builds a single-file Flatpak bundle with ``flatpak-builder`` and ``flatpak``."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.linux = LinuxBuild(request, config, services, ("flatpak-builder", "flatpak"))
        self.context = self.linux.context
        root = self.context.root_dir

        self.build_dir = root / "build"
        self.repo_dir = root / "repo"
        self.state_dir = root / "state"
        self.files_dir = root / "files"
        self.manifest_path = root / f"{config.app_id}.yml"
        self.layout = LinuxLayoutSteps(
            self.context, self.files_dir, f"/app/bin/{self.context.app_exec_name}", prefix=""
        )

    def validate(self) -> bool:
        config = self.context.config
        extra: list[str] = []
        if not config.flatpak_platform_runtime:
            extra.append("FlatpakPlatformRuntime not configured (e.g., org.freedesktop.Platform)")
        if not config.flatpak_platform_sdk:
            extra.append("FlatpakPlatformSdk not configured (e.g., org.freedesktop.Sdk)")
        if not config.flatpak_platform_version:
            extra.append("FlatpakPlatformVersion not configured (e.g., 23.08)")
        if not config.icons_with_suffix(".png") and config.find_icon(".svg") is None:
            extra.append("No icon found in configuration. Flatpak requires at least one icon.")
        return self.linux.validate(extra)

    async def create_structure(self) -> None:
        for directory in (self.build_dir, self.repo_dir, self.state_dir):
            directory.mkdir(parents=True, exist_ok=True)
        self.layout.create_directories()

    async def publish(self) -> None:
        await self.linux.publisher.publish(self.layout.bin_dir)

    async def write_files(self) -> None:
        await self.layout.write_desktop_file()
        await self.layout.write_metainfo_file()
        self.layout.copy_icons(include_pixmaps=False)

    def manifest(self) -> dict:
        config = self.context.config
        manifest: dict = {
            "app-id": config.app_id,
            "runtime": config.flatpak_platform_runtime,
            "runtime-version": config.flatpak_platform_version,
            "sdk": config.flatpak_platform_sdk,
            "command": self.context.app_exec_name,
        }
        finish_args = shlex.split(self.context.macros.expand(config.flatpak_finish_args))
        if finish_args:
            manifest["finish-args"] = finish_args
        manifest["modules"] = [
            {
                "name": config.app_base_name,
                "buildsystem": "simple",
                "build-commands": [
                    "mkdir -p /app/bin",
                    "cp -rn bin/* /app/bin",
                    "mkdir -p /app/share",
                    "cp -rn share/* /app/share",
                ],
                "sources": [{"type": "dir", "path": "files"}],
            }
        ]
        return manifest

    async def write_manifest(self) -> None:
        content = yaml.safe_dump(self.manifest(), sort_keys=False, default_flow_style=False)
        await write_text(self.manifest_path, content)
        logger.info("Flatpak manifest generated", path=str(self.manifest_path))

    async def package(self) -> None:
        invoker = self.linux.invoker
        arch = self.layout.architecture
        args = [
            *shlex.split(self.context.macros.expand(self.context.config.flatpak_builder_args)),
            f"--arch={arch}",
            f"--repo={self.repo_dir}",
            "--force-clean",
            str(self.build_dir),
            "--state-dir",
            str(self.state_dir),
            str(self.manifest_path),
        ]
        check_result(
            await invoker.run(self.linux.tool("flatpak-builder"), args, cwd=self.context.root_dir),
            "flatpak-builder",
        )

        bundle_args = [
            "build-bundle",
            str(self.repo_dir),
            str(self.context.output_path),
            self.context.config.app_id,
            f"--arch={arch}",
            f"--branch={FLATPAK_BRANCH}",
        ]
        check_result(await invoker.run(self.linux.tool("flatpak"), bundle_args), "flatpak build-bundle")
        logger.info("Flatpak bundle built", path=str(self.context.output_path))

    def phases(self) -> list[Phase]:
        return [
            Phase("create structure", self.create_structure),
            Phase("publish", self.publish),
            Phase("write desktop files", self.write_files),
            Phase("write manifest", self.write_manifest),
            Phase("build flatpak", self.package),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()
