"""
Host and tool discovery.

ToolLocator is created once per process and handed to every builder. It
memoizes PATH lookups and host facts so repeated phases do not hit the
filesystem again.
"""

from __future__ import annotations

import platform
import shutil
from collections.abc import Callable
from pathlib import Path

from ..core.exceptions import ToolNotFoundError
from ..core.logging import get_logger
from ..core.types import HostOS, LinuxDistro

logger = get_logger(__name__)

OS_RELEASE = Path("/etc/os-release")

_DEBIAN_MARKERS = ("id=ubuntu", "id=debian", "id=linuxmint", "id_like=debian", "id_like=ubuntu")
_REDHAT_MARKERS = (
    "id=fedora",
    "id=rhel",
    "id=centos",
    "id=rocky",
    "id=alma",
    "id=opensuse",
    "id_like=fedora",
    "id_like=rhel",
)

_ARCHITECTURES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7l": "arm",
    "armv7": "arm",
    "arm": "arm",
}

_RUNTIME_FAMILIES = {
    HostOS.WINDOWS: "win",
    HostOS.MACOS: "osx",
    HostOS.LINUX: "linux",
}

INSTALL_HINTS: dict[str, str] = {
    "dotnet": "Install the .NET SDK from https://dotnet.microsoft.com/download",
    "iscc": "Install Inno Setup 6 and add its directory to PATH",
    "wix": "dotnet tool install --global wix",
    "ditto": "ditto ships with macOS",
    "hdiutil": "hdiutil ships with macOS",
    "codesign": "Install the Xcode command line tools: xcode-select --install",
    "xcrun": "Install the Xcode command line tools: xcode-select --install",
    "appimagetool": "Download appimagetool from https://github.com/AppImage/appimagetool/releases",
    "dpkg-deb": "sudo apt install dpkg",
    "flatpak-builder": "Install flatpak-builder from your distribution repositories",
    "makepkg": "makepkg ships with pacman on Arch based distributions",
    "msbuild": "Run from a Visual Studio Developer Command Prompt or add MSBuild to PATH",
}


class ToolLocator:
    """Memoized answers about the host and its installed tools."""

    def __init__(
        self,
        which: Callable[[str], str | None] = shutil.which,
        host_os: HostOS | None = None,
        host_architecture: str | None = None,
        os_release: Path = OS_RELEASE,
    ) -> None:
        """Initialize the locator.

        Args:
            which: PATH lookup function.
            host_os: Override of the detected operating system.
            host_architecture: Override of the detected CPU architecture (x64, x86, arm64, arm).
            os_release: os-release file used for Linux distribution detection.
        """
        self._which = which
        self._host_os = host_os
        self._host_architecture = host_architecture
        self._os_release = os_release
        self._distro: LinuxDistro | None = None
        self._tools: dict[str, Path | None] = {}

    @property
    def host_os(self) -> HostOS:
        if self._host_os is None:
            system = platform.system().lower()
            self._host_os = {
                "windows": HostOS.WINDOWS,
                "darwin": HostOS.MACOS,
                "linux": HostOS.LINUX,
            }.get(system, HostOS.UNKNOWN)
        return self._host_os

    @property
    def host_architecture(self) -> str:
        if self._host_architecture is None:
            machine = platform.machine().lower()
            self._host_architecture = _ARCHITECTURES.get(machine, machine)
        return self._host_architecture

    def default_runtime(self) -> str:
        """Runtime identifier matching the host, e.g. ``linux-x64``.

        Raises:
            ValueError: If the host OS has no runtime family.
        """
        family = _RUNTIME_FAMILIES.get(self.host_os)
        if family is None:
            raise ValueError(f"Unsupported host operating system: {platform.system()}")
        return f"{family}-{self.host_architecture}"

    @property
    def linux_distro(self) -> LinuxDistro:
        """Distribution family read from /etc/os-release."""
        if self._distro is None:
            self._distro = self._detect_distro()
        return self._distro

    def _detect_distro(self) -> LinuxDistro:
        if self.host_os != HostOS.LINUX or not self._os_release.exists():
            return LinuxDistro.UNKNOWN

        content = self._os_release.read_text(encoding="utf-8", errors="replace").lower()
        if any(marker in content for marker in _DEBIAN_MARKERS):
            return LinuxDistro.DEBIAN
        if any(marker in content for marker in _REDHAT_MARKERS):
            return LinuxDistro.REDHAT
        return LinuxDistro.UNKNOWN

    def find(self, tool: str) -> Path | None:
        """Path of ``tool`` on PATH, or None."""
        if tool not in self._tools:
            found = self._which(tool)
            self._tools[tool] = Path(found) if found else None
            logger.debug("Tool lookup", tool=tool, path=found)
        return self._tools[tool]

    def is_available(self, tool: str) -> bool:
        return self.find(tool) is not None

    def require(self, tool: str) -> Path:
        """Path of ``tool``.

        Raises:
            ToolNotFoundError: If the tool is not on PATH.
        """
        path = self.find(tool)
        if path is None:
            raise ToolNotFoundError(
                message=f"Tool not found: {tool}",
                tool_name=tool,
                install_hint=INSTALL_HINTS.get(tool, f"Install {tool} and add to PATH"),
            )
        return path
