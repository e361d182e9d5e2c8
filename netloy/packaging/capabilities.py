"""
Capability matrix.

One row per package type describing where it can be built. Adding a package
type means adding a row here and registering its builder in the factory.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..core.logging import get_logger
from ..core.types import FrameworkKind, HostOS, PackageType
from ..models.request import BuildRequest
from ..tools.locator import ToolLocator

logger = get_logger(__name__)

WINDOWS_RUNTIMES = frozenset({"win-x64", "win-x86", "win-arm64"})
MACOS_RUNTIMES = frozenset({"osx-x64", "osx-arm64"})
LINUX_RUNTIMES = frozenset({"linux-x64", "linux-x86", "linux-arm64", "linux-arm"})

NETCORE_ONLY = frozenset({FrameworkKind.NETCORE})
ANY_FRAMEWORK = frozenset({FrameworkKind.NETCORE, FrameworkKind.NETFRAMEWORK})


@dataclass(frozen=True)
class CapabilityRule:
    """Where one package type can be built."""

    package_type: PackageType
    host_os: frozenset[HostOS]
    runtimes: frozenset[str]
    frameworks: frozenset[FrameworkKind]
    tool: str | None = None
    tool_optional: bool = False

    def permits(self, request: BuildRequest, host_os: HostOS) -> bool:
        """Whether this row allows ``request`` on ``host_os``.

        The legacy framework is only ever allowed on a Windows host with a
        Windows runtime.
        """
        if host_os not in self.host_os:
            return False
        if request.runtime not in self.runtimes:
            return False
        if request.framework not in self.frameworks:
            return False
        if request.framework == FrameworkKind.NETFRAMEWORK:
            return host_os == HostOS.WINDOWS and request.runtime in WINDOWS_RUNTIMES
        return True


CAPABILITY_RULES: tuple[CapabilityRule, ...] = (
    CapabilityRule(PackageType.EXE, frozenset({HostOS.WINDOWS}), WINDOWS_RUNTIMES, ANY_FRAMEWORK, "iscc"),
    CapabilityRule(PackageType.MSI, frozenset({HostOS.WINDOWS}), WINDOWS_RUNTIMES, ANY_FRAMEWORK, "wix"),
    CapabilityRule(PackageType.APP, frozenset({HostOS.MACOS}), MACOS_RUNTIMES, NETCORE_ONLY, "ditto", tool_optional=True),
    CapabilityRule(PackageType.DMG, frozenset({HostOS.MACOS}), MACOS_RUNTIMES, NETCORE_ONLY, "hdiutil"),
    CapabilityRule(PackageType.APPIMAGE, frozenset({HostOS.LINUX}), LINUX_RUNTIMES, NETCORE_ONLY, "appimagetool"),
    CapabilityRule(PackageType.DEB, frozenset({HostOS.LINUX}), LINUX_RUNTIMES, NETCORE_ONLY, "dpkg-deb"),
    CapabilityRule(PackageType.RPM, frozenset({HostOS.LINUX}), LINUX_RUNTIMES, NETCORE_ONLY, "rpmbuild"),
    CapabilityRule(PackageType.FLATPAK, frozenset({HostOS.LINUX}), LINUX_RUNTIMES, NETCORE_ONLY, "flatpak-builder"),
    CapabilityRule(PackageType.PACMAN, frozenset({HostOS.LINUX}), LINUX_RUNTIMES, NETCORE_ONLY, "makepkg"),
    CapabilityRule(
        PackageType.PORTABLE,
        frozenset({HostOS.WINDOWS, HostOS.MACOS, HostOS.LINUX}),
        WINDOWS_RUNTIMES | MACOS_RUNTIMES | (LINUX_RUNTIMES - {"linux-arm"}),
        ANY_FRAMEWORK,
    ),
)


def get_rule(package_type: PackageType) -> CapabilityRule | None:
    """Capability row for a package type."""
    for rule in CAPABILITY_RULES:
        if rule.package_type == package_type:
            return rule
    return None


def can_build(request: BuildRequest, host_os: HostOS) -> bool:
    """Whether ``request`` can be built on ``host_os``.

    The request's runtime must already be resolved; see ``resolve_runtime``.
    """
    rule = get_rule(request.package_type)
    if rule is None:
        return False
    allowed = rule.permits(request, host_os)
    logger.debug(
        "Capability check",
        package_type=request.package_type.value,
        runtime=request.runtime,
        framework=request.framework.value,
        host_os=host_os.value,
        allowed=allowed,
    )
    return allowed


def resolve_runtime(request: BuildRequest, locator: ToolLocator) -> BuildRequest:
    """Fill an empty runtime from the host architecture.

    Returns:
        The same request when a runtime is set, otherwise a copy with
        ``<family>-<arch>`` of the host.
    """
    if request.runtime:
        return request
    runtime = locator.default_runtime()
    logger.debug("Runtime resolved from host", runtime=runtime)
    return request.model_copy(update={"runtime": runtime})
