"""
Builder factory.

Maps each package type to its builder class. The factory never decides
whether a build is possible; callers check ``can_build`` first and a
violation here is a programming error.
"""

from __future__ import annotations

from collections.abc import Callable

from ..core.exceptions import InternalError
from ..core.logging import get_logger
from ..core.types import HostOS, PackageType
from ..models.configuration import AppConfiguration
from ..models.request import BuildRequest
from .builders import (
    AppBundleBuilder,
    AppImageBuilder,
    DebBuilder,
    DiskImageBuilder,
    ExeBuilder,
    FlatpakBuilder,
    MsiBuilder,
    PacmanBuilder,
    PortableBuilder,
    RpmBuilder,
)
from .capabilities import can_build
from .pipeline import Builder, BuildServices

logger = get_logger(__name__)

BuilderClass = Callable[[BuildRequest, AppConfiguration, BuildServices], Builder]

DEFAULT_BUILDERS: dict[PackageType, BuilderClass] = {
    PackageType.EXE: ExeBuilder,
    PackageType.MSI: MsiBuilder,
    PackageType.APP: AppBundleBuilder,
    PackageType.DMG: DiskImageBuilder,
    PackageType.APPIMAGE: AppImageBuilder,
    PackageType.DEB: DebBuilder,
    PackageType.RPM: RpmBuilder,
    PackageType.FLATPAK: FlatpakBuilder,
    PackageType.PACMAN: PacmanBuilder,
    PackageType.PORTABLE: PortableBuilder,
}


class BuilderFactory:
    """Creates the builder registered for a request's package type."""

    def __init__(
        self,
        services: BuildServices,
        registry: dict[PackageType, BuilderClass] | None = None,
    ) -> None:
        self.services = services
        self.registry = dict(DEFAULT_BUILDERS if registry is None else registry)

    @property
    def host_os(self) -> HostOS:
        return self.services.locator.host_os

    def can_build(self, request: BuildRequest) -> bool:
        return can_build(request, self.host_os)

    def register(self, package_type: PackageType, builder: BuilderClass) -> None:
        self.registry[package_type] = builder

    def create_builder(self, request: BuildRequest, config: AppConfiguration) -> Builder:
        """Instantiate the builder for ``request``.

        Raises:
            InternalError: If the request cannot be built on this host or no
                builder is registered for its package type.
        """
        if not self.can_build(request):
            raise InternalError(
                f"create_builder called for {request.package_type.value} / {request.runtime} "
                f"on {self.host_os.value} without a successful can_build check"
            )
        builder_class = self.registry.get(request.package_type)
        if builder_class is None:
            raise InternalError(f"No builder registered for package type {request.package_type.value}")

        logger.debug("Creating builder", package_type=request.package_type.value, builder=builder_class.__name__)
        return builder_class(request, config, self.services)
