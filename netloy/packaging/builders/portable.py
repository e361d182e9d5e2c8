"""Portable archive builder: the published binaries as ``.zip`` or ``.tar.gz``."""

from __future__ import annotations

import stat

from ...core.logging import get_logger
from ...core.types import BuildReport
from ...models.configuration import AppConfiguration
from ...models.request import BuildRequest
from ..context import BuildContext
from ..pipeline import BuildServices, Phase, run_pipeline
from ..steps.archive import tar_gz_directory, zip_directory
from ..steps.publish import PublishSteps

logger = get_logger(__name__)

READ_EXECUTE_ALL = stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
EXECUTE_ALL = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


class PortableBuilder:
    """Publishes into ``<root>/publish`` and archives the result."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.context = BuildContext(
            request, config, services.settings, services.confirm, windows_host=services.windows_host
        )
        self.services = services
        self.publisher = PublishSteps(self.context, services.invoker, services.locator)
        self.publish_dir = self.context.root_dir / "publish"

    def validate(self) -> bool:
        return True

    async def publish(self) -> None:
        await self.publisher.publish(self.publish_dir)

    async def set_permissions(self) -> None:
        """``+x`` on the main executable, ``a+rx`` on everything else.

        Raises:
            OSError: If a permission cannot be changed.
        """
        exec_name = self.context.app_exec_name
        for path in sorted(self.publish_dir.rglob("*")):
            if not path.is_file() or path.is_symlink():
                continue
            mode = path.stat().st_mode
            if path.name == exec_name:
                logger.info("Setting execute permission", file=path.name)
                path.chmod(mode | EXECUTE_ALL)
            else:
                path.chmod(mode | READ_EXECUTE_ALL)

    def permissions_skip_reason(self) -> str | None:
        return "Windows host" if self.context.windows_host else None

    async def archive(self) -> None:
        output = self.context.output_path
        if self.context.windows_host:
            zip_directory(self.publish_dir, output)
        else:
            tar_gz_directory(self.publish_dir, output)

    def phases(self) -> list[Phase]:
        return [
            Phase("publish", self.publish),
            Phase("set permissions", self.set_permissions, skip_if=self.permissions_skip_reason),
            Phase("archive", self.archive),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()
