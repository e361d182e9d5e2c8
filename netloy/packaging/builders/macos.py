"""
macOS builders: ``.app`` bundles (zipped) and ``.dmg`` disk images.

Both share the bundle phase sequence from ``bundle_phases``; the disk image
builder appends its own imaging, signing and notarization phases.
"""

from __future__ import annotations

from ...core.exceptions import ValidationError
from ...core.logging import get_logger
from ...core.types import BuildReport
from ...models.configuration import AppConfiguration
from ...models.request import BuildRequest, SigningCredentials
from ...notarization import CodeSigner, Notarizer
from ..context import BuildContext
from ..pipeline import BuildServices, Phase, run_pipeline
from ..steps.archive import ditto_zip, zip_directory
from ..steps.macos import MacBundleSteps
from ..steps.publish import PublishSteps

logger = get_logger(__name__)


class MacBuild:
    """Collaborators of one macOS build, shared by the app and dmg builders."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.context = BuildContext(
            request, config, services.settings, services.confirm, windows_host=services.windows_host
        )
        self.services = services
        self.bundle = MacBundleSteps(self.context, services.invoker, services.locator)
        self.publisher = PublishSteps(self.context, services.invoker, services.locator)

    @property
    def credentials(self) -> SigningCredentials:
        return self.context.request.signing

    def signing_skip_reason(self) -> str | None:
        if not self.credentials.has_identity:
            return "No signing identity provided"
        return None

    def notarization_skip_reason(self) -> str | None:
        if not self.credentials.has_notarization_credentials:
            return "Apple ID, team ID and app-specific password are required for notarization"
        return None

    def signer(self) -> CodeSigner:
        codesign = str(self.services.locator.require("codesign"))
        return CodeSigner(self.services.invoker, self.credentials.identity_value, codesign)

    def notarizer(self) -> Notarizer:
        locator = self.services.locator
        return Notarizer(
            self.services.invoker,
            self.credentials,
            work_dir=self.context.root_dir,
            base_name=self.context.config.app_base_name,
            xcrun=str(locator.require("xcrun")),
            ditto=str(locator.require("ditto")),
        )

    def validate(self) -> bool:
        errors = self.bundle.validation_errors()
        if errors:
            logger.error("Validation failed", errors=errors)
            raise ValidationError.from_errors(errors)
        return True

    async def sign_bundle(self) -> None:
        await self.signer().sign_bundle(self.bundle.bundle_dir, self.bundle.entitlements_path)

    async def notarize_bundle(self) -> None:
        await self.notarizer().notarize(self.bundle.bundle_dir)

    async def publish(self) -> None:
        await self.publisher.publish(self.bundle.macos_dir)


def bundle_phases(build: MacBuild) -> list[Phase]:
    """Skeleton through notarization of the ``.app`` bundle."""
    steps = build.bundle
    return [
        Phase("create bundle skeleton", steps.create_skeleton),
        Phase("publish", build.publish),
        Phase("copy icon", steps.copy_icon),
        Phase("write Info.plist", steps.write_metadata),
        Phase("write PkgInfo", steps.write_pkginfo),
        Phase("set permissions", steps.set_permissions, required=False),
        Phase("code signing", build.sign_bundle, skip_if=build.signing_skip_reason),
        Phase("notarization", build.notarize_bundle, skip_if=build.notarization_skip_reason),
    ]


class AppBundleBuilder:
    """Builds ``<PackageName>.<version>-<release>.<rid>.app.zip``."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.mac = MacBuild(request, config, services)
        self.context = self.mac.context

    def validate(self) -> bool:
        return self.mac.validate()

    async def archive(self) -> None:
        bundle_dir = self.mac.bundle.bundle_dir
        output = self.context.output_path
        ditto = self.mac.services.locator.find("ditto")
        if ditto is not None:
            await ditto_zip(self.mac.services.invoker, str(ditto), bundle_dir, output)
        else:
            logger.info("ditto not available, creating zip archive directly")
            zip_directory(bundle_dir, output, keep_parent=True)
        logger.info("App bundle archived", path=str(output))

    def phases(self) -> list[Phase]:
        return [*bundle_phases(self.mac), Phase("archive", self.archive)]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()


class DiskImageBuilder:
    """Builds ``<PackageName>.<version>-<release>.<rid>.dmg``."""

    def __init__(self, request: BuildRequest, config: AppConfiguration, services: BuildServices) -> None:
        self.mac = MacBuild(request, config, services)
        self.context = self.mac.context

    def validate(self) -> bool:
        return self.mac.validate()

    async def create_image(self) -> None:
        await self.mac.bundle.create_disk_image(self.context.output_path)

    async def sign_image(self) -> None:
        await self.mac.signer().sign_path(self.context.output_path)

    async def notarize_image(self) -> None:
        await self.mac.notarizer().notarize(self.context.output_path)

    def phases(self) -> list[Phase]:
        return [
            *bundle_phases(self.mac),
            Phase("create disk image", self.create_image),
            Phase("sign disk image", self.sign_image, skip_if=self.mac.signing_skip_reason),
            Phase("notarize disk image", self.notarize_image, skip_if=self.mac.notarization_skip_reason),
        ]

    async def build(self) -> BuildReport:
        return await run_pipeline(self.context, self.phases())

    def clear(self) -> None:
        self.context.clear()
