"""One builder per package type, each composing the shared steps."""

from .linux import AppImageBuilder, DebBuilder, FlatpakBuilder, PacmanBuilder, RpmBuilder
from .macos import AppBundleBuilder, DiskImageBuilder
from .portable import PortableBuilder
from .windows import ExeBuilder, MsiBuilder

__all__ = [
    "AppBundleBuilder",
    "AppImageBuilder",
    "DebBuilder",
    "DiskImageBuilder",
    "ExeBuilder",
    "FlatpakBuilder",
    "MsiBuilder",
    "PacmanBuilder",
    "PortableBuilder",
    "RpmBuilder",
]
