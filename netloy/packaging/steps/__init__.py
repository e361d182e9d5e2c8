"""Reusable build steps composed by the package builders."""

from .archive import ditto_zip, tar_gz_directory, zip_directory
from .linux import LinuxLayoutSteps, linux_architecture
from .macos import MacBundleSteps
from .publish import PublishSteps, check_result
from .templates import materialize, read_text, render, write_text

__all__ = [
    "LinuxLayoutSteps",
    "MacBundleSteps",
    "PublishSteps",
    "check_result",
    "ditto_zip",
    "linux_architecture",
    "materialize",
    "read_text",
    "render",
    "tar_gz_directory",
    "write_text",
    "zip_directory",
]
