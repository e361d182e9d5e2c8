"""Archive helpers: zip, tar.gz and macOS ditto archives."""

from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path

from ...core.logging import get_logger
from ...tools.invoker import ToolInvoker
from .publish import check_result

logger = get_logger(__name__)


def zip_directory(source: Path, destination: Path, keep_parent: bool = False) -> Path:
    """Write every file under ``source`` into a zip archive.

    Args:
        source: Directory to archive.
        destination: Zip file to create; replaced if it exists.
        keep_parent: Store entries under a single top-level ``source.name``
            directory instead of relative to ``source``.

    Returns:
        The destination path.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    if destination.exists():
        destination.unlink()

    base = source.parent if keep_parent else source
    with zipfile.ZipFile(destination, "w", zipfile.ZIP_DEFLATED) as archive:
        for path in sorted(source.rglob("*")):
            arcname = path.relative_to(base).as_posix()
            if path.is_symlink() or path.is_file():
                archive.write(path, arcname)
            elif path.is_dir():
                archive.write(path, arcname + "/")
    logger.info("Created zip archive", path=str(destination))
    return destination


def tar_gz_directory(source: Path, destination: Path) -> Path:
    """Write every entry under ``source`` into a gzip tarball, paths relative to ``source``."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    if destination.exists():
        destination.unlink()

    with tarfile.open(destination, "w:gz") as archive:
        for path in sorted(source.iterdir()):
            archive.add(path, arcname=path.name)
    logger.info("Created tar.gz archive", path=str(destination))
    return destination


async def ditto_zip(invoker: ToolInvoker, ditto: str, bundle: Path, destination: Path) -> Path:
    """Zip a macOS bundle with ``ditto``, keeping its top-level directory.

    The command runs from the bundle's parent so the archive holds a single
    ``<Name>.app`` entry.

    Raises:
        ToolExecutionError: If ditto fails.
    """
    destination.parent.mkdir(parents=True, exist_ok=True)
    if destination.exists():
        destination.unlink()

    result = await invoker.run(
        ditto,
        ["-c", "-k", "--sequesterRsrc", "--keepParent", bundle.name, str(destination)],
        cwd=bundle.parent,
    )
    check_result(result, "ditto")
    return destination
