"""Template materialization: read, expand macros, write UTF-8 without BOM."""

from __future__ import annotations

from pathlib import Path

import aiofiles

from ...core.logging import get_logger
from ...macro import MacroTable

logger = get_logger(__name__)


async def read_text(path: Path) -> str:
    """Read a text file, dropping a leading BOM if present."""
    async with aiofiles.open(path, encoding="utf-8-sig") as f:
        return await f.read()


async def write_text(path: Path, content: str) -> None:
    """Write ``content`` as UTF-8 without BOM, keeping line endings as given."""
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "w", encoding="utf-8", newline="") as f:
        await f.write(content)


async def materialize(
    source: Path,
    destination: Path,
    macros: MacroTable,
    normalize_newlines: bool = False,
) -> Path:
    """Expand the template at ``source`` into ``destination``.

    Args:
        source: Template file.
        destination: File to write.
        macros: Macro table used for expansion.
        normalize_newlines: Convert CRLF to LF (desktop entries, shell scripts).

    Returns:
        The destination path.
    """
    content = macros.expand(await read_text(source))
    if normalize_newlines:
        content = content.replace("\r\n", "\n")
    await write_text(destination, content)
    logger.debug("Template materialized", source=str(source), destination=str(destination))
    return destination


async def render(content: str, destination: Path, macros: MacroTable) -> Path:
    """Expand an in-memory template into ``destination`` with LF line endings."""
    await write_text(destination, macros.expand(content).replace("\r\n", "\n"))
    return destination
