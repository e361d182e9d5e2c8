"""
AppStream metadata rendering.

Turns the plain text ``AppDescription`` and the ``AppChangeFile`` changelog
into the XML fragments exposed as ``${APPSTREAM_DESCRIPTION_XML}`` and
``${APPSTREAM_CHANGELOG_XML}``.

Changelog format::

    + Version 1.2.0; 2025-10-29
    - Added:
    - Dark mode
    - Fixed:
    - Crash on start
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from xml.sax.saxutils import escape

_PARAGRAPH_SPLIT = re.compile(r"\r?\n\s*\r?\n|\r\r")
_WHITESPACE = re.compile(r"\s+")
_RELEASE_HEADER = re.compile(r"\+\s*Version\s+([\d.]+)\s*;\s*(\d{4})-(\d{2})-(\d{2})")
_LIST_PREFIXES = ("* ", "+ ", "- ")

_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}


@dataclass
class Release:
    version: str
    released: date
    changes: list[str] = field(default_factory=list)


def xml_escape(text: str) -> str:
    """Escape the five XML special characters."""
    return escape(text, _XML_ENTITIES)


def _normalize(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _is_list_item(line: str) -> bool:
    return line.strip().startswith(_LIST_PREFIXES)


def _render_list_paragraph(lines: list[str]) -> list[str]:
    out: list[str] = []
    in_list = False
    for line in lines:
        text = _normalize(line)
        if not text:
            continue
        if _is_list_item(line):
            if not in_list:
                out.append("    <ul>")
                in_list = True
            out.append(f"      <li>{xml_escape(text[2:].strip())}</li>")
        else:
            if in_list:
                out.append("    </ul>")
                in_list = False
            out.append(f"    <p>{xml_escape(text)}</p>")
    if in_list:
        out.append("    </ul>")
    return out


def description_xml(description: str) -> str:
    """Render a plain text description as AppStream ``<p>``/``<ul>`` markup.

    Paragraphs are separated by blank lines. A paragraph with lines starting
    with ``* ``, ``+ `` or ``- `` is rendered as a list; other paragraphs
    have their whitespace collapsed into a single ``<p>``.
    """
    if not description or not description.strip():
        return ""

    out: list[str] = []
    for paragraph in _PARAGRAPH_SPLIT.split(description):
        if not paragraph.strip():
            continue
        lines = paragraph.splitlines()
        if any(_is_list_item(line) for line in lines):
            out.extend(_render_list_paragraph(lines))
        else:
            out.append(f"    <p>{xml_escape(_normalize(paragraph))}</p>")
    return "\n".join(out)


def parse_changelog(content: str) -> list[Release]:
    """Parse changelog text into releases, newest first as written."""
    releases: list[Release] = []
    current: Release | None = None

    for raw in content.splitlines():
        line = raw.strip()
        if line.startswith("+") and "Version" in line:
            if current is not None and current.changes:
                releases.append(current)
            match = _RELEASE_HEADER.search(line)
            current = None
            if match:
                year, month, day = (int(g) for g in match.group(2, 3, 4))
                current = Release(version=match.group(1), released=date(year, month, day))
        elif line.startswith("-") and current is not None:
            change = line[1:].strip()
            if change:
                current.changes.append(change)

    if current is not None and current.changes:
        releases.append(current)
    return releases


def _group_changes(changes: list[str]) -> dict[str, list[str]]:
    groups: dict[str, list[str]] = {}
    category = ""
    for change in changes:
        if change.endswith(":") and "." not in change:
            category = change.rstrip(":")
            groups.setdefault(category, [])
        else:
            groups.setdefault(category, []).append(change)
    return groups


def changelog_xml_from_text(content: str, max_releases: int = 5) -> str:
    """Render changelog text as AppStream ``<release>`` elements."""
    releases = parse_changelog(content or "")
    out: list[str] = []
    for release in releases[:max_releases]:
        out.append(f'    <release version="{xml_escape(release.version)}" date="{release.released.isoformat()}">')
        out.append("      <description>")
        groups = _group_changes(release.changes)
        if any(groups):
            for category, items in groups.items():
                if category:
                    out.append(f"        <p>{xml_escape(category)}:</p>")
                out.append("        <ul>")
                out.extend(f"          <li>{xml_escape(item)}</li>" for item in items)
                out.append("        </ul>")
        else:
            out.append("        <ul>")
            out.extend(f"          <li>{xml_escape(change)}</li>" for change in release.changes)
            out.append("        </ul>")
        out.append("      </description>")
        out.append("    </release>")
    return "\n".join(out)


def changelog_xml(path: Path | None, max_releases: int = 5) -> str:
    """Render the changelog file at ``path``; empty when it does not exist."""
    if path is None or not path.is_file():
        return ""
    return changelog_xml_from_text(path.read_text(encoding="utf-8"), max_releases)
