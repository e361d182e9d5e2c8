"""
Starter template files written by ``netloy new``.

Every template uses macro placeholders so a single file serves all builds;
builders expand them when the file is materialized.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path

from ..configuration.loader import default_configuration
from ..core.exceptions import OperationCancelled
from ..core.logging import get_logger

logger = get_logger(__name__)

DESKTOP_TEMPLATE = """\
[Desktop Entry]
Type=Application
Name=${APP_FRIENDLY_NAME}
GenericName=${APP_FRIENDLY_NAME}
Icon=${APP_ID}
Comment=${APP_SHORT_SUMMARY}
Exec=${INSTALL_EXEC}
TryExec=${INSTALL_EXEC}
StartupWMClass=${APP_BASE_NAME}
NoDisplay=${DESKTOP_NODISPLAY}
X-AppImage-Integrate=${DESKTOP_INTEGRATE}
Terminal=${DESKTOP_TERMINAL}
Categories=${PRIME_CATEGORY};
"""

METAINFO_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<component type="desktop-application">
    <metadata_license>${APP_LICENSE_ID}</metadata_license>

    <!-- Note the use of macros to automate most (but not all) content below -->
    <id>${APP_ID}</id>
    <name>${APP_FRIENDLY_NAME}</name>
    <summary>${APP_SHORT_SUMMARY}</summary>
    <developer_name>${PUBLISHER_NAME}</developer_name>
    <url type="homepage">${PUBLISHER_LINK_URL}</url>
    <project_license>${APP_LICENSE_ID}</project_license>
    <content_rating type="oars-1.1" />

    <launchable type="desktop-id">${APP_ID}.desktop</launchable>

    <description>
        <!-- See AppDescription in configuration -->
        ${APPSTREAM_DESCRIPTION_XML}
    </description>

    <!-- Freedesktop Categories -->
    <categories>
        <category>${PRIME_CATEGORY}</category>
    </categories>

    <!-- Uncomment to provide keywords
    <keywords>
        <keyword>your-keyword-here</keyword>
    </keywords>
    -->

    <!-- Uncomment to provide screenshots
    <screenshots>
        <screenshot type="default">
            <image>https://example.com/screenshot.png</image>
        </screenshot>
    </screenshots>
    -->

    <releases>
        <!-- See AppChangeFile in configuration -->
        ${APPSTREAM_CHANGELOG_XML}
    </releases>

</component>
"""

INFO_PLIST_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <!-- Basic App Information -->
    <key>CFBundleName</key>
    <string>${APP_BASE_NAME}</string>
    <key>CFBundleDisplayName</key>
    <string>${APP_FRIENDLY_NAME}</string>
    <key>CFBundleIdentifier</key>
    <string>${APP_ID}</string>
    <key>CFBundleVersion</key>
    <string>${APP_VERSION}</string>
    <key>CFBundleShortVersionString</key>
    <string>${APP_VERSION}</string>

    <!-- Bundle Configuration -->
    <key>CFBundlePackageType</key>
    <string>APPL</string>
    <key>CFBundleExecutable</key>
    <string>${APP_EXEC_NAME}</string>

    <!-- App Icon -->
    <key>CFBundleIconFile</key>
    <string>${APP_BASE_NAME}.icns</string>

    <!-- Category -->
    <key>LSApplicationCategoryType</key>
    <string>${PRIME_CATEGORY}</string>

    <!-- High Resolution Support -->
    <key>NSHighResolutionCapable</key>
    <true/>

    <!-- UI Mode (false = normal app, true = menu bar app) -->
    <key>LSUIElement</key>
    <false/>
</dict>
</plist>
"""

ENTITLEMENTS_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
    <!-- Network access -->
    <key>com.apple.security.network.client</key>
    <true/>
    <key>com.apple.security.network.server</key>
    <true/>

    <!-- File system access -->
    <key>com.apple.security.files.user-selected.read-write</key>
    <true/>

    <!-- Required by the .NET runtime under the hardened runtime -->
    <key>com.apple.security.cs.allow-jit</key>
    <true/>
</dict>
</plist>
"""


class NewFileType(str, Enum):
    """File kinds ``netloy new`` can create."""

    ALL = "all"
    CONF = "conf"
    DESKTOP = "desktop"
    META = "meta"
    PLIST = "plist"
    ENTITLE = "entitle"


def _file_contents(kind: NewFileType, name: str) -> tuple[str, str]:
    """(file name, content) for a single file kind."""
    if kind == NewFileType.CONF:
        return f"{name}.netloy", default_configuration()
    if kind == NewFileType.DESKTOP:
        return f"{name}.desktop", DESKTOP_TEMPLATE
    if kind == NewFileType.META:
        return f"{name}.metainfo.xml", METAINFO_TEMPLATE
    if kind == NewFileType.PLIST:
        return f"{name}.plist", INFO_PLIST_TEMPLATE
    if kind == NewFileType.ENTITLE:
        return f"{name}.entitlements", ENTITLEMENTS_TEMPLATE
    raise ValueError(f"Not a single file kind: {kind}")


def create_template_files(
    kind: NewFileType,
    directory: Path,
    name: str = "app",
    confirm: Callable[[str], bool] | None = None,
) -> list[Path]:
    """Write starter files into ``directory``.

    Args:
        kind: File kind, or ALL for every kind.
        directory: Target directory; created when missing.
        name: Base file name.
        confirm: Asked before overwriting an existing file. None overwrites silently.

    Returns:
        Paths of the files written.
    """
    kinds = [k for k in NewFileType if k != NewFileType.ALL] if kind == NewFileType.ALL else [kind]
    directory.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for item in kinds:
        file_name, content = _file_contents(item, name)
        path = directory / file_name
        if path.exists() and confirm is not None and not confirm(f"{path} already exists. Overwrite?"):
            logger.info("Skipped existing file", path=str(path))
            continue
        path.write_text(content, encoding="utf-8", newline="\n")
        logger.info("File created", kind=item.value, path=str(path))
        written.append(path)

    if not written and kind != NewFileType.ALL:
        raise OperationCancelled(message="Operation cancelled by user")
    return written
