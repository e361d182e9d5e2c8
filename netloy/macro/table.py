"""
Macro table and expansion.

A MacroTable is built fresh for each build and filled in as phases learn
values. Expansion replaces ``${NAME}`` placeholders of known identifiers and
leaves every other ``${...}`` untouched, so shell scripts can keep their own
variables.
"""

from __future__ import annotations

from ..core.types import PackageType
from .ids import MacroId

MAX_EXPANSION_PASSES = 8

MACOS_DEFAULT_CATEGORY = "public.app-category.utilities"

MACOS_CATEGORIES: dict[str, str] = {
    "development": "public.app-category.developer-tools",
    "graphics": "public.app-category.graphics-design",
    "network": "public.app-category.networking",
    "utility": "public.app-category.utilities",
    "game": "public.app-category.games",
    "office": "public.app-category.productivity",
    "productivity": "public.app-category.productivity",
    "audiovideo": "public.app-category.music",
    "audio": "public.app-category.music",
    "video": "public.app-category.music",
    "music": "public.app-category.music",
    "education": "public.app-category.education",
    "finance": "public.app-category.finance",
    "business": "public.app-category.business",
    "entertainment": "public.app-category.entertainment",
    "health": "public.app-category.healthcare-fitness",
    "lifestyle": "public.app-category.lifestyle",
    "news": "public.app-category.news",
    "photo": "public.app-category.photography",
    "reference": "public.app-category.reference",
    "social": "public.app-category.social-networking",
    "sports": "public.app-category.sports",
    "travel": "public.app-category.travel",
    "weather": "public.app-category.weather",
}


def macos_category(category: str) -> str:
    """Map a freedesktop style category to an LSApplicationCategoryType value."""
    return MACOS_CATEGORIES.get(category.strip().lower(), MACOS_DEFAULT_CATEGORY)


class MacroTable:
    """Values for every macro identifier of one build."""

    def __init__(self, package_type: PackageType) -> None:
        """Initialize an empty table.

        Args:
            package_type: Package type of the build; decides how PRIME_CATEGORY resolves.
        """
        self.package_type = package_type
        self._values: dict[MacroId, str] = {}

    def set_value(self, macro_id: MacroId, value: str | None) -> None:
        """Upsert the value of a macro; last write wins."""
        if not isinstance(macro_id, MacroId):
            raise TypeError(f"Unknown macro identifier: {macro_id!r}")
        self._values[macro_id] = value or ""

    def get_value(self, macro_id: MacroId) -> str:
        """Stored value of a macro, or an empty string when it was never set."""
        value = self._values.get(macro_id, "")
        if macro_id is MacroId.PRIME_CATEGORY and self.package_type.is_macos_bundle:
            return macos_category(value)
        return value

    def expand(self, text: str) -> str:
        """Replace every known placeholder in ``text`` with its current value.

        Values may contain placeholders themselves (a description mentioning
        ``${APP_ID}``), so passes repeat until the text stops changing and
        expanding the result again is a no-op.
        """
        if not text:
            return text
        for _ in range(MAX_EXPANSION_PASSES):
            expanded = self._expand_once(text)
            if expanded == text:
                break
            text = expanded
        return text

    def _expand_once(self, text: str) -> str:
        for macro_id in MacroId:
            placeholder = macro_id.placeholder
            if placeholder in text:
                text = text.replace(placeholder, self.get_value(macro_id))
        return text

    def environment(self) -> dict[str, str]:
        """Macro values as environment variables for user scripts."""
        return {macro_id.value: self.get_value(macro_id) for macro_id in MacroId if macro_id in self._values}

    def __contains__(self, macro_id: object) -> bool:
        return macro_id in self._values

    def __repr__(self) -> str:
        return f"MacroTable(package_type={self.package_type.value!r}, values={len(self._values)})"
