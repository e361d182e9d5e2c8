"""Macro identifiers and the per-build macro table."""

from .ids import MACRO_DESCRIPTIONS, MacroId
from .table import MacroTable, macos_category

__all__ = ["MACRO_DESCRIPTIONS", "MacroId", "MacroTable", "macos_category"]
