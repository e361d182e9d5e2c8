"""External tool invocation, host discovery and secret redaction."""

from .invoker import ToolInvoker, ToolResult
from .locator import ToolLocator
from .sanitizer import REDACTION_TOKENS, Sanitizer

__all__ = ["REDACTION_TOKENS", "Sanitizer", "ToolInvoker", "ToolLocator", "ToolResult"]
