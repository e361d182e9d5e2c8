"""
Secret redaction for tool output and log events.

Every message derived from external tool output passes through a Sanitizer
before it is logged or placed in an exception.
"""

from __future__ import annotations

import re

REDACTION_TOKENS: dict[str, str] = {
    "apple_id": "***APPLE_ID***",
    "team_id": "***TEAM_ID***",
    "password": "***PASSWORD***",
    "signing_identity": "***SIGNING_IDENTITY***",
}


class Sanitizer:
    """Replaces configured secret values with fixed redaction tokens."""

    def __init__(self, secrets: dict[str, str] | None = None) -> None:
        """Initialize the sanitizer.

        Args:
            secrets: Raw secret values keyed by kind (apple_id, team_id,
                password, signing_identity). Empty values are ignored.

        Raises:
            KeyError: If a secret kind has no redaction token.
        """
        self._tokens: dict[str, str] = {}
        for kind, value in (secrets or {}).items():
            if value:
                self._tokens.setdefault(value, REDACTION_TOKENS[kind])

        # Longest first so a secret containing another one is replaced whole
        ordered = sorted(self._tokens, key=len, reverse=True)
        self._pattern = re.compile("|".join(re.escape(s) for s in ordered)) if ordered else None

    @property
    def active(self) -> bool:
        return self._pattern is not None

    def sanitize(self, text: str | None) -> str:
        """Return ``text`` with every secret replaced by its token."""
        if not text:
            return text or ""
        if self._pattern is None:
            return text
        return self._pattern.sub(lambda m: self._tokens[m.group(0)], text)

    def sanitize_args(self, args: list[str]) -> list[str]:
        return [self.sanitize(arg) for arg in args]
