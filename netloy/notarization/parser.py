"""Parsing of ``xcrun notarytool`` output."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class NotarizationState(str, Enum):
    """Lifecycle of one notarization submission."""

    NOT_SUBMITTED = "not_submitted"
    SUBMITTED = "submitted"
    ACCEPTED = "accepted"
    INVALID = "invalid"
    UNKNOWN = "unknown"


class NotarizationRequest(BaseModel):
    """One submission to the Apple notary service."""

    artifact: str = Field(description="Path that was submitted")
    request_id: str | None = Field(default=None, description="Id printed by notarytool submit")
    state: NotarizationState = NotarizationState.NOT_SUBMITTED

    @property
    def accepted(self) -> bool:
        return self.state == NotarizationState.ACCEPTED


def parse_request_id(output: str) -> str | None:
    """Request id from ``notarytool submit`` output.

    Takes the first line containing ``id:`` and returns the text after its
    first colon, trimmed. Returns None when no such line exists or the value
    is empty.
    """
    for line in output.splitlines():
        if "id:" in line:
            value = line.split(":", 1)[1].strip()
            return value or None
    return None


def parse_status(output: str) -> NotarizationState:
    """Final state reported by ``notarytool info``: ACCEPTED, INVALID or UNKNOWN."""
    if "status: Accepted" in output:
        return NotarizationState.ACCEPTED
    if "status: Invalid" in output:
        return NotarizationState.INVALID
    return NotarizationState.UNKNOWN
