"""macOS code signing and notarization."""

from .parser import NotarizationRequest, NotarizationState, parse_request_id, parse_status
from .protocol import Notarizer
from .signing import CodeSigner

__all__ = [
    "CodeSigner",
    "NotarizationRequest",
    "NotarizationState",
    "Notarizer",
    "parse_request_id",
    "parse_status",
]
