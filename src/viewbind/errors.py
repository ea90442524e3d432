"""Record loading errors.

Only failures to obtain the Record are exceptions. Field-level problems are
never raised: they degrade to fallback text and surface as render warnings.
"""

from __future__ import annotations

from typing import Any


class RecordLoadError(Exception):
    """Base for failures that abort a render pass before any binding."""

    code = "LOAD_FAILED"

    def __init__(self, message: str, *, source: str = "", **detail: Any) -> None:
        super().__init__(message)
        self.message = message
        self.source = source
        self.detail = detail


class TransportError(RecordLoadError):
    """Network failure or non-success HTTP status."""

    code = "TRANSPORT"

    def __init__(self, message: str, *, source: str = "", status: int | None = None) -> None:
        super().__init__(message, source=source, status=status)
        self.status = status


class DecodeError(RecordLoadError):
    """Body is not valid JSON, or its top level is not a mapping."""

    code = "DECODE"


class RenderStateError(RuntimeError):
    """A page runner was asked to run twice; it is terminal after one pass."""
