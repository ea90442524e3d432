"""RenderResult and RenderError: the render pass contract.

INVARIANT: Every render pass, successful or not, returns a RenderResult.
The CLI and any embedding view layer consume this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RenderError(BaseModel):
    """Structured error payload within a RenderResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class RenderResult(BaseModel):
    """Outcome of one render pass.

    Attributes:
        ok: Whether the record loaded and every binding ran.
        op: Name of the operation (``"render"`` or ``"render_failure"``).
        data: Operation payload (view name, slots written, row counts).
        warnings: Non-fatal issues: mistyped fields, missing slots.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (telemetry spans).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: RenderError | None = None
    meta: dict[str, Any] | None = None
