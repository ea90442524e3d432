"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, viewbind.toml only contains
overrides. A page that uses a bundled preset needs only ``[view] preset``
and ``[source] base_url``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from viewbind.config.presets import Preset, get_preset
from viewbind.domain.formatting import Formatter
from viewbind.domain.locales import get_locale
from viewbind.domain.specs import FieldSpec, RepeatedSpec, ViewSpec

# --- viewbind.toml sections ---


class SourceConfig(BaseModel):
    """[source] section."""

    model_config = {"frozen": True}

    base_url: str = ""
    path: str | None = None
    timeout_seconds: float | None = 10.0


class FormatConfig(BaseModel):
    """[format] section. Unset keys fall back to the preset's conventions."""

    model_config = {"frozen": True}

    locale: str | None = None
    currency_code: str | None = None
    currency_fraction_digits: int | None = Field(default=None, ge=0)
    fallback: str | None = None

    def build_formatter(self, preset: Preset | None = None) -> Formatter:
        """Create the Formatter for one render pass."""
        locale = self.locale or (preset.locale if preset else "en-US")
        digits = self.currency_fraction_digits
        if digits is None:
            digits = preset.currency_fraction_digits if preset else 2
        return Formatter(
            get_locale(locale),
            currency_code=self.currency_code,
            currency_fraction_digits=digits,
            fallback=self.fallback,
        )


class ViewConfig(BaseModel):
    """[view] section.

    Either names a bundled preset, declares custom ``[[view.fields]]`` /
    ``[[view.repeated]]`` tables, or both (custom bindings replace the
    preset's, slot and message overrides apply on top).
    """

    model_config = {"frozen": True}

    preset: str | None = "real-estate"
    status_slot: str | None = None
    error_slot: str | None = None
    failed_status: str | None = None
    loading_status: str | None = None
    rendered_status: str | None = None
    error_message: str | None = None
    fields: list[FieldSpec] = Field(default_factory=list)
    repeated: list[RepeatedSpec] = Field(default_factory=list)

    def resolve(self, preset: Preset | None = None) -> ViewSpec:
        """Merge preset bindings, custom bindings and overrides into one ViewSpec."""
        base = preset.view if preset else ViewSpec()
        values = {name: getattr(base, name) for name in ViewSpec.model_fields}
        if self.fields or self.repeated:
            values["fields"] = tuple(self.fields)
            values["repeated"] = tuple(self.repeated)
            values["name"] = f"{base.name}+custom" if preset else "custom"
        overrides = (
            "status_slot",
            "error_slot",
            "failed_status",
            "loading_status",
            "rendered_status",
            "error_message",
        )
        for key in overrides:
            value = getattr(self, key)
            if value is not None:
                values[key] = value
        return ViewSpec(**values)


def preset_for(view: ViewConfig, name: str | None = None) -> Preset | None:
    """The preset selected by *name* (CLI) or by ``[view] preset``."""
    chosen = name or view.preset
    return get_preset(chosen) if chosen else None
