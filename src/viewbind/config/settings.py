"""Settings for one viewbind invocation.

Sources, strongest first: keyword arguments (the CLI flags), ``VIEWBIND_*``
environment variables with ``__`` between nested keys
(``VIEWBIND_FORMAT__LOCALE=de-DE``), the ``viewbind.toml`` file, and the
defaults on the section models.
"""

from __future__ import annotations

import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from viewbind.config.discovery import find_config
from viewbind.config.models import FormatConfig, SourceConfig, ViewConfig

# TOML tables for the settings object currently being built by from_cli().
_toml_tables: ContextVar[dict[str, Any]] = ContextVar("_toml_tables", default={})


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*; a syntax error becomes a ClickException naming the file."""
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Feeds already-parsed ``viewbind.toml`` tables to pydantic-settings."""

    def __init__(self, settings_cls: type[BaseSettings], tables: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self.tables = tables

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self.tables.get(field_name), field_name, field_name in self.tables

    def __call__(self) -> dict[str, Any]:
        return self.tables


class ViewbindSettings(BaseSettings):
    """Frozen, merged settings.

    Attributes:
        project_root: Directory holding ``viewbind.toml`` (or CWD); relative
            file sources resolve against it.
        config_path: The TOML file in use, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "VIEWBIND_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # Global flags
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    source: SourceConfig = Field(default_factory=SourceConfig)
    format: FormatConfig = Field(default_factory=FormatConfig)
    view: ViewConfig = Field(default_factory=ViewConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, TomlSettingsSource(settings_cls, _toml_tables.get()))

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> ViewbindSettings:
        """Build settings for a CLI run.

        An explicit *config_path* must exist. Without one, ``viewbind.toml``
        is looked up from *project_root* (or CWD) upwards, and the directory
        it is found in becomes the project root.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(project_root)

        if project_root is None:
            project_root = toml_path.parent if toml_path else Path.cwd()

        token = _toml_tables.set(read_toml(toml_path) if toml_path else {})
        try:
            return cls(project_root=project_root, config_path=toml_path, **cli_flags)
        except ValidationError as exc:
            where = toml_path or "environment"
            msg = f"Invalid settings from {where}:\n{exc}"
            raise click.ClickException(msg) from exc
        finally:
            _toml_tables.reset(token)
