"""Configuration using Pydantic Settings for automatic env var support."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from schemacov.errors import ConfigError

ENTRY_ALIAS = "@entry"
"""Reserved registry alias each suite's subject schema is bound to in turn."""

ReporterKind = Literal["cli", "html", "json"]


class Settings(BaseSettings):
    """Run settings. Every field can be set as ``SCHEMACOV_<FIELD>``."""

    reporter: ReporterKind = "cli"
    verbose: bool = False
    json_logs: bool = False
    detect_ref_cycles: bool = True
    entry_alias: str = ENTRY_ALIAS
    html_template: Optional[Path] = Field(default=None)

    @field_validator("html_template", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Any:
        if isinstance(v, str) and v:
            return Path(v).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    model_config = SettingsConfigDict(env_prefix="SCHEMACOV_")

    def with_overrides(self, **overrides: Any) -> Settings:
        """Copy with CLI overrides applied; ``None`` values are ignored."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        try:
            return type(self).model_validate({**self.model_dump(), **updates})
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


def load_settings(**overrides: Any) -> Settings:
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
    return settings.with_overrides(**overrides)
