"""Runtime settings for daxgen, read from DAXGEN_* environment variables."""

from __future__ import annotations

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

DAX_VERSION = "3.6"

ENV_PREFIX = "DAXGEN_"

DependencyPolicy = Literal["inferred", "explicit"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseModel):
    # inferred: explicit edges plus producer->consumer edges from file usage
    # explicit: exactly the edges added with add_dependency()
    dependency_policy: DependencyPolicy = "inferred"
    dax_version: str = DAX_VERSION
    indent: int = Field(default=2, ge=0)
    validate_on_write: bool = True
    log_level: LogLevel = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        environ = os.environ if environ is None else environ
        raw = {}
        for field_name in ("dependency_policy", "indent", "validate_on_write", "log_level"):
            value = environ.get(ENV_PREFIX + field_name.upper())
            if value is not None and value != "":
                raw[field_name] = value
        if "dependency_policy" in raw:
            raw["dependency_policy"] = raw["dependency_policy"].strip().lower()
        if "log_level" in raw:
            raw["log_level"] = raw["log_level"].strip().upper()
        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError("Invalid daxgen settings in environment", errors=e.errors()) from e


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the process-wide settings, loading them from the environment once."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Replace the process-wide settings (None reloads from the environment)."""
    global _settings
    _settings = settings
