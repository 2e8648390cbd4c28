"""
Run configuration.

A RunConfig holds every tuneable parameter of a snapshot run.  It can be
built in code or loaded from YAML:

    results_dir: results
    export_csv: false
    log_level: DEBUG
    max_settle_iterations: 100000

Unknown keys are rejected so that typos do not silently fall back to
defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from brickstack.core.errors import ConfigError

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class RunConfig(BaseModel):
    """All tuneable parameters for a single snapshot run."""

    model_config = ConfigDict(extra="forbid")

    results_dir: Path = Path("results")
    export_json: bool = True
    export_csv: bool = True

    # Settling
    max_settle_iterations: Optional[int] = Field(default=None, gt=0)
    verify_settled: bool = True

    # Logging
    log_level: LogLevel = "INFO"
    log_file: Optional[str] = None

    # Notifications
    send_telegram_updates: bool = False
    telegram_chat_id: Optional[str] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.upper()
        return value

    @property
    def logging_level(self) -> int:
        """log_level as a logging module constant."""
        return getattr(logging, self.log_level)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")


def load_config(path: Path | str) -> RunConfig:
    """
    Load a RunConfig from a YAML file.

    An empty file yields the defaults.

    Raises:
        ConfigError: file missing, not valid YAML, not a mapping, or holds
            invalid values.
    """
    path = Path(path)
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"config {path} must be a mapping, got {type(raw).__name__}")

    try:
        return RunConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigError(f"invalid config {path}:\n{exc}") from exc
