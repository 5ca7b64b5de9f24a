"""
Validator configuration: defaults, JSON load/save.

A saved config is applied with ``--config`` and written with
``--save-config``; explicit CLI flags override values from the file.
"""

import json
import logging
import os
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when a config file is missing, unreadable or invalid."""


class ValidatorConfig(BaseModel):
    """Settings for one validation pass."""

    model_config = ConfigDict(extra="forbid")

    extensions: List[str] = Field(default_factory=lambda: [".md"])
    entry_phase: int = Field(default=1, gt=0)
    strict: bool = False
    include_drafts_in_aliases: bool = False

    @field_validator("extensions")
    @classmethod
    def normalise_extensions(cls, values: List[str]) -> List[str]:
        cleaned = []
        for ext in values:
            ext = ext.strip().lower()
            if not ext:
                continue
            if not ext.startswith("."):
                ext = "." + ext
            if ext not in cleaned:
                cleaned.append(ext)
        if not cleaned:
            raise ValueError("at least one file extension is required")
        return cleaned


def load_config(path: str) -> ValidatorConfig:
    """Read a JSON config file into a :class:`ValidatorConfig`."""
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config {path} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object.")

    try:
        config = ValidatorConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config {path}: {exc}") from exc

    logger.info("Loaded config from %s.", path)
    return config


def save_config(config: ValidatorConfig, path: str) -> None:
    """Write *config* as indented JSON, creating parent directories."""
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(config.model_dump(), fh, indent=2)
    logger.info("Config saved -> %s", path)
