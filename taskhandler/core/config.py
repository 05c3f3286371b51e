"""
ⒸAngelaMos | 2026
config.py
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent / "config"

DeferStrategyName = Literal["auto", "tick", "immediate", "timeout"]


class DeferSettings(BaseModel):
    """
    Settings for the deferred batch engine
    "auto" picks the lowest latency primitive the host offers on every arm
    """
    strategy: DeferStrategyName = "auto"


class IntervalSettings(BaseModel):
    """
    Settings for repeating timers
    """
    min_interval: Annotated[float, Field(ge=0.0)] = 0.001


class TaskHandlerSettings(BaseSettings):
    """
    Main handler settings
    Loads from YAML config files with env var overrides
    """
    model_config = SettingsConfigDict(
        env_prefix="TASKHANDLER_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False
    json_logs: bool | None = None
    config_dir: Path = DEFAULT_CONFIG_DIR
    default_handler: str = "m"
    defer: DeferSettings = Field(default_factory=DeferSettings)
    interval: IntervalSettings = Field(default_factory=IntervalSettings)

    @field_validator("config_dir", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        """
        Expand ~ and environment variables in path
        """
        if isinstance(v, str):
            return Path(os.path.expanduser(os.path.expandvars(v)))
        return v


def load_yaml_file(path: Path) -> dict:
    """
    Load a YAML file and return its contents
    Returns empty dict if file does not exist
    """
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def merge_configs(base: dict, override: dict) -> dict:
    """
    Deep merge two config dictionaries
    Override takes precedence
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config_from_yaml(config_dir: Path | None = None) -> dict:
    """
    Load configuration from config.yaml in the config directory
    """
    if config_dir is None:
        config_dir = DEFAULT_CONFIG_DIR

    config_dir = Path(os.path.expanduser(os.path.expandvars(str(config_dir))))

    return load_yaml_file(config_dir / "config.yaml")


_settings: TaskHandlerSettings | None = None


def get_settings() -> TaskHandlerSettings:
    """
    Get the current settings instance
    Loads defaults on first use when load_settings() was never called
    """
    if _settings is None:
        return load_settings()
    return _settings


def load_settings(config_dir: Path | str | None = None, **overrides) -> TaskHandlerSettings:
    """
    Load settings from YAML files and optional overrides

    Priority (highest to lowest):
    1. Explicit overrides passed to this function
    2. YAML config file
    3. Environment variables (TASKHANDLER_ prefix)
    4. Default values
    """
    global _settings

    if config_dir is not None:
        config_dir = Path(os.path.expanduser(os.path.expandvars(str(config_dir))))

    yaml_config = load_config_from_yaml(config_dir)

    merged = merge_configs(yaml_config, overrides)

    if config_dir is not None:
        merged["config_dir"] = config_dir

    _settings = TaskHandlerSettings(**merged)

    return _settings


def reset_settings() -> None:
    """
    Forget loaded settings so the next get_settings() reloads them
    """
    global _settings
    _settings = None
