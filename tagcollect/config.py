"""Configuration loading for tagcollect (.tagcollect.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".tagcollect.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class CollectConfig:
    """Which scopes the collector visits."""

    include_bodies: bool = True
    keys: bool = True


@dataclass
class OutputConfig:
    """Where and how attribute documents are written."""

    directory: Path = Path("attributes")
    skip_empty: bool = True


@dataclass
class LoggingConfig:
    """Log verbosity and optional log file (relative to the config root)."""

    verbose: bool = False
    file: Optional[Path] = None


@dataclass
class TagCollectConfig:
    """Represents the settings defined in .tagcollect.yml."""

    root: Path
    collect: CollectConfig = field(default_factory=CollectConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(config_path: Path) -> TagCollectConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TagCollectConfig(root=root, output=OutputConfig(directory=root / "attributes"))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    collect = CollectConfig()
    collect_data = _as_dict(data.get("collect"))
    if collect_data:
        include_bodies = _as_bool(collect_data.get("include_bodies"))
        if include_bodies is not None:
            collect.include_bodies = include_bodies
        keys = _as_bool(collect_data.get("keys"))
        if keys is not None:
            collect.keys = keys

    output = OutputConfig(directory=root / "attributes")
    output_data = _as_dict(data.get("output"))
    if output_data:
        directory = _as_str(output_data.get("directory"))
        if directory:
            output.directory = root / directory
        skip_empty = _as_bool(output_data.get("skip_empty"))
        if skip_empty is not None:
            output.skip_empty = skip_empty

    log_config = LoggingConfig()
    logging_data = _as_dict(data.get("logging"))
    if logging_data:
        verbose = _as_bool(logging_data.get("verbose"))
        if verbose is not None:
            log_config.verbose = verbose
        log_file = _as_str(logging_data.get("file"))
        if log_file:
            log_config.file = root / log_file

    return TagCollectConfig(root=root, collect=collect, output=output, logging=log_config)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "CollectConfig",
    "ConfigError",
    "LoggingConfig",
    "OutputConfig",
    "TagCollectConfig",
    "load_config",
]
