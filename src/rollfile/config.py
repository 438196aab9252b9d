"""Config loading, defaults, validation, and deep merge."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from rollfile.errors import ConfigError
from rollfile.sizing import parse_size

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}

DEFAULT_CONFIG: dict = {
    "version": 1,
    "path": None,
    "truncate": False,
    "threshold": "10MB",
    "keep_count": 5,
    "compress": False,
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    },
}


@dataclass(frozen=True)
class RotationConfig:
    """Immutable settings for one appender."""

    path: Path
    truncate: bool
    threshold: int
    keep_count: int
    compress: bool

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", Path(self.path))
        errors = []
        if isinstance(self.threshold, bool) or not isinstance(self.threshold, int) or self.threshold <= 0:
            errors.append(f"threshold must be a positive byte count, got {self.threshold!r}")
        if isinstance(self.keep_count, bool) or not isinstance(self.keep_count, int) or self.keep_count < 0:
            errors.append(f"keep_count must be >= 0, got {self.keep_count!r}")
        if errors:
            raise ConfigError(errors)

    @classmethod
    def from_dict(cls, data: dict) -> RotationConfig:
        """Build from a config dict (sizes may be strings like ``"10MB"``)."""
        errors = validate_config(data)
        if errors:
            raise ConfigError(errors)
        return cls(
            path=Path(data["path"]).expanduser(),
            truncate=bool(data["truncate"]),
            threshold=parse_size(data["threshold"]),
            keep_count=int(data["keep_count"]),
            compress=bool(data["compress"]),
        )


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in YAML_SUFFIXES:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError([f"Could not parse {path}: {exc}"]) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError([f"{path}: top level must be a mapping"])
    return data


def load_config(path: Path) -> dict:
    """Load a JSON or YAML config file, merged with defaults.

    Relative ``path`` values are resolved against the config file's directory.
    """
    user_config = _read_file(path)
    if not user_config:
        logger.warning("Config file %s is empty, using defaults", path)
    config = deep_merge(DEFAULT_CONFIG, user_config)
    log_path = config.get("path")
    if isinstance(log_path, str) and log_path:
        target = Path(log_path).expanduser()
        if not target.is_absolute():
            target = path.parent / target
        config["path"] = str(target)
    return config


def save_config(config: dict, path: Path) -> Path:
    """Save config as YAML or pretty-printed JSON, based on the suffix."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.suffix.lower() in YAML_SUFFIXES:
        path.write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    else:
        path.write_text(json.dumps(config, indent=2) + "\n", encoding="utf-8")
    return path


def validate_config(config: dict) -> list[str]:
    """Validate config, returning list of error messages (empty if valid)."""
    errors = []
    path = config.get("path")
    if not path or not isinstance(path, (str, Path)):
        errors.append("Missing 'path' for the active log file")

    try:
        threshold = parse_size(config.get("threshold"))
    except (TypeError, ValueError) as exc:
        errors.append(f"Invalid 'threshold': {exc}")
    else:
        if threshold <= 0:
            errors.append(f"'threshold' must be positive, got {threshold}")

    keep = config.get("keep_count")
    if isinstance(keep, bool) or not isinstance(keep, int) or keep < 0:
        errors.append(f"'keep_count' must be a non-negative integer, got {keep!r}")

    for flag in ("truncate", "compress"):
        if not isinstance(config.get(flag), bool):
            errors.append(f"'{flag}' must be true or false")

    log_cfg = config.get("logging", {})
    if not isinstance(log_cfg, dict):
        errors.append("'logging' must be a mapping")
    elif not isinstance(logging.getLevelName(str(log_cfg.get("level", "INFO")).upper()), int):
        errors.append(f"'logging.level': unknown level '{log_cfg.get('level')}'")
    return errors
