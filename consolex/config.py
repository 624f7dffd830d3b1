from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError

DEFAULT_CFG_FILE = ".consolex.yaml"

# --------------------------------------------------------------------------- #
# DEFAULTS
# --------------------------------------------------------------------------- #
DEFAULT_TYPES = [
    "log", "error", "warn", "info", "debug", "table", "time",
    "timeEnd", "group", "groupEnd", "clear", "count", "trace",
]
DEFAULT_EXTENSIONS = ["js", "ts", "jsx", "tsx"]
DEFAULT_EXCLUDE = ["node_modules", "dist", "build", ".git"]

_yaml = YAML(typ="safe")


@dataclass
class RemoverCfg:
    """Project-level configuration (defaults < .consolex.yaml < CLI)."""
    types: List[str] = field(default_factory=lambda: list(DEFAULT_TYPES))
    extensions: List[str] = field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    exclude: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    receiver: str = "console"
    respect_gitignore: bool = True
    jobs: int = 1
    verify: bool = True

    @staticmethod
    def from_dict(d: Optional[Dict[str, Any]]) -> RemoverCfg:
        """
        Load configuration from a YAML mapping.

        Raises:
            ConfigError: On unknown keys or values of the wrong type
        """
        cfg = RemoverCfg()
        if not d:
            return cfg
        if not isinstance(d, dict):
            raise ConfigError(f"Configuration must be a mapping, got {type(d).__name__}")

        unknown = sorted(set(d) - set(cfg.__dataclass_fields__))
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        for key in ("types", "extensions", "exclude"):
            if key in d:
                setattr(cfg, key, _str_list(key, d[key]))
        if "receiver" in d:
            receiver = d["receiver"]
            if not isinstance(receiver, str) or not receiver.strip():
                raise ConfigError("'receiver' must be a non-empty string")
            cfg.receiver = receiver.strip()
        for key in ("respect_gitignore", "verify"):
            if key in d:
                if not isinstance(d[key], bool):
                    raise ConfigError(f"'{key}' must be true or false")
                setattr(cfg, key, d[key])
        if "jobs" in d:
            cfg.jobs = _positive_int("jobs", d["jobs"])
        return cfg

    def merged(self, **overrides: Any) -> RemoverCfg:
        """Copy with non-None overrides applied (CLI layer)."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _str_list(key: str, value: Any) -> List[str]:
    """Accept a YAML list or a comma-separated string."""
    if isinstance(value, str):
        return split_csv(value)
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return [v.strip() for v in value if v.strip()]
    raise ConfigError(f"'{key}' must be a list of strings or a comma-separated string")


def _positive_int(key: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"'{key}' must be a positive integer")
    return value


def split_csv(value: Optional[str]) -> List[str]:
    """'log, warn,,info' -> ['log', 'warn', 'info']."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def load_config(root: Path, path: Optional[Path] = None) -> RemoverCfg:
    """
    Load project configuration.

    • Explicit path must exist.
    • Without it, <root>/.consolex.yaml is used when present, defaults otherwise.
    """
    if path is None:
        path = root / DEFAULT_CFG_FILE
        if not path.is_file():
            return RemoverCfg()
    elif not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with path.open(encoding="utf-8") as f:
            raw = _yaml.load(f)
    except YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    return RemoverCfg.from_dict(raw)


__all__ = [
    "RemoverCfg",
    "load_config",
    "split_csv",
    "DEFAULT_CFG_FILE",
    "DEFAULT_TYPES",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_EXCLUDE",
]
