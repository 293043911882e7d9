from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Mapping

from .errors import ConfigError
from .models import AnalysisOptions

ENV_PREFIX = "BLAME_STATS_"

# Every setting understood in config files, environment variables and flags.
SETTING_TYPES: dict[str, type] = {
    "concurrency": int,
    "focus_author": str,
    "include_authors": list,
    "exclude_authors": list,
    "since": str,
    "until": str,
    "min_lines": int,
    "sort_by": str,
    "max_results": int,
    "author_format": str,
    "verbose": bool,
    "result_buffer": int,
    "output": str,
    "emoji": bool,
    "quiet": bool,
    "no_progress": bool,
    "exclude_patterns": list,
}

# Friendlier spellings accepted in config files and environment variables.
SETTING_ALIASES = {
    "author": "focus_author",
    "username": "focus_author",
    "include_author": "include_authors",
    "exclude_author": "exclude_authors",
    "exclude_pattern": "exclude_patterns",
    "sort": "sort_by",
    "limit": "max_results",
    "jobs": "concurrency",
}

DEFAULT_SETTINGS: dict[str, object] = {
    "output": "table",
    "emoji": False,
    "quiet": False,
    "no_progress": False,
    "exclude_patterns": [],
}

_OPTION_FIELDS = (
    "concurrency",
    "focus_author",
    "include_authors",
    "exclude_authors",
    "since",
    "until",
    "min_lines",
    "sort_by",
    "max_results",
    "author_format",
    "verbose",
    "result_buffer",
)


def default_config_paths() -> list[Path]:
    return [
        Path("blame-stats.json"),
        Path.home() / ".config" / "blame-stats" / "config.json",
    ]


def find_config_file(explicit: Path | None = None) -> Path | None:
    if explicit is not None:
        if not explicit.exists():
            raise ConfigError(f"config file {str(explicit)!r} does not exist")
        return explicit
    for candidate in default_config_paths():
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"failed to read config file {str(config_path)!r}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {str(config_path)!r} must contain a JSON object")
    return data


def _canonical_key(key: str) -> str:
    k = key.strip().lower().replace("-", "_")
    return SETTING_ALIASES.get(k, k)


def _split_csv(values: list[object] | tuple[object, ...] | str) -> list[str]:
    if isinstance(values, str):
        values = [values]
    out: list[str] = []
    for v in values:
        for part in str(v).split(","):
            part = part.strip()
            if part:
                out.append(part)
    return out


def coerce_setting(key: str, value: object) -> object:
    kind = SETTING_TYPES[key]
    if kind is bool:
        if isinstance(value, bool):
            return value
        s = str(value).strip().lower()
        if s in ("1", "true", "yes", "on"):
            return True
        if s in ("0", "false", "no", "off", ""):
            return False
        raise ConfigError(f"{key}: expected a boolean, got {value!r}")
    if kind is int:
        if isinstance(value, bool):
            raise ConfigError(f"{key}: expected an integer, got {value!r}")
        try:
            return int(str(value).strip())
        except ValueError as e:
            raise ConfigError(f"{key}: expected an integer, got {value!r}") from e
    if kind is list:
        if not isinstance(value, (list, tuple, str)):
            raise ConfigError(f"{key}: expected a list or comma-separated string, got {value!r}")
        return _split_csv(value)
    if isinstance(value, (dict, list)):
        raise ConfigError(f"{key}: expected a string, got {value!r}")
    return str(value).strip()


def normalize_settings(raw: Mapping[str, object], *, source: str) -> dict[str, object]:
    out: dict[str, object] = {}
    for key, value in raw.items():
        k = _canonical_key(str(key))
        if k not in SETTING_TYPES:
            raise ConfigError(f"unknown setting {key!r} in {source}")
        if value is None:
            continue
        out[k] = coerce_setting(k, value)
    return out


def env_settings(environ: Mapping[str, str] | None = None) -> dict[str, object]:
    """Collect `BLAME_STATS_<SETTING>` variables; unknown names are ignored."""
    environ = os.environ if environ is None else environ
    raw: dict[str, object] = {}
    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        k = _canonical_key(name[len(ENV_PREFIX) :])
        if k in SETTING_TYPES:
            raw[k] = value
    return normalize_settings(raw, source="environment")


def resolve_settings(
    *,
    file_settings: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
    cli_settings: Mapping[str, object] | None = None,
) -> dict[str, object]:
    """
    Merge settings from lowest to highest precedence:
    defaults < config file < environment < command line.
    """
    merged: dict[str, object] = dict(DEFAULT_SETTINGS)
    merged.update(normalize_settings(file_settings or {}, source="config file"))
    merged.update(env_settings(environ))
    merged.update(normalize_settings(cli_settings or {}, source="command line"))
    return merged


def options_from_settings(settings: Mapping[str, object]) -> AnalysisOptions:
    kwargs: dict[str, object] = {}
    for field in _OPTION_FIELDS:
        if field not in settings:
            continue
        value = settings[field]
        if field in ("include_authors", "exclude_authors"):
            value = tuple(value)
        kwargs[field] = value
    return AnalysisOptions(**kwargs)
