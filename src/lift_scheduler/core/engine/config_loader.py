"""
YAML → typed config loader.

Loads writer, store, and collection settings from config.yaml (bundled
with the package) and optionally merges user overrides from
~/.lift-scheduler/config.yaml.

Usage:
    from lift_scheduler.core.engine.config_loader import load_settings
    settings = load_settings()
    settings.writer.concurrency, settings.store.backend, settings.collections.set_logs

A user override file that cannot be parsed raises ValueError naming the
file; a missing file is simply skipped.
"""

from __future__ import annotations

import importlib.resources
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..config import (
    BASE_DELAY_SECONDS,
    COLLECTION_PROGRAM_DAYS,
    COLLECTION_PROGRAM_EXERCISES,
    COLLECTION_SET_LOGS,
    COLLECTION_WORKOUT_LOGS,
    DEFAULT_CONCURRENCY,
    JITTER_SECONDS,
    MAX_RETRIES,
    PACE_EVERY,
    PACE_SECONDS,
)

STORE_BACKENDS = ("json", "memory", "http")

# ---------------------------------------------------------------------------
# Typed settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WriterSettings:
    concurrency: int = DEFAULT_CONCURRENCY
    base_delay_seconds: float = BASE_DELAY_SECONDS
    max_retries: int = MAX_RETRIES
    jitter_seconds: float = JITTER_SECONDS
    pace_every: int = PACE_EVERY
    pace_seconds: float = PACE_SECONDS

    def __post_init__(self) -> None:
        if self.base_delay_seconds < 0 or self.jitter_seconds < 0 or self.pace_seconds < 0:
            raise ValueError("writer delays must be non-negative")
        if self.max_retries < 0:
            raise ValueError("writer.max_retries must be non-negative")
        if self.pace_every < 0:
            raise ValueError("writer.pace_every must be non-negative")


@dataclass(frozen=True)
class StoreSettings:
    backend: str = "json"
    data_dir: Path = field(default_factory=lambda: Path.home() / ".lift-scheduler" / "data")
    endpoint: str | None = None
    api_key: str | None = None
    timeout_seconds: float = 15.0

    def __post_init__(self) -> None:
        if self.backend not in STORE_BACKENDS:
            raise ValueError(
                f"Invalid store.backend: {self.backend!r}. Must be one of {STORE_BACKENDS}"
            )


@dataclass(frozen=True)
class Collections:
    program_days: str = COLLECTION_PROGRAM_DAYS
    program_exercises: str = COLLECTION_PROGRAM_EXERCISES
    workout_logs: str = COLLECTION_WORKOUT_LOGS
    set_logs: str = COLLECTION_SET_LOGS


@dataclass(frozen=True)
class Settings:
    writer: WriterSettings = field(default_factory=WriterSettings)
    store: StoreSettings = field(default_factory=StoreSettings)
    collections: Collections = field(default_factory=Collections)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; an empty file yields {}."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as e:
        raise ValueError(f"Cannot read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping at top level")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_bundled_yaml_path() -> Path | None:
    """Return the path to the bundled config.yaml, or None if not found."""
    ref = importlib.resources.files("lift_scheduler").joinpath("config.yaml")
    if ref.is_file():
        return Path(str(ref))
    candidate = Path(__file__).parent.parent.parent / "config.yaml"
    return candidate if candidate.exists() else None


def get_user_yaml_path() -> Path | None:
    """Return ~/.lift-scheduler/config.yaml if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / ".lift-scheduler" / "config.yaml"
    return p if p.exists() else None


def load_model_config(extra: Path | None = None) -> dict[str, Any]:
    """
    Load and merge configuration from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/lift_scheduler/config.yaml
    2. User override at ~/.lift-scheduler/config.yaml
    3. ``extra`` (e.g. a --config path), when given

    Returns:
        Merged dict of config sections.  Empty dict if no YAML available.
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled is not None:
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = get_user_yaml_path()
    if user is not None:
        config = _deep_merge(config, _load_yaml_file(user))

    if extra is not None:
        config = _deep_merge(config, _load_yaml_file(extra))

    return config


def settings_from_dict(config: dict[str, Any]) -> Settings:
    """
    Build typed settings from a merged config dict.

    Unknown keys are ignored.

    Raises:
        ValueError: If a value has the wrong type or is out of range
    """
    writer_raw = _section(config, "writer")
    store_raw = _section(config, "store")
    collections_raw = _section(config, "collections")

    defaults = WriterSettings()
    try:
        writer = WriterSettings(
            concurrency=int(writer_raw.get("concurrency", defaults.concurrency)),
            base_delay_seconds=float(writer_raw.get("base_delay_seconds", defaults.base_delay_seconds)),
            max_retries=int(writer_raw.get("max_retries", defaults.max_retries)),
            jitter_seconds=float(writer_raw.get("jitter_seconds", defaults.jitter_seconds)),
            pace_every=int(writer_raw.get("pace_every", defaults.pace_every)),
            pace_seconds=float(writer_raw.get("pace_seconds", defaults.pace_seconds)),
        )
    except TypeError as e:
        raise ValueError(f"Invalid writer settings: {e}") from e

    store_defaults = StoreSettings()
    data_dir = store_raw.get("data_dir")
    store = StoreSettings(
        backend=str(store_raw.get("backend", store_defaults.backend)),
        data_dir=Path(data_dir).expanduser() if data_dir else store_defaults.data_dir,
        endpoint=store_raw.get("endpoint") or None,
        api_key=store_raw.get("api_key") or None,
        timeout_seconds=float(store_raw.get("timeout_seconds", store_defaults.timeout_seconds)),
    )

    coll_defaults = Collections()
    collections = Collections(**{
        name: str(collections_raw.get(name, getattr(coll_defaults, name)))
        for name in ("program_days", "program_exercises", "workout_logs", "set_logs")
    })

    return Settings(writer=writer, store=store, collections=collections)


def load_settings(extra: Path | None = None) -> Settings:
    """Load and type-check the merged YAML configuration."""
    return settings_from_dict(load_model_config(extra))
