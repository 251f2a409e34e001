from __future__ import annotations

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Tuple

import yaml

from .models import AppSettings


logger = logging.getLogger(__name__)
_CONFIG_CACHE: AppSettings | None = None


def get_app_config() -> AppSettings:
    """Return the cached settings, loading them on first use."""

    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = _load_settings()
    return _CONFIG_CACHE


def reload_app_config() -> AppSettings:
    """Reload the settings from disk and the environment, bypassing the cache."""

    global _CONFIG_CACHE
    _CONFIG_CACHE = _load_settings()
    return _CONFIG_CACHE


def _load_settings() -> AppSettings:
    raw = _load_raw_config()
    merged = _apply_env_overrides(raw)
    return AppSettings.model_validate(merged)


def _load_raw_config() -> Dict[str, Any]:
    path = Path(os.getenv("KVCACHE_CONFIG_FILE", "config/kvcache.yaml"))
    if not path.exists():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Unable to read config file at {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise RuntimeError(f"Top-level structure in {path} must be a mapping.")
    return data


def _apply_env_overrides(source: Dict[str, Any]) -> Dict[str, Any]:
    result: Dict[str, Any] = copy.deepcopy(source)
    for env_name, overrides in _ENV_MAPPING.items():
        raw_value = os.getenv(env_name)
        if raw_value is None or raw_value == "":
            continue
        for path, transformer in overrides:
            try:
                value = transformer(raw_value) if transformer else raw_value
            except Exception as exc:
                logger.warning("Ignoring invalid value for %s: %s", env_name, exc)
                continue
            _assign_path(result, path, value)
    return result


def _assign_path(target: Dict[str, Any], path: Tuple[str, ...], value: Any) -> None:
    current: Dict[str, Any] = target
    for key in path[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[path[-1]] = value


def _to_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on", "y"}


def _to_int(value: str) -> int:
    return int(value.strip())


def _to_positive_float(value: str) -> float:
    candidate = float(value.strip())
    if candidate <= 0:
        raise ValueError(f"expected a positive number, got {candidate}")
    return candidate


def _strip(value: str) -> str:
    return value.strip()


def _map(
    path: Tuple[str, ...], transformer: Callable[[str], Any] | None = None
) -> Tuple[Tuple[str, ...], Callable[[str], Any] | None]:
    return path, transformer


_ENV_MAPPING: Dict[str, list[Tuple[Tuple[str, ...], Callable[[str], Any] | None]]] = {}


def _register(
    env: str, *paths: Tuple[Tuple[str, ...], Callable[[str], Any] | None]
) -> None:
    bucket = _ENV_MAPPING.setdefault(env, [])
    bucket.extend(paths)


_register("KVCACHE_CONFIG_VERSION", _map(("version",), _to_int))
_register("KVCACHE_BOUNDED_CAPACITY", _map(("bounded", "capacity"), _to_int))
_register("KVCACHE_TTL_NAME", _map(("ttl", "name"), _strip))
_register(
    "KVCACHE_TTL_PRUNE_INTERVAL_SECONDS",
    _map(("ttl", "prune_interval_seconds"), _to_positive_float),
)
_register("KVCACHE_TTL_VALUE_PREFIX", _map(("ttl", "value_prefix")))
_register("KVCACHE_TTL_AUTOSTART", _map(("ttl", "autostart_pruning"), _to_bool))
_register("KVCACHE_STORE_CODEC", _map(("store", "codec"), _strip))
_register("KVCACHE_SERVICE_NAME", _map(("logging", "service_name"), _strip))
_register("LOG_LEVEL", _map(("logging", "level"), _strip))
_register("KVCACHE_LOG_ROOT", _map(("logging", "log_dir"), _strip))
