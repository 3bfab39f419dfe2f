from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from .settings import Settings

ENV_PREFIX = "VOLTNET_"


def _deep_set(obj: dict[str, Any], path: list[str], value: Any) -> None:
    cur: dict[str, Any] = obj
    for key in path[:-1]:
        nxt = cur.get(key)
        if not isinstance(nxt, dict):
            nxt = {}
            cur[key] = nxt
        cur = nxt
    cur[path[-1]] = value


def _resolve_path(obj: dict[str, Any], path: list[str]) -> list[str]:
    """Use the camelCase spelling of a key where the loaded file already does."""
    resolved: list[str] = []
    cur: Any = obj
    for key in path:
        if isinstance(cur, dict) and key not in cur and to_camel(key) in cur:
            key = to_camel(key)
        resolved.append(key)
        cur = cur.get(key) if isinstance(cur, dict) else None
    return resolved


def _parse_env_value(raw: str) -> Any:
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError:
        return raw


def _apply_env_overrides(data: dict[str, Any], *, prefix: str = ENV_PREFIX) -> dict[str, Any]:
    merged: dict[str, Any] = dict(data)

    for key, raw_value in os.environ.items():
        if not key.startswith(prefix):
            continue

        remainder = key[len(prefix) :]
        if remainder in {"CONFIG", "LOG_LEVEL"}:
            continue

        path = [p.lower() for p in remainder.split("__") if p]
        if not path:
            continue

        value = _parse_env_value(raw_value)
        # ids and keys stay strings even when they look like numbers
        if path[-1] in {"api_key", "participant_id", "api_url"}:
            value = raw_value
        _deep_set(merged, _resolve_path(merged, path), value)

    return merged


def build_settings(data: dict[str, Any] | Settings) -> Settings:
    if isinstance(data, Settings):
        return data
    try:
        return Settings.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid configuration: {exc}") from exc


def load_settings(config_path: str | Path | None = None) -> Settings:
    if config_path is None:
        config_path = os.environ.get("VOLTNET_CONFIG", "voltnet.yml")

    path = Path(config_path)
    if path.exists():
        raw = path.read_text(encoding="utf-8")
        loaded = yaml.safe_load(raw)
        if loaded is None:
            data: dict[str, Any] = {}
        elif isinstance(loaded, dict):
            data = loaded
        else:
            raise ValueError(f"Config root must be a mapping, got: {type(loaded)!r}")
    else:
        data = {}

    return build_settings(_apply_env_overrides(data))
