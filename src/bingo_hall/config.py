from __future__ import annotations

import hashlib
import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

import yaml

from .serialize import canonical_json_dumps

ENV_PREFIX = "BINGO_HALL_"

DEFAULTS: Dict[str, Any] = {
    "host": "127.0.0.1",
    "port": 5000,
    "room_ttl_sec": 60 * 60 * 12,
    "room_code_length": 6,
    "seed": {"engine": "py_random", "value": None},
    "log_level": "INFO",
    "log_file": None,
    "cors_origins": "*",
}


def _read_config_file(config_path: Path | None) -> Dict[str, Any]:
    if not config_path:
        return {}
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    suffix = config_path.suffix.lower()
    text = config_path.read_text(encoding="utf-8")
    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
        if not isinstance(data, dict):
            raise ValueError("Top-level YAML config must be a mapping")
        return data
    if suffix == ".json":
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Top-level JSON config must be a mapping")
        return data
    raise ValueError(f"Unsupported config extension: {suffix}")


def _collect_env_vars(env: Mapping[str, str]) -> Dict[str, Any]:
    """Map ENV variables with BINGO_HALL_ prefix to config keys.

    We use an explicit map to avoid ambiguity. Keys not present are ignored.
    """
    mapping: Dict[str, str] = {
        f"{ENV_PREFIX}HOST": "host",
        f"{ENV_PREFIX}PORT": "port",
        f"{ENV_PREFIX}ROOM_TTL_SEC": "room_ttl_sec",
        f"{ENV_PREFIX}ROOM_CODE_LENGTH": "room_code_length",
        f"{ENV_PREFIX}SEED_ENGINE": "seed.engine",
        f"{ENV_PREFIX}SEED_VALUE": "seed.value",
        f"{ENV_PREFIX}LOG_LEVEL": "log_level",
        f"{ENV_PREFIX}LOG_FILE": "log_file",
        f"{ENV_PREFIX}CORS_ORIGINS": "cors_origins",
    }

    result: Dict[str, Any] = {}
    for env_key, cfg_key in mapping.items():
        if env_key not in env:
            continue
        raw = env[env_key]
        if cfg_key in {"port", "room_ttl_sec", "room_code_length", "seed.value"}:
            try:
                result[cfg_key] = int(raw)
            except ValueError:
                result[cfg_key] = raw
        else:
            result[cfg_key] = raw

    return result


def _set_nested(config: Dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = dotted_key.split(".")
    cursor = config
    for part in parts[:-1]:
        if part not in cursor or not isinstance(cursor[part], dict):
            cursor[part] = {}
        cursor = cursor[part]
    cursor[parts[-1]] = value


def _apply_overrides(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = json.loads(json.dumps(base))  # deep copy via JSON
    for key, value in overrides.items():
        if "." in key:
            _set_nested(merged, key, value)
        elif isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def compute_params_hash(resolved: Mapping[str, Any]) -> str:
    """Hash of the settings that change how rooms behave (not where they are served)."""
    include = {
        "room_ttl_sec",
        "room_code_length",
        "seed.engine",
        "seed.value",
    }

    def extract(path: str, source: Mapping[str, Any]) -> Any:
        cur: Any = source
        for part in path.split("."):
            if not isinstance(cur, Mapping) or part not in cur:
                return None
            cur = cur[part]
        return cur

    contract: Dict[str, Any] = {}
    for item in include:
        value = extract(item, resolved)
        if value is not None:
            contract[item] = value

    digest = hashlib.sha256(canonical_json_dumps(contract).encode("utf-8")).hexdigest()
    return f"sha256:{digest}"


def resolve_log_path(resolved: Dict[str, Any], config_file: Path | None, from_cli: bool) -> Dict[str, Any]:
    """Log file paths from the config file are relative to it; CLI paths to the CWD."""
    value = resolved.get("log_file")
    if not value:
        return resolved
    p = Path(str(value))
    if not p.is_absolute():
        base = Path.cwd() if from_cli or config_file is None else config_file.parent
        p = (base / p).resolve()
    result = dict(resolved)
    result["log_file"] = str(p)
    return result


def resolve_parameters(
    *,
    config_path_str: str | None,
    cli_overrides: Dict[str, Any],
    env: Mapping[str, str] | None = None,
) -> Tuple[Dict[str, Any], str, Path | None]:
    """Resolve parameters with precedence CLI > ENV > config > defaults.

    Returns (resolved_params, params_hash, config_path)
    """
    config_path = Path(config_path_str).resolve() if config_path_str else None
    file_cfg = _read_config_file(config_path) if config_path else {}
    env_map = _collect_env_vars(os.environ if env is None else env)

    merged = _apply_overrides(DEFAULTS, file_cfg)
    merged = _apply_overrides(merged, env_map)
    merged = _apply_overrides(merged, cli_overrides)

    merged = resolve_log_path(merged, config_path, "log_file" in cli_overrides)

    params_hash = compute_params_hash(merged)
    return merged, params_hash, config_path
