"""Configuration loading utilities."""

import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from nudge.config.schema import Config


# Conventional variable names honoured when the config leaves a value empty.
# These sit below NUDGE_* variables and config.json in priority.
_WELL_KNOWN_ENV: dict[str, tuple[str, ...]] = {
    "OPENAI_API_KEY": ("providers", "openai", "api_key"),
    "HUGGING_FACE_TOKEN": ("providers", "hub", "token"),
}

_ENDPOINTS_ENV = "OLLAMA_ENDPOINTS"


def get_config_path() -> Path:
    """Get the default configuration file path."""
    return Path.home() / ".nudge" / "config.json"


def get_env_path() -> Path:
    """Get the default secrets .env file path."""
    return Path.home() / ".nudge" / ".env"


def _load_dotenv(env_path: Path) -> dict[str, str]:
    """Parse a simple .env file into a dict (no shell expansion)."""
    values: dict[str, str] = {}
    if not env_path.exists():
        return values
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        # Strip optional surrounding quotes
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]
        values[key] = value
    return values


def _inject_env(env_path: Path) -> None:
    """Load .env values into os.environ (existing vars take precedence)."""
    for key, value in _load_dotenv(env_path).items():
        os.environ.setdefault(key, value)


def load_config(config_path: Path | None = None, env_path: Path | None = None) -> Config:
    """
    Load configuration from file + .env secrets.

    Resolution order (highest priority wins):
      1. Explicit values in config.json
      2. NUDGE_* environment variables (e.g. NUDGE_PROVIDERS__OPENAI__API_KEY=…)
      3. Well-known variables: OPENAI_API_KEY, HUGGING_FACE_TOKEN, OLLAMA_ENDPOINTS
      4. Built-in defaults

    Variables found in ~/.nudge/.env are injected first and never override
    the real environment.

    Args:
        config_path: Optional path to config file. Uses default if not provided.
        env_path: Optional path to the .env file. Uses default if not provided.

    Returns:
        Loaded configuration object.
    """
    path = config_path or get_config_path()
    _inject_env(env_path or get_env_path())

    data: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path) as f:
                raw = json.load(f)
            if not isinstance(raw, dict):
                raise ValueError("top-level JSON value must be an object")
            data = convert_keys(raw)
            config = Config(**data)
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Failed to load config from {}: {}; using defaults", path, e)
            data = {}
            config = Config()
    else:
        config = Config()

    _apply_well_known_env(config, data)
    return config


def _apply_well_known_env(config: Config, data: dict[str, Any]) -> None:
    """Fill empty credentials and unset endpoints from conventional env vars."""
    for env_var, attr_path in _WELL_KNOWN_ENV.items():
        value = os.environ.get(env_var, "").strip()
        if not value:
            continue
        obj: Any = config
        for part in attr_path[:-1]:
            obj = getattr(obj, part)
        if not getattr(obj, attr_path[-1]):
            setattr(obj, attr_path[-1], value)

    endpoints = os.environ.get(_ENDPOINTS_ENV, "")
    local_data = data.get("providers", {}).get("local", {})
    if endpoints and "endpoints" not in local_data:
        parsed = [e.strip() for e in endpoints.split(",") if e.strip()]
        if parsed:
            config.providers.local.endpoints = parsed


# ── Key conversion helpers ──


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        return {camel_to_snake(k): convert_keys(v) for k, v in data.items()}
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0:
            result.append("_")
        result.append(char.lower())
    return "".join(result)
