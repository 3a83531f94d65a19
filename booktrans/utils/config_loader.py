"""Configuration loading and management."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from booktrans.core.exceptions import ConfigurationError

ENV_PREFIX = "BOOKTRANS_"

# Environment variable suffix -> (config key, type)
ENV_MAPPINGS = {
    "SOURCE_LANG": ("source_lang", str),
    "TARGET_LANG": ("target_lang", str),
    "BACKEND": ("backend", str),
    "API_KEY": ("api_key", str),
    "WORKERS": ("max_workers", int),
    "DEADLINE": ("deadline_seconds", float),
    "BATCH_LIMIT": ("batch_size_limit", int),
    "DELIMITER": ("delimiter", str),
    "MAX_ATTEMPTS": ("max_attempts", int),
    "BACKOFF_BASE": ("backoff_base", float),
    "CORRECTIONS": ("corrections_path", str),
    "LOG_LEVEL": ("log_level", str),
    "LOG_FILE": ("log_file", str),
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file (defaults to configs/default.yaml
            if one exists, otherwise built-in defaults)

    Returns:
        Flat configuration dictionary with environment overrides applied
    """
    load_dotenv()
    config = get_default_config()

    if config_path is None:
        possible_paths = [
            Path("configs/default.yaml"),
            Path(__file__).parent.parent.parent / "configs" / "default.yaml"
        ]
        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}", config_key="config")

        with open(config_path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {config_path}", config_key="config")
        config.update(loaded)

    return override_with_env(config)


def save_config(config: Dict[str, Any], config_path: str) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration dictionary
        config_path: Output path
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    serializable = {key: str(value) if isinstance(value, Path) else value for key, value in config.items()}
    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(serializable, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


def override_with_env(config: Dict[str, Any]) -> Dict[str, Any]:
    """Override config with BOOKTRANS_* environment variables."""
    for suffix, (key, cast) in ENV_MAPPINGS.items():
        env_var = ENV_PREFIX + suffix
        value = os.getenv(env_var)
        if value is None or value == "":
            continue
        try:
            config[key] = cast(value)
        except ValueError:
            raise ConfigurationError(
                f"{env_var} must be a valid {cast.__name__}",
                config_key=key,
                invalid_value=value
            )
    return config


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "source_lang": "en",
        "target_lang": "ru",
        "backend": "free",
        "max_workers": 3,
        "deadline_seconds": 7200,
        "batch_size_limit": 1800,
        "delimiter": " ||| ",
        "max_attempts": 3,
        "backoff_base": 2.0,
        "pacing_min": 0.1,
        "pacing_max": 0.3,
        "corrections_path": None,
        "log_level": "INFO",
        "log_file": None,
    }
