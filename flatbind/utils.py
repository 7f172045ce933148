import os
from pathlib import Path

import tomli as toml

from flatbind import logging as flatbind_logging

logger = flatbind_logging.get_logger(__name__)


def _merge_configs(config, default_config):
    config_out = {}

    for key, default_value in default_config.items():
        if key in config:
            if isinstance(config[key], dict) and isinstance(default_value, dict):
                config_out[key] = _merge_configs(config[key], default_value)
            elif isinstance(config[key], dict) or isinstance(default_value, dict):
                raise TypeError(f"Type mismatch for key '{key}': "
                                f"config has {type(config[key])}, default_config has {type(default_value)}")
            else:
                config_out[key] = config[key]
        else:
            config_out[key] = default_value

    # keys that only the user config knows about
    for key, value in config.items():
        if key not in default_config:
            config_out[key] = value

    return config_out


def load_default_config():
    """Load the bundled default configuration from packaged resources."""
    candidate = Path(__file__).resolve().parent / "_resources" / "flatbind.default.toml"
    if candidate.is_file():
        with open(candidate, "rb") as f:
            return toml.load(f)

    raise FileNotFoundError("Could not load _resources/flatbind.default.toml")


def try_load_config(config_file=None):
    """Load user configuration merged with defaults.

    Resolution order:
    1. Explicit `config_file` argument.
    2. `FLATBIND_CONFIG` environment variable.
    3. `./flatbind.toml` relative to current working directory.
    4. `flatbind.toml` inside the repository checkout (development mode).
    If none are found, return the default config alone.
    """
    default_config = load_default_config()

    def _load_user_config(path: Path) -> dict:
        with open(path, "rb") as f:
            return toml.load(f)

    if config_file:
        candidate = Path(config_file).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(f"Could not find config file {candidate}")
        return _merge_configs(_load_user_config(candidate), default_config)

    env_candidate = os.environ.get("FLATBIND_CONFIG")
    if env_candidate:
        env_path = Path(env_candidate).expanduser()
        if not env_path.is_file():
            raise FileNotFoundError(f"FLATBIND_CONFIG={env_candidate} does not point to a readable file")
        return _merge_configs(_load_user_config(env_path), default_config)

    cwd_candidate = Path.cwd() / "flatbind.toml"
    if cwd_candidate.is_file():
        return _merge_configs(_load_user_config(cwd_candidate), default_config)

    repo_candidate = Path(__file__).resolve().parent.parent / "flatbind.toml"
    if repo_candidate.is_file():
        return _merge_configs(_load_user_config(repo_candidate), default_config)

    logger.debug("No user config found; falling back to default configuration only")
    return default_config


def save_code(path, code):
    path_dir = os.path.dirname(path)
    if path_dir:
        os.makedirs(path_dir, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(code)
