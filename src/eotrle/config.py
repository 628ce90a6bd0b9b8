"""config.py - configuration management.

layered config: defaults -> global (~/.eotrle/config.json) -> project (.eotrle.json) -> env.
covers codec defaults for the CLI and whether usage metrics are kept.
the run threshold is part of the format and is not a setting.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from eotrle import paths
from eotrle.io import read_json, write_json


# ============================================================
# DEFAULTS
# ============================================================

DEFAULTS = {
    "escape_marker": False,
    "strict": True,
    "verify": False,
    "metrics": True,
}

_ENV_MAP = {
    "EOTRLE_ESCAPE_MARKER": "escape_marker",
    "EOTRLE_STRICT": "strict",
    "EOTRLE_VERIFY": "verify",
    "EOTRLE_METRICS": "metrics",
}


@dataclass
class Config:
    """merged configuration from all layers."""
    values: dict = field(default_factory=dict)
    source: str = ""  # which layer provided the final values

    def get(self, key: str, default=None):
        return self.values.get(key, DEFAULTS.get(key, default))

    def set(self, key: str, value):
        self.values[key] = value

    def __getitem__(self, key: str):
        return self.get(key)

    def __contains__(self, key: str):
        return key in self.values or key in DEFAULTS

    def to_dict(self) -> dict:
        merged = dict(DEFAULTS)
        merged.update(self.values)
        return merged


# ============================================================
# CONFIG LOADING
# ============================================================

def load_global() -> dict:
    """load global config from ~/.eotrle/config.json."""
    data = read_json(paths.GLOBAL_CONFIG_FILE, default={})
    return data if isinstance(data, dict) else {}


def save_global(config: dict):
    write_json(paths.GLOBAL_CONFIG_FILE, config)


def load_project(root: str = ".") -> dict:
    """load project config from .eotrle.json in project root."""
    data = read_json(Path(root) / paths.PROJECT_CONFIG_NAME, default={})
    return data if isinstance(data, dict) else {}


def save_project(config: dict, root: str = "."):
    write_json(Path(root) / paths.PROJECT_CONFIG_NAME, config)


def load_config(root: str = ".") -> Config:
    """load merged config: defaults -> global -> project -> env."""
    merged = dict(DEFAULTS)

    global_config = load_global()
    merged.update(global_config)

    project_config = load_project(root)
    merged.update(project_config)

    env_overrides = _env_overrides()
    merged.update(env_overrides)

    source = "defaults"
    if env_overrides:
        source = "env"
    elif project_config:
        source = "project"
    elif global_config:
        source = "global"

    return Config(values=merged, source=source)


def parse_bool(value: str):
    """'true'/'1'/'yes'/'on' -> True, 'false'/'0'/'no'/'off' -> False, else None."""
    v = value.strip().lower()
    if v in ("true", "1", "yes", "on"):
        return True
    if v in ("false", "0", "no", "off"):
        return False
    return None


def _env_overrides() -> dict:
    """extract config overrides from environment variables. unparseable values are ignored."""
    overrides = {}
    for env_key, config_key in _ENV_MAP.items():
        value = os.environ.get(env_key)
        if value is None:
            continue
        parsed = parse_bool(value)
        if parsed is not None:
            overrides[config_key] = parsed
    return overrides


# ============================================================
# CONFIG HELPERS
# ============================================================

def get_value(key: str, root: str = "."):
    """get a single config value (merged)."""
    return load_config(root).get(key)


def set_global_value(key: str, value):
    config = load_global()
    config[key] = value
    save_global(config)


def set_project_value(key: str, value, root: str = "."):
    config = load_project(root)
    config[key] = value
    save_project(config, root)


def list_config(root: str = ".") -> dict:
    """list all config values with their sources."""
    global_config = load_global()
    project_config = load_project(root)
    env = _env_overrides()

    result = {}
    for key in DEFAULTS:
        source = "default"
        value = DEFAULTS[key]

        if key in global_config:
            source = "global"
            value = global_config[key]
        if key in project_config:
            source = "project"
            value = project_config[key]
        if key in env:
            source = "env"
            value = env[key]

        result[key] = {"value": value, "source": source}

    return result


def init_project_config(root: str = ".") -> str:
    """initialize a .eotrle.json in the project root with defaults."""
    config_path = Path(root) / paths.PROJECT_CONFIG_NAME
    if config_path.exists():
        return str(config_path)
    save_project(dict(DEFAULTS), root)
    return str(config_path)
