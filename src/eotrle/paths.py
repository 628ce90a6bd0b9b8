"""paths.py - one place for all eotrle paths.

every file that touches ~/.eotrle/ imports from here.
"""

from pathlib import Path


def eotrle_home() -> Path:
    """~/.eotrle/ - the root of all eotrle state."""
    return Path.home() / ".eotrle"


def ensure_dir(path: Path) -> Path:
    """mkdir -p. returns the path for chaining."""
    path.mkdir(parents=True, exist_ok=True)
    return path


# -- ~/.eotrle/ paths --
GLOBAL_CONFIG_FILE = eotrle_home() / "config.json"
METRICS_FILE = eotrle_home() / "metrics.jsonl"

# -- per-project --
PROJECT_CONFIG_NAME = ".eotrle.json"
