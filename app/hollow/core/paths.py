"""Where hollow keeps its files.

Configuration lives under ``$XDG_CONFIG_HOME/hollow`` (``~/.config/hollow``)
and everything that must survive between scan invocations under
``$XDG_STATE_HOME/hollow`` (``~/.local/state/hollow``). Directories are
created lazily by the modules that write into them.
"""

import os
from pathlib import Path

APP_NAME = "hollow"


def _xdg_home(env_var: str, fallback: str) -> Path:
    base = os.environ.get(env_var)
    return (Path(base) if base else Path.home() / fallback) / APP_NAME


def get_config_dir() -> Path:
    """Directory holding config.toml and the optional theme.toml."""
    return _xdg_home("XDG_CONFIG_HOME", ".config")


def get_state_dir() -> Path:
    """Directory holding the scan checkpoint, schedule and default report."""
    return _xdg_home("XDG_STATE_HOME", ".local/state")


def get_config_path() -> Path:
    return get_config_dir() / "config.toml"


def get_checkpoint_dir() -> Path:
    return get_state_dir() / "checkpoints"


def get_schedule_path() -> Path:
    """File listing pending re-invocation triggers."""
    return get_state_dir() / "schedule.json"


def get_default_report_path() -> Path:
    """CSV report location used when ``report.csv_path`` is not set."""
    return get_state_dir() / "empty-folders.csv"
