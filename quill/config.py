import json
import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .console import console
from .theme import Theme

# Load environment variables from .env file
load_dotenv()

# Configuration Defaults
DEFAULT_CONFIG = {
    "AUTOSAVE_INTERVAL": "120",
    "BACKUP": "true",
    "THEME": "default",
    "LINE_NUMBERS": "true",
    "TRUNCATE_LONG": "false",
    "FORMATTER": "black -q",
    "RUNNER": "python3",
    "LOG_LEVEL": "WARNING",
}

# Environment variables carry this prefix, e.g. QUILL_AUTOSAVE_INTERVAL=30
ENV_PREFIX = "QUILL_"

# File Paths
QUILL_DIR = Path(os.getenv("QUILL_DIR", str(Path.home() / ".quill")))
CONFIG_FILE = Path(os.getenv("QUILL_CONFIG_FILE", str(QUILL_DIR / "config.json")))
RECOVERY_DIR = Path(os.getenv("QUILL_RECOVERY_DIR", str(QUILL_DIR)))

# Values accepted as "on" by boolean settings
TRUTHY = ("true", "1", "yes", "on")

# Fixed capacities
HISTORY_MAX = 800
UNDO_MAX = 200


def ensure_quill_dir():
    """Ensure the quill storage directory exists"""
    if not QUILL_DIR.exists():
        try:
            QUILL_DIR.mkdir(parents=True, exist_ok=True)
        except Exception as e:
            console.print(f"[yellow]Warning: Could not create directory {QUILL_DIR}: {e}[/yellow]")


def load_config() -> dict[str, Any]:
    """Load configuration from file"""
    if CONFIG_FILE.exists():
        try:
            with open(CONFIG_FILE) as f:
                config: dict[str, Any] = json.load(f)
                return config
        except Exception as e:
            console.print(f"[yellow]Warning: Could not load config file: {e}[/yellow]")
    return {}


def save_config(config: dict[str, Any]) -> bool:
    """Save configuration to file"""
    try:
        ensure_quill_dir()
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w") as f:
            json.dump(config, f, indent=2)
        return True
    except Exception as e:
        console.print(f"[red]Error saving config file: {e}[/red]")
        return False


def get_setting(key: str, default: str) -> str:
    """Get setting with priority: Env Var > Config File > Default"""
    # 1. Environment Variable
    env_val = os.getenv(f"{ENV_PREFIX}{key}")
    if env_val:
        return env_val

    # 2. Config File
    config = load_config()
    if key in config:
        return str(config[key])

    # 3. Default
    return default


def get_int_setting(key: str, default: int) -> int:
    """Get integer setting with priority: Env Var > Config File > Default"""
    value = get_setting(key, str(default))
    try:
        return int(value)
    except ValueError:
        console.print(
            f"[yellow]Warning: Invalid integer value for {key}: {value}, using default {default}[/yellow]"
        )
        return default


def get_bool_setting(key: str, default: bool) -> bool:
    """Get boolean setting with priority: Env Var > Config File > Default"""
    value = get_setting(key, str(default).lower())
    return value.lower() in TRUTHY


@dataclass
class Settings:
    """Runtime settings handed to the editor and its commands."""

    autosave_interval: int = 120
    backup: bool = True
    theme: Theme = Theme.DEFAULT
    line_numbers: bool = True
    truncate_long: bool = False
    formatter: list[str] = field(default_factory=lambda: ["black", "-q"])
    runner: list[str] = field(default_factory=lambda: ["python3"])
    log_level: str = "WARNING"


def load_settings() -> Settings:
    """Resolve every setting from env, config file and defaults."""
    interval = get_int_setting("AUTOSAVE_INTERVAL", int(DEFAULT_CONFIG["AUTOSAVE_INTERVAL"]))
    return Settings(
        autosave_interval=max(interval, 0),
        backup=get_bool_setting("BACKUP", True),
        theme=Theme.from_name(get_setting("THEME", DEFAULT_CONFIG["THEME"])),
        line_numbers=get_bool_setting("LINE_NUMBERS", True),
        truncate_long=get_bool_setting("TRUNCATE_LONG", False),
        formatter=shlex.split(get_setting("FORMATTER", DEFAULT_CONFIG["FORMATTER"])),
        runner=shlex.split(get_setting("RUNNER", DEFAULT_CONFIG["RUNNER"])),
        log_level=get_setting("LOG_LEVEL", DEFAULT_CONFIG["LOG_LEVEL"]),
    )
