"""User configuration stored as one JSON object.

Lives at ``user_config_dir("irexplorer")/config.json``. Reads never fail:
anything missing, unreadable, or of the wrong type yields the default.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from platformdirs import user_config_dir

logger = logging.getLogger(__name__)

APP_NAME = "irexplorer"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_LEFT_PANE_PERCENT = 50.0
DEFAULT_POLL_TIMEOUT_MS = 50
DEFAULT_NU_EXECUTABLE = "nu"
DEFAULT_RESOLVER_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

Config = dict[str, object]


def load_config() -> Config:
    """Read the config file; ``{}`` unless it holds a JSON object."""
    try:
        with CONFIG_PATH.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: Config) -> None:
    """Write ``data`` as indented JSON; failures are logged and otherwise ignored."""
    payload = json.dumps(data, indent=2, sort_keys=True) + "\n"
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(payload, encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", CONFIG_PATH, exc)


def _text(config: Config | None, key: str) -> str | None:
    value = (load_config() if config is None else config).get(key)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _positive(config: Config | None, key: str) -> float | None:
    value = (load_config() if config is None else config).get(key)
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return None
    return float(value)


def load_theme_name(config: Config | None = None) -> str | None:
    """Saved UI theme name, if any."""
    return _text(config, "theme")


def save_theme_name(theme_name: str) -> None:
    """Remember ``theme_name`` as the default UI palette."""
    name = str(theme_name).strip()
    if name:
        data = load_config()
        data["theme"] = name
        save_config(data)


def load_style_name(config: Config | None = None) -> str | None:
    """Pygments style for source colors, if one is configured."""
    return _text(config, "style")


def load_left_pane_percent(config: Config | None = None) -> float:
    """Instruction-pane share of the width, strictly between 0 and 100."""
    value = _positive(config, "left_pane_percent")
    return value if value is not None and value < 100 else DEFAULT_LEFT_PANE_PERCENT


def load_poll_timeout_ms(config: Config | None = None) -> int:
    """Key-read timeout for the session loop, in milliseconds."""
    value = _positive(config, "poll_timeout_ms")
    return DEFAULT_POLL_TIMEOUT_MS if value is None else int(value)


def load_nu_executable(config: Config | None = None) -> str:
    """Path or name of the ``nu`` binary."""
    return _text(config, "nu_executable") or DEFAULT_NU_EXECUTABLE


def load_resolver_timeout_seconds(config: Config | None = None) -> float:
    """Upper bound for one resolver subprocess run."""
    value = _positive(config, "resolver_timeout_seconds")
    return DEFAULT_RESOLVER_TIMEOUT_SECONDS if value is None else value


def load_log_level(config: Config | None = None) -> str:
    """A ``logging`` level name; WARNING unless a valid one is configured."""
    value = (_text(config, "log_level") or "").upper()
    return value if value in LOG_LEVELS else DEFAULT_LOG_LEVEL
