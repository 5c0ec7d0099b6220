from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from wallet_browser.core.comparison import DEFAULT_MAX_SELECTION
from wallet_browser.core.debounce import DEFAULT_SEARCH_DEBOUNCE_MS

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigError(ValueError):
    """
    Raised when a config file or environment value is structurally invalid.
    """
    pass


@dataclass
class AppConfig:
    """
    Runtime settings.

    - catalog_path: JSON catalog of records loaded at startup
    - state_dir: directory for the persisted snapshot and exported files
    - max_selection: comparison capacity for a fresh session
    - search_debounce_ms: quiet window before a search edit is applied
    - log_format: "json" or "plain"
    - log_level: root logger level name (DEBUG, INFO, WARNING, ERROR)
    """
    catalog_path: Path = Path("data/wallets.json")
    state_dir: Path = Path(".wallet_browser")
    max_selection: int = DEFAULT_MAX_SELECTION
    search_debounce_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS
    log_format: str = "json"
    log_level: str = "INFO"

    def validate(self) -> None:
        if self.max_selection < 1:
            raise ConfigError("max_selection must be at least 1")
        if self.search_debounce_ms < 0:
            raise ConfigError("search_debounce_ms must not be negative")
        if self.log_format not in ("json", "plain"):
            raise ConfigError(f"Unknown log_format '{self.log_format}'")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level '{self.log_level}'")


_ENV_VARS = {
    "catalog_path": "WALLET_BROWSER_CATALOG_PATH",
    "state_dir": "WALLET_BROWSER_STATE_DIR",
    "max_selection": "WALLET_BROWSER_MAX_SELECTION",
    "search_debounce_ms": "WALLET_BROWSER_SEARCH_DEBOUNCE_MS",
    "log_format": "WALLET_BROWSER_LOG_FORMAT",
    "log_level": "WALLET_BROWSER_LOG_LEVEL",
}


def _coerce(name: str, value: Any) -> Any:
    try:
        if name in ("catalog_path", "state_dir"):
            return Path(value)
        if name in ("max_selection", "search_debounce_ms"):
            return int(value)
        if name == "log_level":
            return str(value).upper()
        return str(value).lower()
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid value for {name}: {value!r}") from None


def load_config(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build the config.

    Selection Order (later wins):
        1) defaults
        2) JSON file at `path`, if given (keys match AppConfig fields)
        3) WALLET_BROWSER_* environment variables
    """
    environ = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Config file not found at {path}.")
        logger.info("Loading config", extra={"config_path": str(path)})
        with path.open() as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise ConfigError("Config file must hold a JSON object.")
        for key, value in raw.items():
            if key not in _ENV_VARS:
                logger.warning("Ignoring unknown config key %s", key)
                continue
            values[key] = _coerce(key, value)

    for name, env_var in _ENV_VARS.items():
        if env_var in environ:
            values[name] = _coerce(name, environ[env_var])

    # relative paths in the file resolve against the file's directory
    if path is not None:
        for name in ("catalog_path", "state_dir"):
            if name in values and not values[name].is_absolute() and _ENV_VARS[name] not in environ:
                values[name] = (path.parent / values[name]).resolve()

    config = AppConfig(**values)
    config.validate()
    return config
