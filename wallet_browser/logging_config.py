from __future__ import annotations

import logging
from typing import Optional, TYPE_CHECKING

from pythonjsonlogger import jsonlogger

if TYPE_CHECKING:
    from wallet_browser.config import AppConfig

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(
        config: Optional[AppConfig] = None,
        *,
        log_format: Optional[str] = None,
        level: Optional[str] = None,
) -> logging.Handler:
    """
    Configure the root logger from resolved settings.

    Modes:
    - JSON (default) in prod
    - plain text (dev mode)

    Explicit `log_format` / `level` arguments win over the AppConfig values,
    which already carry the file and WALLET_BROWSER_* overrides.
    Returns the installed handler.
    """
    format_mode = log_format or (config.log_format if config is not None else "json")
    level_name = (level or (config.log_level if config is not None else "INFO")).upper()

    logger = logging.getLogger()
    logger.setLevel(level_name)

    handler = logging.StreamHandler()

    if format_mode == "plain":
        formatter = logging.Formatter(PLAIN_FORMAT)
    else:
        formatter = jsonlogger.JsonFormatter(JSON_FORMAT)

    handler.setFormatter(formatter)

    # Replace any existing handlers to avoid duplicate logs
    logger.handlers.clear()
    logger.addHandler(handler)
    return handler
