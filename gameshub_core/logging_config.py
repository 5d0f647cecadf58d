"""Logging configuration for GamesHub."""

import logging
import os
import sys
from typing import Optional

DEFAULT_LEVEL = os.getenv("GAMESHUB_LOG_LEVEL", "WARNING")

FORMATS = {
    "simple": "%(name)s - %(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
}


def setup_logging(level: Optional[str] = None, format_style: str = "simple") -> None:
    """
    Set up logging for the whole application.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to ``GAMESHUB_LOG_LEVEL`` or WARNING.
        format_style: "simple" or "detailed"
    """
    numeric_level = getattr(logging, (level or DEFAULT_LEVEL).upper(), logging.WARNING)
    log_format = FORMATS.get(format_style, FORMATS["simple"])

    logging.basicConfig(
        level=numeric_level,
        format=log_format,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )
    # Werkzeug request lines are noise at INFO
    logging.getLogger("werkzeug").setLevel(max(numeric_level, logging.WARNING))


def get_logger(module_name: str) -> logging.Logger:
    """
    Get a logger with the package prefix stripped.

    Args:
        module_name: Full module name (e.g., 'gameshub_core.constraint')

    Returns:
        Logger named e.g. 'constraint'
    """
    if module_name.startswith('gameshub_core.'):
        module_name = module_name[len('gameshub_core.'):]
    return logging.getLogger(module_name)
