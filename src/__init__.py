"""
Sonar - code-intelligence commands for AI agents.

This package exposes language-server queries (symbols, references, call and
type hierarchies) as composite, agent-friendly reports.
"""

import logging
import logging.handlers
import os
import sys
from typing import Optional

from dotenv import load_dotenv

# Configure logger for this module
logger = logging.getLogger(__name__)

# Load environment variables from .env file if present
load_dotenv()

if "pytest" not in sys.modules:
    SONAR_HOME = os.environ.get("SONAR_HOME", os.path.expanduser("~/.sonar"))
else:
    SONAR_HOME = "/tmp/.sonar"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 10485760  # 10MB
LOG_BACKUP_COUNT = 3


def _rotating_handler(path: str, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
    )
    handler.setFormatter(formatter)
    handler.setLevel(level)
    return handler


def setup_logging(level: Optional[str] = None, console: Optional[bool] = None) -> None:
    """
    Configure centralized logging for the entire application.

    Log files live in {SONAR_HOME}/logs:
    - stdout.log receives every message at the configured level
    - stderr.log receives warnings and above

    Args:
        level: Level name; defaults to LOG_LEVEL or INFO
        console: Also log to stderr; defaults to LOG_TO_CONSOLE=1. Reports are
            printed on stdout, so console logging never mixes into them.

    Safe to call again, e.g. when the CLI raises verbosity.
    """
    level_name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if console is None:
        console = os.environ.get("LOG_TO_CONSOLE", "0") == "1"

    log_dir = os.path.join(SONAR_HOME, "logs")
    os.makedirs(log_dir, exist_ok=True)

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    # Remove all existing handlers to prevent duplication
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)
    root_logger.addHandler(_rotating_handler(os.path.join(log_dir, "stdout.log"), log_level, formatter))
    root_logger.addHandler(_rotating_handler(os.path.join(log_dir, "stderr.log"), logging.WARNING, formatter))

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        root_logger.addHandler(console_handler)

    logger.debug(f"Logging configured at {level_name}; files in {log_dir}; console {'on' if console else 'off'}")


setup_logging()
