import logging
import os
import sys
from typing import Optional, TextIO, Union

from .core.utils.rich_ui import get_rich_handler, is_rich_enabled

LOG_LEVEL_ENV_VAR = "LOG_LEVEL"

DEBUG_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-5s | %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Effective level: ``LOG_LEVEL`` from the environment wins over ``level``."""
    level = os.environ.get(LOG_LEVEL_ENV_VAR) or level
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def setup_logging(
    level: Union[int, str] = logging.INFO,
    stream: TextIO = sys.stderr,
    fmt: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Configure the root logger (or ``logger``) once per process.
    Log records go to stderr so command output on stdout stays clean; the
    Rich handler is used when LWB_RICH_UI is set.
    Later calls only adjust the level.
    """
    level = resolve_level(level)
    root_logger = logger or logging.getLogger()
    root_logger.setLevel(level)

    if root_logger.hasHandlers():
        return

    if is_rich_enabled():
        handler = get_rich_handler()
    else:
        handler = logging.StreamHandler(stream)
        handler.setFormatter(
            logging.Formatter(fmt or (DEBUG_FORMAT if level == logging.DEBUG else DEFAULT_FORMAT))
        )
    root_logger.addHandler(handler)
