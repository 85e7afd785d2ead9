"""
Rich UI helpers for lambda-workbench logging output.
"""

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

RICH_UI_ENV_VAR = "LWB_RICH_UI"


def is_rich_enabled() -> bool:
    """Check if Rich UI should be enabled based on environment"""
    return os.environ.get(RICH_UI_ENV_VAR, "false").lower() in ("true", "1", "yes")


def get_rich_handler() -> logging.Handler:
    """Get a Rich logging handler writing to stderr."""
    return RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
