"""
Root logger setup.

Modules log through logging.getLogger(__name__); this only decides the
level and format of what reaches the console.
"""

import logging
from typing import Optional

from backend.settings import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
CONSOLE_HANDLER_NAME = "tracking-console"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Set the root log level from settings and install the console handler once."""
    settings = settings or get_settings()
    root = logging.getLogger()
    root.setLevel(settings.log_level)

    if any(h.get_name() == CONSOLE_HANDLER_NAME for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
