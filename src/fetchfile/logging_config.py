from __future__ import annotations

import logging
import os
from typing import Optional

ENV_LOG_LEVEL = "FETCHFILE_LOG_LEVEL"


def configure_logging(default_level: int = logging.WARNING, level: Optional[int] = None) -> None:
    """Configure the root logger for command line use.

    An explicit ``level`` wins; otherwise FETCHFILE_LOG_LEVEL is honored, then
    ``default_level``. The library itself never installs handlers.
    """
    if level is None:
        level = default_level
        level_name = os.getenv(ENV_LOG_LEVEL)
        if level_name:
            level = getattr(logging, level_name.upper(), default_level)
    logging.basicConfig(
        level=level,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
