from __future__ import annotations

import sys
from typing import Optional

from loguru import logger

from .config import Settings, get_settings


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Route SDK logs to stderr at the configured level."""
    settings = settings or get_settings()
    logger.configure(
        handlers=[
            {
                "sink": sys.stderr,
                "format": "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message} | {extra}",
                "serialize": settings.log_serialize,
                "level": settings.log_level.value,
            }
        ]
    )
