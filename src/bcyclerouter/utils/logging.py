from __future__ import annotations

import logging
from typing import Iterable, Optional

from bcyclerouter.config.models import LoggingSettings


# Connection-pool chatter from the HTTP stack drowns out feed/geocoder messages at INFO.
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore")


def resolve_level(name: str) -> int:
    level = getattr(logging, name.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {name}")
    return level


def configure_logging(
    settings: LoggingSettings,
    *,
    quiet: Iterable[str] = NOISY_LOGGERS,
    force: bool = False,
) -> None:
    level = resolve_level(settings.level)

    handlers: Optional[list[logging.Handler]] = None
    if settings.file is not None:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(settings.file, encoding="utf-8"), logging.StreamHandler()]

    logging.basicConfig(level=level, format=settings.format, handlers=handlers, force=force)

    if level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))
