from __future__ import annotations

import logging
from typing import Iterable, Optional

from gbakaguides.config.models import LoggingSettings
from gbakaguides.providers.base import redact


class SecretRedactingFilter(logging.Filter):
    """Scrubs configured secrets (the Mapbox token) from every formatted log message."""

    def __init__(self, secrets: Iterable[Optional[str]]) -> None:
        super().__init__()
        self.secrets = tuple(s for s in secrets if s)

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.secrets:
            return True
        message = record.getMessage()
        scrubbed = redact(message, self.secrets)
        if scrubbed != message:
            record.msg = scrubbed
            record.args = None
        return True


def configure_logging(settings: LoggingSettings, *, secrets: Iterable[Optional[str]] = ()) -> None:
    level = getattr(logging, settings.level.upper(), None)
    if not isinstance(level, int):
        raise ValueError(f"Invalid log level: {settings.level}")

    handlers: Optional[list[logging.Handler]] = None
    if settings.file is not None:
        settings.file.parent.mkdir(parents=True, exist_ok=True)
        handlers = [logging.FileHandler(settings.file, encoding="utf-8"), logging.StreamHandler()]

    logging.basicConfig(level=level, format=settings.format, handlers=handlers)

    redactor = SecretRedactingFilter(secrets)
    for handler in logging.getLogger().handlers:
        # Replace any filter left by an earlier call (tests build several apps per process).
        for existing in [f for f in handler.filters if isinstance(f, SecretRedactingFilter)]:
            handler.removeFilter(existing)
        handler.addFilter(redactor)

    # Keep connection-pool chatter out of INFO logs; it would also echo tokenised URLs.
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))
