"""Logging setup for the NOS client.

The package logs through ``logging.getLogger(__name__)`` module loggers and
never installs handlers on its own. Applications that want the client's
output formatted call ``configure_logging``; ``NosClient.from_config_file``
does so from the YAML ``logging`` section.
"""

import json
import logging
import sys
from datetime import datetime, timezone

PACKAGE_LOGGER = "nosclient"

# Record attributes passed through ``extra=`` that JSON output carries.
_EXTRA_FIELDS = ("operation", "bucket", "object", "status", "request_id")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Always present: timestamp (UTC, ISO 8601), level, logger, message.
    ``exception`` is added when the record carries exc_info, and each of
    the per-request extras is added when set on the record.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            (name, getattr(record, name))
            for name in _EXTRA_FIELDS
            if getattr(record, name, None) is not None
        )
        return json.dumps(entry, default=str)


def _stderr_handler(level: int, fmt: str) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    formatter = JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT)
    handler.setFormatter(formatter)
    return handler


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Send ``nosclient`` log records to stderr at ``level``.

    Only the package logger is touched, so an application's root logging
    setup is left alone. Calling this again replaces the previous handler.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); unknown
            names fall back to INFO.
        fmt: ``text`` for human-readable lines, ``json`` for JSON lines.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(numeric_level)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(_stderr_handler(numeric_level, fmt))
