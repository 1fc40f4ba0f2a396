"""
Structured Logging for the Beanstalk provider.
Outputs JSON-formatted logs so request traces can be machine-read.
"""

import json
import os
import sys
import logging
from datetime import datetime, timezone

LOGGER_NAME = "BeanstalkProvider"

# Configure package logger; BEANSTALK_LOG_LEVEL=DEBUG shows request traces
logger = logging.getLogger(LOGGER_NAME)
logger.setLevel(logging.getLevelName(os.environ.get("BEANSTALK_LOG_LEVEL", "INFO").upper()))
handler = logging.StreamHandler(sys.stderr)
logger.addHandler(handler)


# Attributes every LogRecord carries; anything else came in through ``extra``
RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


def _jsonable(value):
    try:
        json.dumps(value)
    except (TypeError, ValueError):
        return str(value)
    return value


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` fields at the top level."""

    def format(self, record):
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        entry.update(
            (key, _jsonable(value))
            for key, value in vars(record).items()
            if key not in RECORD_ATTRS and not key.startswith("_")
        )
        return json.dumps(entry)


handler.setFormatter(JsonFormatter())


def get_logger(component: str = "provider"):
    return ComponentLogger(component)


class ComponentLogger:
    def __init__(self, component):
        self.component = component
        self.logger = logging.getLogger(LOGGER_NAME)

    def _extra(self, resource_id, kwargs):
        extra = {"component": self.component}
        if resource_id: extra["resource_id"] = resource_id
        extra.update(kwargs)
        return extra

    def debug(self, msg, resource_id=None, **kwargs):
        self.logger.debug(msg, extra=self._extra(resource_id, kwargs))

    def info(self, msg, resource_id=None, **kwargs):
        self.logger.info(msg, extra=self._extra(resource_id, kwargs))

    def warning(self, msg, resource_id=None, **kwargs):
        self.logger.warning(msg, extra=self._extra(resource_id, kwargs))

    def error(self, msg, resource_id=None, **kwargs):
        self.logger.error(msg, extra=self._extra(resource_id, kwargs))
