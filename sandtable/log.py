import json
import logging
import os

DEFAULT_FORMAT = "%(levelname)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line."""

    def format(self, record):
        entry = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in ("input", "output", "waypoint", "sweeps"):
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


_configured = False


def configure(level=None, fmt=None):
    """
    Set up the root logger once.

    level: defaults to $SANDTABLE_LOG_LEVEL, then INFO
    fmt:   "text" or "json"; defaults to $SANDTABLE_LOG_FORMAT, then text
    """
    global _configured
    if _configured:
        return

    level = (level or os.environ.get("SANDTABLE_LOG_LEVEL", "INFO")).upper()
    fmt = (fmt or os.environ.get("SANDTABLE_LOG_FORMAT", "text")).lower()

    logging.basicConfig(level=level, format=DEFAULT_FORMAT)
    root = logging.getLogger()
    root.setLevel(level)
    if fmt == "json" and root.handlers:
        root.handlers[0].setFormatter(JsonFormatter())
    _configured = True


def get_logger(name):
    """Return a named logger, configuring the root logger on first use."""
    configure()
    return logging.getLogger(name)
