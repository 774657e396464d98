"""
Structured JSON logging for the API process.

Every record becomes one JSON line on stdout and in ``<LOG_DIR>/app.log``.
Context is passed with ``extra={...}``: request ids, file ids, latencies.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone


# LogRecord attributes that are not caller context
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = {
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
    "openai": logging.WARNING,
    "urllib3": logging.WARNING,
    "multipart": logging.WARNING,
    "pypdf": logging.ERROR,
}


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:

        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in vars(record).items():

            if key in _RECORD_ATTRS or key.startswith("_"):
                continue

            payload[key if key not in payload else f"extra_{key}"] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str)


def setup_logging(log_level: str = "INFO", log_dir: str = "logs"):

    os.makedirs(log_dir, exist_ok=True)

    formatter = JSONFormatter()

    handlers = [
        logging.StreamHandler(sys.stdout),
        logging.FileHandler(os.path.join(log_dir, "app.log")),
    ]

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level.upper())

    # replaces whatever uvicorn or a previous call installed
    root_logger.handlers = []

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name, level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)
