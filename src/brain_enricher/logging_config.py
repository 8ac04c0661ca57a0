"""JSON logging for the brain-enricher API and worker processes.

Both entry points share one stdout JSON format (``severity``/``timestamp``/
``logger`` field names) and stamp every record with ``service: brain-enricher``
so API and worker output can be told apart once collected. The root level
comes from ``Settings.log_level``. ``httpx`` is held at WARNING because every
extractor fetch would otherwise log a request line.

Usage:
    from brain_enricher.logging_config import configure_logging
    configure_logging(settings.log_level)
"""

import copy
import logging
import logging.config

LOGGING_CONFIG: dict = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(levelname)s %(name)s %(funcName)s %(message)s",
            "rename_fields": {
                "levelname": "severity",
                "asctime": "timestamp",
                "name": "logger",
            },
            "static_fields": {
                "service": "brain-enricher",
            },
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    },
    "root": {
        "level": "INFO",
        "handlers": ["console"],
    },
    "loggers": {
        "httpx": {"level": "WARNING"},
    },
}


def configure_logging(level: str = "INFO") -> None:
    """Apply ``LOGGING_CONFIG`` with the root logger at ``level``.

    Works on a copy so the module-level dict keeps its defaults when the API
    and worker are configured in the same interpreter (as in tests).
    """
    config = copy.deepcopy(LOGGING_CONFIG)
    config["root"]["level"] = level.upper()
    logging.config.dictConfig(config)
