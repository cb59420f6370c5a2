"""Logging configuration for the survey API."""
import logging
import os
import json
from logging.handlers import RotatingFileHandler
from flask import has_request_context, request
from shared.models import now

# Per-request and per-transfer chatter from the HTTP server and storage driver
QUIET_LOGGERS = ('werkzeug', 'libcloud', 'urllib3')


class StructuredFormatter(logging.Formatter):
    """One JSON object per line for the rotating log file."""

    def format(self, record):
        log_entry = {
            'timestamp': now().isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if has_request_context():
            log_entry['request'] = f"{request.method} {request.path}"

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        # Structured context passed as extra={'extra_fields': {...}}
        if hasattr(record, 'extra_fields'):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, default=str)


def setup_logging(log_dir=None):
    """Configure the root logger with a JSON file handler and a console handler.

    Args:
        log_dir: Directory for survey_api.log; defaults to LOG_DIR or ./logs
            beside the backend package
    """
    log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    logs_dir = log_dir or os.getenv('LOG_DIR') or os.path.join(os.path.dirname(__file__), '..', 'logs')
    os.makedirs(logs_dir, exist_ok=True)
    log_file = os.path.join(logs_dir, 'survey_api.log')

    file_handler = RotatingFileHandler(log_file, maxBytes=10*1024*1024, backupCount=5)
    file_handler.setFormatter(StructuredFormatter())
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)-8s %(name)-20s %(message)s'))

    root = logging.getLogger()
    root.setLevel(log_level)
    # The app factory runs once per test app
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    for handler in (file_handler, console_handler):
        handler.setLevel(log_level)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info("Logging initialized", extra={
        'extra_fields': {
            'log_level': log_level_str,
            'log_file': log_file,
        }
    })
    return root
