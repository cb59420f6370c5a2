"""Logging configuration for the survey client."""
import logging
import sys
import os

# Image decoding and API connection pool debug output
QUIET_LOGGERS = ('PIL', 'urllib3')

# Photo ingestion runs on worker threads, so the thread name is logged
LOG_FORMAT = '%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s: %(message)s'


class ColorFormatter(logging.Formatter):
    """Colours the level name of console output."""

    COLORS = {
        'DEBUG': '\033[36m',
        'INFO': '\033[32m',
        'WARNING': '\033[33m',
        'ERROR': '\033[31m',
        'CRITICAL': '\033[35m',
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)
        # Colour a copy so other handlers see the plain level name
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(stream=None):
    """Console-only logging for the client, level from LOG_LEVEL.

    Colours are used when LOG_COLORS is set (default) and the stream is a tty.
    """
    log_level_str = os.getenv('LOG_LEVEL', 'INFO').upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    stream = stream or sys.stdout

    use_colors = os.getenv('LOG_COLORS', 'true').lower() in ('true', '1', 'yes')
    formatter_class = ColorFormatter if use_colors and stream.isatty() else logging.Formatter

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter_class(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(console_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    root.info(f"Client logging initialized (level: {log_level_str})")
    return root
