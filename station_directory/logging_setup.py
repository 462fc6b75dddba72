"""
Logging configuration for Station Directory

This module sets up logging based on the 'logging' section of the settings:
- Console logging (stdout, for development)
- File logging (rotating, for production debugging)
- Configurable log levels for console and file
"""

import re
import sys
import logging
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages"""

    def format(self, record):
        record.msg = _ANSI_ESCAPE.sub('', str(record.msg))
        return super().format(record)


def setup_logging(settings=None, console=True):
    """Setup logging based on settings

    Args:
        settings: Settings dict (uses the 'logging' section); None for defaults
        console: Add the stdout handler (default: True)
    """
    logging_config = settings.get('logging', {}) if settings else {}

    log_file = logging_config.get('file', 'station_directory.log')
    max_bytes = logging_config.get('max_bytes', 10485760)  # 10MB default
    backup_count = logging_config.get('backup_count', 5)
    console_level_name = logging_config.get('console_level', 'INFO')
    file_level_name = logging_config.get('file_level', 'ERROR')

    console_level = getattr(logging, console_level_name.upper(), logging.INFO)
    file_level = getattr(logging, file_level_name.upper(), logging.ERROR)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, handlers filter
    root_logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(console_level)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding='utf-8'
            )
            file_handler.setLevel(file_level)
            file_handler.setFormatter(ColorStripFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
            root_logger.addHandler(file_handler)
        except OSError as e:
            # Console logging still works
            print(f"Warning: Could not setup file logging: {e}")

    # Reduce Flask/Werkzeug request logging noise
    logging.getLogger('werkzeug').setLevel(logging.ERROR)
    logging.getLogger('apscheduler').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured: console={console_level_name if console else 'off'}, "
                f"file={file_level_name}, file={log_file}")
    logger.debug(f"Max file size: {max_bytes} bytes, Backup count: {backup_count}")
