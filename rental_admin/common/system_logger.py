import logging
import os
import sys
import traceback

from concurrent_log_handler import ConcurrentRotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class SystemLogger:
    def __init__(self, name="rental_admin"):
        self.logger = logging.getLogger(name)
        self.console_handler = None
        self.file_handler = None
        self.logger.setLevel(logging.INFO)

    def configure_logging(self, level="INFO", log_dir=None, max_bytes=10 * 1024 * 1024, backup_count=5):
        # Called once per app; drop handlers from a previous create_app()
        for handler in (self.console_handler, self.file_handler):
            if handler is not None:
                self.logger.removeHandler(handler)
                handler.close()

        level = getattr(logging, str(level).upper(), logging.INFO)
        self.logger.setLevel(level)
        formatter = logging.Formatter(LOG_FORMAT)

        # Console Handler
        self.console_handler = logging.StreamHandler(sys.stdout)
        self.console_handler.setLevel(level)
        self.console_handler.setFormatter(formatter)
        self.logger.addHandler(self.console_handler)

        # File Handler with Concurrent Rotation
        self.file_handler = None
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            self.file_handler = ConcurrentRotatingFileHandler(
                os.path.join(log_dir, "system.log"),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            self.file_handler.setLevel(level)
            self.file_handler.setFormatter(formatter)
            self.logger.addHandler(self.file_handler)

    def _log(self, level, message, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        exc_info = kwargs.pop("exc_info", None)

        if exc_info:
            extra["traceback"] = traceback.format_exc()

        self.logger.log(level, message, *args, extra=extra, exc_info=exc_info, **kwargs)

    def debug(self, message, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def critical(self, message, *args, **kwargs):
        self._log(logging.CRITICAL, message, *args, **kwargs)


# Create a global instance of the logger
system_logger = SystemLogger()


def get_logger():
    return system_logger


def configure_from_settings(settings):
    """Apply the logging section of Settings to the global logger."""
    system_logger.configure_logging(
        level=settings.LOG_LEVEL,
        log_dir=settings.LOG_DIR,
        max_bytes=settings.MAX_LOG_FILE_SIZE,
        backup_count=settings.BACKUP_COUNT,
    )
    return system_logger
