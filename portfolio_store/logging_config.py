"""
Logging setup for the portfolio backend.

All records pass through one queue. Request threads only enqueue; a single
listener thread formats them and writes to stdout and, when configured, to a
size-rotated log file.
"""

import atexit
import logging
import logging.handlers
import sys
from pathlib import Path
from queue import Queue
from typing import List, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# Libraries that log every request or connection at INFO
NOISY_LOGGERS = ("werkzeug", "urllib3", "requests", "PIL")


class QueueLogging:
    """Owns the queue listener so it can be restarted or stopped cleanly."""

    def __init__(self):
        self._listener: Optional[logging.handlers.QueueListener] = None

    def _build_handlers(self, log_file: Optional[str]) -> List[logging.Handler]:
        formatter = logging.Formatter(LOG_FORMAT)

        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        handlers: List[logging.Handler] = [console]

        if log_file:
            path = Path(log_file)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)
        return handlers

    def start(self, debug: bool = False, log_file: Optional[str] = None) -> None:
        """
        Route the root logger through a fresh queue.

        Calling this again replaces the previous listener, so the level or
        the log file can change at runtime.

        Args:
            debug: Log at DEBUG and keep third-party loggers verbose
            log_file: Optional path of a rotating log file
        """
        self.stop()

        log_queue: Queue = Queue()
        self._listener = logging.handlers.QueueListener(
            log_queue, *self._build_handlers(log_file), respect_handler_level=True
        )
        self._listener.start()

        root_logger = logging.getLogger()
        root_logger.handlers.clear()
        root_logger.addHandler(logging.handlers.QueueHandler(log_queue))
        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.NOTSET if debug else logging.WARNING)

    def stop(self) -> None:
        """Flush pending records and stop the listener thread."""
        if self._listener is None:
            return
        self._listener.stop()
        for handler in self._listener.handlers:
            handler.close()
        self._listener = None


_queue_logging = QueueLogging()
atexit.register(_queue_logging.stop)


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """Configure process-wide logging."""
    _queue_logging.start(debug=debug, log_file=log_file)


def stop_logging() -> None:
    _queue_logging.stop()


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
