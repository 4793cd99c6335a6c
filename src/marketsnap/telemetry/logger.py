"""
Queue-based logging for the refresh job and the data server.

Records are queued by the caller and written by a listener thread, so a
slow disk never holds up the event loop between API calls. Every line is
tagged with the component that wrote it (``refresh`` or ``serve``); both
can share one rotating log file next to the snapshots.
"""

import logging
import sys
import time
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue

from marketsnap.config.constants import (
    LOG_DATE_FORMAT,
    LOG_FILE_BACKUP_COUNT,
    LOG_FILE_MAX_BYTES,
    LOG_FORMAT,
    MAX_LOG_QUEUE_SIZE,
    NOISY_LOGGERS,
)


class UTCFormatter(logging.Formatter):
    """Formatter stamping records in UTC, like the snapshot timestamps."""

    converter = time.gmtime


class ComponentFilter(logging.Filter):
    """Tag every record with the component that emitted it."""

    def __init__(self, component: str) -> None:
        super().__init__()
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:
        record.component = self.component
        return True


def _build_handlers(
    level: int,
    component: str,
    log_file: Path | None,
) -> list[logging.Handler]:
    formatter = UTCFormatter(LOG_FORMAT, LOG_DATE_FORMAT)
    tag = ComponentFilter(component)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    handlers: list[logging.Handler] = [console]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        rotating.setLevel(logging.DEBUG)
        handlers.append(rotating)

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(tag)
    return handlers


class AsyncLogger:
    """
    Queue-backed logger for one component.

    Calls on the ``marketsnap`` logger tree only enqueue; a listener
    thread does the console and file writes.
    """

    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        log_file: Path | None = None,
        component: str = "refresh",
    ) -> None:
        """
        Initialize async logger.

        Args:
            name: Logger name.
            level: Console logging level; the file always gets DEBUG.
            log_file: Optional rotating log file.
            component: Tag written on every line.
        """
        self._level = level
        self._log_file = log_file
        self._component = component
        self._queue: Queue[logging.LogRecord] = Queue(maxsize=MAX_LOG_QUEUE_SIZE)
        self._listener: QueueListener | None = None
        self._queue_handler: QueueHandler | None = None
        self._logger = logging.getLogger(name)

    @property
    def component(self) -> str:
        return self._component

    def start(self) -> None:
        """Attach the queue and start the listener thread."""
        handlers = _build_handlers(self._level, self._component, self._log_file)

        self._queue_handler = QueueHandler(self._queue)
        self._logger.addHandler(self._queue_handler)
        # DEBUG must reach the queue when a file wants it
        self._logger.setLevel(logging.DEBUG if self._log_file else self._level)

        self._listener = QueueListener(self._queue, *handlers, respect_handler_level=True)
        self._listener.start()

    def stop(self) -> None:
        """Flush queued records, then detach and close the handlers."""
        if self._queue_handler:
            self._logger.removeHandler(self._queue_handler)
            self._queue_handler = None
        if self._listener:
            self._listener.stop()
            for handler in self._listener.handlers:
                handler.close()
            self._listener = None

    @property
    def logger(self) -> logging.Logger:
        """Get the underlying logger."""
        return self._logger

    def __enter__(self) -> "AsyncLogger":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


def setup_logging(
    level: str = "INFO",
    log_file: Path | None = None,
    component: str = "refresh",
) -> AsyncLogger:
    """
    Set up logging for one process.

    Root handlers are cleared so nothing is printed twice, and the
    chatty HTTP and server libraries are held at WARNING.

    Args:
        level: Console level (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional rotating log file.
        component: ``refresh`` for the scheduled job, ``serve`` for the server.

    Returns:
        Started AsyncLogger; call ``stop()`` before exit to flush.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    async_logger = AsyncLogger(
        name="marketsnap",
        level=numeric_level,
        log_file=log_file,
        component=component,
    )
    async_logger.start()
    return async_logger
