# tuatara_sim/utils/logging_setup.py

import logging
from datetime import datetime
from typing import Callable, List, Optional
from dataclasses import dataclass
from enum import Enum

from PyQt6.QtCore import QObject, pyqtSignal

logger = logging.getLogger(__name__)

CONSOLE_FORMAT = '%(asctime)s.%(msecs)03d [%(levelname)-8s] [%(name)-20.20s] %(message)s'
CONSOLE_DATE_FORMAT = '%H:%M:%S'


class LogLevel(Enum):
    """Log levels with the icon a console view shows next to them."""
    DEBUG = (logging.DEBUG, "🔍")
    INFO = (logging.INFO, "ℹ️")
    WARNING = (logging.WARNING, "⚠️")
    ERROR = (logging.ERROR, "❌")
    CRITICAL = (logging.CRITICAL, "🔥")

    def __init__(self, level: int, icon: str):
        self.level = level
        self.icon = icon

    @classmethod
    def from_levelno(cls, levelno: int) -> "LogLevel":
        return next((l for l in cls if l.level == levelno), cls.INFO)


@dataclass
class LogEntry:
    """A log record flattened into what a view needs to display it."""
    timestamp: datetime
    level: LogLevel
    logger_name: str
    message: str
    formatted: str
    exc_info: Optional[str] = None


class QtLogSignal(QObject):
    """Signal emitter so log records can cross into Qt views."""
    log_received = pyqtSignal(object)  # LogEntry
    clear_logs_signal = pyqtSignal()


class QtSignalLogHandler(logging.Handler):
    """Forwards every record to `emitter.log_received` and keeps a bounded history."""

    def __init__(self, max_entries: int = 5000):
        super().__init__()
        self.emitter = QtLogSignal()
        self.max_entries = max_entries
        self._entries: List[LogEntry] = []
        self.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = LogEntry(
                timestamp=datetime.fromtimestamp(record.created),
                level=LogLevel.from_levelno(record.levelno),
                logger_name=record.name,
                message=record.getMessage(),
                formatted=self.format(record),
                exc_info=self.formatter.formatException(record.exc_info) if record.exc_info else None,
            )
        except Exception:
            self.handleError(record)
            return
        self._entries.append(entry)
        if len(self._entries) > self.max_entries:
            del self._entries[:len(self._entries) - self.max_entries]
        self.emitter.log_received.emit(entry)

    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.emitter.clear_logs_signal.emit()


def setup_global_logging(level: int = logging.INFO,
                         signal_target: Optional[Callable[[LogEntry], None]] = None
                         ) -> Optional[QtSignalLogHandler]:
    """
    Sets up the global root logger with a console handler and, when
    `signal_target` is given, a QtSignalLogHandler connected to it.
    This is the main entry point for logging setup.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers to prevent duplicate logs
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATE_FORMAT))
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    signal_handler = None
    if signal_target is not None:
        signal_handler = QtSignalLogHandler()
        signal_handler.setLevel(logging.DEBUG)  # Views filter for themselves
        signal_handler.emitter.log_received.connect(signal_target)
        root_logger.addHandler(signal_handler)

    logger.info("Global logging system initialized.")
    return signal_handler
