"""Optional diagnostics sink threaded through the processing context.

Decoding results never depend on the sink: NullDiagnostics is the default,
LoggingDiagnostics forwards to the ``pptxjson.debug`` logger when the parser
is created with ``debug=True``.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


class DiagnosticsSink(ABC):
    """Receives trace events from the engine."""

    @abstractmethod
    def log(self, message: str, level: str = "info", **details: Any) -> None:
        """Record one trace event."""

    @property
    def enabled(self) -> bool:
        return True


class NullDiagnostics(DiagnosticsSink):
    """Discards everything."""

    def log(self, message: str, level: str = "info", **details: Any) -> None:
        return None

    @property
    def enabled(self) -> bool:
        return False


class LoggingDiagnostics(DiagnosticsSink):
    """Forwards events to a logger at DEBUG (or WARNING for warnings)."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("pptxjson.debug")

    def log(self, message: str, level: str = "info", **details: Any) -> None:
        log_level = logging.WARNING if level in ("warning", "error") else logging.DEBUG
        if details:
            message = f"{message} {details}"
        self.logger.log(log_level, message)


@dataclass(frozen=True)
class DiagnosticEvent:
    message: str
    level: str
    details: dict[str, Any]


class MemoryDiagnostics(DiagnosticsSink):
    """Keeps events in memory, mainly for tests."""

    def __init__(self):
        self.events: list[DiagnosticEvent] = []
        self._lock = threading.Lock()

    def log(self, message: str, level: str = "info", **details: Any) -> None:
        with self._lock:
            self.events.append(DiagnosticEvent(message, level, details))

    def messages(self) -> list[str]:
        return [event.message for event in self.events]
