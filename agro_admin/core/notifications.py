"""User-visible notifications (the dashboard's toast surface)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Literal

from agro_admin.core.errors import AdminError, ServerError
from agro_admin.core.i18n import Translator

logger = logging.getLogger(__name__)

Level = Literal["success", "info", "warning", "error"]

_LOG_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.WARNING,
}


@dataclass(frozen=True)
class Notification:
    level: Level
    message: str


Sink = Callable[[Notification], None]


class Notifier:
    """Collect notifications and fan them out to registered sinks.

    Messages are passed through the translator, so callers can hand over
    either a translation key or a server-provided text (shown verbatim).
    """

    def __init__(self, translator: Translator | None = None):
        self._translator = translator or Translator()
        self._sinks: list[Sink] = []
        self.history: list[Notification] = []

    def add_sink(self, sink: Sink) -> None:
        self._sinks.append(sink)

    def success(self, text: str) -> Notification:
        return self._emit("success", text)

    def info(self, text: str) -> Notification:
        return self._emit("info", text)

    def warning(self, text: str) -> Notification:
        return self._emit("warning", text)

    def error(self, text: str) -> Notification:
        return self._emit("error", text)

    def failure(self, error: AdminError, fallback: str) -> Notification:
        """Report a failed operation with the server text, or ``fallback`` when it sent none."""
        message = error.message
        if isinstance(error, ServerError) or type(error) is AdminError:
            if message == error.default_message:
                message = fallback
        return self._emit("error", message)

    def _emit(self, level: Level, text: str) -> Notification:
        notification = Notification(level=level, message=self._translator.t(text))
        self.history.append(notification)
        logger.log(_LOG_LEVELS[level], f"[{level}] {notification.message}")

        for sink in self._sinks:
            try:
                sink(notification)
            except Exception as e:
                # Sink failures are logged only
                logger.error(f"Notification sink {sink!r} failed: {e}", exc_info=True)
        return notification
