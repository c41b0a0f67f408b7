"""
Transient user notifications ("toasts").

Panels never raise for server or network trouble; they push a toast and
carry on. The Toaster keeps the history so a view (or a test) can read what
was shown, and mirrors every toast into the log.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from portal.config import get_settings

logger = logging.getLogger(__name__)


class ToastLevel(str, Enum):
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS = {
    ToastLevel.SUCCESS: logging.INFO,
    ToastLevel.INFO: logging.INFO,
    ToastLevel.WARNING: logging.WARNING,
    ToastLevel.ERROR: logging.ERROR,
}


@dataclass(frozen=True)
class Toast:
    level: ToastLevel
    message: str
    duration: float


class Toaster:
    def __init__(self, default_duration: Optional[float] = None):
        self.default_duration = default_duration or get_settings().TOAST_SECONDS
        self.history: List[Toast] = []

    def push(self, level: ToastLevel, message: str, duration: Optional[float] = None) -> Toast:
        toast = Toast(level=level, message=message, duration=duration or self.default_duration)
        self.history.append(toast)
        logger.log(_LOG_LEVELS[level], "[toast:%s] %s", level.value, message)
        return toast

    def success(self, message: str, duration: Optional[float] = None) -> Toast:
        return self.push(ToastLevel.SUCCESS, message, duration)

    def info(self, message: str, duration: Optional[float] = None) -> Toast:
        return self.push(ToastLevel.INFO, message, duration)

    def warning(self, message: str, duration: Optional[float] = None) -> Toast:
        return self.push(ToastLevel.WARNING, message, duration)

    def error(self, message: str, duration: Optional[float] = None) -> Toast:
        return self.push(ToastLevel.ERROR, message, duration)

    @property
    def latest(self) -> Optional[Toast]:
        return self.history[-1] if self.history else None

    def messages(self, level: Optional[ToastLevel] = None) -> List[str]:
        return [t.message for t in self.history if level is None or t.level == level]

    def clear(self) -> None:
        self.history.clear()
