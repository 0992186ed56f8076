"""Toast notifications raised by the client view models."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

logger = logging.getLogger(__name__)


class ToastLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Toast:
    level: ToastLevel
    message: str


@dataclass
class Toaster:
    """Collects toasts in the order they were raised."""

    toasts: List[Toast] = field(default_factory=list)

    def success(self, message: str) -> None:
        logger.info("toast success: %s", message)
        self.toasts.append(Toast(ToastLevel.SUCCESS, message))

    def error(self, message: str) -> None:
        logger.warning("toast error: %s", message)
        self.toasts.append(Toast(ToastLevel.ERROR, message))

    @property
    def last(self) -> Optional[Toast]:
        return self.toasts[-1] if self.toasts else None

    def messages(self, level: Optional[ToastLevel] = None) -> List[str]:
        return [t.message for t in self.toasts if level is None or t.level == level]
