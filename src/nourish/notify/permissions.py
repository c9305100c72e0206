"""Permission gates for posting notifications."""
from __future__ import annotations

import logging
import shutil

logger = logging.getLogger(__name__)


class StaticPermissionGate:
    """Answers every request with a fixed decision."""

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.requests = 0

    async def request_permission(self) -> bool:
        self.requests += 1
        return self.granted


class NotifySendPermissionGate:
    """Granted when the desktop has ``notify-send`` available."""

    def __init__(self, binary: str = "notify-send") -> None:
        self.binary = binary

    async def request_permission(self) -> bool:
        if shutil.which(self.binary) is None:
            logger.debug("%s not available — notifications cannot be shown", self.binary)
            return False
        return True
