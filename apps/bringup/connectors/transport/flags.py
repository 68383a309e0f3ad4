"""One-shot boolean flags shared across the transport boundary."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import UTC, datetime
from typing import Any

from .bus import Signal
from .errors import TransportError, TransportErrorCode

logger = logging.getLogger(__name__)


class BoundaryFlag:
    """Readiness primitive read by both sides and written by exactly one.

    The flag starts ``False`` and can be set once. A waiter that arrives after
    the flip returns immediately and one that arrives before is woken by it.
    The wake-up event is created inside the running loop on first wait, and
    replaced when a later wait runs on a different loop, so a flag may outlive
    the ``asyncio.run`` call that first waited on it.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.changed: Signal[bool] = Signal(f"{name}.changed")
        self._set = False
        self._set_at: str | None = None
        self._event: asyncio.Event | None = None
        self._event_loop: asyncio.AbstractEventLoop | None = None

    def is_set(self) -> bool:
        return self._set

    def mark_set(self) -> None:
        if self._set:
            raise TransportError(TransportErrorCode.FLAG_ALREADY_SET, f"flag {self.name!r} is already set")
        self._set = True
        self._set_at = _now_iso()
        if self._event is not None:
            self._event.set()
        logger.info("bringup_flag_set", extra={"event": "flag_set", "flag": self.name})
        self.changed.emit(True)

    async def wait(self) -> float:
        """Suspend until the flag is set; returns the seconds spent waiting."""

        if self._set:
            return 0.0
        started_at = time.monotonic()
        await self._loop_event().wait()
        return time.monotonic() - started_at

    def snapshot(self) -> dict[str, Any]:
        return {
            "flag": self.name,
            "set": self._set,
            "set_at": self._set_at,
        }

    def _loop_event(self) -> asyncio.Event:
        loop = asyncio.get_running_loop()
        if self._event is None or self._event_loop is not loop:
            self._event = asyncio.Event()
            self._event_loop = loop
        return self._event


def _now_iso() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")
