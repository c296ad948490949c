"""
At-most-once fan-out of events to connected WebSocket clients.

No acknowledgement, no per-client filtering, no replay: a client that is not
connected when an event is sent never receives it and must re-fetch state.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Protocol, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

DISASTER_UPDATED = "disaster_updated"


class Notifier(Protocol):
    async def notify(self, event: str, data: Dict[str, Any]) -> int:
        ...


class BroadcastNotifier:
    """WebSocket connection registry; sockets that fail a send are dropped."""

    def __init__(self) -> None:
        self.active: Set[WebSocket] = set()

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.active.add(ws)
        logger.info("Client connected (%d active)", len(self.active))

    def disconnect(self, ws: WebSocket) -> None:
        self.active.discard(ws)
        logger.info("Client disconnected (%d active)", len(self.active))

    async def notify(self, event: str, data: Dict[str, Any]) -> int:
        """Send {event, data} to every client; returns how many sends succeeded."""
        payload = {"event": event, "data": data}
        dead: Set[WebSocket] = set()
        delivered = 0
        for ws in list(self.active):
            try:
                await ws.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.debug("Dropping client after failed send: %r", e)
                dead.add(ws)
        self.active -= dead
        return delivered


_notifier = BroadcastNotifier()


def get_broadcast_notifier() -> BroadcastNotifier:
    return _notifier
