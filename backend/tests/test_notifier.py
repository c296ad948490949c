"""Broadcast notifier fan-out and the /ws endpoint."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from services.notifier import DISASTER_UPDATED, BroadcastNotifier


class _Socket:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.accepted = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, payload):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(payload)


@pytest.mark.asyncio
async def test_notify_fans_out_and_drops_dead_sockets():
    notifier = BroadcastNotifier()
    alive, dead = _Socket(), _Socket(fail=True)
    await notifier.connect(alive)
    await notifier.connect(dead)

    delivered = await notifier.notify(DISASTER_UPDATED, {"action": "delete", "disaster_id": "d1"})

    assert delivered == 1
    assert alive.accepted
    assert alive.sent == [{"event": "disaster_updated", "data": {"action": "delete", "disaster_id": "d1"}}]
    assert notifier.active == {alive}


@pytest.mark.asyncio
async def test_notify_without_clients_is_a_no_op():
    assert await BroadcastNotifier().notify(DISASTER_UPDATED, {"action": "create"}) == 0


def test_websocket_answers_ping():
    from main import app

    # no lifespan: the socket endpoint needs no database
    client = TestClient(app)
    with client.websocket_connect("/ws") as ws:
        ws.send_text("ping")
        assert ws.receive_json() == {"event": "pong"}
