import pytest
from fastapi import FastAPI, WebSocketDisconnect
from fastapi.testclient import TestClient

from schoolportal.core.database import get_db
from schoolportal.core.redis import get_redis
from schoolportal.routes import realtime
from schoolportal.routes.realtime import _parse_room_id
from schoolportal.services.chat_relay import ConnectionManager


class FakeSocket:
    def __init__(self, fail: bool = False):
        self.accepted = False
        self.sent = []
        self.fail = fail

    async def accept(self):
        self.accepted = True

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.sent.append(data)


@pytest.fixture
def relay():
    return ConnectionManager()


async def test_relay_reaches_other_members_only(relay):
    alice, bob, carol = FakeSocket(), FakeSocket(), FakeSocket()
    for socket in (alice, bob, carol):
        await relay.connect(socket)
    relay.join("7", alice)
    relay.join("7", bob)
    relay.join("8", carol)

    delivered = await relay.relay("7", "receive-message", {"content": "hello"}, sender=alice)

    assert delivered == 1
    assert bob.sent == [{"event": "receive-message", "data": {"content": "hello"}}]
    assert alice.sent == []
    assert carol.sent == []


async def test_failed_socket_is_dropped(relay):
    sender, dead, alive = FakeSocket(), FakeSocket(fail=True), FakeSocket()
    for socket in (sender, dead, alive):
        await relay.connect(socket)
        relay.join("3", socket)

    delivered = await relay.relay("3", "receive-message", "hi", sender=sender)

    assert delivered == 1
    assert not relay.is_member("3", dead)
    assert dead not in relay.active_connections
    assert relay.room_size("3") == 2


async def test_disconnect_leaves_every_room(relay):
    socket = FakeSocket()
    await relay.connect(socket)
    relay.join("1", socket)
    relay.join("2", socket)

    relay.disconnect(socket)

    assert relay.rooms == {}
    assert relay.active_connections == []


@pytest.mark.parametrize("raw,expected", [("12", 12), (12, 12), ("abc", None), (None, None)])
def test_room_id_parsing(raw, expected):
    assert _parse_room_id(raw) == expected


def test_socket_without_token_is_refused():
    app = FastAPI()
    app.include_router(realtime.router)

    async def no_db():
        yield None

    async def no_redis():
        return None

    app.dependency_overrides[get_db] = no_db
    app.dependency_overrides[get_redis] = no_redis

    with TestClient(app) as client:
        with pytest.raises(WebSocketDisconnect) as closed:
            with client.websocket_connect("/ws/chat"):
                pass
    assert closed.value.code == 1008
