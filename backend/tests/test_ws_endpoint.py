"""
The /ws transport end to end, through Starlette's TestClient.
"""
import pytest
from starlette.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from nexus.core.enums import Role

from conftest import make_participant

PARTICIPANTS = {
    "token-a": make_participant("user-a", "Alice", Role.INVESTOR),
    "token-b": make_participant("user-b", "Bob", Role.ENTREPRENEUR),
}


async def fake_validator(token):
    return PARTICIPANTS.get(token)


@pytest.fixture
def app_client(monkeypatch, ws_manager):
    from main import app, ws_event_handler

    monkeypatch.setattr(ws_event_handler, "token_validator", fake_validator)
    with TestClient(app) as client:
        yield client


def round_trip(ws, user_ids):
    """Block until every earlier event on this socket has been processed."""
    ws.send_json({"type": "getOnlineStatus", "userIds": user_ids})


class TestWebSocketEndpoint:

    def test_chat_between_two_connections(self, app_client, ws_manager):
        with app_client.websocket_connect("/ws?token=token-a") as ws_a:
            with app_client.websocket_connect("/ws", headers={"Authorization": "Bearer token-b"}) as ws_b:
                assert ws_a.receive_json() == {
                    "type": "userOnline",
                    "data": {"userId": "user-b", "userName": "Bob"},
                }

                ws_a.send_json({"type": "joinChat", "otherId": "user-b"})
                round_trip(ws_a, ["user-b"])
                assert ws_a.receive_json() == {"type": "onlineStatus", "data": {"user-b": True}}

                ws_b.send_json({"type": "joinChat", "otherId": "user-a"})
                round_trip(ws_b, ["user-a", "user-z"])
                assert ws_b.receive_json() == {
                    "type": "onlineStatus",
                    "data": {"user-a": True, "user-z": False},
                }

                ws_a.send_json({"type": "sendMessage", "receiverId": "user-b", "content": "hi"})

                message = ws_b.receive_json()
                assert message["type"] == "newMessage"
                assert message["data"]["sender"]["id"] == "user-a"
                assert message["data"]["sender"]["name"] == "Alice"
                assert message["data"]["content"] == "hi"

                notification = ws_b.receive_json()
                assert notification["type"] == "messageNotification"
                assert notification["data"]["content"] == "hi"

                # No echo: the next thing A sees is the reply to its own query
                round_trip(ws_a, ["user-b"])
                assert ws_a.receive_json()["type"] == "onlineStatus"

                ws_b.send_json({"type": "typing", "receiverId": "user-a", "isTyping": True})
                assert ws_a.receive_json() == {
                    "type": "userTyping",
                    "data": {"userId": "user-b", "userName": "Bob", "isTyping": True},
                }

            assert ws_a.receive_json() == {
                "type": "userOffline",
                "data": {"userId": "user-b", "userName": "Bob"},
            }
            assert not ws_manager.is_online("user-b")
            assert ws_manager.is_online("user-a")

    def test_malformed_frames_do_not_close_the_connection(self, app_client):
        with app_client.websocket_connect("/ws?token=token-a") as ws:
            ws.send_text("{oops")
            assert ws.receive_json() == {"type": "error", "message": "Invalid JSON format"}

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_binary_frames_are_decoded_not_fatal(self, app_client, ws_manager):
        with app_client.websocket_connect("/ws?token=token-a") as ws:
            ws.send_bytes(b'{"type": "ping"}')
            assert ws.receive_json() == {"type": "pong"}

            ws.send_bytes(b"\xff\xfe\x00")
            assert ws.receive_json() == {"type": "error", "message": "Frame must be UTF-8 encoded JSON"}

            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}
            assert ws_manager.is_online("user-a")

    @pytest.mark.parametrize("url", ["/ws", "/ws?token=garbage"])
    def test_rejected_token_closes_with_policy_violation(self, app_client, ws_manager, url):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with app_client.websocket_connect(url) as ws:
                ws.receive_json()

        assert exc_info.value.code == 1008
        assert ws_manager.list_online() == set()
