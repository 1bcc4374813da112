"""
Presence, room routing and relay, driven with in-memory sockets.
"""
import json

import pytest

from nexus.core.enums import Role
from nexus.ws.connection_manager import ConnectionManager
from nexus.ws.events import WebSocketEventHandler
from nexus.ws.message_types import MessageSchema
from nexus.ws.relay import MessageRelay
from nexus.ws.rooms import room_id

from conftest import FakeWebSocket, make_participant

PARTICIPANTS = {
    "token-alice": make_participant("alice", "Alice", Role.INVESTOR),
    "token-bob": make_participant("bob", "Bob", Role.ENTREPRENEUR),
    "token-carol": make_participant("carol", "Carol", Role.INVESTOR),
    "token-inactive": make_participant("dave", "Dave", Role.INVESTOR, is_active=False),
}


async def fake_validator(token):
    return PARTICIPANTS.get(token)


@pytest.fixture
def handler():
    manager = ConnectionManager()
    return WebSocketEventHandler(manager, token_validator=fake_validator)


async def connect(handler, token):
    websocket = FakeWebSocket()
    connection = await handler.connect(websocket, token)
    return connection, websocket


class TestConnect:

    async def test_valid_token_registers_and_announces(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")

        assert handler.connection_manager.is_online("alice")
        assert handler.connection_manager.is_online("bob")
        online = alice_ws.of_type("userOnline")
        assert online == [{"type": "userOnline", "data": {"userId": "bob", "userName": "Bob"}}]
        # Nobody is told about their own arrival
        assert bob_ws.of_type("userOnline") == []

    @pytest.mark.parametrize("token", ["bad-token", None, "", "token-inactive"])
    async def test_rejected_token_leaves_registry_untouched(self, handler, token):
        watcher, watcher_ws = await connect(handler, "token-alice")

        connection, _ = await connect(handler, token)

        assert connection is None
        assert handler.connection_manager.list_online() == {"alice"}
        assert watcher_ws.sent == []

    async def test_disconnect_announces_offline(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")
        bob, _ = await connect(handler, "token-bob")

        await handler.disconnect(bob)

        assert not handler.connection_manager.is_online("bob")
        assert alice_ws.of_type("userOffline") == [
            {"type": "userOffline", "data": {"userId": "bob", "userName": "Bob"}}
        ]

    async def test_superseded_connection_closes_silently(self, handler):
        watcher, watcher_ws = await connect(handler, "token-alice")
        old, _ = await connect(handler, "token-bob")
        new, _ = await connect(handler, "token-bob")

        await handler.disconnect(old)

        assert handler.connection_manager.handle_for("bob") is new
        assert watcher_ws.of_type("userOffline") == []


class TestRooms:

    async def test_join_and_leave_are_idempotent(self, handler):
        alice, _ = await connect(handler, "token-alice")
        expected = room_id("alice", "bob")

        await handler.join_chat(alice, "bob")
        await handler.join_chat(alice, "bob")
        assert alice.rooms == {expected}

        await handler.leave_chat(alice, "bob")
        await handler.leave_chat(alice, "bob")
        assert alice.rooms == set()

    async def test_typing_goes_to_room_only(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        carol, carol_ws = await connect(handler, "token-carol")
        await handler.join_chat(alice, "bob")
        await handler.join_chat(bob, "alice")

        await handler.dispatch(alice, {"type": "typing", "receiverId": "bob", "isTyping": True})

        assert bob_ws.of_type("userTyping") == [
            {"type": "userTyping", "data": {"userId": "alice", "userName": "Alice", "isTyping": True}}
        ]
        assert alice_ws.of_type("userTyping") == []
        assert carol_ws.of_type("userTyping") == []

    async def test_online_status_replies_to_requester_only(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")

        await handler.dispatch(alice, {"type": "getOnlineStatus", "userIds": ["bob", "zed"]})

        assert alice_ws.of_type("onlineStatus") == [
            {"type": "onlineStatus", "data": {"bob": True, "zed": False}}
        ]
        assert bob_ws.of_type("onlineStatus") == []


class TestRelay:

    async def test_message_reaches_room_without_echo(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        await handler.join_chat(alice, "bob")
        await handler.join_chat(bob, "alice")

        await handler.dispatch(alice, {"type": "sendMessage", "receiverId": "bob", "content": "hi"})

        [message] = bob_ws.of_type("newMessage")
        assert message["data"]["sender"]["id"] == "alice"
        assert message["data"]["receiver"] == {"id": "bob"}
        assert message["data"]["content"] == "hi"
        assert message["data"]["read"] is False
        assert message["data"]["createdAt"]
        assert alice_ws.of_type("newMessage") == []

    async def test_receiver_outside_room_still_notified(self, handler):
        alice, _ = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        await handler.join_chat(alice, "bob")

        await handler.dispatch(alice, {"type": "sendMessage", "receiverId": "bob", "content": "hello there"})

        assert bob_ws.of_type("newMessage") == []
        [notification] = bob_ws.of_type("messageNotification")
        assert notification["data"]["senderId"] == "alice"
        assert notification["data"]["senderName"] == "Alice"
        assert notification["data"]["content"] == "hello there"

    async def test_notification_preview_is_truncated(self, handler):
        alice, _ = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        content = "x" * 80

        await handler.relay.send_message(alice, "bob", content)

        [notification] = bob_ws.of_type("messageNotification")
        assert notification["data"]["content"] == "x" * 50 + "..."

    @pytest.mark.parametrize("content", ["", "   ", None, 42, "y" * 1001])
    async def test_invalid_content_is_dropped_silently(self, handler, content):
        alice, alice_ws = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        await handler.join_chat(alice, "bob")
        await handler.join_chat(bob, "alice")
        bob_ws.sent.clear()

        await handler.dispatch(alice, {"type": "sendMessage", "receiverId": "bob", "content": content})

        assert bob_ws.sent == []
        assert alice_ws.of_type("error") == []

    async def test_content_at_the_bound_is_relayed(self, handler):
        alice, _ = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        await handler.join_chat(bob, "alice")

        assert await handler.relay.send_message(alice, "bob", "z" * 1000) is True
        assert len(bob_ws.of_type("newMessage")) == 1

    async def test_offline_receiver_is_not_an_error(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")

        assert await handler.relay.send_message(alice, "nobody", "anyone there?") is True
        assert alice_ws.sent == []

    async def test_notify_participant(self, handler):
        bob, bob_ws = await connect(handler, "token-bob")
        event = MessageSchema.pong_message()

        assert await handler.notify_user("bob", event) is True
        assert await handler.notify_user("nobody", event) is False
        assert bob_ws.sent[-1] == event

    async def test_broken_socket_does_not_stop_fan_out(self):
        manager = ConnectionManager()
        relay = MessageRelay(manager)
        handler = WebSocketEventHandler(manager, relay=relay, token_validator=fake_validator)
        alice, _ = await connect(handler, "token-alice")
        bob, bob_ws = await connect(handler, "token-bob")
        carol, _ = await connect(handler, "token-carol")
        carol.websocket = FakeWebSocket(fail=True)
        for conn in (bob, carol):
            conn.join("shared")

        delivered = await relay.broadcast_to_room("shared", {"type": "pong"}, exclude=alice)

        assert delivered == 1
        assert bob_ws.sent[-1] == {"type": "pong"}


class TestDispatch:

    async def test_invalid_json(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")

        await handler.handle_raw(alice, "{not json")

        assert alice_ws.sent == [{"type": "error", "message": "Invalid JSON format"}]

    @pytest.mark.parametrize("frame,reply", [
        ({"type": "websocket.receive", "text": '{"type": "ping"}'}, {"type": "pong"}),
        ({"type": "websocket.receive", "bytes": b'{"type": "ping"}'}, {"type": "pong"}),
        (
            {"type": "websocket.receive", "bytes": b"\xc3\x28"},
            {"type": "error", "message": "Frame must be UTF-8 encoded JSON"},
        ),
        ({"type": "websocket.receive"}, {"type": "error", "message": "Frame must be UTF-8 encoded JSON"}),
    ])
    async def test_text_and_binary_frames(self, handler, frame, reply):
        alice, alice_ws = await connect(handler, "token-alice")

        await handler.handle_frame(alice, frame)

        assert alice_ws.sent == [reply]

    async def test_non_object_payload(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")

        await handler.handle_raw(alice, json.dumps(["joinChat"]))

        assert alice_ws.of_type("error")

    @pytest.mark.parametrize("payload,error", [
        ({}, "Message type missing"),
        ({"type": "dance"}, "Unknown message type: dance"),
        ({"type": "joinChat"}, "otherId is required"),
        ({"type": "leaveChat", "otherId": "  "}, "otherId is required"),
        ({"type": "sendMessage", "content": "hi"}, "receiverId is required"),
        ({"type": "typing", "receiverId": {"id": "bob"}}, "receiverId is required"),
        ({"type": "typing", "receiverId": "bob", "isTyping": "false"}, "isTyping must be a boolean"),
        ({"type": "typing", "receiverId": "bob"}, "isTyping must be a boolean"),
        ({"type": "getOnlineStatus", "userIds": "bob"}, "userIds must be a list"),
        ({"type": "newMessage"}, "Unsupported message type: newMessage"),
    ])
    async def test_malformed_events_get_an_error(self, handler, payload, error):
        alice, alice_ws = await connect(handler, "token-alice")

        await handler.dispatch(alice, payload)

        assert alice_ws.sent == [{"type": "error", "message": error}]

    async def test_ping(self, handler):
        alice, alice_ws = await connect(handler, "token-alice")

        await handler.handle_raw(alice, json.dumps({"type": "ping"}))

        assert alice_ws.sent == [{"type": "pong"}]

    async def test_handler_failure_is_reported_not_raised(self, handler, monkeypatch):
        alice, alice_ws = await connect(handler, "token-alice")

        async def boom(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(handler, "join_chat", boom)
        await handler.dispatch(alice, {"type": "joinChat", "otherId": "bob"})

        assert alice_ws.sent == [{"type": "error", "message": "Failed to process joinChat"}]
        # The connection is still usable
        await handler.dispatch(alice, {"type": "ping"})
        assert alice_ws.sent[-1] == {"type": "pong"}
