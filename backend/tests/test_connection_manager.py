import pytest

from nexus.ws.connection_manager import ConnectionManager

from conftest import FakeWebSocket, make_connection


class TestConnectionRegistry:

    def test_register_then_unregister_goes_offline(self):
        manager = ConnectionManager()
        conn = make_connection("p1")

        manager.register("p1", conn)
        assert manager.is_online("p1")
        assert manager.handle_for("p1") is conn

        assert manager.unregister("p1") is True
        assert not manager.is_online("p1")
        assert manager.handle_for("p1") is None

    def test_last_writer_wins(self):
        manager = ConnectionManager()
        first, second = make_connection("p1"), make_connection("p1")

        manager.register("p1", first)
        previous = manager.register("p1", second)

        assert previous is first
        assert manager.handle_for("p1") is second
        assert manager.get_total_connections() == 1

    def test_stale_connection_cannot_evict_replacement(self):
        manager = ConnectionManager()
        first, second = make_connection("p1"), make_connection("p1")
        manager.register("p1", first)
        manager.register("p1", second)

        assert manager.unregister("p1", first) is False
        assert manager.handle_for("p1") is second

        assert manager.unregister("p1", second) is True
        assert not manager.is_online("p1")

    def test_unknown_participant_is_a_no_op(self):
        manager = ConnectionManager()
        assert manager.unregister("ghost") is False
        assert manager.is_online("ghost") is False
        assert manager.handle_for("ghost") is None

    def test_register_requires_id(self):
        manager = ConnectionManager()
        with pytest.raises(ValueError):
            manager.register("", make_connection("p1"))

    def test_list_online_is_a_snapshot(self):
        manager = ConnectionManager()
        manager.register("a", make_connection("a"))
        manager.register("b", make_connection("b"))

        online = manager.list_online()
        manager.unregister("a")

        assert online == {"a", "b"}
        assert manager.list_online() == {"b"}

    def test_room_members(self):
        manager = ConnectionManager()
        a, b, c = make_connection("a"), make_connection("b"), make_connection("c")
        for conn in (a, b, c):
            manager.register(conn.participant_id, conn)
        a.join("a:b")
        b.join("a:b")
        c.join("a:c")

        assert set(manager.room_members("a:b")) == {a, b}
        assert list(manager.room_members("nobody")) == []


class TestClientConnection:

    async def test_send_reports_failure_instead_of_raising(self):
        conn = make_connection("p1")
        conn.websocket = FakeWebSocket(fail=True)

        assert await conn.send({"type": "pong"}) is False

    async def test_send_writes_json(self):
        conn = make_connection("p1")

        assert await conn.send({"type": "pong"}) is True
        assert conn.websocket.sent == [{"type": "pong"}]

    def test_join_and_leave_are_idempotent(self):
        conn = make_connection("p1")
        conn.join("r")
        conn.join("r")
        assert conn.rooms == {"r"}

        conn.leave("r")
        conn.leave("r")
        assert conn.rooms == set()
