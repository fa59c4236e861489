"""
Tests for ConnectionRegistry.

This module tests registration, idempotent removal, snapshot semantics,
group membership and thread safety of the registry.
"""

import threading

import pytest

from relay.managers.connection import Connection
from relay.managers.connection_registry import ConnectionRegistry
from tests.mocks.websocket_mocks import create_mock_websocket


def make_connection() -> Connection:
    return Connection(create_mock_websocket())


class TestRegisterUnregister:
    def test_register_assigns_unique_ids(self, registry):
        first, second = make_connection(), make_connection()

        first_id = registry.register(first)
        second_id = registry.register(second)

        assert first_id != second_id
        assert first.id == first_id
        assert second.id == second_id
        assert len(registry) == 2
        assert first_id in registry

    def test_unregister_removes_connection(self, registry):
        connection = make_connection()
        connection_id = registry.register(connection)

        assert registry.unregister(connection_id) is True

        assert connection_id not in registry
        assert connection not in registry.snapshot()
        assert registry.get(connection_id) is None

    def test_unregister_is_idempotent(self, registry):
        connection_id = registry.register(make_connection())

        assert registry.unregister(connection_id) is True
        assert registry.unregister(connection_id) is False
        assert len(registry) == 0

    def test_unregister_unknown_id(self, registry):
        assert registry.unregister("never-registered") is False


class TestSnapshot:
    def test_snapshot_keeps_registration_order(self, registry):
        connections = [make_connection() for _ in range(5)]
        for connection in connections:
            registry.register(connection)

        assert registry.snapshot() == tuple(connections)

    def test_snapshot_is_not_affected_by_later_changes(self, registry):
        first = make_connection()
        first_id = registry.register(first)

        snapshot = registry.snapshot()
        registry.register(make_connection())
        registry.unregister(first_id)

        assert snapshot == (first,)

    def test_empty_snapshot(self, registry):
        assert registry.snapshot() == ()
        assert list(registry) == []


class TestGroups:
    def test_join_and_group_snapshot(self, registry):
        member, outsider = make_connection(), make_connection()
        member_id = registry.register(member)
        registry.register(outsider)

        assert registry.join(member_id, "ops") is True

        assert registry.snapshot(group="ops") == (member,)
        assert registry.snapshot(group="unknown") == ()
        assert registry.groups() == {"ops": 1}
        assert member.groups == {"ops"}

    def test_join_unknown_connection(self, registry):
        assert registry.join("missing", "ops") is False
        assert registry.groups() == {}

    def test_leave(self, registry):
        connection = make_connection()
        connection_id = registry.register(connection)
        registry.join(connection_id, "ops")

        assert registry.leave(connection_id, "ops") is True
        assert registry.leave(connection_id, "ops") is False

        assert registry.snapshot(group="ops") == ()
        assert registry.groups() == {}
        assert connection.groups == set()

    def test_unregister_drops_memberships(self, registry):
        connection = make_connection()
        connection_id = registry.register(connection)
        registry.join(connection_id, "ops")
        registry.join(connection_id, "billing")

        registry.unregister(connection_id)

        assert registry.groups() == {}
        assert registry.snapshot(group="ops") == ()


class TestConcurrency:
    def test_concurrent_register_unregister(self, registry):
        """Unregistered connections never show up in later snapshots."""
        errors: list[str] = []

        def worker():
            for _ in range(200):
                connection = make_connection()
                connection_id = registry.register(connection)
                if connection not in registry.snapshot():
                    errors.append(f"{connection_id} missing after register")
                registry.unregister(connection_id)
                if connection in registry.snapshot():
                    errors.append(f"{connection_id} present after unregister")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert len(registry) == 0


class TestCloseAll:
    @pytest.mark.asyncio
    async def test_close_all_closes_and_unregisters(self):
        registry = ConnectionRegistry()
        connections = [make_connection() for _ in range(3)]
        for connection in connections:
            registry.register(connection)

        closed = await registry.close_all()

        assert closed == 3
        assert len(registry) == 0
        for connection in connections:
            connection.websocket.close.assert_awaited_once_with(code=1001)
            assert connection.alive is False

    @pytest.mark.asyncio
    async def test_close_all_on_empty_registry(self):
        assert await ConnectionRegistry().close_all() == 0
