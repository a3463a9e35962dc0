"""Tests for subscriber membership and best-effort fan-out."""

import pytest
from starlette.websockets import WebSocketState

from conftest import FakeSubscriber, StalledSubscriber
from services.subscriber_registry import SubscriberRegistry, is_open


class TestMembership:

    def test_add_and_discard(self, subscriber):
        registry = SubscriberRegistry()
        registry.add(subscriber)
        assert subscriber in registry
        assert len(registry) == 1

        registry.discard(subscriber)
        assert subscriber not in registry
        assert len(registry) == 0

    def test_discard_absent_is_noop(self, subscriber):
        registry = SubscriberRegistry()
        registry.discard(subscriber)
        registry.discard(subscriber)
        assert len(registry) == 0

    def test_snapshot_is_decoupled(self, subscriber):
        registry = SubscriberRegistry()
        registry.add(subscriber)
        snapshot = registry.snapshot()

        registry.discard(subscriber)
        registry.add(FakeSubscriber())

        assert snapshot == (subscriber,)


class TestOpenState:

    def test_both_sides_must_be_connected(self):
        half_closed = FakeSubscriber()
        half_closed.application_state = WebSocketState.DISCONNECTED
        assert is_open(FakeSubscriber())
        assert not is_open(half_closed)
        assert not is_open(FakeSubscriber(state=WebSocketState.CONNECTING))


class TestBroadcast:

    async def test_delivers_to_every_open_subscriber(self):
        registry = SubscriberRegistry()
        first, second = FakeSubscriber(), FakeSubscriber()
        registry.add(first)
        registry.add(second)

        delivered = await registry.broadcast('{"type": "SENSOR_UPDATE", "data": []}')

        assert delivered == 2
        assert first.types == ["SENSOR_UPDATE"]
        assert second.types == ["SENSOR_UPDATE"]

    async def test_skips_closed_and_failing(self):
        registry = SubscriberRegistry()
        healthy = FakeSubscriber()
        closed = FakeSubscriber(state=WebSocketState.DISCONNECTED)
        broken = FakeSubscriber(fail=True)
        for member in (healthy, closed, broken):
            registry.add(member)

        delivered = await registry.broadcast('{"type": "SENSOR_UPDATE", "data": []}')

        assert delivered == 1
        assert healthy.types == ["SENSOR_UPDATE"]
        assert closed.messages == []
        # Failed sends do not evict; only a disconnect does
        assert broken in registry

    async def test_empty_registry(self):
        assert await SubscriberRegistry().broadcast("{}") == 0

    async def test_stalled_subscriber_is_dropped(self):
        registry = SubscriberRegistry(send_timeout=0.05)
        healthy, stalled = FakeSubscriber(), StalledSubscriber()
        registry.add(healthy)
        registry.add(stalled)

        delivered = await registry.broadcast('{"type": "SENSOR_UPDATE", "data": []}')

        assert delivered == 1
        assert healthy.types == ["SENSOR_UPDATE"]
        assert stalled not in registry
        assert healthy in registry

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError):
            SubscriberRegistry(send_timeout=0)
